"""
오버레이 HTTP/웹소켓 서버. /api/config 제어 API, /hook 웹훅, /ws 라이브 세션.

OBS 브라우저 소스: http://127.0.0.1:3000/overlay.html (public/ 폴더가 있으면 정적 제공)
모든 변경은 StateStore 단일 진입점을 거친다 (라우트가 상태를 직접 만지지 않음).
"""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from win_overlay.overlay.commands import Action, CommandDispatcher, CommandError
from win_overlay.overlay.hub import BroadcastHub, WebSocketSession
from win_overlay.overlay.store import StateStore
from win_overlay.overlay.watcher import StateFileWatcher
from win_overlay.overlay.webhook import WebhookError, handle_webhook
from win_overlay.utils.config import OverlaySettings

logger = logging.getLogger(__name__)

_HOOK_RAW_PATH = re.compile(r"^/(?:hook/([^/]+)|([^/]+:[^/]+:[^/]+(?::[^/]+)?))$")


def _hook_route_path(scope: dict[str, Any]) -> Optional[str]:
    """원본 경로가 웹훅 형태면 /hook/<퍼센트 인코딩 유지 payload> 반환.

    디코딩된 path 로 라우팅하면 인자 속 %2F 가 경로 구분자가 되어 404.
    payload 디코딩은 parse_payload 에서 한 번만.
    """
    raw = scope.get("raw_path")
    path = raw.decode("latin-1") if raw else scope["path"]
    m = _HOOK_RAW_PATH.match(path.split("?", 1)[0])
    if m is None:
        return None
    return "/hook/" + (m.group(1) or m.group(2))


_NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


async def _read_partial(request: Request) -> dict[str, Any]:
    """요청 본문 JSON. 비었거나 객체가 아니면 빈 dict (필드 유지)."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


async def serve_live_session(hub: BroadcastHub, websocket: WebSocket) -> None:
    """연결 수락 → 허브 등록(즉시 스냅샷) → 끊길 때까지 대기 → 해제."""
    await websocket.accept()
    session = WebSocketSession(websocket)
    try:
        await hub.register(session)
        # 클라이언트 메시지는 쓰지 않음, 끊김만 감지
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        hub.unregister(session)


def create_app(
    store: StateStore,
    dispatcher: CommandDispatcher,
    hub: BroadcastHub,
    settings: OverlaySettings,
    watcher: Optional[StateFileWatcher] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if watcher is not None:
            await watcher.start()
        try:
            yield
        finally:
            if watcher is not None:
                await watcher.stop()

    app = FastAPI(title="WIN Overlay", docs_url=None, redoc_url=None, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
    )

    @app.middleware("http")
    async def no_cache(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(_NO_CACHE_HEADERS)
        return response

    @app.middleware("http")
    async def hook_raw_path(request: Request, call_next):
        # TikFinity 호환: http://host:3000/token:winoverlay:win_plus 형태도 /hook 으로
        hook_path = _hook_route_path(request.scope)
        if hook_path is not None:
            request.scope["path"] = hook_path
        return await call_next(request)

    @app.get("/")
    def index():
        return RedirectResponse("/overlay.html")

    @app.get("/api/config")
    def get_config():
        """현재 스냅샷 (파일 접근 없음)."""
        return JSONResponse(store.snapshot().to_dict())

    @app.post("/api/config")
    async def post_config(request: Request):
        """부분 업데이트 병합. 타입이 틀린 필드는 무시."""
        saved = await store.apply_and_persist(await _read_partial(request))
        logger.info("Overlay API: config updated")
        return JSONResponse({"ok": True, "config": saved.to_dict()})

    @app.post("/save-config")
    async def save_config_legacy(request: Request):
        """구버전 설정 화면 호환. 본문 없이 200."""
        await store.apply_and_persist(await _read_partial(request))
        return PlainTextResponse("OK")

    @app.post("/api/win/plus")
    async def win_plus():
        saved = await dispatcher.dispatch(Action.WIN_PLUS.value)
        return JSONResponse({"count": saved.current, "maxWin": saved.max_win})

    @app.post("/api/win/minus")
    async def win_minus():
        saved = await dispatcher.dispatch(Action.WIN_MINUS.value)
        return JSONResponse({"count": saved.current, "maxWin": saved.max_win})

    async def run_webhook(payload: str) -> JSONResponse:
        try:
            action, saved = await handle_webhook(dispatcher, payload, settings.token)
        except (WebhookError, CommandError) as e:
            logger.warning("Webhook rejected: %s", e)
            return JSONResponse({"ok": False, "error": str(e)}, status_code=400)
        return JSONResponse({"ok": True, "action": action, "state": saved.to_dict()})

    @app.api_route("/hook/{payload}", methods=["GET", "POST"])
    async def hook(payload: str):
        """/hook/<payload> 와 루트 경로 /<payload> 모두 여기로 (hook_raw_path 참고)."""
        return await run_webhook(payload)

    @app.websocket("/ws")
    async def live(websocket: WebSocket):
        await serve_live_session(hub, websocket)

    if settings.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.public_dir)), name="public")

    return app


def create_live_app(hub: BroadcastHub) -> FastAPI:
    """오버레이 페이지가 ws://host:8080 으로 붙는 전용 웹소켓 리스너."""
    app = FastAPI(title="WIN Overlay Live", docs_url=None, redoc_url=None)

    @app.websocket("/")
    async def live(websocket: WebSocket):
        await serve_live_session(hub, websocket)

    return app
