"""
WIN 오버레이 서버 실행: python -m win_overlay  (프로젝트 루트에서)

.env 에 WIN_TOKEN 설정 후 실행. 포트 변경은 OVERLAY_PORT / OVERLAY_WS_PORT.
웹훅(TikFinity): http://127.0.0.1:3000/hook/<WIN_TOKEN>:winoverlay:win_plus:1
단축키 Alt+= / Alt+- 는 호스트 셸이 app.state.shortcuts.trigger() 로 전달.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from win_overlay.overlay.commands import CommandDispatcher
from win_overlay.overlay.hub import BroadcastHub
from win_overlay.overlay.server import create_app, create_live_app
from win_overlay.overlay.shortcuts import ShortcutBridge
from win_overlay.overlay.store import StateStore
from win_overlay.overlay.watcher import StateFileWatcher
from win_overlay.utils import OverlaySettings, setup_logging

logger = logging.getLogger(__name__)


async def serve(settings: OverlaySettings) -> None:
    hub = BroadcastHub()
    store = StateStore(settings.config_path, hub)
    state = store.load()
    logger.info("State loaded: %s", state.to_dict())
    dispatcher = CommandDispatcher(store)
    watcher = StateFileWatcher(store, settings.watch_debounce_ms) if settings.watch_enabled else None

    app = create_app(store, dispatcher, hub, settings, watcher=watcher)
    app.state.shortcuts = ShortcutBridge(dispatcher, asyncio.get_running_loop())

    servers = [
        uvicorn.Server(uvicorn.Config(app, host=settings.host, port=settings.port, log_level="warning")),
    ]
    print(f"오버레이: http://{settings.host}:{settings.port}/ (OBS 브라우저 소스에 추가)")
    if settings.ws_port:
        live = create_live_app(hub)
        servers.append(
            uvicorn.Server(uvicorn.Config(live, host=settings.host, port=settings.ws_port, log_level="warning"))
        )
        print(f"라이브 웹소켓: ws://{settings.host}:{settings.ws_port}/")

    tasks = [asyncio.create_task(s.serve()) for s in servers]
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    # 한쪽이 끝나면(종료 신호·바인드 실패) 나머지도 정리
    for s in servers:
        s.should_exit = True
    if pending:
        await asyncio.wait(pending)
    for t in done:
        t.result()


def main() -> None:
    load_dotenv(Path(__file__).resolve().parent.parent / ".env")
    log_dir = setup_logging()
    logger.info("Logs: %s", log_dir)
    settings = OverlaySettings.from_env()
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
