"""
환경 변수 기반 서버 설정. .env 는 진입점에서 load_dotenv 로 미리 읽어 둔다.

- WIN_TOKEN: 웹훅 공유 토큰
- OVERLAY_HOST / OVERLAY_PORT: 제어 API·웹훅 서버
- OVERLAY_WS_PORT: 라이브 오버레이 전용 웹소켓 포트 (0이면 끔, /ws 는 항상 사용 가능)
- OVERLAY_CONFIG_PATH / OVERLAY_PUBLIC_DIR: 상태 파일, 정적 파일 폴더
- OVERLAY_WATCH / OVERLAY_WATCH_DEBOUNCE_MS: config.json 외부 편집 감시 on/off, 이벤트 묶음 간격(ms)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_TOKEN = "changeme"


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer, using %s", name, raw, default)
        return default


def _bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = (env.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class OverlaySettings:
    token: str = DEFAULT_TOKEN
    host: str = "127.0.0.1"
    port: int = 3000
    ws_port: int = 8080
    config_path: Path = _project_root() / "public" / "config.json"
    public_dir: Path = _project_root() / "public"
    watch_enabled: bool = True
    watch_debounce_ms: int = 500

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "OverlaySettings":
        env = os.environ if env is None else env
        public_dir = Path(env.get("OVERLAY_PUBLIC_DIR") or cls.public_dir)
        config_path = Path(env.get("OVERLAY_CONFIG_PATH") or (public_dir / "config.json"))
        token = (env.get("WIN_TOKEN") or "").strip() or DEFAULT_TOKEN
        if token == DEFAULT_TOKEN:
            logger.warning("WIN_TOKEN not set, webhook uses the default token")
        return cls(
            token=token,
            host=(env.get("OVERLAY_HOST") or "").strip() or cls.host,
            port=_int_env(env, "OVERLAY_PORT", cls.port),
            ws_port=_int_env(env, "OVERLAY_WS_PORT", cls.ws_port),
            config_path=config_path,
            public_dir=public_dir,
            watch_enabled=_bool_env(env, "OVERLAY_WATCH", cls.watch_enabled),
            watch_debounce_ms=_int_env(env, "OVERLAY_WATCH_DEBOUNCE_MS", cls.watch_debounce_ms),
        )
