"""
라이브 오버레이 세션 브로드캐스트.

- 접속 직후 최신 스냅샷을 바로 보냄 (다음 변경을 기다리지 않음).
- 상태 변경 시 {"type": "state", "data": ...} 를 열린 세션 전체에 전송.
- 전송 실패하거나 send_timeout 안에 끝나지 않은 세션은 조용히 목록에서 제거.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from win_overlay.overlay.state import OverlayState

logger = logging.getLogger(__name__)


def encode_state(state: OverlayState) -> str:
    """웹소켓 전송용 state 봉투 직렬화."""
    return json.dumps({"type": "state", "data": state.to_dict()}, ensure_ascii=False)


class LiveSession(ABC):
    """라이브 디스플레이 연결 하나. 전송 핸들 외에는 상태 없음."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """전송 가능한 상태인지"""
        pass

    @abstractmethod
    async def send(self, text: str) -> None:
        """텍스트 프레임 전송"""
        pass


class WebSocketSession(LiveSession):
    """Starlette WebSocket 래퍼."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        ws = self.websocket
        return (
            ws.client_state == WebSocketState.CONNECTED
            and ws.application_state == WebSocketState.CONNECTED
        )

    async def send(self, text: str) -> None:
        await self.websocket.send_text(text)


class BroadcastHub:
    """세션 집합의 유일한 소유자. register / unregister / broadcast 로만 변경."""

    def __init__(self, send_timeout: float = 5.0) -> None:
        self.send_timeout = send_timeout
        self._sessions: set[LiveSession] = set()
        self._latest = OverlayState()
        # 접속 직후 스냅샷과 브로드캐스트가 섞이지 않게 전송 직렬화
        self._lock = asyncio.Lock()

    @property
    def sessions(self) -> frozenset[LiveSession]:
        return frozenset(self._sessions)

    @property
    def latest(self) -> OverlayState:
        return self._latest

    def prime(self, state: OverlayState) -> None:
        """전송 없이 최신 스냅샷만 갱신 (시작 시 load 직후)."""
        self._latest = state

    async def register(self, session: LiveSession) -> None:
        async with self._lock:
            self._sessions.add(session)
            logger.info("Live session connected (total=%d)", len(self._sessions))
            await self._send(session, encode_state(self._latest))

    def unregister(self, session: LiveSession) -> None:
        if session in self._sessions:
            self._sessions.discard(session)
            logger.info("Live session disconnected (total=%d)", len(self._sessions))

    async def broadcast(self, state: OverlayState) -> int:
        """열린 세션 전체에 전송. 실제 전송된 세션 수 반환."""
        message = encode_state(state)
        sent = 0
        async with self._lock:
            self._latest = state
            for session in list(self._sessions):
                if not session.is_open:
                    continue
                if await self._send(session, message):
                    sent += 1
        logger.info("[WS] Sent state to %d session(s): %s", sent, message)
        return sent

    async def _send(self, session: LiveSession, message: str) -> bool:
        try:
            await asyncio.wait_for(session.send(message), self.send_timeout)
            return True
        except Exception:
            logger.debug("Live session send failed, dropping session", exc_info=True)
            self._sessions.discard(session)
            return False
