"""
전역 단축키 → 카운터 증감.

실제 키 후킹은 호스트 셸(데스크톱 앱) 몫. 셸이 자기 스레드에서 trigger()를
부르면 서버 이벤트 루프로 넘겨 같은 변경 경로(StateStore)를 탄다.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Mapping, Optional

from win_overlay.overlay.commands import Action, CommandDispatcher
from win_overlay.overlay.state import OverlayState

logger = logging.getLogger(__name__)

DEFAULT_BINDINGS: dict[str, Action] = {
    "Alt+=": Action.WIN_PLUS,
    "Alt+-": Action.WIN_MINUS,
}


class ShortcutBridge:
    def __init__(
        self,
        dispatcher: CommandDispatcher,
        loop: asyncio.AbstractEventLoop,
        bindings: Optional[Mapping[str, Action]] = None,
    ):
        self.dispatcher = dispatcher
        self.loop = loop
        self.bindings = dict(DEFAULT_BINDINGS if bindings is None else bindings)

    def accelerators(self) -> list[str]:
        return list(self.bindings)

    def trigger(self, accelerator: str) -> concurrent.futures.Future[OverlayState]:
        """
        어느 스레드에서든 호출 가능. 스텝은 항상 1.

        Raises:
            KeyError: 등록되지 않은 단축키
        """
        action = self.bindings[accelerator]
        logger.info("Shortcut %s -> %s", accelerator, action.value)
        return asyncio.run_coroutine_threadsafe(
            self.dispatcher.dispatch(action.value), self.loop
        )
