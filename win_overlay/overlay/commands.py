"""
웹훅/단축키 액션 → 상태 변경 명령.

액션 목록은 Action enum 으로 고정. 새 액션은 enum 멤버 + parse_command /
Command.build_update 분기를 함께 추가해야 한다.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from win_overlay.overlay.state import OverlayState
from win_overlay.overlay.store import StateStore

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_TRUTHY = frozenset({"1", "true", "on"})


class Action(Enum):
    WIN_PLUS = "win_plus"
    WIN_MINUS = "win_minus"
    SET_CURRENT = "set_current"
    SET_MAX = "set_max"
    THEME = "theme"
    FONT = "font"
    FONT_URL = "fonturl"
    BG = "bg"
    STROKE = "stroke"


class CommandError(ValueError):
    """명령 해석 실패 (클라이언트 오류)."""


class UnknownActionError(CommandError):
    pass


class ArgumentError(CommandError):
    pass


def parse_int(raw: Optional[str]) -> Optional[int]:
    """앞부분 정수만 읽음: "3" / " 3" / "3px" → 3, "abc" → None."""
    if raw is None:
        return None
    m = _LEADING_INT.match(raw)
    return int(m.group(1)) if m else None


def parse_float(raw: Optional[str]) -> Optional[float]:
    """앞부분 실수만 읽음: "2.5" → 2.5, "4px" → 4.0."""
    if raw is None:
        return None
    m = _LEADING_FLOAT.match(raw)
    return float(m.group(1)) if m else None


@dataclass(frozen=True)
class Command:
    """검증된 명령. value 의미는 action 별로 다름 (stroke 는 value=두께, color=색)."""
    action: Action
    value: Any = None
    color: Optional[str] = None

    def build_update(self, state: OverlayState) -> dict[str, Any]:
        """현재 상태 기준 부분 업데이트 생성. StateStore 잠금 안에서 호출됨."""
        action = self.action
        if action is Action.WIN_PLUS:
            return {"current": state.current + self.value}
        if action is Action.WIN_MINUS:
            return {"current": state.current - self.value}
        if action is Action.SET_CURRENT:
            return {"current": self.value}
        if action is Action.SET_MAX:
            return {"maxWin": self.value}
        if action is Action.THEME:
            return {"theme": self.value}
        if action is Action.FONT:
            return {"font": self.value}
        if action is Action.FONT_URL:
            return {"fontUrl": self.value}
        if action is Action.BG:
            return {"showBg": self.value}
        if action is Action.STROKE:
            update: dict[str, Any] = {}
            if self.value is not None:
                update["strokeWidth"] = self.value
            if self.color:
                update["strokeColor"] = self.color
            return update
        raise UnknownActionError(f"unknown action: {action.value}")


def parse_command(name: str, argument: Optional[str] = None) -> Command:
    """
    액션 이름 + 원본 인자 문자열 → Command.

    Raises:
        UnknownActionError: 목록에 없는 액션 (대소문자 구분)
        ArgumentError: 필수 인자 누락/형식 오류
    """
    try:
        action = Action(name)
    except ValueError:
        raise UnknownActionError(f"unknown action: {name}") from None

    if action in (Action.WIN_PLUS, Action.WIN_MINUS):
        step = parse_int(argument)
        return Command(action, 1 if step is None else step)
    if action is Action.SET_CURRENT:
        n = parse_int(argument)
        if n is None:
            raise ArgumentError("set_current needs a number")
        return Command(action, n)
    if action is Action.SET_MAX:
        n = parse_int(argument)
        return Command(action, n if n is not None and n >= 1 else 1)
    if action is Action.THEME:
        if not argument:
            raise ArgumentError("theme needs a value")
        return Command(action, argument)
    if action is Action.FONT:
        if not argument:
            raise ArgumentError("font needs a value")
        return Command(action, argument)
    if action is Action.FONT_URL:
        return Command(action, argument or "")
    if action is Action.BG:
        return Command(action, (argument or "").lower() in _TRUTHY)
    if action is Action.STROKE:
        if not argument:
            raise ArgumentError('stroke needs "<size>,<color>"')
        parts = argument.split(",")
        width = parse_float(parts[0])
        if width is not None and width.is_integer():
            width = int(width)
        color = parts[1] if len(parts) > 1 else None
        return Command(action, width, color or None)
    raise UnknownActionError(f"unknown action: {name}")


class CommandDispatcher:
    """액션을 해석해 StateStore 단일 진입점으로 넘김."""

    def __init__(self, store: StateStore):
        self.store = store

    async def dispatch(self, name: str, argument: Optional[str] = None) -> OverlayState:
        command = parse_command(name, argument)
        state = await self.store.apply(command.build_update)
        logger.info("Command %s(%r) -> current=%s maxWin=%s",
                    name, argument, state.current, state.max_win)
        return state
