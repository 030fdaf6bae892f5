"""
오버레이 상태 저장소 (단일 변경 진입점).

apply_and_persist: 병합 → 클램프 → config.json 덮어쓰기 → 브로드캐스트.
모든 변경 경로(API, 웹훅, 단축키, 외부 편집)가 이 순서를 거치며,
asyncio.Lock 으로 직렬화해 동시 +1 두 번이 +1 한 번으로 합쳐지지 않게 한다.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from win_overlay.overlay.hub import BroadcastHub
from win_overlay.overlay.state import OverlayState, merge_partial

logger = logging.getLogger(__name__)

PartialBuilder = Callable[[OverlayState], Mapping[str, Any]]


class StateStore:
    """OverlayState 와 저장 파일의 유일한 소유자."""

    def __init__(self, path: Union[Path, str], hub: BroadcastHub):
        self.path = Path(path)
        self._hub = hub
        self._state = OverlayState()
        self._lock = asyncio.Lock()
        self._persisted_text: Optional[str] = None

    @property
    def persisted_text(self) -> Optional[str]:
        """이 프로세스가 마지막으로 쓰거나 읽은 파일 내용. 외부 편집 감지용."""
        return self._persisted_text

    def snapshot(self) -> OverlayState:
        return self._state

    def load(self) -> OverlayState:
        """
        저장 파일에서 상태 로드. 파일이 없으면 기본값을 쓰고 반환.
        읽기/파싱 실패 시 로그만 남기고 메모리 상태 그대로 반환.
        """
        try:
            if not self.path.is_file():
                logger.info("State file missing, writing defaults: %s", self.path)
                self._state = OverlayState()
                self._persist(self._state)
            else:
                text = self.path.read_text(encoding="utf-8")
                data = json.loads(text)
                if not isinstance(data, dict):
                    raise ValueError("state file must contain a JSON object")
                self._state = merge_partial(self._state, data)
                self._persisted_text = text
        except (OSError, ValueError) as e:
            logger.error("State load failed (%s): %s", self.path, e)
        self._hub.prime(self._state)
        return self._state

    async def apply_and_persist(self, partial: Mapping[str, Any]) -> OverlayState:
        """부분 업데이트 병합 후 저장·브로드캐스트. 새 스냅샷 반환."""
        return await self.apply(lambda _state: partial)

    async def apply(self, build: PartialBuilder) -> OverlayState:
        """
        build(현재 상태) 로 부분 업데이트를 만들어 적용.
        현재 값 기준 연산(+N 등)도 잠금 안에서 계산되므로 갱신 손실 없음.
        """
        async with self._lock:
            partial = build(self._state)
            state = merge_partial(self._state, partial)
            self._state = state
            self._persist(state)
            await self._hub.broadcast(state)
            return state

    async def reload(self) -> OverlayState:
        """파일 재로드 후 브로드캐스트 (외부 편집 감지 시)."""
        async with self._lock:
            state = self.load()
            await self._hub.broadcast(state)
            return state

    def _persist(self, state: OverlayState) -> bool:
        # 임시 파일에 쓰고 교체: 쓰기 실패 시 기존 파일은 그대로 남음
        text = json.dumps(state.to_dict(), ensure_ascii=False, indent=2)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error("State save failed (%s): %s", self.path, e)
            return False
        self._persisted_text = text
        return True
