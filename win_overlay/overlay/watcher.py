"""
config.json 외부 편집 감지 (watchfiles, OS 네이티브 감시).

상태 파일이 있는 폴더를 감시하다가 상태 파일 이벤트가 오면, 내용이 이 프로세스가
마지막으로 쓴 것과 다를 때만 StateStore.reload() (load + broadcast) 호출.
감시 실패는 경고 로그만 남기고 외부 편집 감지 없이 계속 동작.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import watchfiles

from win_overlay.overlay.store import StateStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500


class StateFileWatcher:
    def __init__(self, store: StateStore, debounce_ms: int = DEFAULT_DEBOUNCE_MS):
        self.store = store
        self.debounce_ms = debounce_ms
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        self._stop_event.set()
        try:
            await asyncio.wait_for(task, timeout=5.0)
        except asyncio.TimeoutError:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _is_state_file(self, changes: set[tuple[watchfiles.Change, str]]) -> bool:
        target = self.store.path.resolve()
        return any(Path(p).resolve() == target for _change, p in changes)

    async def check_once(self) -> bool:
        """내용 비교 후 필요하면 재로드. 외부 변경으로 재로드했으면 True."""
        try:
            text = self.store.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return False
        if text == self.store.persisted_text:
            return False
        logger.info("State file changed externally, reloading: %s", self.store.path)
        await self.store.reload()
        return True

    async def _run(self) -> None:
        folder = self.store.path.parent
        logger.info("Watching state file: %s", self.store.path)
        try:
            async for changes in watchfiles.awatch(
                folder, stop_event=self._stop_event, debounce=self.debounce_ms
            ):
                if not self._is_state_file(changes):
                    continue
                try:
                    await self.check_once()
                except (OSError, ValueError) as e:
                    logger.warning("State file watch error: %s", e)
        except (OSError, RuntimeError) as e:
            logger.warning("State file watch disabled (%s): %s", folder, e)
