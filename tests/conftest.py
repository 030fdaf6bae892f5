"""오버레이 테스트 공용 fixture."""

import asyncio

import pytest

from win_overlay.overlay.commands import CommandDispatcher
from win_overlay.overlay.hub import BroadcastHub, LiveSession
from win_overlay.overlay.store import StateStore


class FakeSession(LiveSession):
    """받은 프레임을 기록하는 가짜 세션."""

    def __init__(self, open_=True, fail=False, stall=False):
        self.open = open_
        self.fail = fail
        self.stall = stall
        self.sent = []

    @property
    def is_open(self):
        return self.open

    async def send(self, text):
        if self.fail:
            raise ConnectionError("socket gone")
        if self.stall:
            # 버퍼가 꽉 찬 느린 클라이언트
            await asyncio.Event().wait()
        self.sent.append(text)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "public" / "config.json"


@pytest.fixture
def hub():
    return BroadcastHub()


@pytest.fixture
def store(config_path, hub):
    s = StateStore(config_path, hub)
    s.load()
    return s


@pytest.fixture
def dispatcher(store):
    return CommandDispatcher(store)
