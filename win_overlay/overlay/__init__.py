"""
방송 오버레이 상태 동기화: 저장소 → 명령 → 브로드캐스트.

- StateStore: 단일 변경 진입점 (병합·클램프·저장·브로드캐스트).
- CommandDispatcher: 웹훅/단축키 액션 해석.
- BroadcastHub: 라이브 오버레이 웹소켓 세션에 state 푸시.
- OBS에서 브라우저 소스 URL을 http://127.0.0.1:3000/overlay.html 로 설정.
"""

from win_overlay.overlay.commands import Action, CommandDispatcher, CommandError
from win_overlay.overlay.hub import BroadcastHub, LiveSession
from win_overlay.overlay.state import OverlayState
from win_overlay.overlay.store import StateStore

__all__ = [
    "Action",
    "BroadcastHub",
    "CommandDispatcher",
    "CommandError",
    "LiveSession",
    "OverlayState",
    "StateStore",
]
