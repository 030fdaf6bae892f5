"""WIN Overlay: 방송용 승리 카운터 오버레이 서버."""

__version__ = "1.0.0"
