"""유틸리티 모듈"""
from .config import OverlaySettings
from .logging_config import setup_logging

__all__ = ["OverlaySettings", "setup_logging"]
