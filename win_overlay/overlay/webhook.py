"""
TikFinity 등 외부 서비스용 웹훅 페이로드 해석.

형식: token:appName:action[:argument]  (퍼센트 디코딩 후 ':' 로 분리)
인자 안의 ':' 는 다시 이어 붙여 하나의 인자로 유지.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote

from win_overlay.overlay.commands import CommandDispatcher
from win_overlay.overlay.state import OverlayState

logger = logging.getLogger(__name__)

APP_NAME = "winoverlay"


class WebhookError(ValueError):
    """웹훅 페이로드 거부 (클라이언트 오류)."""


class WebhookFormatError(WebhookError):
    pass


class WebhookAuthError(WebhookError):
    pass


class WebhookRouteError(WebhookError):
    pass


@dataclass(frozen=True)
class WebhookRequest:
    action: str
    argument: Optional[str] = None


def parse_payload(payload: str, token: str) -> WebhookRequest:
    """
    페이로드 검증 순서: 디코딩 → 분리 → 개수 → 토큰 → 앱 이름.

    Raises:
        WebhookFormatError: 구분자 3개 미만
        WebhookAuthError: 토큰 불일치 (기대값은 메시지에 노출하지 않음)
        WebhookRouteError: 앱 이름 불일치
    """
    text = unquote(payload)
    parts = text.split(":")
    if len(parts) < 3:
        raise WebhookFormatError("payload format: token:app:action[:arg]")
    given_token, app_name, action, *rest = parts
    if not secrets.compare_digest(given_token.encode("utf-8"), token.encode("utf-8")):
        raise WebhookAuthError("invalid token")
    if app_name != APP_NAME:
        raise WebhookRouteError("invalid app name")
    return WebhookRequest(action, ":".join(rest) if rest else None)


async def handle_webhook(
    dispatcher: CommandDispatcher, payload: str, token: str
) -> tuple[str, OverlayState]:
    """페이로드 해석 + 디스패치. (action, 새 상태) 반환. 실패 시 ValueError 계열 예외."""
    request = parse_payload(payload, token)
    state = await dispatcher.dispatch(request.action, request.argument)
    logger.info("Webhook: %s applied", request.action)
    return request.action, state
