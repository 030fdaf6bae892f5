import asyncio

import pytest

from win_overlay.overlay.commands import UnknownActionError
from win_overlay.overlay.webhook import (
    WebhookAuthError,
    WebhookFormatError,
    WebhookRouteError,
    handle_webhook,
    parse_payload,
)

TOKEN = "TOKEN"


def test_parse_without_argument():
    req = parse_payload("TOKEN:winoverlay:win_plus", TOKEN)
    assert (req.action, req.argument) == ("win_plus", None)


def test_parse_with_argument():
    req = parse_payload("TOKEN:winoverlay:stroke:5,#ff0000", TOKEN)
    assert (req.action, req.argument) == ("stroke", "5,#ff0000")


def test_parse_rejoins_colons_in_argument():
    req = parse_payload("TOKEN:winoverlay:fonturl:https://fonts.example/a.css", TOKEN)
    assert req.argument == "https://fonts.example/a.css"


def test_parse_percent_decodes_before_split():
    req = parse_payload("TOKEN%3Awinoverlay%3Astroke%3A4%2C%23ff0000", TOKEN)
    assert (req.action, req.argument) == ("stroke", "4,#ff0000")


@pytest.mark.parametrize("payload", ["", "TOKEN", "TOKEN:winoverlay"])
def test_too_few_parts(payload):
    with pytest.raises(WebhookFormatError):
        parse_payload(payload, TOKEN)


def test_bad_token_does_not_echo_secret():
    with pytest.raises(WebhookAuthError) as exc:
        parse_payload("badtoken:winoverlay:win_plus", TOKEN)
    assert TOKEN not in str(exc.value)


def test_bad_app_name():
    with pytest.raises(WebhookRouteError):
        parse_payload("TOKEN:otherapp:win_plus", TOKEN)


def test_token_checked_before_app_name():
    with pytest.raises(WebhookAuthError):
        parse_payload("nope:otherapp:win_plus", TOKEN)


def test_handle_webhook_applies_stroke(dispatcher):
    action, state = asyncio.run(handle_webhook(dispatcher, "TOKEN:winoverlay:stroke:5,#ff0000", TOKEN))
    assert action == "stroke"
    assert state.stroke_width == 5
    assert state.stroke_color == "#ff0000"


def test_handle_webhook_bad_token_leaves_state(dispatcher, store):
    before = store.snapshot()
    with pytest.raises(WebhookAuthError):
        asyncio.run(handle_webhook(dispatcher, "badtoken:winoverlay:win_plus", TOKEN))
    assert store.snapshot() == before


def test_handle_webhook_unknown_action(dispatcher):
    with pytest.raises(UnknownActionError):
        asyncio.run(handle_webhook(dispatcher, "TOKEN:winoverlay:explode", TOKEN))
