import logging
from pathlib import Path

from win_overlay.utils.config import DEFAULT_TOKEN, OverlaySettings
from win_overlay.utils.logging_config import setup_logging


def test_from_env_defaults(caplog):
    with caplog.at_level(logging.WARNING):
        s = OverlaySettings.from_env({})
    assert s.token == DEFAULT_TOKEN
    assert (s.host, s.port, s.ws_port) == ("127.0.0.1", 3000, 8080)
    assert s.config_path == s.public_dir / "config.json"
    assert (s.watch_enabled, s.watch_debounce_ms) == (True, 500)
    assert "WIN_TOKEN" in caplog.text


def test_from_env_overrides(tmp_path):
    s = OverlaySettings.from_env({
        "WIN_TOKEN": " secret ",
        "OVERLAY_HOST": "0.0.0.0",
        "OVERLAY_PORT": "3100",
        "OVERLAY_WS_PORT": "0",
        "OVERLAY_PUBLIC_DIR": str(tmp_path),
        "OVERLAY_WATCH": "off",
        "OVERLAY_WATCH_DEBOUNCE_MS": "200",
    })
    assert s.token == "secret"
    assert s.host == "0.0.0.0"
    assert (s.port, s.ws_port) == (3100, 0)
    assert s.config_path == tmp_path / "config.json"
    assert (s.watch_enabled, s.watch_debounce_ms) == (False, 200)


def test_explicit_config_path(tmp_path):
    s = OverlaySettings.from_env({"OVERLAY_CONFIG_PATH": str(tmp_path / "state.json")})
    assert s.config_path == Path(tmp_path / "state.json")


def test_bad_numbers_fall_back(caplog):
    with caplog.at_level(logging.WARNING):
        s = OverlaySettings.from_env({"OVERLAY_PORT": "abc", "OVERLAY_WATCH_DEBOUNCE_MS": "fast"})
    assert s.port == 3000
    assert s.watch_debounce_ms == 500
    assert "OVERLAY_PORT" in caplog.text


def test_setup_logging_writes_category_files(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        log_dir = setup_logging()
        logging.getLogger("win_overlay.overlay.webhook").info("hook hit")
        logging.getLogger("win_overlay.overlay.hub").info("sent")
        for h in root.handlers:
            h.flush()
    finally:
        for h in root.handlers:
            h.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
    assert log_dir == tmp_path / "logs"
    assert "hook hit" in (log_dir / "webhook.log").read_text(encoding="utf-8")
    assert "hook hit" not in (log_dir / "live.log").read_text(encoding="utf-8")
    assert "sent" in (log_dir / "app.log").read_text(encoding="utf-8")
