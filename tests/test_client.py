"""Tests for tananoni.realtime.client — the browser reload script."""

from tananoni.realtime.client import HOT_RELOAD_SCRIPT, hot_reload_script


def test_default_script_targets_refresh_path() -> None:
    assert '.replace("http", "ws")}/refresh`' in HOT_RELOAD_SCRIPT
    assert 'event.data === "refresh"' in HOT_RELOAD_SCRIPT
    assert "}, 1000);" in HOT_RELOAD_SCRIPT


def test_no_placeholders_left() -> None:
    assert "__" not in hot_reload_script("/ws", 250)


def test_custom_path_and_delay() -> None:
    script = hot_reload_script("/__reload", 250)
    assert "}/__reload`" in script
    assert "}, 250);" in script


def test_reconnect_reloads_page() -> None:
    assert "connect(refresh)" in HOT_RELOAD_SCRIPT
    assert "window.location.reload()" in HOT_RELOAD_SCRIPT
