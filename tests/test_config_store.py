from __future__ import annotations

import json
from pathlib import Path

from config import JsonConfigStore


def test_config_read_write(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path=path)

    assert store.get_api_key() == ""
    assert store.get_hotkey() == "Key.f9"

    store.set_api_key("abc")
    store.set_hotkey("Key.f8")

    reloaded = JsonConfigStore(path=path)
    assert reloaded.get_api_key() == "abc"
    assert reloaded.get_hotkey() == "Key.f8"


def test_session_defaults(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "config.json")

    assert store.get_language() == "es-ES"
    assert store.get_restart_settle_s() == 0.15
    assert store.get_clear_suppress_s() == 0.3


def test_delays_read_from_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"language": "en-US", "restart_settle_ms": 250, "clear_suppress_ms": "bad"}),
        encoding="utf-8",
    )
    store = JsonConfigStore(path=path)

    assert store.get_language() == "en-US"
    assert store.get_restart_settle_s() == 0.25
    assert store.get_clear_suppress_s() == 0.3


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_api_key() == ""
    assert store.get_hotkey() == "Key.f9"
