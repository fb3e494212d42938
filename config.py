"""Simple JSON-based config store."""

from __future__ import annotations

import json
from pathlib import Path

DEFAULT_HOTKEY = "Key.f9"
DEFAULT_LANGUAGE = "es-ES"
DEFAULT_RESTART_SETTLE_MS = 150
DEFAULT_CLEAR_SUPPRESS_MS = 300


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "live_dictation" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_api_key(self) -> str:
        data = self._read_all()
        return str(data.get("api_key", ""))

    def set_api_key(self, key: str) -> None:
        data = self._read_all()
        data["api_key"] = key
        self._write_all(data)

    def get_hotkey(self) -> str:
        data = self._read_all()
        return str(data.get("hotkey", DEFAULT_HOTKEY))

    def set_hotkey(self, hotkey: str) -> None:
        data = self._read_all()
        data["hotkey"] = hotkey
        self._write_all(data)

    def get_language(self) -> str:
        data = self._read_all()
        return str(data.get("language", DEFAULT_LANGUAGE))

    def get_restart_settle_s(self) -> float:
        return self._read_ms("restart_settle_ms", DEFAULT_RESTART_SETTLE_MS) / 1000.0

    def get_clear_suppress_s(self) -> float:
        return self._read_ms("clear_suppress_ms", DEFAULT_CLEAR_SUPPRESS_MS) / 1000.0

    def _read_ms(self, key: str, default: int) -> int:
        value = self._read_all().get(key, default)
        try:
            value = int(value)
        except (TypeError, ValueError):
            return default
        return value if value >= 0 else default

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            return json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
