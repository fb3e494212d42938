"""Protocol interfaces used by the session layer."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from models import ResultBatch


class RecognitionEngine(Protocol):
    """Native continuous recognizer consumed by the engine adapter."""

    continuous: bool
    interim_results: bool
    lang: str

    on_start: Optional[Callable[[], None]]
    on_end: Optional[Callable[[], None]]
    on_error: Optional[Callable[[str], None]]
    on_result: Optional[Callable[[ResultBatch], None]]

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def abort(self) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class ClipboardService(Protocol):
    def copy_text(self, text: str) -> bool: ...


class ConfigStore(Protocol):
    def get_api_key(self) -> str: ...

    def set_api_key(self, key: str) -> None: ...

    def get_hotkey(self) -> str: ...

    def set_hotkey(self, hotkey: str) -> None: ...

    def get_language(self) -> str: ...

    def get_restart_settle_s(self) -> float: ...

    def get_clear_suppress_s(self) -> float: ...
