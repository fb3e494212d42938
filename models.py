"""Core data models for the dictation session."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    STARTING = "STARTING"
    RECORDING = "RECORDING"
    STOPPING = "STOPPING"


class SessionEventKind(str, Enum):
    STARTED = "started"
    RESULT = "result"
    ENDED = "ended"
    ERROR = "error"


@dataclass
class SessionEvent:
    """Normalized event emitted by the engine adapter."""

    kind: str
    text: str = ""
    is_final: bool = False
    first_in_batch: bool = True
    code: str = ""


@dataclass
class SpeechResult:
    transcript: str
    is_final: bool = False


@dataclass
class ResultBatch:
    """Cumulative result list delivered by a recognition engine.

    ``results`` holds every result of the current run; only entries from
    ``result_index`` onward changed since the previous batch.
    """

    result_index: int
    results: list[SpeechResult] = field(default_factory=list)
