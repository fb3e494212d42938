"""Shared error codes and user-facing messages."""

from __future__ import annotations

ENGINE_UNAVAILABLE = "EngineUnavailable"
ENGINE_START_FAILURE = "EngineStartFailure"
ENGINE_RUNTIME_ERROR = "EngineRuntimeError"

ERROR_MESSAGES = {
    ENGINE_UNAVAILABLE: "Speech recognition is not available on this system.",
    ENGINE_START_FAILURE: "Speech recognition could not be started.",
    ENGINE_RUNTIME_ERROR: "Speech recognition stopped with an error.",
}


class EngineError(Exception):
    code = ENGINE_RUNTIME_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message or ERROR_MESSAGES[self.code])


class EngineUnavailable(EngineError):
    code = ENGINE_UNAVAILABLE


class EngineStartFailure(EngineError):
    code = ENGINE_START_FAILURE


def runtime_error_text(engine_code: str) -> str:
    """Error cell text for an engine-reported failure."""
    if not engine_code:
        return ENGINE_RUNTIME_ERROR
    return f"{ENGINE_RUNTIME_ERROR}: {engine_code}"


# Engine codes raised by the session itself rather than reported by the engine.
STOP_FAILED = "stop-failed"
ABORT_FAILED = "abort-failed"
START_TIMEOUT = "start-timeout"
STOP_TIMEOUT = "stop-timeout"
