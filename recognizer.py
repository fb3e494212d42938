"""Adapter that turns a native recognition engine into session events.

The native engine reports a cumulative, indexed result list plus
start/end/error lifecycle callbacks.  The adapter binds to those callbacks,
configures continuous interim capture and forwards a small closed set of
:class:`SessionEvent` values to a single sink.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from errors import EngineStartFailure, EngineUnavailable
from interfaces import RecognitionEngine
from models import ResultBatch, SessionEvent, SessionEventKind

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "es-ES"

EventSink = Callable[[SessionEvent], None]
EngineFactory = Callable[[], Optional[RecognitionEngine]]
AvailabilityCheck = Callable[[], bool]
Dispatcher = Callable[[Callable[[], None]], None]


class TranscriptionEngineAdapter:
    def __init__(
        self,
        engine_factory: EngineFactory,
        language: str = DEFAULT_LANGUAGE,
        availability_check: Optional[AvailabilityCheck] = None,
        dispatch: Optional[Dispatcher] = None,
    ) -> None:
        self._engine_factory = engine_factory
        self._language = language
        self._availability_check = availability_check
        self._dispatch = dispatch
        self._engine: Optional[RecognitionEngine] = None
        self._engine_created = False
        self._on_event: Optional[EventSink] = None

    def bind(self, on_event: EventSink) -> None:
        self._on_event = on_event

    def is_available(self) -> bool:
        try:
            if self._availability_check is not None and not self._availability_check():
                return False
            return self._get_engine() is not None
        except Exception:
            logger.exception("Recognition engine availability check failed")
            return False

    def start(self) -> None:
        if not self.is_available():
            raise EngineUnavailable()
        engine = self._get_engine()
        if engine is None:
            raise EngineUnavailable()
        engine.continuous = True
        engine.interim_results = True
        engine.lang = self._language
        try:
            engine.start()
        except Exception as exc:
            logger.warning("Recognition engine failed to start: %s", exc)
            raise EngineStartFailure(str(exc)) from exc

    def stop(self) -> bool:
        """Ask the engine to finish gracefully; ``False`` if the request failed."""
        engine = self._engine
        if engine is None:
            return True
        try:
            engine.stop()
        except Exception:
            logger.warning("Recognition engine stop failed", exc_info=True)
            return False
        return True

    def abort(self) -> bool:
        engine = self._engine
        if engine is None:
            return True
        try:
            engine.abort()
        except Exception:
            logger.warning("Recognition engine abort failed", exc_info=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _get_engine(self) -> Optional[RecognitionEngine]:
        if not self._engine_created:
            self._engine_created = True
            engine = self._engine_factory()
            if engine is not None:
                engine.on_start = self._handle_start
                engine.on_end = self._handle_end
                engine.on_error = self._handle_error
                engine.on_result = self._handle_result
            self._engine = engine
        return self._engine

    def _emit(self, event: SessionEvent) -> None:
        sink = self._on_event
        if sink is None:
            return
        if self._dispatch is not None:
            self._dispatch(lambda: sink(event))
        else:
            sink(event)

    def _handle_start(self) -> None:
        self._emit(SessionEvent(kind=SessionEventKind.STARTED.value))

    def _handle_end(self) -> None:
        self._emit(SessionEvent(kind=SessionEventKind.ENDED.value))

    def _handle_error(self, code: str) -> None:
        logger.warning("Recognition engine error: %s", code)
        self._emit(SessionEvent(kind=SessionEventKind.ERROR.value, code=code))

    def _handle_result(self, batch: ResultBatch) -> None:
        start = max(batch.result_index, 0)
        for offset, result in enumerate(batch.results[start:]):
            self._emit(
                SessionEvent(
                    kind=SessionEventKind.RESULT.value,
                    text=result.transcript,
                    is_final=result.is_final,
                    first_in_batch=offset == 0,
                )
            )
