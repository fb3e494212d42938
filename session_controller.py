"""State-machine based dictation session orchestration."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from errors import (
    ABORT_FAILED,
    ENGINE_RUNTIME_ERROR,
    ENGINE_UNAVAILABLE,
    ERROR_MESSAGES,
    START_TIMEOUT,
    STOP_FAILED,
    STOP_TIMEOUT,
    EngineError,
    runtime_error_text,
)
from interfaces import Scheduler, TimerHandle
from models import SessionEvent, SessionEventKind, SessionStatus
from observable import Cell, Derived, ReadOnlyCell
from recognizer import TranscriptionEngineAdapter
from scheduler import ThreadingScheduler

logger = logging.getLogger(__name__)

StateCallback = Callable[[SessionStatus, SessionStatus], None]
ErrorCallback = Callable[[str, str], None]

RESTART_SETTLE_S = 0.15
CLEAR_SUPPRESS_S = 0.3
TRANSITION_TIMEOUT_S = 3.0


class SessionController:
    def __init__(
        self,
        adapter: TranscriptionEngineAdapter,
        scheduler: Optional[Scheduler] = None,
        restart_settle_s: float = RESTART_SETTLE_S,
        clear_suppress_s: float = CLEAR_SUPPRESS_S,
        transition_timeout_s: float = TRANSITION_TIMEOUT_S,
        on_state_change: Optional[StateCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._adapter = adapter
        self._scheduler = scheduler or ThreadingScheduler()
        self._restart_settle_s = restart_settle_s
        self._clear_suppress_s = clear_suppress_s
        self._transition_timeout_s = transition_timeout_s
        self._on_state_change = on_state_change
        self._on_error = on_error

        self._lock = threading.RLock()
        self._final_buffer = ""
        self._interim_segment = ""
        self._aborting = False
        self._restart_generation = 0
        self._suppress_generation = 0
        self._watchdog_generation = 0
        self._restart_handle: Optional[TimerHandle] = None
        self._suppress_handle: Optional[TimerHandle] = None
        self._watchdog_handle: Optional[TimerHandle] = None

        self._status: Cell[SessionStatus] = Cell(SessionStatus.IDLE)
        self._transcription: Cell[str] = Cell("")
        self._interim_transcription: Cell[str] = Cell("")
        self._error: Cell[str] = Cell("")
        self._suppress_sync: Cell[bool] = Cell(False)

        self.status = self._status.readonly()
        self.transcription = self._transcription.readonly()
        self.interim_transcription = self._interim_transcription.readonly()
        self.error = self._error.readonly()
        self.suppress_sync = self._suppress_sync.readonly()
        self.is_recording = ReadOnlyCell(
            Derived(lambda: self._status.get() == SessionStatus.RECORDING, [self._status])
        )
        self.is_processing = ReadOnlyCell(
            Derived(lambda: self._status.get() == SessionStatus.STARTING, [self._status])
        )

        self._adapter.bind(self._handle_session_event)

    @property
    def state(self) -> SessionStatus:
        return self._status.get()

    @property
    def is_available(self) -> bool:
        return self._adapter.is_available()

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    def toggle(self) -> None:
        with self._lock:
            state = self._status.get()
            if state in (SessionStatus.STARTING, SessionStatus.STOPPING):
                logger.debug("Ignoring toggle while %s", state.value)
                return
            if state == SessionStatus.RECORDING:
                self.stop()
            else:
                self._cancel_restart()
                self.start()

    def start(self) -> None:
        with self._lock:
            if self._status.get() != SessionStatus.IDLE:
                return
            self._error.set("")
            self._final_buffer = ""
            self._interim_segment = ""
            if not self._adapter.is_available():
                self._fail(ENGINE_UNAVAILABLE, ENGINE_UNAVAILABLE, ERROR_MESSAGES[ENGINE_UNAVAILABLE])
                return
            self._transition(SessionStatus.STARTING)
            try:
                self._adapter.start()
            except EngineError as exc:
                self._fail(exc.code, exc.code, str(exc))

    def stop(self) -> None:
        with self._lock:
            if self._status.get() != SessionStatus.RECORDING:
                return
            self._transition(SessionStatus.STOPPING)
            if not self._adapter.stop():
                self._fail(runtime_error_text(STOP_FAILED), ENGINE_RUNTIME_ERROR, STOP_FAILED)

    def clear(self) -> None:
        """Reset all text; while recording, also restart the engine run.

        Results arriving before the suppression window elapses are still
        accumulated but not published; the window end republishes them.
        """
        with self._lock:
            if self._status.get() != SessionStatus.RECORDING:
                self._reset_text()
                return
            self._cancel_suppression()
            self._suppress_sync.set(True)
            self.restart()
            generation = self._suppress_generation
            self._suppress_handle = self._scheduler.call_later(
                self._clear_suppress_s, lambda: self._end_suppression(generation)
            )

    def restart(self) -> None:
        with self._lock:
            self._cancel_restart()
            self._reset_text()
            self._aborting = self._status.get() != SessionStatus.IDLE
            if not self._adapter.abort():
                self._aborting = False
                self._fail(runtime_error_text(ABORT_FAILED), ENGINE_RUNTIME_ERROR, ABORT_FAILED)
                return
            generation = self._restart_generation
            self._restart_handle = self._scheduler.call_later(
                self._restart_settle_s, lambda: self._start_after_abort(generation)
            )

    def close(self) -> None:
        with self._lock:
            self._cancel_restart()
            self._cancel_suppression()
            self._suppress_sync.set(False)
            if self._status.get() != SessionStatus.IDLE:
                self._adapter.abort()
                self._transition(SessionStatus.IDLE)

    # ------------------------------------------------------------------
    # Engine events
    # ------------------------------------------------------------------

    def _handle_session_event(self, event: SessionEvent) -> None:
        with self._lock:
            kind = event.kind
            if kind == SessionEventKind.STARTED.value:
                self._error.set("")
                self._transition(SessionStatus.RECORDING)
            elif kind == SessionEventKind.RESULT.value:
                self._handle_result(event)
            elif kind == SessionEventKind.ENDED.value:
                self._handle_ended()
            elif kind == SessionEventKind.ERROR.value:
                self._fail(runtime_error_text(event.code), ENGINE_RUNTIME_ERROR, event.code)

    def _handle_result(self, event: SessionEvent) -> None:
        if event.first_in_batch:
            self._interim_segment = ""
        if event.is_final:
            self._final_buffer += event.text + " "
        else:
            self._interim_segment += event.text
        if self._suppress_sync.get():
            logger.debug("Holding back result while suppressed: %r", event.text)
            return
        self._interim_transcription.set(self._final_buffer + self._interim_segment)

    def _handle_ended(self) -> None:
        if self._aborting:
            self._aborting = False
            if self._status.get() == SessionStatus.STARTING:
                # Late end of the aborted run; the new run is already starting.
                return
        self._transition(SessionStatus.IDLE)
        final_text = self._final_buffer.strip()
        if final_text:
            self._transcription.set(final_text)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _start_after_abort(self, generation: int) -> None:
        with self._lock:
            if generation != self._restart_generation:
                return
            self._restart_handle = None
            self._final_buffer = ""
            if self._status.get() != SessionStatus.IDLE:
                # The aborted run never reported its end.
                self._transition(SessionStatus.IDLE)
            self.start()

    def _end_suppression(self, generation: int) -> None:
        with self._lock:
            if generation != self._suppress_generation:
                return
            self._suppress_handle = None
            self._suppress_sync.set(False)
            if self._status.get() == SessionStatus.RECORDING:
                self._interim_transcription.set(self._final_buffer + self._interim_segment)

    def _on_watchdog(self, generation: int) -> None:
        with self._lock:
            if generation != self._watchdog_generation:
                return
            self._watchdog_handle = None
            state = self._status.get()
            code = START_TIMEOUT if state == SessionStatus.STARTING else STOP_TIMEOUT
            logger.warning("Engine did not leave %s in time", state.value)
            self._aborting = False
            self._adapter.abort()
            self._fail(runtime_error_text(code), ENGINE_RUNTIME_ERROR, code)

    def _reset_text(self) -> None:
        self._final_buffer = ""
        self._interim_segment = ""
        self._transcription.set("")
        self._interim_transcription.set("")

    def _fail(self, error_text: str, code: str, message: str) -> None:
        self._error.set(error_text)
        self._emit_error(code, message)
        self._transition(SessionStatus.IDLE)

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)

    def _cancel_restart(self) -> None:
        # A timer that already fired may be waiting on the lock; bumping the
        # generation turns it into a no-op.
        self._restart_generation += 1
        self._cancel(self._restart_handle)
        self._restart_handle = None

    def _cancel_suppression(self) -> None:
        self._suppress_generation += 1
        self._cancel(self._suppress_handle)
        self._suppress_handle = None

    def _cancel_watchdog(self) -> None:
        self._watchdog_generation += 1
        self._cancel(self._watchdog_handle)
        self._watchdog_handle = None

    def _cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

    def _transition(self, to_state: SessionStatus) -> None:
        from_state = self._status.get()
        if from_state == to_state:
            return
        logger.debug("Session %s -> %s", from_state.value, to_state.value)
        self._cancel_watchdog()
        if to_state in (SessionStatus.STARTING, SessionStatus.STOPPING):
            generation = self._watchdog_generation
            self._watchdog_handle = self._scheduler.call_later(
                self._transition_timeout_s, lambda: self._on_watchdog(generation)
            )
        self._status.set(to_state)
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
