"""Tests for TranscriptionEngineAdapter."""

from __future__ import annotations

import pytest

from errors import EngineStartFailure, EngineUnavailable
from models import ResultBatch, SessionEvent, SessionEventKind, SpeechResult
from recognizer import TranscriptionEngineAdapter

from fakes import FakeEngine


def _bound_adapter(engine: FakeEngine | None) -> tuple[TranscriptionEngineAdapter, list[SessionEvent]]:
    adapter = TranscriptionEngineAdapter(engine_factory=lambda: engine)
    events: list[SessionEvent] = []
    adapter.bind(events.append)
    return adapter, events


# ---------------------------------------------------------------
# Availability
# ---------------------------------------------------------------

def test_unavailable_without_engine() -> None:
    adapter, _ = _bound_adapter(None)

    assert adapter.is_available() is False
    with pytest.raises(EngineUnavailable):
        adapter.start()


def test_start_raises_unavailable_when_factory_yields_nothing() -> None:
    adapter = TranscriptionEngineAdapter(engine_factory=lambda: None, availability_check=lambda: True)

    with pytest.raises(EngineUnavailable) as info:
        adapter.start()

    assert info.value.code == "EngineUnavailable"


def test_availability_check_failure_reports_unavailable() -> None:
    def broken_check() -> bool:
        raise OSError("no audio device")

    adapter = TranscriptionEngineAdapter(engine_factory=FakeEngine, availability_check=broken_check)

    assert adapter.is_available() is False


def test_availability_check_false_reports_unavailable() -> None:
    adapter = TranscriptionEngineAdapter(engine_factory=FakeEngine, availability_check=lambda: False)

    assert adapter.is_available() is False


def test_stop_and_abort_are_noops_when_unavailable() -> None:
    adapter, events = _bound_adapter(None)

    assert adapter.stop() is True
    assert adapter.abort() is True
    assert events == []


# ---------------------------------------------------------------
# Start / stop / abort
# ---------------------------------------------------------------

def test_start_failure_is_wrapped() -> None:
    adapter, _ = _bound_adapter(FakeEngine(fail_on_start=True))

    with pytest.raises(EngineStartFailure) as info:
        adapter.start()

    assert info.value.code == "EngineStartFailure"
    assert "already started" in str(info.value)


def test_stop_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    engine = FakeEngine()

    def broken_stop() -> None:
        raise RuntimeError("boom")

    engine.stop = broken_stop  # type: ignore[method-assign]
    adapter, _ = _bound_adapter(engine)
    adapter.start()

    assert adapter.stop() is False
    assert "stop failed" in caplog.text


def test_abort_failure_is_reported_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    adapter, _ = _bound_adapter(FakeEngine(fail_on_abort=True))
    adapter.start()

    assert adapter.abort() is False
    assert "abort failed" in caplog.text
    assert adapter.stop() is True


def test_abort_is_distinct_from_stop() -> None:
    engine = FakeEngine()
    adapter, _ = _bound_adapter(engine)
    adapter.start()

    adapter.abort()

    assert engine.calls == ["start", "abort"]


# ---------------------------------------------------------------
# Event normalization
# ---------------------------------------------------------------

def test_lifecycle_events_are_forwarded() -> None:
    engine = FakeEngine()
    adapter, events = _bound_adapter(engine)
    adapter.start()

    engine.emit_start()
    engine.emit_error("no-speech")
    engine.emit_end()

    assert [e.kind for e in events] == [
        SessionEventKind.STARTED.value,
        SessionEventKind.ERROR.value,
        SessionEventKind.ENDED.value,
    ]
    assert events[1].code == "no-speech"


def test_batch_is_read_from_result_index_onward() -> None:
    engine = FakeEngine()
    adapter, events = _bound_adapter(engine)
    adapter.start()

    engine.emit_batch(
        ResultBatch(
            result_index=1,
            results=[
                SpeechResult("ya procesado", is_final=True),
                SpeechResult("hola", is_final=True),
                SpeechResult("mun", is_final=False),
            ],
        )
    )

    assert [(e.text, e.is_final, e.first_in_batch) for e in events] == [
        ("hola", True, True),
        ("mun", False, False),
    ]


def test_dispatch_receives_every_event() -> None:
    engine = FakeEngine()
    queued: list = []
    adapter = TranscriptionEngineAdapter(engine_factory=lambda: engine, dispatch=queued.append)
    events: list[SessionEvent] = []
    adapter.bind(events.append)
    adapter.start()

    engine.emit_start()
    engine.emit_result("hola")
    assert events == []

    for call in queued:
        call()

    assert [e.kind for e in events] == [SessionEventKind.STARTED.value, SessionEventKind.RESULT.value]
    assert events[1].text == "hola"


def test_engine_factory_called_once() -> None:
    created: list[FakeEngine] = []

    def factory() -> FakeEngine:
        engine = FakeEngine()
        created.append(engine)
        return engine

    adapter = TranscriptionEngineAdapter(engine_factory=factory)
    adapter.is_available()
    adapter.start()
    adapter.stop()

    assert len(created) == 1
    assert created[0].calls == ["start", "stop"]
