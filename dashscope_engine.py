"""Continuous recognition engine backed by DashScope real-time ASR.

Microphone frames from ``sounddevice`` are streamed straight into a
``dashscope.audio.asr.Recognition`` session.  Recognized sentences are kept
as a cumulative, indexed result list for the current run; each callback
delivers a :class:`ResultBatch` starting at the sentence that changed.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable, Optional

from models import ResultBatch, SpeechResult

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

try:
    import dashscope
    from dashscope.audio.asr import Recognition, RecognitionCallback, RecognitionResult
except Exception:  # pragma: no cover
    dashscope = None  # type: ignore
    Recognition = None  # type: ignore
    RecognitionCallback = object  # type: ignore
    RecognitionResult = None  # type: ignore

logger = logging.getLogger(__name__)

NETWORK_ERROR_CODE = "network"


class _RecognitionRun(RecognitionCallback):
    """Callback sink and result history for a single recognition run."""

    def __init__(self, engine: "DashscopeSpeechEngine") -> None:
        self._engine = engine
        self.recognition: Any = None
        self.stream: Any = None
        self.discarded = False
        self.results: list[SpeechResult] = []
        self._ended = False

    # DashScope callbacks ------------------------------------------------

    def on_open(self) -> None:
        if self.discarded:
            return
        self._engine._emit(self._engine.on_start)

    def on_event(self, result: Any) -> None:
        if self.discarded:
            return
        sentence = result.get_sentence()
        if not isinstance(sentence, dict) or "text" not in sentence:
            return
        text = str(sentence.get("text", ""))
        is_final = bool(RecognitionResult.is_sentence_end(sentence))
        if self.results and not self.results[-1].is_final:
            index = len(self.results) - 1
            self.results[index] = SpeechResult(transcript=text, is_final=is_final)
        else:
            index = len(self.results)
            self.results.append(SpeechResult(transcript=text, is_final=is_final))
        if not is_final and not self._engine.interim_results:
            return
        batch = ResultBatch(result_index=index, results=list(self.results))
        self._engine._emit(self._engine.on_result, batch)
        if is_final and not self._engine.continuous:
            self._engine.stop()

    def on_error(self, result: Any) -> None:
        if self.discarded:
            return
        code = str(getattr(result, "code", "") or NETWORK_ERROR_CODE)
        logger.warning("DashScope recognition error: %s", getattr(result, "message", code))
        self._engine._emit(self._engine.on_error, code)
        self.on_close()

    def on_complete(self) -> None:
        logger.debug("DashScope recognition complete")

    def on_close(self) -> None:
        if self.discarded or self._ended:
            return
        self._ended = True
        self.close_microphone()
        self._engine._finish_run(self)

    # Audio ------------------------------------------------------------

    def on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if self.discarded or self._ended or self.recognition is None or np is None:
            return
        payload = np.asarray(indata, dtype=np.int16).tobytes()
        try:
            self.recognition.send_audio_frame(payload)
        except Exception as exc:
            logger.debug("Dropping audio frame: %s", exc)

    def close_microphone(self) -> None:
        stream = self.stream
        self.stream = None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception:
            logger.warning("Closing microphone stream failed", exc_info=True)


class DashscopeSpeechEngine:
    def __init__(
        self,
        api_key: str = "",
        model: str = "paraformer-realtime-v2",
        sample_rate: int = 16000,
        chunk_ms: int = 100,
    ) -> None:
        self.continuous = True
        self.interim_results = True
        self.lang = "es-ES"
        self.on_start: Optional[Callable[[], None]] = None
        self.on_end: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None
        self.on_result: Optional[Callable[[ResultBatch], None]] = None

        self._api_key = api_key
        self._model = model
        self._sample_rate = sample_rate
        self._chunk_ms = chunk_ms
        self._lock = threading.Lock()
        self._run: Optional[_RecognitionRun] = None

    def set_api_key(self, api_key: str) -> None:
        self._api_key = api_key

    def is_supported(self) -> bool:
        if dashscope is None or sd is None or np is None:
            return False
        return bool(self._resolve_api_key())

    def start(self) -> None:
        with self._lock:
            if self._run is not None:
                raise RuntimeError("recognition already started")
            if dashscope is None or sd is None:
                raise RuntimeError("dashscope and sounddevice are required")
            api_key = self._resolve_api_key()
            if not api_key:
                raise RuntimeError("No API key configured")
            dashscope.api_key = api_key

            run = _RecognitionRun(self)
            run.recognition = Recognition(
                model=self._model,
                format="pcm",
                sample_rate=self._sample_rate,
                language_hints=[self.lang.split("-")[0]],
                callback=run,
            )
            self._run = run
            try:
                run.recognition.start()
                run.stream = sd.InputStream(
                    samplerate=self._sample_rate,
                    channels=1,
                    dtype="int16",
                    blocksize=int(self._sample_rate * (self._chunk_ms / 1000.0)),
                    callback=run.on_audio,
                )
                run.stream.start()
            except Exception:
                run.discarded = True
                run.close_microphone()
                self._run = None
                raise

    def stop(self) -> None:
        with self._lock:
            run = self._run
        if run is None:
            return
        run.close_microphone()
        threading.Thread(target=self._stop_recognition, args=(run,), daemon=True).start()

    def abort(self) -> None:
        """End the run now and forget its results.

        Callbacks still arriving from the aborted run are ignored, so the
        next ``start()`` begins with an empty result history.
        """
        with self._lock:
            run = self._run
            self._run = None
        if run is None:
            return
        run.discarded = True
        run.results = []
        run.close_microphone()
        threading.Thread(target=self._stop_recognition, args=(run,), daemon=True).start()
        self._emit(self.on_end)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _resolve_api_key(self) -> str:
        return self._api_key or os.getenv("DASHSCOPE_API_KEY", "")

    def _stop_recognition(self, run: _RecognitionRun) -> None:
        try:
            run.recognition.stop()
        except Exception as exc:
            logger.debug("DashScope stop raised: %s", exc)
        if not run.discarded:
            run.on_close()

    def _finish_run(self, run: _RecognitionRun) -> None:
        with self._lock:
            if self._run is run:
                self._run = None
        self._emit(self.on_end)

    def _emit(self, handler: Optional[Callable[..., None]], *args: Any) -> None:
        if handler is not None:
            handler(*args)
