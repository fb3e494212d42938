"""Displayed-message projection over a dictation session."""

from __future__ import annotations

import logging
from typing import Optional

from interfaces import ClipboardService
from observable import Cell, Derived, ReadOnlyCell
from session_controller import SessionController

logger = logging.getLogger(__name__)


class DictationPresenter:
    """Mirrors live or settled text into the message shown to the user.

    While recording the message follows the interim transcription; once a
    run ends it follows the settled transcription.  Neither source reaches
    the message while the controller is suppressing stale results.
    """

    def __init__(
        self,
        controller: SessionController,
        clipboard: Optional[ClipboardService] = None,
    ) -> None:
        self._controller = controller
        self._clipboard = clipboard

        self._message: Cell[str] = Cell("")
        self.message = self._message.readonly()
        self.has_message = ReadOnlyCell(Derived(lambda: len(self._message.get()) > 0, [self._message]))
        self.character_count = ReadOnlyCell(Derived(lambda: len(self._message.get()), [self._message]))

        self.is_recording = controller.is_recording
        self.error_message = controller.error

        controller.interim_transcription.subscribe(self._sync_interim)
        controller.is_recording.subscribe(self._sync_interim)
        controller.transcription.subscribe(self._sync_final)

    def toggle_recording(self) -> None:
        self._controller.toggle()

    def clear_message(self) -> None:
        self._set_message("")
        self._controller.clear()

    def copy_to_clipboard(self) -> bool:
        text = self._message.get()
        if not text.strip() or self._clipboard is None:
            return False
        try:
            return self._clipboard.copy_text(text)
        except Exception:
            logger.exception("Copy to clipboard failed")
            return False

    def _sync_interim(self, _value: object) -> None:
        interim = self._controller.interim_transcription.get()
        if (
            self._controller.is_recording.get()
            and interim
            and not self._controller.suppress_sync.get()
        ):
            self._set_message(interim)

    def _sync_final(self, _value: object) -> None:
        transcription = self._controller.transcription.get()
        if transcription and not self._controller.suppress_sync.get():
            self._set_message(transcription)

    def _set_message(self, text: str) -> None:
        self._message.set(text)
