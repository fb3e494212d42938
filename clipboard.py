"""Clipboard copy service."""

from __future__ import annotations

import logging

try:
    import pyperclip
except Exception:  # pragma: no cover
    pyperclip = None  # type: ignore

logger = logging.getLogger(__name__)


class PyperclipClipboardService:
    def copy_text(self, text: str) -> bool:
        if not text.strip():
            return False
        if pyperclip is None:
            logger.warning("pyperclip is not installed, cannot copy")
            return False
        try:
            pyperclip.copy(text)
        except Exception as exc:
            logger.warning("Clipboard copy failed: %s", exc)
            return False
        return True
