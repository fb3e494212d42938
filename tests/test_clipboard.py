from __future__ import annotations

from unittest.mock import MagicMock, patch

import clipboard
from clipboard import PyperclipClipboardService


def test_copy_returns_false_when_dependency_missing(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(clipboard, "pyperclip", None)

    assert PyperclipClipboardService().copy_text("hello") is False


def test_copy_returns_false_on_blank_text() -> None:
    assert PyperclipClipboardService().copy_text("   ") is False


@patch("clipboard.pyperclip")
def test_copy_writes_text(mock_clip: MagicMock) -> None:
    assert PyperclipClipboardService().copy_text("hola") is True
    mock_clip.copy.assert_called_once_with("hola")


@patch("clipboard.pyperclip")
def test_copy_error_is_reported(mock_clip: MagicMock) -> None:
    mock_clip.copy.side_effect = RuntimeError("no display")

    assert PyperclipClipboardService().copy_text("hola") is False
