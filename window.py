"""Dictation window: live text, record/clear/copy controls."""

from __future__ import annotations

from dictation import DictationPresenter

try:
    from PySide6.QtCore import Qt
    from PySide6.QtWidgets import (
        QHBoxLayout,
        QLabel,
        QPushButton,
        QTextEdit,
        QVBoxLayout,
        QWidget,
    )
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QHBoxLayout = object  # type: ignore
    QLabel = object  # type: ignore
    QPushButton = object  # type: ignore
    QTextEdit = object  # type: ignore
    QVBoxLayout = object  # type: ignore
    QWidget = object  # type: ignore

MAX_TEXT_HEIGHT = 400
MIN_TEXT_HEIGHT = 80


class DictationWindow(QWidget):
    def __init__(self, presenter: DictationPresenter) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self._presenter = presenter
        self.setWindowTitle("Dictation")
        self.setMinimumWidth(560)

        self._text = QTextEdit()
        self._text.setReadOnly(True)
        self._text.setPlaceholderText("Press record and start speaking...")
        self._text.setStyleSheet("font-size: 16px; padding: 8px;")
        self._text.setFixedHeight(MIN_TEXT_HEIGHT)

        self._record_button = QPushButton("Record")
        self._record_button.clicked.connect(presenter.toggle_recording)
        self._clear_button = QPushButton("Clear")
        self._clear_button.clicked.connect(presenter.clear_message)
        self._copy_button = QPushButton("Copy")
        self._copy_button.clicked.connect(presenter.copy_to_clipboard)

        self._count_label = QLabel("0")
        self._count_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self._error_label = QLabel("")
        self._error_label.setWordWrap(True)
        self._error_label.setStyleSheet("color: #D64545;")

        buttons = QHBoxLayout()
        buttons.addWidget(self._record_button)
        buttons.addWidget(self._clear_button)
        buttons.addWidget(self._copy_button)
        buttons.addStretch(1)
        buttons.addWidget(self._count_label)

        layout = QVBoxLayout()
        layout.addWidget(self._text)
        layout.addLayout(buttons)
        layout.addWidget(self._error_label)
        self.setLayout(layout)

        presenter.message.subscribe(self.set_text)
        presenter.character_count.subscribe(lambda count: self._count_label.setText(str(count)))
        presenter.has_message.subscribe(lambda _: self._sync_buttons())
        presenter.is_recording.subscribe(lambda _: self._sync_buttons())
        presenter.error_message.subscribe(self._error_label.setText)
        self._sync_buttons()

    def set_text(self, text: str) -> None:
        """Replace the shown text and fit the box height to its content."""
        self._text.setPlainText(text)
        doc_height = int(self._text.document().size().height()) + 16
        self._text.setFixedHeight(max(MIN_TEXT_HEIGHT, min(doc_height, MAX_TEXT_HEIGHT)))
        if doc_height > MAX_TEXT_HEIGHT:
            self._text.setVerticalScrollBarPolicy(Qt.ScrollBarAsNeeded)
        else:
            self._text.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

    def _sync_buttons(self) -> None:
        recording = self._presenter.is_recording.get()
        self._record_button.setText("Stop" if recording else "Record")
        has_message = self._presenter.has_message.get()
        self._clear_button.setEnabled(has_message or recording)
        self._copy_button.setEnabled(has_message)
