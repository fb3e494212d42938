"""Application entrypoint."""

from __future__ import annotations

import logging
import sys
from typing import Callable

from clipboard import PyperclipClipboardService
from config import JsonConfigStore
from dashscope_engine import DashscopeSpeechEngine
from dictation import DictationPresenter
from hotkey import GlobalHotkeyAdapter
from interfaces import ConfigStore
from recognizer import TranscriptionEngineAdapter
from session_controller import SessionController
from window import DictationWindow

try:
    from PySide6.QtCore import QObject, QTimer, Signal
    from PySide6.QtGui import QAction
    from PySide6.QtWidgets import QApplication, QInputDialog, QMenuBar
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)


class UIBridge(QObject):
    """Hops callables from worker threads onto the Qt thread."""

    call_signal = Signal(object)

    def __init__(self) -> None:
        super().__init__()
        self.call_signal.connect(self._run)

    def post(self, fn: Callable[[], None]) -> None:
        self.call_signal.emit(fn)

    def _run(self, fn: Callable[[], None]) -> None:
        fn()


class QtTimerHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class QtScheduler:
    def __init__(self) -> None:
        self._timers: set[QTimer] = set()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(callback)
        timer.timeout.connect(lambda: self._timers.discard(timer))
        self._timers.add(timer)
        timer.start(int(delay_s * 1000))
        return QtTimerHandle(timer)


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store: ConfigStore = JsonConfigStore()
        self.ui = UIBridge()

        self.engine = DashscopeSpeechEngine(api_key=self.config_store.get_api_key())
        adapter = TranscriptionEngineAdapter(
            engine_factory=lambda: self.engine,
            language=self.config_store.get_language(),
            availability_check=self.engine.is_supported,
            dispatch=self.ui.post,
        )
        self.controller = SessionController(
            adapter=adapter,
            scheduler=QtScheduler(),
            restart_settle_s=self.config_store.get_restart_settle_s(),
            clear_suppress_s=self.config_store.get_clear_suppress_s(),
            on_error=self._on_error,
        )
        self.presenter = DictationPresenter(self.controller, clipboard=PyperclipClipboardService())
        self.window = DictationWindow(self.presenter)
        self.hotkey = GlobalHotkeyAdapter(hotkey_name=self.config_store.get_hotkey())
        self._setup_menu()

    def _setup_menu(self) -> None:
        menu_bar = QMenuBar(self.window)
        menu = menu_bar.addMenu("Settings")

        api_action = QAction("Set API Key", menu)
        api_action.triggered.connect(self._set_api_key)
        menu.addAction(api_action)

        hotkey_action = QAction("Set Hotkey", menu)
        hotkey_action.triggered.connect(self._set_hotkey)
        menu.addAction(hotkey_action)

        self.window.layout().setMenuBar(menu_bar)

    def _set_api_key(self) -> None:
        value, ok = QInputDialog.getText(self.window, "API Key", "DashScope API Key")
        if not ok:
            return
        self.config_store.set_api_key(value)
        self.engine.set_api_key(value)

    def _set_hotkey(self) -> None:
        value, ok = QInputDialog.getText(
            self.window, "Hotkey", "Use pynput key format, e.g. Key.f9 (applies after restart)"
        )
        if not ok or not value:
            return
        self.config_store.set_hotkey(value)

    def _on_error(self, code: str, message: str) -> None:
        logger.warning("Dictation error %s: %s", code, message)

    def run(self) -> int:
        try:
            self.hotkey.start(on_toggle=lambda: self.ui.post(self.presenter.toggle_recording))
        except Exception as exc:
            logger.warning("Hotkey disabled: %s", exc)
        self.app.aboutToQuit.connect(self.quit)
        self.window.show()
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        self.controller.close()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
