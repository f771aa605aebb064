"""Chat window: one console per channel, channel buttons, clear button."""

from __future__ import annotations

import logging

from PyQt6.QtCore import pyqtSignal, pyqtSlot
from PyQt6.QtGui import QColor, QFont, QTextCharFormat, QTextCursor
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from aion_notifier.classifier import Channel, Color
from aion_notifier.config import AppConfig

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


class ChatConsole(QTextEdit):
    """Read-only colored text console for one channel.

    write_output() may be called from any thread: the text is handed to
    the GUI thread through a queued signal. Output is dropped until the
    console has been shown once.
    """

    _output_requested = pyqtSignal(str, object)  # (text, Color)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._ready = False
        self.setReadOnly(True)
        self.setFont(QFont("Consolas", 10))
        self.setStyleSheet("QTextEdit { background: #000000; border: none; }")
        self._output_requested.connect(self._append)

    @property
    def ready(self) -> bool:
        return self._ready

    def write_output(self, text: str, color: Color) -> None:
        self._output_requested.emit(text, color)

    def showEvent(self, event: object) -> None:
        self._ready = True
        super().showEvent(event)

    @pyqtSlot(str, object)
    def _append(self, text: str, color: Color) -> None:
        cursor = self.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.End)
        fmt = QTextCharFormat()
        fmt.setForeground(QColor(color.r, color.g, color.b))
        cursor.setCharFormat(fmt)
        cursor.insertText(text)
        # Auto-scroll to bottom
        self.verticalScrollBar().setValue(self.verticalScrollBar().maximum())


class ChatWindow(QWidget):
    """Main window hosting the All / LFG / PM consoles."""

    error_reported = pyqtSignal(str)  # emitted from any thread

    def __init__(self, config: AppConfig, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._config = config
        self._consoles: dict[Channel, ChatConsole] = {}
        self._buttons: dict[Channel, QPushButton] = {}
        self._selected = Channel.ALL

        self.setWindowTitle(f"AION Notifier {VERSION}")
        self.setGeometry(
            config.window_x, config.window_y, config.window_width, config.window_height,
        )
        self._setup_ui()
        self.error_reported.connect(self._show_error)

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        bar = QHBoxLayout()
        bar.setSpacing(2)
        self._stack = QStackedWidget()
        for channel in Channel:
            console = ChatConsole()
            self._consoles[channel] = console
            self._stack.addWidget(console)

            btn = QPushButton(channel.value)
            btn.setCheckable(True)
            btn.setChecked(channel is Channel.ALL)
            btn.clicked.connect(lambda checked, c=channel: self.select_channel(c))
            bar.addWidget(btn)
            self._buttons[channel] = btn
        bar.addStretch()

        clear_btn = QPushButton("Clear")
        clear_btn.clicked.connect(self.clear_selected)
        bar.addWidget(clear_btn)

        layout.addLayout(bar)
        layout.addWidget(self._stack)

    @property
    def sinks(self) -> dict[Channel, ChatConsole]:
        return dict(self._consoles)

    def select_channel(self, channel: Channel) -> None:
        self._selected = channel
        self._stack.setCurrentWidget(self._consoles[channel])
        for c, btn in self._buttons.items():
            btn.setChecked(c is channel)

    def realize_consoles(self) -> None:
        """Show every console once so background channels accept output too."""
        for console in self._consoles.values():
            self._stack.setCurrentWidget(console)
        self._stack.setCurrentWidget(self._consoles[self._selected])

    def clear_selected(self) -> None:
        self._consoles[self._selected].clear()

    @pyqtSlot(str)
    def _show_error(self, message: str) -> None:
        QMessageBox.critical(self, "AION Notifier", message)

    def closeEvent(self, event: object) -> None:
        geo = self.geometry()
        self._config.window_x = geo.x()
        self._config.window_y = geo.y()
        self._config.window_width = geo.width()
        self._config.window_height = geo.height()
        super().closeEvent(event)
