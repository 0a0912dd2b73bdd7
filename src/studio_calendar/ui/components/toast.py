from __future__ import annotations

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import QLabel

from ...config import AppPalette
from ...services import Toast
from ..styles.theme import toast_stylesheet


class ToastBanner(QLabel):
    """Single-slot notification; a newer toast replaces the visible one."""

    dismissed = pyqtSignal(int)

    def __init__(self, *, palette: AppPalette, timeout_ms: int) -> None:
        super().__init__("")
        self.setObjectName("toast")
        self.setWordWrap(True)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.palette_ = palette
        self.timeout_ms = timeout_ms
        self._current: int = 0
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._expire)
        self.hide()

    def show_toast(self, toast: Toast) -> None:
        self._current = toast.id
        self.setStyleSheet(toast_stylesheet(self.palette_, toast.variant.value))
        self.setText(toast.message)
        self.show()
        self._timer.start(self.timeout_ms)

    def mousePressEvent(self, event) -> None:  # noqa: N802
        self._expire()
        super().mousePressEvent(event)

    def _expire(self) -> None:
        self._timer.stop()
        self.hide()
        self.dismissed.emit(self._current)
