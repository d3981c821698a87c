"""Scheduler backed by single-shot QTimers on the Qt event loop."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class QtTask:
    def __init__(self, delay_ms: int, callback: Callable[[], None], parent: Optional[QObject]) -> None:
        self._callback = callback
        self._active = True
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)
        self._timer.start(max(0, int(delay_ms)))

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._timer.stop()
        self._timer.deleteLater()

    def _fire(self) -> None:
        if not self._active:
            return
        self._active = False
        self._timer.deleteLater()
        self._callback()


class QtScheduler:
    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> QtTask:
        return QtTask(delay_ms, callback, self._parent)
