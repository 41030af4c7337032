"""Qt event-loop implementation of :class:`core.scheduler.Scheduler`."""

from collections.abc import Callable

from PyQt6.QtCore import QObject, QTimer

from core.scheduler import Scheduler, TimerHandle


class _QtTimerHandle(TimerHandle):
    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None

    def _fired(self) -> None:
        if self._timer is not None:
            self._timer.deleteLater()
            self._timer = None


class QtScheduler(Scheduler):
    """Hands out single-shot QTimers parented to *parent*."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(delay_ms)))
        handle = _QtTimerHandle(timer)
        timer.timeout.connect(handle._fired)
        timer.timeout.connect(callback)
        timer.start()
        return handle
