"""Debounce / immediate dispatch policy over an injected timer source.

The core never owns an event loop.  A host supplies a :class:`Scheduler`
(the Qt app uses single-shot ``QTimer`` objects); everything here only keeps
a single pending-timer slot and decides whether to run now or later.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """A scheduled callback that has not necessarily fired yet."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from firing.  Safe to call more than once."""


class Scheduler(ABC):
    """Source of one-shot timers on the host's event loop."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once after *delay_ms* milliseconds."""


class Debouncer:
    """Runs *callback* once after *delay_ms* of quiet.

    Every :meth:`trigger` cancels the pending timer (if any) and starts a new
    one, so a burst of triggers collapses into a single call.
    """

    def __init__(self, scheduler: Scheduler, delay_ms: int, callback: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._callback = callback
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self.delay_ms, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class RecomputeDispatcher:
    """Throttled-or-immediate dispatch of a recompute callback.

    ``request(throttled=True)`` (document edits) schedules the recompute after
    the quiet period, replacing any earlier pending one.  ``request()``
    (viewport, rule-set or preview changes) drops the pending one and runs now.
    """

    def __init__(self, scheduler: Scheduler, delay_ms: int, recompute: Callable[[], None]) -> None:
        self._recompute = recompute
        self._debouncer = Debouncer(scheduler, delay_ms, recompute)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def request(self, throttled: bool = False) -> None:
        if throttled:
            self._debouncer.trigger()
        else:
            self._debouncer.cancel()
            self._recompute()

    def cancel(self) -> None:
        self._debouncer.cancel()
