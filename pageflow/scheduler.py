"""Cancelable timers and debouncing.

Pagination is recomputed from timer callbacks. The timer source is injected
so the same engine runs on an asyncio loop, inside a Textual app, or on a
virtual clock in tests.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Any, Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled before it fires."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay.

    ``asyncio.AbstractEventLoop`` already satisfies this protocol.
    """

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class _ManualTimer:
    """Timer entry owned by a ManualScheduler."""

    def __init__(self, when: float, callback: Callable[[], Any]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by a virtual clock.

    Time only moves when ``advance`` is called, so debounce behaviour can be
    exercised deterministically.
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._queue: List[Tuple[float, int, _ManualTimer]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> _ManualTimer:
        timer = _ManualTimer(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
        return timer

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every timer that comes due.

        Args:
            seconds: How far to move the clock.

        Returns:
            Number of callbacks that ran.
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = when
            timer.callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending(self) -> int:
        """Number of timers that have neither fired nor been cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)


class TextualTimerHandle:
    """Adapts a Textual ``Timer`` to the TimerHandle protocol."""

    def __init__(self, timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class TextualScheduler:
    """Schedules callbacks through a Textual app or widget's ``set_timer``."""

    def __init__(self, node):
        self._node = node

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TextualTimerHandle:
        return TextualTimerHandle(self._node.set_timer(delay, callback))


class Debouncer:
    """Coalesces bursts of triggers into a single callback.

    Every ``trigger`` restarts the quiet period; the callback runs once the
    period passes without another trigger.
    """

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[[], Any]):
        self._scheduler = scheduler
        self._delay = delay
        self._callback = callback
        self._handle: Optional[TimerHandle] = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        """Start or restart the quiet period."""
        self.cancel()
        self._handle = self._scheduler.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending callback, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()
