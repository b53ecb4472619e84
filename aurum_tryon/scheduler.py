"""
Cooperative timer queue pumped by the host loop.

All callbacks run on the caller of ``run_pending``, i.e. the same thread
that processes camera frames, so scheduled work never races with
rendering or navigation.
"""

import heapq
import itertools
import time
from typing import Callable, Optional

from .logger import get_logger

logger = get_logger("Scheduler")

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


class ScheduledTask:
    """Handle for one delayed callback."""

    def __init__(self, due_ms: float, callback: Callable[[], None], name: str = ""):
        self.due_ms = due_ms
        self.callback = callback
        self.name = name
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        if not self._done:
            self._cancelled = True


class FrameScheduler:
    """
    Min-heap of delayed callbacks ordered by due time, then submission order.
    """

    def __init__(self, clock: Optional[Clock] = None):
        """
        Args:
            clock: Millisecond clock; defaults to the monotonic clock.
        """
        self._clock = clock or monotonic_ms
        self._queue: list[tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def now_ms(self) -> float:
        return self._clock()

    def call_later(self, delay_ms: float, callback: Callable[[], None], name: str = "") -> ScheduledTask:
        """
        Schedule a callback.

        Args:
            delay_ms: Delay from now in milliseconds.
            callback: Function to call.
            name: Label for logs.

        Returns:
            Cancellable task handle.
        """
        task = ScheduledTask(self.now_ms() + max(delay_ms, 0.0), callback, name)
        heapq.heappush(self._queue, (task.due_ms, next(self._counter), task))
        logger.debug(f"Scheduled {name or 'task'} in {delay_ms:.0f}ms")
        return task

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._queue if task.pending)

    def run_pending(self, now_ms: Optional[float] = None) -> int:
        """
        Run every task due at ``now_ms``.

        Tasks scheduled by a callback run in the same call only if they are
        already due.

        Args:
            now_ms: Time to run up to; defaults to the clock.

        Returns:
            Number of callbacks run.
        """
        now = self.now_ms() if now_ms is None else now_ms
        ran = 0

        while self._queue and self._queue[0][0] <= now:
            _, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            task._done = True
            task.callback()
            ran += 1

        return ran

    def clear(self) -> None:
        """Cancel and drop every queued task."""
        for _, _, task in self._queue:
            task.cancel()
        self._queue.clear()
