"""
Cooperative timer queue.

All waiting in a dialogue sequence is expressed as deferred callbacks
on a Scheduler. Nothing blocks: the host loop advances simulated time
once per frame (see FrameClock) and every timer that has fallen due
fires in order. Tests drive the same queue with explicit advances.

Usage:
    scheduler = Scheduler()
    scheduler.schedule(1500, show_next)

    # In the frame loop
    scheduler.update(dt)
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Callable


logger = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


class TimerHandle:
    """A scheduled callback. Cancelling is idempotent."""

    __slots__ = ("due_ms", "callback", "cancelled", "fired")

    def __init__(self, due_ms: float, callback: TimerCallback):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        """True while the timer is still waiting to fire."""
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        return f"TimerHandle(due_ms={self.due_ms}, active={self.active})"


class Scheduler:
    """
    Single-threaded deferred callback queue on simulated milliseconds.

    Timers fire in due-time order, first-scheduled first for equal due
    times. A callback may schedule further timers; those fire within the
    same advance if they fall due inside it. Exceptions raised by a
    callback propagate to whoever advanced the clock.
    """

    def __init__(self):
        self._now_ms: float = 0.0
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    @property
    def now_ms(self) -> float:
        """Current simulated time in milliseconds."""
        return self._now_ms

    @property
    def pending(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for _, _, handle in self._queue if handle.active)

    def schedule(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        """
        Run callback once delay_ms of simulated time has elapsed.

        Raises:
            ValueError: If delay_ms is negative
        """
        if delay_ms < 0:
            raise ValueError(f"Timer delay must be non-negative, got {delay_ms}")

        handle = TimerHandle(self._now_ms + delay_ms, callback)
        heapq.heappush(self._queue, (handle.due_ms, next(self._counter), handle))
        return handle

    def advance(self, ms: float) -> int:
        """
        Move simulated time forward, firing every timer that falls due.

        Returns:
            Number of callbacks fired
        """
        if ms < 0:
            raise ValueError(f"Cannot advance time backwards ({ms} ms)")

        target = self._now_ms + ms
        fired = 0

        try:
            while self._queue and self._queue[0][0] <= target:
                due_ms, _, handle = heapq.heappop(self._queue)
                if not handle.active:
                    continue
                self._now_ms = max(self._now_ms, due_ms)
                handle.fired = True
                handle.callback()
                fired += 1
        finally:
            # A raising callback still moves the clock the full distance;
            # timers left behind it fire on the next advance
            self._now_ms = target
        return fired

    def update(self, dt: float) -> int:
        """Advance by dt seconds (frame loop convention)."""
        return self.advance(dt * 1000.0)

    def clear(self) -> None:
        """Cancel and drop every pending timer."""
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()
        logger.debug("Scheduler cleared")
