"""
Frame clock - feeds real elapsed time into a Scheduler.
"""

from __future__ import annotations

import pygame

from narrator.core.timers import Scheduler


class FrameClock:
    """
    Pumps a Scheduler from pygame's millisecond tick counter.

    Call tick() once per frame. The first tick only records a baseline,
    so time spent before the loop started is not replayed.

    Usage:
        clock = FrameClock(scheduler)
        while running:
            clock.tick()
            ...
    """

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._last_ticks: int | None = None

    def reset(self) -> None:
        """Forget the baseline; the next tick starts fresh."""
        self._last_ticks = None

    def tick(self) -> int:
        """
        Advance the scheduler by the time since the previous tick.

        Returns:
            Elapsed milliseconds that were fed to the scheduler
        """
        now = pygame.time.get_ticks()
        if self._last_ticks is None:
            self._last_ticks = now
            return 0

        # get_ticks restarts after pygame.quit()/init()
        elapsed = max(0, now - self._last_ticks)
        self._last_ticks = now
        if elapsed:
            self.scheduler.advance(elapsed)
        return elapsed
