"""Clocks and schedulers driving deferred work (expiry, periodic sampling).

Engines never talk to ``threading.Timer`` or ``datetime.now`` directly; they
receive a :class:`Scheduler` whose ``clock`` tells the time. Production code
uses :class:`ThreadingScheduler`; tests use :class:`ManualScheduler` and move
time forward explicitly.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, seconds: float) -> datetime:
        self._now = self._now + timedelta(seconds=seconds)
        return self._now


class ScheduledTask:
    """Handle for a callback scheduled to run once."""

    def __init__(self, callback: Callable[..., Any], args: tuple[Any, ...], name: str = "") -> None:
        self._callback = callback
        self._args = args
        self.name = name or getattr(callback, "__name__", "task")
        self.cancelled = False
        self.fired = False
        self._timer: Optional[threading.Timer] = None

    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()

    def run(self) -> None:
        if self.cancelled or self.fired:
            return
        self.fired = True
        try:
            self._callback(*self._args)
        except Exception as exc:
            logger.error("Scheduled task %s failed: %s", self.name, exc, exc_info=True)


class Scheduler(Protocol):
    clock: Clock

    def call_later(
        self, delay_seconds: float, callback: Callable[..., Any], *args: Any
    ) -> ScheduledTask: ...


class ThreadingScheduler:
    """Run callbacks on daemon ``threading.Timer`` threads."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock: Clock = clock or SystemClock()

    def call_later(
        self, delay_seconds: float, callback: Callable[..., Any], *args: Any
    ) -> ScheduledTask:
        task = ScheduledTask(callback, args)
        timer = threading.Timer(max(0.0, delay_seconds), task.run)
        timer.daemon = True
        task._timer = timer
        timer.start()
        return task


class ManualScheduler:
    """Deterministic scheduler: tasks run only inside :meth:`advance`."""

    def __init__(self, clock: Optional[ManualClock] = None) -> None:
        self.clock = clock or ManualClock()
        self._queue: list[tuple[datetime, int, ScheduledTask]] = []
        self._seq = itertools.count()

    def call_later(
        self, delay_seconds: float, callback: Callable[..., Any], *args: Any
    ) -> ScheduledTask:
        task = ScheduledTask(callback, args)
        due = self.clock.now() + timedelta(seconds=max(0.0, delay_seconds))
        heapq.heappush(self._queue, (due, next(self._seq), task))
        return task

    @property
    def pending(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, seconds: float = 0.0) -> int:
        """Move the clock forward, running every task that falls due.

        Tasks run in due order with the clock set to their due time. Tasks
        scheduled while advancing run too when they fall inside the span.
        Returns the number of tasks executed.
        """
        target = self.clock.now() + timedelta(seconds=seconds)
        executed = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            if due > self.clock.now():
                self.clock.set(due)
            task.run()
            executed += 1
        self.clock.set(target)
        return executed

    def run_pending(self) -> int:
        return self.advance(0.0)
