"""
scheduler.py — Cooperative periodic scheduler.

Single-threaded: the owner calls run_pending() once per frame (or
advance() under a VirtualClock in tests) and every due callback runs to
completion before the next one starts. There is no preemption, so a
callback never observes another callback half-way through.

Classes:
    VirtualClock   — manually driven millisecond clock for headless runs
    PeriodicTask   — cancellation / rescheduling handle
    Scheduler      — owns the tasks and fires them in deadline order
"""

import itertools
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class VirtualClock:
    """A millisecond time source that only moves when told to."""

    def __init__(self, start_ms: int = 0):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def set(self, now_ms: int) -> None:
        if now_ms < self.now:
            raise ValueError(f"virtual time cannot go backwards ({now_ms} < {self.now})")
        self.now = now_ms


class PeriodicTask:
    """Handle returned by Scheduler.call_every()."""

    def __init__(self, scheduler: "Scheduler", period_ms: int,
                 callback: Callable[[], None], name: str, seq: int):
        self._scheduler = scheduler
        self.period_ms = period_ms
        self.callback = callback
        self.name = name
        self.seq = seq
        self.deadline = scheduler.now() + period_ms
        self.active = True
        self._generation = 0

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._scheduler._remove(self)
            logger.debug("cancelled task %s", self.name)

    def reschedule(self, period_ms: int) -> None:
        """Drop the outstanding firing and restart at the new period from now."""
        if period_ms <= 0:
            raise ValueError(f"period must be positive, got {period_ms}")
        if not self.active:
            raise RuntimeError(f"task {self.name!r} was cancelled")
        self.period_ms = period_ms
        self.deadline = self._scheduler.now() + period_ms
        self._generation += 1
        logger.debug("rescheduled task %s every %dms", self.name, period_ms)

    def __repr__(self):
        state = "active" if self.active else "cancelled"
        return f"PeriodicTask({self.name!r}, every {self.period_ms}ms, {state})"


class Scheduler:
    """Fires periodic callbacks against an injected millisecond clock."""

    def __init__(self, clock: Callable[[], int]):
        self._clock = clock
        self._tasks: list[PeriodicTask] = []
        self._seq = itertools.count()

    # ── Public API ───────────────────────────────────────────────
    def now(self) -> int:
        return self._clock()

    def call_every(self, period_ms: int, callback: Callable[[], None],
                   name: str = "") -> PeriodicTask:
        if period_ms <= 0:
            raise ValueError(f"period must be positive, got {period_ms}")
        task = PeriodicTask(self, period_ms, callback, name or callback.__name__,
                            next(self._seq))
        self._tasks.append(task)
        logger.debug("scheduled task %s every %dms", task.name, period_ms)
        return task

    @property
    def tasks(self) -> list[PeriodicTask]:
        return list(self._tasks)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()

    def run_pending(self) -> int:
        """Fire every task due at the current time. Returns the fire count.

        A task that has fallen more than a period behind fires once and is
        re-based to now instead of bursting through its backlog.
        """
        now = self._clock()
        fired = 0
        while True:
            task = self._next_due(now)
            if task is None:
                return fired
            self._fire(task, now)
            fired += 1

    def advance(self, ms: int) -> int:
        """Move a VirtualClock forward, firing each deadline on the way."""
        if not isinstance(self._clock, VirtualClock):
            raise TypeError("advance() needs a VirtualClock")
        end = self._clock.now + ms
        fired = 0
        while True:
            task = self._next_due(end)
            if task is None:
                break
            self._clock.set(max(self._clock.now, task.deadline))
            self._fire(task, self._clock.now)
            fired += 1
        self._clock.set(end)
        return fired

    # ── Private helpers ──────────────────────────────────────────
    def _next_due(self, now: int) -> Optional[PeriodicTask]:
        due = [t for t in self._tasks if t.deadline <= now]
        if not due:
            return None
        return min(due, key=lambda t: (t.deadline, t.seq))

    def _fire(self, task: PeriodicTask, now: int) -> None:
        generation = task._generation
        task.callback()
        # The callback may have cancelled or rescheduled its own task.
        if task.active and task._generation == generation:
            task.deadline += task.period_ms
            if task.deadline <= now:
                task.deadline = now + task.period_ms

    def _remove(self, task: PeriodicTask) -> None:
        if task in self._tasks:
            self._tasks.remove(task)
