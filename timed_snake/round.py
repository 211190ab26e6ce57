"""
round.py — Round lifecycle.

RoundController owns the one SimulationEngine, the round deadline and the
two periodic tasks (simulation tick and countdown). A crash only restarts
the life; the round ends when the countdown runs out.

    idle --start_round()--> running --time up--> ended --restart()--> running
"""

import logging
import math
import random
from typing import Optional

from .config import GameRules, STATE_ENDED, STATE_IDLE, STATE_RUNNING
from .events import (
    EventBus, LifeEnded, RemainingTimeChanged,
    RoundEnded, RoundStarted, TickRateChanged,
)
from .model import Direction, SimulationEngine
from .scheduler import PeriodicTask, Scheduler

logger = logging.getLogger(__name__)


def format_time(ms: int) -> str:
    """Remaining milliseconds as MM:SS, seconds rounded up, never negative."""
    s = max(0, math.ceil(ms / 1000))
    return f"{s // 60:02d}:{s % 60:02d}"


class RoundController:
    """Top-level game object. Collaborators talk to the rules through it."""

    def __init__(self, scheduler: Scheduler, bus: Optional[EventBus] = None,
                 rules: Optional[GameRules] = None,
                 rng: Optional[random.Random] = None):
        self.scheduler = scheduler
        self.bus = bus or EventBus()
        self.rules = rules or GameRules()
        self.state: str = STATE_IDLE
        self.deadline: int = scheduler.now()
        self.final_score: Optional[int] = None
        self.lives: int = 0
        self.engine = SimulationEngine(self.rules, self.bus, self.remaining_ms, rng=rng)
        self._tick_task: Optional[PeriodicTask] = None
        self._countdown_task: Optional[PeriodicTask] = None

        self.bus.subscribe(LifeEnded, self._on_life_ended)
        self.bus.subscribe(TickRateChanged, self._on_tick_rate_changed)

    # ── Queries ──────────────────────────────────────────────────
    def remaining_ms(self) -> int:
        if self.state == STATE_IDLE:
            return self.rules.round_duration_ms
        return max(0, self.deadline - self.scheduler.now())

    @property
    def score(self) -> int:
        return self.engine.score

    @property
    def running(self) -> bool:
        return self.state == STATE_RUNNING

    # ── Commands ─────────────────────────────────────────────────
    def start_round(self) -> None:
        self._cancel_tasks()
        self.state = STATE_RUNNING
        self.final_score = None
        self.lives = 0
        self.deadline = self.scheduler.now() + self.rules.round_duration_ms
        logger.info("round started (%ds)", self.rules.round_duration_ms // 1000)

        self.bus.publish(RoundStarted(self.rules.round_duration_ms))
        self.engine.reset_score()
        self.bus.publish(RemainingTimeChanged(self.remaining_ms()))
        self._countdown_task = self.scheduler.call_every(
            self.rules.countdown_interval_ms, self._on_countdown, name="countdown")

        self._start_life()
        self._tick_task = self.scheduler.call_every(
            self.engine.tick_ms, self.engine.advance_tick, name="tick")

    def restart(self) -> None:
        """Explicit restart request from the player."""
        logger.info("restart requested (state=%s)", self.state)
        self.start_round()

    def set_intended_direction(self, direction: Direction) -> bool:
        if not self.running:
            return False
        return self.engine.set_intended_direction(direction)

    def stop(self) -> None:
        """Cancel both periodic tasks, e.g. on quit."""
        self._cancel_tasks()

    # ── Event handlers ───────────────────────────────────────────
    def _on_life_ended(self, event: LifeEnded) -> None:
        if self.running:
            self._start_life()

    def _on_tick_rate_changed(self, event: TickRateChanged) -> None:
        # Takes effect on the very next tick boundary, not after the
        # currently scheduled firing.
        if self._tick_task is not None and self._tick_task.active:
            self._tick_task.reschedule(event.interval_ms)

    def _on_countdown(self) -> None:
        remaining = self.remaining_ms()
        self.bus.publish(RemainingTimeChanged(remaining))
        if remaining <= 0:
            self._end_round()

    # ── Private helpers ──────────────────────────────────────────
    def _start_life(self) -> None:
        self.lives += 1
        self.engine.start_life()

    def _end_round(self) -> None:
        self._cancel_tasks()
        self.state = STATE_ENDED
        self.final_score = self.engine.score
        logger.info("round ended, final score %d over %d lives",
                    self.final_score, self.lives)
        self.bus.publish(RoundEnded(self.final_score))

    def _cancel_tasks(self) -> None:
        for task in (self._tick_task, self._countdown_task):
            if task is not None:
                task.cancel()
        self._tick_task = None
        self._countdown_task = None
