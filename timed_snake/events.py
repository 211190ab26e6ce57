"""
events.py — Typed events and a tiny synchronous event bus.

The engine and round controller publish; view, audio and HUD subscribe.
Nothing a subscriber does is fed back into the rules except through the
intent buffer or an explicit restart request.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

Cell = tuple[int, int]


@dataclass(frozen=True)
class LifeStarted:
    body: tuple[Cell, ...]
    target: Cell


@dataclass(frozen=True)
class LifeEnded:
    """Self-collision. ``cell`` is where the head would have gone."""
    cell: Cell


@dataclass(frozen=True)
class TargetConsumed:
    cell: Cell


@dataclass(frozen=True)
class ScoreChanged:
    score: int


@dataclass(frozen=True)
class TickRateChanged:
    interval_ms: int


@dataclass(frozen=True)
class RemainingTimeChanged:
    remaining_ms: int


@dataclass(frozen=True)
class RoundStarted:
    duration_ms: int


@dataclass(frozen=True)
class RoundEnded:
    final_score: int


class EventBus:
    """Dispatches each published event to the handlers of its exact type."""

    def __init__(self):
        self._handlers: dict[type, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event) -> None:
        logger.debug("event %r", event)
        # Copy so a handler may (un)subscribe while we iterate.
        for handler in list(self._handlers.get(type(event), ())):
            handler(event)
