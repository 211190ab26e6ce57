import random

import pytest

from timed_snake import events
from timed_snake.config import GameRules
from timed_snake.events import EventBus
from timed_snake.model import SimulationEngine
from timed_snake.round import RoundController
from timed_snake.scheduler import Scheduler, VirtualClock

ALL_EVENTS = (
    events.LifeStarted, events.LifeEnded, events.TargetConsumed,
    events.ScoreChanged, events.TickRateChanged, events.RemainingTimeChanged,
    events.RoundStarted, events.RoundEnded,
)


class Recorder:
    """Collects every event published on a bus, in order."""

    def __init__(self, bus: EventBus):
        self.events = []
        for event_type in ALL_EVENTS:
            bus.subscribe(event_type, self.events.append)

    def of(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self):
        self.events.clear()


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def scheduler(clock) -> Scheduler:
    return Scheduler(clock)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus) -> Recorder:
    return Recorder(bus)


@pytest.fixture
def rules() -> GameRules:
    return GameRules()


@pytest.fixture
def engine(rules, bus) -> SimulationEngine:
    """An engine with plenty of round time left, life already started."""
    eng = SimulationEngine(rules, bus, lambda: 60_000, rng=random.Random(7))
    eng.start_life()
    return eng


@pytest.fixture
def make_game(scheduler, bus):
    def _make(**overrides) -> RoundController:
        return RoundController(scheduler, bus, GameRules(**overrides),
                               rng=random.Random(11))
    return _make


@pytest.fixture
def find_task(scheduler):
    def _find(name: str):
        matches = [t for t in scheduler.tasks if t.name == name]
        return matches[0] if matches else None
    return _find
