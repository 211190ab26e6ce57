"""
model.py — Model layer.

Owns ALL game rules and simulation state. Zero rendering, zero input
handling, zero timers. Exposes a clean API for the round controller.

Classes:
    Direction         — immutable (dx, dy) value object
    IntentBuffer      — at most one pending turn between ticks
    Snake             — body and heading
    Grid              — toroidal coordinates and target spawning
    SimulationEngine  — one life's worth of ticking, publishes events
"""

import logging
import math
import random
from collections import deque
from typing import Callable, Iterable, Optional

from .config import GameRules
from .events import (
    EventBus, LifeEnded, LifeStarted, ScoreChanged,
    TargetConsumed, TickRateChanged,
)

logger = logging.getLogger(__name__)

Cell = tuple[int, int]


class GridFullError(RuntimeError):
    """No free cell is left for the target."""


# ─────────────────────────── Direction ───────────────────────────
class Direction:
    """Immutable 2-D unit direction."""
    LEFT  = None  # filled below after class definition
    RIGHT = None
    UP    = None
    DOWN  = None

    def __init__(self, x: int, y: int):
        if abs(x) + abs(y) != 1:
            raise ValueError(f"not a unit direction: ({x}, {y})")
        self.x = x
        self.y = y

    def is_opposite(self, other: "Direction") -> bool:
        return self.x == -other.x and self.y == -other.y

    def __neg__(self) -> "Direction":
        return Direction(-self.x, -self.y)

    def __eq__(self, other):
        return isinstance(other, Direction) and self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    def __repr__(self):
        return f"Direction({self.x}, {self.y})"


Direction.LEFT  = Direction(-1,  0)
Direction.RIGHT = Direction( 1,  0)
Direction.UP    = Direction( 0, -1)
Direction.DOWN  = Direction( 0,  1)
ALL_DIRS = [Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT]


# ───────────────────────── IntentBuffer ──────────────────────────
class IntentBuffer:
    """
    Holds the latest accepted turn until the next tick consumes it.
    Inputs may arrive at any rate; at most one turn applies per tick.
    """

    def __init__(self):
        self._pending: Optional[Direction] = None

    @property
    def pending(self) -> Optional[Direction]:
        return self._pending

    def offer(self, direction: Direction, heading: Direction) -> bool:
        """Buffer ``direction`` unless it reverses ``heading``."""
        if direction.is_opposite(heading):
            return False
        self._pending = direction
        return True

    def take(self) -> Optional[Direction]:
        pending, self._pending = self._pending, None
        return pending

    def clear(self) -> None:
        self._pending = None


# ──────────────────────────── Snake ──────────────────────────────
class Snake:
    """Body cells, head first, plus the current heading."""

    def __init__(self, body: Iterable[Cell], heading: Direction):
        self.body: deque[Cell] = deque(body)
        self.heading: Direction = heading

    @property
    def head(self) -> Cell:
        return self.body[0]

    def __len__(self):
        return len(self.body)

    def occupies(self, cell: Cell) -> bool:
        return cell in self.body


# ──────────────────────────── Grid ───────────────────────────────
class Grid:
    """Square toroidal grid with a band of reserved rows at the top."""

    def __init__(self, size: int, reserved_top_rows: int = 0,
                 rng: Optional[random.Random] = None,
                 max_attempts: int = 1000):
        self.size = size
        self.reserved_top_rows = reserved_top_rows
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts

    def wrap(self, x: int, y: int) -> Cell:
        return x % self.size, y % self.size

    def step(self, cell: Cell, direction: Direction) -> Cell:
        return self.wrap(cell[0] + direction.x, cell[1] + direction.y)

    def random_cell_excluding_top(self) -> Cell:
        x = self.rng.randrange(self.size)
        y = self.rng.randrange(self.reserved_top_rows, self.size)
        return x, y

    def spawn_target(self, occupied) -> Cell:
        """
        Pick a random cell outside the reserved band that is not occupied.

        Rejection sampling first; once ``max_attempts`` draws have all
        landed on the snake, choose among the enumerated free cells so a
        crowded grid still terminates. Raises GridFullError if none is free.
        """
        occupied = set(occupied)
        for _ in range(self.max_attempts):
            cell = self.random_cell_excluding_top()
            if cell not in occupied:
                return cell

        free = [
            (x, y)
            for y in range(self.reserved_top_rows, self.size)
            for x in range(self.size)
            if (x, y) not in occupied
        ]
        if not free:
            logger.error("no free cell for target on a %dx%d grid (%d occupied)",
                         self.size, self.size, len(occupied))
            raise GridFullError("grid is fully occupied")
        logger.debug("spawn fell back to free-cell enumeration (%d free)", len(free))
        return self.rng.choice(free)


# ─────────────────────── SimulationEngine ────────────────────────
class SimulationEngine:
    """
    The rules. The round controller calls advance_tick() once per
    simulation tick and start_life() at round start and after a crash.

    ``remaining_ms`` is a callable supplied by the round controller;
    while it reports <= 0 the engine is frozen.
    """

    def __init__(self, rules: GameRules, bus: EventBus,
                 remaining_ms: Callable[[], int],
                 rng: Optional[random.Random] = None):
        self.rules = rules
        self.bus = bus
        self._remaining_ms = remaining_ms
        self.grid = Grid(rules.grid_size, rules.reserved_top_rows,
                         rng=rng, max_attempts=rules.max_spawn_attempts)
        self.intents = IntentBuffer()
        self.snake: Snake = Snake(rules.initial_body, Direction(*rules.initial_heading))
        self.target: Cell = (0, 0)
        self.tick_ms: int = rules.base_tick_ms
        self.score: int = 0
        self.ticks: int = 0

    # ── Public API ───────────────────────────────────────────────
    @property
    def heading(self) -> Direction:
        return self.snake.heading

    @property
    def round_over(self) -> bool:
        return self._remaining_ms() <= 0

    def reset_score(self) -> None:
        self.score = 0
        self.bus.publish(ScoreChanged(self.score))

    def start_life(self) -> None:
        self.snake = Snake(self.rules.initial_body, Direction(*self.rules.initial_heading))
        self.tick_ms = self.rules.base_tick_ms
        self.target = self.grid.spawn_target(self.snake.body)
        self.intents.clear()
        logger.info("life started, target at %s", self.target)
        self.bus.publish(LifeStarted(tuple(self.snake.body), self.target))
        self.bus.publish(TickRateChanged(self.tick_ms))

    def set_intended_direction(self, direction: Direction) -> bool:
        """Buffer a turn for the next tick. Returns False if it was ignored."""
        if self.round_over:
            return False
        return self.intents.offer(direction, self.snake.heading)

    def advance_tick(self) -> None:
        if self.round_over:
            return
        self.ticks += 1

        turn = self.intents.take()
        if turn is not None:
            self.snake.heading = turn

        new_head = self.grid.step(self.snake.head, self.snake.heading)
        if self.snake.occupies(new_head):
            logger.info("self-collision at %s (length %d)", new_head, len(self.snake))
            self.bus.publish(LifeEnded(new_head))
            return

        self.snake.body.appendleft(new_head)
        if new_head == self.target:
            self._consume_target()
        else:
            self.snake.body.pop()

    # ── Private helpers ──────────────────────────────────────────
    def _consume_target(self) -> None:
        eaten = self.target
        self.score += self.rules.score_increment
        self.bus.publish(TargetConsumed(eaten))
        self.bus.publish(ScoreChanged(self.score))
        self.target = self.grid.spawn_target(self.snake.body)
        # Round half up, not to even: 150.5 -> 151.
        faster = math.floor(self.tick_ms * self.rules.speedup_factor + 0.5)
        self.tick_ms = max(self.rules.min_tick_ms, faster)
        logger.debug("ate %s, score %d, tick %dms", eaten, self.score, self.tick_ms)
        self.bus.publish(TickRateChanged(self.tick_ms))
