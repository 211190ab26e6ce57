"""
controller.py — Controller layer.

Responsibilities:
  - Own the pygame event loop.
  - Translate raw keyboard and mouse events into direction intents and
    restart requests.
  - Pump the scheduler once per frame so simulation and countdown
    callbacks run in this loop and nowhere else.
  - Wire the view and audio observers onto the event bus.
  - Know nothing about rendering details (that's the View's job).
  - Know nothing about game rules (that's the Round Controller's job).

The controller is the only layer that reads pygame events.
"""

import logging
import random
import sys
from typing import Optional

import pygame

from .audio import AudioPlayer
from .config import WIDTH, HEIGHT, FPS, GameRules, STATE_ENDED
from .events import EventBus
from .model import Direction
from .round import RoundController
from .scheduler import Scheduler
from .view import GameView

logger = logging.getLogger(__name__)

DIRECTION_KEYS = {
    pygame.K_UP:    Direction.UP,
    pygame.K_DOWN:  Direction.DOWN,
    pygame.K_LEFT:  Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_w:     Direction.UP,
    pygame.K_s:     Direction.DOWN,
    pygame.K_a:     Direction.LEFT,
    pygame.K_d:     Direction.RIGHT,
}
RESTART_KEYS = (pygame.K_r, pygame.K_RETURN, pygame.K_SPACE)
QUIT_KEYS = (pygame.K_ESCAPE, pygame.K_q)


class GameController:
    """
    Owns the main loop.
    Glues the round controller to the view and audio without either
    knowing about the other.
    """

    def __init__(self, rules: Optional[GameRules] = None,
                 seed: Optional[int] = None, muted: bool = False):
        pygame.init()
        self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption("Snake — 90 second round")
        self.clock = pygame.time.Clock()

        self.bus = EventBus()
        self.scheduler = Scheduler(pygame.time.get_ticks)
        self.game = RoundController(self.scheduler, self.bus, rules,
                                    rng=random.Random(seed))
        self.view = GameView(self.screen, self.bus)
        self.audio = AudioPlayer(self.bus, enabled=not muted)

    # ── Public entry point ────────────────────────────────────────
    def run(self) -> None:
        """Start the first round and run until the player quits."""
        self.game.start_round()
        while True:
            self.clock.tick(FPS)
            self._handle_events()
            self.scheduler.run_pending()
            self.view.render(self.game, pygame.time.get_ticks())

    # ── Event dispatch ────────────────────────────────────────────
    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._quit()
            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_click(event.pos)

    def _handle_keydown(self, key: int) -> None:
        if key in QUIT_KEYS:
            self._quit()
        elif key == pygame.K_m:
            self.audio.toggle()
        elif key in DIRECTION_KEYS:
            self.game.set_intended_direction(DIRECTION_KEYS[key])
        elif key in RESTART_KEYS and self.game.state == STATE_ENDED:
            self.game.restart()

    def _handle_click(self, pos: tuple[int, int]) -> None:
        if self.view.restart_hit(pos):
            self.game.restart()
            return
        direction = self.view.pad_direction_at(pos)
        if direction is not None:
            self.game.set_intended_direction(direction)

    # ── Utilities ─────────────────────────────────────────────────
    def _quit(self) -> None:
        logger.info("quitting")
        self.game.stop()
        pygame.quit()
        sys.exit()
