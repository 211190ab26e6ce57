"""
view.py — View layer.

Draws the field, the HUD in the reserved top rows, the eat/crash flash,
the on-screen direction pad and the "Time's Up" overlay.

The view never reads rules to make decisions. It keeps only what it has
been told through events (score, time text, flash, overlay) plus read-only
looks at the snake and target when drawing a frame.

Public API:
    GameView(screen, bus)        — bind to a pygame surface and event bus
    view.render(game, now_ms)    — draw the current frame
    view.pad_direction_at(pos)   — on-screen pad hit test
    view.restart_hit(pos)        — overlay button hit test
"""

import math
import pygame

from .config import (
    WIDTH, FIELD_PX, PAD_H, TILE, FLASH_MS,
    BG, BORDER_COL, SNAKE_COL, FOOD_COL, HUD_COL, PAD_BG,
    EAT_FLASH, CRASH_FLASH, OVERLAY_BG, MATRIX_COL,
)
from .events import (
    EventBus, LifeEnded, RemainingTimeChanged, RoundEnded,
    RoundStarted, ScoreChanged, TargetConsumed,
)
from .model import Direction
from .round import RoundController, format_time

END_TITLE = "Time's Up"


# ─────────────────────── colour helpers ──────────────────────────
def _with_alpha(color: tuple, alpha: int) -> tuple:
    return (*color[:3], max(0, min(255, alpha)))


def _brighten(color: tuple, factor: float) -> tuple:
    return tuple(min(255, int(c * factor)) for c in color[:3])


# ─────────────────────────── GameView ────────────────────────────
class GameView:
    """Renders one frame from the round controller's observable state."""

    def __init__(self, screen: pygame.Surface, bus: EventBus):
        self.screen = screen
        self._init_fonts()
        self._build_static_surfaces()
        self._build_pad()

        self.score_text = "Score: 0"
        self.time_text = "Time: 00:00"
        self.overlay_visible = False
        self.final_score = 0
        self._flash_color = None
        self._flash_at = 0
        self._overlay_at = 0
        self._now = 0
        self._tile = TILE
        self.restart_rect = pygame.Rect(0, 0, 0, 0)

        bus.subscribe(ScoreChanged, self._on_score)
        bus.subscribe(RemainingTimeChanged, self._on_time)
        bus.subscribe(TargetConsumed, lambda e: self._flash(EAT_FLASH))
        bus.subscribe(LifeEnded, lambda e: self._flash(CRASH_FLASH))
        bus.subscribe(RoundStarted, self._on_round_started)
        bus.subscribe(RoundEnded, self._on_round_ended)

    # ── Main entry ───────────────────────────────────────────────
    def render(self, game: RoundController, now_ms: int) -> None:
        self._now = now_ms
        self.screen.fill(PAD_BG)
        pygame.draw.rect(self.screen, BG, (0, 0, FIELD_PX, FIELD_PX))
        pygame.draw.rect(self.screen, BORDER_COL, (1, 1, FIELD_PX - 2, FIELD_PX - 2), 2)

        engine = game.engine
        self._tile = FIELD_PX // game.rules.grid_size
        self._draw_cell(engine.target, FOOD_COL)
        for cell in engine.snake.body:
            self._draw_cell(cell, SNAKE_COL)

        self._draw_flash()
        self._draw_hud()
        self._draw_pad(game.running)
        if self.overlay_visible:
            self._draw_end_overlay()

        pygame.display.flip()

    # ── Hit testing ──────────────────────────────────────────────
    def pad_direction_at(self, pos) -> Direction | None:
        for direction, rect in self._pad:
            if rect.collidepoint(pos):
                return direction
        return None

    def restart_hit(self, pos) -> bool:
        return self.overlay_visible and self.restart_rect.collidepoint(pos)

    # ── Event handlers ───────────────────────────────────────────
    def _on_score(self, event: ScoreChanged) -> None:
        self.score_text = f"Score: {event.score}"

    def _on_time(self, event: RemainingTimeChanged) -> None:
        self.time_text = f"Time: {format_time(event.remaining_ms)}"

    def _on_round_started(self, event: RoundStarted) -> None:
        self.overlay_visible = False
        self._flash_color = None

    def _on_round_ended(self, event: RoundEnded) -> None:
        self.final_score = event.final_score
        self.overlay_visible = True
        self._overlay_at = self._now

    def _flash(self, color: tuple) -> None:
        # A new flash replaces the one in progress.
        self._flash_color = color
        self._flash_at = self._now

    # ── Static surface pre-builds ─────────────────────────────────
    def _build_static_surfaces(self) -> None:
        self._overlay_surf = pygame.Surface((FIELD_PX, FIELD_PX), pygame.SRCALPHA)
        self._overlay_surf.fill(OVERLAY_BG)

    def _build_pad(self) -> None:
        size = 40
        cx, cy = WIDTH // 2, FIELD_PX + PAD_H // 2
        self._pad = [
            (Direction.UP,    pygame.Rect(cx - size // 2, cy - size - 2, size, size - 4)),
            (Direction.DOWN,  pygame.Rect(cx - size // 2, cy + 2, size, size - 4)),
            (Direction.LEFT,  pygame.Rect(cx - size * 3 // 2 - 4, cy - size // 2, size, size)),
            (Direction.RIGHT, pygame.Rect(cx + size // 2 + 4, cy - size // 2, size, size)),
        ]

    # ── Field ────────────────────────────────────────────────────
    def _draw_cell(self, cell: tuple[int, int], color: tuple) -> None:
        x, y = cell
        t = self._tile
        pygame.draw.rect(self.screen, color, (x * t, y * t, t - 1, t - 1))

    def _draw_flash(self) -> None:
        if self._flash_color is None:
            return
        age = self._now - self._flash_at
        if age >= FLASH_MS:
            self._flash_color = None
            return
        fade = 1.0 - age / FLASH_MS
        glow = pygame.Surface((FIELD_PX, FIELD_PX), pygame.SRCALPHA)
        for i in range(10):
            a = int(140 * fade * (1 - i / 10))
            pygame.draw.rect(glow, _with_alpha(self._flash_color, a),
                             (i, i, FIELD_PX - 2 * i, FIELD_PX - 2 * i), 1)
        self.screen.blit(glow, (0, 0))

    # ── HUD ──────────────────────────────────────────────────────
    def _draw_hud(self) -> None:
        score = self.font_hud.render(self.score_text, True, HUD_COL)
        timer = self.font_hud.render(self.time_text, True, HUD_COL)
        y = (3 * TILE - score.get_height()) // 2
        self.screen.blit(score, (8, y))
        self.screen.blit(timer, (FIELD_PX - timer.get_width() - 8, y))

    def _draw_pad(self, enabled: bool) -> None:
        color = HUD_COL if enabled else _brighten(PAD_BG, 2.0)
        for direction, rect in self._pad:
            pygame.draw.rect(self.screen, BG, rect, border_radius=6)
            pygame.draw.rect(self.screen, color, rect, 2, border_radius=6)
            # Arrow triangle pointing along the direction
            cx, cy = rect.center
            dx, dy = direction.x, direction.y
            px, py = -dy, dx  # perpendicular
            tip = (cx + dx * 9, cy + dy * 9)
            left = (cx - dx * 6 + px * 8, cy - dy * 6 + py * 8)
            right = (cx - dx * 6 - px * 8, cy - dy * 6 - py * 8)
            pygame.draw.polygon(self.screen, color, (tip, left, right))

    # ── End-of-round overlay ─────────────────────────────────────
    def _draw_end_overlay(self) -> None:
        self.screen.blit(self._overlay_surf, (0, 0))
        cy = FIELD_PX // 2 - 60
        self._draw_wave_title(END_TITLE, cy)

        info = self.font_med.render(f"Score: {self.final_score}", True, HUD_COL)
        self.screen.blit(info, info.get_rect(center=(WIDTH // 2, cy + 64)))

        label = self.font_med.render("Restart", True, MATRIX_COL)
        rect = pygame.Rect(0, 0, label.get_width() + 40, label.get_height() + 14)
        rect.center = (WIDTH // 2, cy + 112)
        pygame.draw.rect(self.screen, MATRIX_COL, rect, 2, border_radius=4)
        self.screen.blit(label, label.get_rect(center=rect.center))
        self.restart_rect = rect

    def _draw_wave_title(self, title: str, cy: int) -> None:
        """Each letter bobs with a phase offset, like falling code."""
        glyphs = [self.font_title.render(ch, True, MATRIX_COL) for ch in title]
        total = sum(g.get_width() for g in glyphs)
        x = WIDTH // 2 - total // 2
        t = (self._now - self._overlay_at) / 1000
        for i, glyph in enumerate(glyphs):
            dy = int(6 * math.sin(t * 4 - i * 0.6))
            self.screen.blit(glyph, (x, cy + dy))
            x += glyph.get_width()

    # ── Font init ─────────────────────────────────────────────────
    def _init_fonts(self) -> None:
        specs = [
            ("font_title", "courier", 40, True),
            ("font_med",   "courier", 20, True),
            ("font_hud",   "courier", 16, True),
        ]
        for attr, name, size, bold in specs:
            try:
                setattr(self, attr, pygame.font.SysFont(name, size, bold=bold))
            except (pygame.error, OSError):
                setattr(self, attr, pygame.font.Font(None, size))
