"""
config.py — Shared constants for the entire application.
No game logic, no imports from internal modules.

Every rule constant is also a field of GameRules, so a round can be
played with overrides (tests, command line) without touching globals.
"""

from dataclasses import dataclass

# ── Window & Grid ─────────────────────────────────────────────────
TILE            = 12
FIELD_PX        = 480
GRID_SIZE       = FIELD_PX // TILE
PAD_H           = 96            # on-screen direction pad below the field
WIDTH, HEIGHT   = FIELD_PX, FIELD_PX + PAD_H
FPS             = 60
RESERVED_TOP_ROWS = 3           # keep top rows free for HUD text

# ── Colors ────────────────────────────────────────────────────────
BG          = (0x20, 0x3b, 0x15)
BORDER_COL  = (0x2f, 0x4d, 0x1f)
SNAKE_COL   = (0xc8, 0xfd, 0xa0)
FOOD_COL    = (0xd2, 0xaa, 0x34)
HUD_COL     = (0xe8, 0xff, 0xd0)
PAD_BG      = (0x16, 0x29, 0x0e)
EAT_FLASH   = (0xf5, 0xd0, 0x5a)
CRASH_FLASH = (0xff, 0x44, 0x44)
OVERLAY_BG  = (0, 0, 0, 190)
MATRIX_COL  = (0x6f, 0xff, 0x6f)

# ── Gameplay ──────────────────────────────────────────────────────
BASE_TICK_MS          = round(150 * 1.3)   # ~30% slower than a classic 150ms
MIN_TICK_MS           = 70
SPEEDUP_FACTOR        = 0.995              # -0.5% interval per food
ROUND_DURATION_MS     = 90_000
COUNTDOWN_INTERVAL_MS = 250
SCORE_INCREMENT       = 1
INITIAL_BODY          = ((8, 10), (7, 10), (6, 10))
INITIAL_HEADING       = (1, 0)
MAX_SPAWN_ATTEMPTS    = 1000
FLASH_MS              = 500

# ── Audio ─────────────────────────────────────────────────────────
SAMPLE_RATE  = 22050
EAT_TONE     = (880, 0.06, 0.03)    # (Hz, seconds, peak gain)
CRASH_TONE   = (180, 0.18, 0.04)

# ── Round States ──────────────────────────────────────────────────
STATE_IDLE    = "idle"
STATE_RUNNING = "running"
STATE_ENDED   = "ended"


@dataclass(frozen=True)
class GameRules:
    """The round's tunable rules. Defaults mirror the module constants."""

    grid_size: int = GRID_SIZE
    reserved_top_rows: int = RESERVED_TOP_ROWS
    base_tick_ms: int = BASE_TICK_MS
    min_tick_ms: int = MIN_TICK_MS
    speedup_factor: float = SPEEDUP_FACTOR
    round_duration_ms: int = ROUND_DURATION_MS
    countdown_interval_ms: int = COUNTDOWN_INTERVAL_MS
    score_increment: int = SCORE_INCREMENT
    initial_body: tuple = INITIAL_BODY
    initial_heading: tuple = INITIAL_HEADING
    max_spawn_attempts: int = MAX_SPAWN_ATTEMPTS

    def __post_init__(self):
        if self.grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {self.grid_size}")
        if not 0 <= self.reserved_top_rows < self.grid_size:
            raise ValueError(
                f"reserved_top_rows must be in [0, {self.grid_size}), "
                f"got {self.reserved_top_rows}"
            )
        if not 0 < self.min_tick_ms <= self.base_tick_ms:
            raise ValueError("need 0 < min_tick_ms <= base_tick_ms")
        if not 0 < self.speedup_factor <= 1:
            raise ValueError(f"speedup_factor must be in (0, 1], got {self.speedup_factor}")
        if self.round_duration_ms <= 0 or self.countdown_interval_ms <= 0:
            raise ValueError("round and countdown durations must be positive")
        if len(self.initial_body) < 1:
            raise ValueError("initial_body needs at least one cell")
        if len(set(self.initial_body)) != len(self.initial_body):
            raise ValueError("initial_body cells must be unique")
        for x, y in self.initial_body:
            if not (0 <= x < self.grid_size and 0 <= y < self.grid_size):
                raise ValueError(f"initial_body cell {(x, y)} lies outside the grid")
