"""
audio.py — Synthesized feedback beeps.

Square-wave tones are rendered once with numpy and handed to the pygame
mixer. AudioPlayer is an event observer: eating and crashing beep, nothing
else. If the mixer cannot start the game runs silently.
"""

import logging

import numpy as np
import pygame

from .config import CRASH_TONE, EAT_TONE, SAMPLE_RATE
from .events import EventBus, LifeEnded, TargetConsumed

logger = logging.getLogger(__name__)

_FLOOR = 0.0001     # exponential ramps cannot start or end at zero
_ATTACK_S = 0.01


def square_tone(freq: float, seconds: float, gain: float,
                rate: int = SAMPLE_RATE) -> np.ndarray:
    """Mono int16 square wave with a short exponential attack and decay."""
    n = max(1, int(rate * seconds))
    t = np.arange(n, dtype=np.float64) / rate
    wave = np.where(np.sin(2 * np.pi * freq * t) >= 0, 1.0, -1.0)

    attack = min(n, max(1, int(rate * _ATTACK_S)))
    env = np.empty(n, dtype=np.float64)
    env[:attack] = np.geomspace(_FLOOR, gain, attack)
    if n > attack:
        env[attack:] = np.geomspace(gain, _FLOOR, n - attack)
    return (wave * env * 32767).astype(np.int16)


class AudioPlayer:
    """Plays the eat and crash beeps in response to engine events."""

    def __init__(self, bus: EventBus, enabled: bool = True):
        self.enabled = enabled
        self._sounds: dict[str, pygame.mixer.Sound] = {}
        self._ok = self._init_mixer()
        bus.subscribe(TargetConsumed, self._on_target_consumed)
        bus.subscribe(LifeEnded, self._on_life_ended)

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        logger.info("sound %s", "on" if self.enabled else "off")
        return self.enabled

    # ── Mixer helpers ─────────────────────────────────────────────
    def _init_mixer(self) -> bool:
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=256)
            self._sounds["eat"] = self._make_sound(*EAT_TONE)
            self._sounds["crash"] = self._make_sound(*CRASH_TONE)
            return True
        except pygame.error as exc:
            logger.warning("audio unavailable, running silently: %s", exc)
            return False

    @staticmethod
    def _make_sound(freq: float, seconds: float, gain: float) -> pygame.mixer.Sound:
        rate, _, channels = pygame.mixer.get_init()
        samples = square_tone(freq, seconds, gain, rate)
        if channels > 1:
            samples = np.repeat(samples[:, None], channels, axis=1)
        return pygame.sndarray.make_sound(np.ascontiguousarray(samples))

    def _play(self, name: str) -> None:
        if self.enabled and self._ok:
            self._sounds[name].play()

    # ── Event handlers ────────────────────────────────────────────
    def _on_target_consumed(self, event: TargetConsumed) -> None:
        self._play("eat")

    def _on_life_ended(self, event: LifeEnded) -> None:
        self._play("crash")
