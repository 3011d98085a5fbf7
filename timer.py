"""Repeating animation timer delivered through the pygame event queue."""
from __future__ import annotations

import logging

import pygame

logger = logging.getLogger(__name__)

ANIMATION_TICK = pygame.event.custom_type()


class AnimationTimer:
    """
    Posts ``ANIMATION_TICK`` events at a fixed cadence while valid.

    Ticks are handled by the screen's event loop, so they never run
    concurrently with input handling.  ``invalidate`` cancels pending
    repeats; nothing else needs draining.
    """

    def __init__(self, fps: float = 30.0, event_type: int = ANIMATION_TICK):
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.event_type = event_type
        self.interval_ms = max(1, int(round(1000.0 / fps)))
        self._valid = False

    @property
    def is_valid(self) -> bool:
        return self._valid

    def start(self) -> None:
        if self._valid:
            return
        pygame.time.set_timer(self.event_type, self.interval_ms)
        self._valid = True
        logger.info("Animation timer started (%d ms)", self.interval_ms)

    def invalidate(self) -> None:
        if not self._valid:
            return
        pygame.time.set_timer(self.event_type, 0)
        self._valid = False
        logger.info("Animation timer stopped")
