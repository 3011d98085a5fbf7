"""
Mouse input on the map: taps, long-press drags, panning and zooming.

pygame reports raw button and motion events; this module turns them into
the gestures the demo reacts to:

* tap             - press and release without moving, before the long
                    press delay; places a new buffer at the point.
* long-press drag - hold still for ``long_press_ms`` then move; every move
                    re-centres the existing buffer.
* pan             - press and move before the delay; scrolls the map.
* wheel           - zooms about the pointer.

Every tap and drag refreshes the coordinate readout.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import pygame
from shapely.geometry import Point

from geometry import CoordinateFormat, CoordinateFormatError, format_coordinate
from simulation import Simulation
from viewport import MapViewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoordinateReadout:
    """The four notations shown for the last picked point; ``None`` where one does not apply."""

    lat_lon: Optional[str]
    dms: Optional[str]
    utm: Optional[str]
    mgrs: Optional[str]

    @classmethod
    def for_point(cls, point: Point, crs: str) -> "CoordinateReadout":
        def _safe(fmt: CoordinateFormat, **kwargs) -> Optional[str]:
            try:
                return format_coordinate(point, fmt, crs=crs, **kwargs)
            except CoordinateFormatError as exc:
                logger.debug("No %s notation: %s", fmt.value, exc)
                return None

        return cls(
            lat_lon=_safe(CoordinateFormat.DECIMAL_DEGREES, decimal_places=4),
            dms=_safe(CoordinateFormat.DEGREES_MINUTES_SECONDS, decimal_places=1),
            utm=_safe(CoordinateFormat.UTM, add_spaces=True),
            mgrs=_safe(CoordinateFormat.MGRS, precision=4, add_spaces=True),
        )


class Gesture(Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    PANNING = "panning"
    DRAGGING = "dragging"


class InteractionHandler:
    def __init__(
        self,
        simulation: Simulation,
        viewport: MapViewport,
        *,
        long_press_ms: int = 450,
        tap_tolerance_px: float = 6.0,
        zoom_step: float = 1.0,
        clock: Callable[[], int] = pygame.time.get_ticks,
    ):
        self.simulation = simulation
        self.viewport = viewport
        self.long_press_ms = int(long_press_ms)
        self.tap_tolerance_px = float(tap_tolerance_px)
        self.zoom_step = float(zoom_step)
        self._clock = clock

        self.gesture = Gesture.IDLE
        self.readout: Optional[CoordinateReadout] = None
        self._press_pos: tuple[int, int] = (0, 0)
        self._press_time: int = 0
        self._last_pos: tuple[int, int] = (0, 0)
        self._pointer: Optional[tuple[int, int]] = None

    # ------------------------------------------------------------------ Events
    def handle_event(self, event: pygame.event.Event) -> bool:
        """Process one pygame event; returns True when it was consumed."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            return self._on_press(event.pos)
        if event.type == pygame.MOUSEMOTION:
            self._pointer = event.pos
            return self._on_motion(event.pos)
        if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            return self._on_release(event.pos)
        if event.type == pygame.MOUSEWHEEL:
            return self._on_wheel(event.y)
        return False

    def _on_press(self, pos: tuple[int, int]) -> bool:
        if not self.viewport.bounds.collidepoint(pos):
            return False
        self.gesture = Gesture.PRESSED
        self._press_pos = pos
        self._last_pos = pos
        self._press_time = self._clock()
        return True

    def _on_motion(self, pos: tuple[int, int]) -> bool:
        if self.gesture is Gesture.IDLE:
            return False
        if self.gesture is Gesture.PRESSED:
            held = self._clock() - self._press_time
            moved = math.dist(pos, self._press_pos)
            if held >= self.long_press_ms:
                self.gesture = Gesture.DRAGGING
            elif moved > self.tap_tolerance_px:
                self.gesture = Gesture.PANNING
            else:
                return True

        if self.gesture is Gesture.DRAGGING:
            self.drag_to(pos)
        elif self.gesture is Gesture.PANNING:
            self.viewport.pan_by(pos[0] - self._last_pos[0], pos[1] - self._last_pos[1])
        self._last_pos = pos
        return True

    def _on_release(self, pos: tuple[int, int]) -> bool:
        gesture = self.gesture
        self.gesture = Gesture.IDLE
        if gesture is Gesture.IDLE:
            return False
        if gesture is Gesture.PRESSED and self._clock() - self._press_time < self.long_press_ms:
            self.tap(pos)
        return True

    def _on_wheel(self, amount: float) -> bool:
        pointer = self._pointer
        if pointer is None or not self.viewport.bounds.collidepoint(pointer):
            return False
        self.viewport.zoom_at(pointer, amount * self.zoom_step)
        return True

    # ------------------------------------------------------------------ Gestures
    def tap(self, screen_pos: tuple[float, float]) -> None:
        map_point = self.viewport.screen_to_location(screen_pos)
        self.simulation.place_buffer(map_point)
        self.show_coordinates(map_point)

    def drag_to(self, screen_pos: tuple[float, float]) -> None:
        if self.simulation.buffer is None:
            return
        map_point = self.viewport.screen_to_location(screen_pos)
        self.simulation.drag_buffer(map_point)
        self.show_coordinates(map_point)

    def show_coordinates(self, map_point: Point) -> None:
        self.readout = CoordinateReadout.for_point(map_point, self.viewport.spatial_reference)
