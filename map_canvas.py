"""
Drawing of the map area: a gridded basemap, the particle markers and the
buffer polygon.

Markers are symbolised with a unique-value rule on the containment flag,
so re-classifying a particle is enough to change how it is drawn.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pygame
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from buffer_region import BufferOverlay
from particles import ParticleSet
from viewport import MapViewport

# Smallest on-screen distance between basemap grid lines.
MIN_GRID_SPACING_PX = 80


@dataclass(frozen=True)
class MarkerSymbol:
    color: tuple[int, int, int]
    size: int  # diameter in pixels


class UniqueValueRenderer:
    """Chooses a marker symbol from the particle's ``in_buffer`` flag."""

    def __init__(self, default_symbol: MarkerSymbol, inside_symbol: MarkerSymbol):
        self.default_symbol = default_symbol
        self.inside_symbol = inside_symbol

    def symbol_for(self, in_buffer: bool) -> MarkerSymbol:
        return self.inside_symbol if in_buffer else self.default_symbol


def grid_step(resolution: float, min_spacing_px: float = MIN_GRID_SPACING_PX) -> float:
    """Round grid spacing (1, 2 or 5 × 10^k map units) at least ``min_spacing_px`` apart."""
    target = resolution * min_spacing_px
    if target <= 0:
        return 1.0
    magnitude = 10.0 ** math.floor(math.log10(target))
    for factor in (1.0, 2.0, 5.0, 10.0):
        if magnitude * factor >= target:
            return magnitude * factor
    return magnitude * 10.0


def ring_to_screen(viewport: MapViewport, ring) -> list[tuple[float, float]]:
    return [viewport.location_to_screen(x, y) for x, y in ring.coords]


def polygon_parts(geometry: BaseGeometry) -> list[Polygon]:
    """Polygons making up ``geometry``; other geometry types are skipped."""
    if isinstance(geometry, Polygon):
        return [geometry]
    return [part for part in getattr(geometry, "geoms", ()) if isinstance(part, Polygon)]


class MapCanvas:
    def __init__(
        self,
        viewport: MapViewport,
        renderer: UniqueValueRenderer,
        *,
        basemap_color: tuple[int, int, int] = (28, 44, 38),
        grid_color: tuple[int, int, int] = (52, 74, 64),
        buffer_fill: tuple[int, int, int, int] = (255, 165, 0, 128),
        buffer_outline: tuple[int, int, int] = (255, 165, 0),
        buffer_outline_width: int = 8,
    ):
        self.viewport = viewport
        self.renderer = renderer
        self.basemap_color = basemap_color
        self.grid_color = grid_color
        self.buffer_fill = buffer_fill
        self.buffer_outline = buffer_outline
        self.buffer_outline_width = buffer_outline_width

    def draw(self, surface: pygame.Surface, particles: ParticleSet, overlay: BufferOverlay) -> None:
        rect = self.viewport.bounds
        previous_clip = surface.get_clip()
        surface.set_clip(rect)
        try:
            self._draw_basemap(surface)
            self._draw_particles(surface, particles)
            self._draw_buffer(surface, overlay.geometry)
        finally:
            surface.set_clip(previous_clip)

    # ------------------------------------------------------------------ Layers
    def _draw_basemap(self, surface: pygame.Surface) -> None:
        rect = self.viewport.bounds
        surface.fill(self.basemap_color, rect)
        extent = self.viewport.current_extent()
        if extent is None:
            return
        step = grid_step(self.viewport.resolution)
        x = math.floor(extent.xmin / step) * step
        while x <= extent.xmax:
            sx, _ = self.viewport.location_to_screen(x, extent.ymin)
            pygame.draw.line(surface, self.grid_color, (sx, rect.top), (sx, rect.bottom))
            x += step
        y = math.floor(extent.ymin / step) * step
        while y <= extent.ymax:
            _, sy = self.viewport.location_to_screen(extent.xmin, y)
            pygame.draw.line(surface, self.grid_color, (rect.left, sy), (rect.right, sy))
            y += step

    def _draw_particles(self, surface: pygame.Surface, particles: ParticleSet) -> None:
        if len(particles) == 0:
            return
        xs, ys = particles.positions
        res = self.viewport.resolution
        rect = self.viewport.bounds
        screen_x = rect.centerx + (xs - self.viewport.center.x) / res
        screen_y = rect.centery - (ys - self.viewport.center.y) / res
        flags = particles.in_buffer
        # Outside markers first so the smaller inside markers stay visible.
        for in_buffer in (False, True):
            symbol = self.renderer.symbol_for(in_buffer)
            radius = max(1, symbol.size // 2)
            for sx, sy in zip(screen_x[flags == in_buffer], screen_y[flags == in_buffer]):
                pygame.draw.circle(surface, symbol.color, (int(sx), int(sy)), radius)

    def _draw_buffer(self, surface: pygame.Surface, geometry: Optional[BaseGeometry]) -> None:
        if geometry is None or geometry.is_empty:
            return
        rect = self.viewport.bounds
        origin = np.asarray(rect.topleft)
        layer = pygame.Surface(rect.size, pygame.SRCALPHA)
        for polygon in polygon_parts(geometry):
            rings = [polygon.exterior, *polygon.interiors]
            screens = [(np.asarray(ring_to_screen(self.viewport, ring)) - origin).tolist() for ring in rings]
            if len(screens[0]) < 3:
                continue
            pygame.draw.polygon(layer, self.buffer_fill, screens[0])
            # Holes are punched back to transparent.
            for hole in screens[1:]:
                pygame.draw.polygon(layer, (0, 0, 0, 0), hole)
            for ring in screens:
                pygame.draw.polygon(layer, self.buffer_outline, ring, self.buffer_outline_width)
        surface.blit(layer, rect.topleft)
