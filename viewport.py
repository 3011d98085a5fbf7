"""Web Mercator map viewport: what part of the world the map rectangle shows."""
from __future__ import annotations

import logging
import math
from typing import Optional

import pygame
from shapely.geometry import Point

from geometry import MERCATOR_HALF_WORLD, WEB_MERCATOR, Envelope, from_lon_lat, to_lon_lat

logger = logging.getLogger(__name__)

# Metres per pixel at level of detail 0 on the equator (256 px tiles).
LOD0_RESOLUTION = 156543.03392804097
TILE_SIZE = 256
MIN_LOD = 0.0
MAX_LOD = 23.0
# Half the side of the square Web Mercator world.
WORLD_HALF = MERCATOR_HALF_WORLD


class MapViewport:
    """
    Screen rectangle plus the map centre and zoom it displays.

    Screen coordinates grow right and down; map coordinates grow right and
    up, so the y axis is flipped in both conversions.

    The view never shows more than one world: zooming out stops once the
    longer side of the map covers the whole Mercator square, and the centre
    is held so the extent stays inside it.
    """

    def __init__(self, rect: pygame.Rect, center: Point, level_of_detail: float):
        self.rect = pygame.Rect(rect)
        self.level_of_detail = self._clamp_lod(level_of_detail)
        self.center = self._clamp_center(center.x, center.y)

    @classmethod
    def from_lat_lon(
        cls, rect: pygame.Rect, latitude: float, longitude: float, level_of_detail: float
    ) -> "MapViewport":
        return cls(rect, from_lon_lat(longitude, latitude, WEB_MERCATOR), level_of_detail)

    def min_level_of_detail(self) -> float:
        """Lowest level at which the map rectangle fits inside one world."""
        side = max(self.rect.width, self.rect.height)
        if side <= TILE_SIZE:
            return MIN_LOD
        return max(MIN_LOD, math.log2(side / TILE_SIZE))

    def _clamp_lod(self, value: float) -> float:
        return max(self.min_level_of_detail(), min(MAX_LOD, float(value)))

    def _clamp_center(self, x: float, y: float) -> Point:
        res = self.resolution
        half_w = min(WORLD_HALF, max(0, self.rect.width) * res / 2.0)
        half_h = min(WORLD_HALF, max(0, self.rect.height) * res / 2.0)
        x = max(-WORLD_HALF + half_w, min(WORLD_HALF - half_w, x))
        y = max(-WORLD_HALF + half_h, min(WORLD_HALF - half_h, y))
        return Point(x, y)

    # ------------------------------------------------------------------ Geometry
    @property
    def spatial_reference(self) -> str:
        return WEB_MERCATOR

    @property
    def resolution(self) -> float:
        """Map units (metres) per screen pixel."""
        return LOD0_RESOLUTION / (2.0 ** self.level_of_detail)

    @property
    def bounds(self) -> pygame.Rect:
        """Screen-space rectangle of the map."""
        return self.rect

    def current_extent(self) -> Optional[Envelope]:
        """Visible map area, or ``None`` while the map has no on-screen area."""
        if self.rect.width <= 0 or self.rect.height <= 0:
            return None
        half_w = self.rect.width * self.resolution / 2.0
        half_h = self.rect.height * self.resolution / 2.0
        cx, cy = self.center.x, self.center.y
        return Envelope(cx - half_w, cy - half_h, cx + half_w, cy + half_h, crs=WEB_MERCATOR)

    def screen_to_location(self, screen_point: tuple[float, float]) -> Point:
        sx, sy = screen_point
        res = self.resolution
        x = self.center.x + (sx - self.rect.centerx) * res
        y = self.center.y - (sy - self.rect.centery) * res
        return Point(x, y)

    def location_to_screen(self, x: float, y: float) -> tuple[float, float]:
        res = self.resolution
        sx = self.rect.centerx + (x - self.center.x) / res
        sy = self.rect.centery - (y - self.center.y) / res
        return sx, sy

    def center_lon_lat(self) -> tuple[float, float]:
        return to_lon_lat(self.center, WEB_MERCATOR)

    # ------------------------------------------------------------------ Navigation
    def resize(self, rect: pygame.Rect) -> None:
        self.rect = pygame.Rect(rect)
        self.level_of_detail = self._clamp_lod(self.level_of_detail)
        self.center = self._clamp_center(self.center.x, self.center.y)

    def pan_by(self, dx_px: float, dy_px: float) -> None:
        """Move the content by a screen offset (dragging the map right shows more west)."""
        res = self.resolution
        x = self.center.x - dx_px * res
        y = self.center.y + dy_px * res
        self.center = self._clamp_center(x, y)

    def zoom_at(self, screen_point: tuple[float, float], delta: float) -> None:
        """Change the level of detail by ``delta`` keeping ``screen_point`` fixed."""
        new_lod = self._clamp_lod(self.level_of_detail + delta)
        if new_lod == self.level_of_detail:
            return
        anchor = self.screen_to_location(screen_point)
        self.level_of_detail = new_lod
        res = self.resolution
        sx, sy = screen_point
        x = anchor.x - (sx - self.rect.centerx) * res
        y = anchor.y + (sy - self.rect.centery) * res
        self.center = self._clamp_center(x, y)
        logger.debug("Zoomed to level of detail %.1f", new_lod)
