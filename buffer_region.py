"""
Buffer region: the single polygon the particles are tested against.

``BufferOverlay`` is a one-slot layer.  ``place`` swaps in a brand new
``BufferRegion`` (the old one is dropped), ``move`` reshapes the region that
is already there, ``clear`` empties the slot.  ``BufferBuilder`` turns a
picked map point into the geodesic buffer polygon, sized from the current
viewport.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry

from geometry import WEB_MERCATOR, Envelope, geodetic_buffer, linear_unit_of, project_extent

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 0.5


class BufferRegion:
    """Holder for the buffer geometry; its identity survives geometry edits."""

    def __init__(self, geometry: Optional[BaseGeometry], center: Optional[Point] = None):
        self.geometry = geometry
        self.center = center

    def __repr__(self) -> str:
        if self.geometry is None:
            return "BufferRegion(empty)"
        return f"BufferRegion(bounds={tuple(round(v, 1) for v in self.geometry.bounds)})"


class BufferOverlay:
    """Layer holding at most one :class:`BufferRegion`."""

    def __init__(self):
        self._region: Optional[BufferRegion] = None

    @property
    def region(self) -> Optional[BufferRegion]:
        return self._region

    @property
    def geometry(self) -> Optional[BaseGeometry]:
        return None if self._region is None else self._region.geometry

    def __len__(self) -> int:
        return 0 if self._region is None else 1

    def place(self, geometry: Optional[BaseGeometry], center: Optional[Point] = None) -> BufferRegion:
        """Replace whatever region exists with a new one."""
        self._region = BufferRegion(geometry, center)
        logger.debug("Placed %r", self._region)
        return self._region

    def move(self, geometry: Optional[BaseGeometry], center: Optional[Point] = None) -> bool:
        """Give the existing region a new geometry; no-op when there is none."""
        if self._region is None:
            return False
        self._region.geometry = geometry
        self._region.center = center
        return True

    def clear(self) -> None:
        self._region = None


def buffer_radius(extent: Envelope, fraction: float) -> float:
    """``fraction × min(width, height) / 2`` of ``extent``, in its own units."""
    return min(extent.width, extent.height) * fraction / 2.0


class BufferBuilder:
    """
    Builds geodesic buffers sized relative to the visible map.

    Args:
        extent_source: Callable returning the current viewport extent or
            ``None`` when it is unavailable.
        size_fraction: Share of the smaller viewport side used as diameter.
    """

    def __init__(
        self,
        extent_source: Callable[[], Optional[Envelope]],
        size_fraction: float = DEFAULT_BUFFER_SIZE,
        *,
        target_crs: str = WEB_MERCATOR,
    ):
        self._extent_source = extent_source
        self._target_crs = target_crs
        self._size_fraction = DEFAULT_BUFFER_SIZE
        self.size_fraction = size_fraction

    @property
    def size_fraction(self) -> float:
        return self._size_fraction

    @size_fraction.setter
    def size_fraction(self, value: float) -> None:
        value = float(value)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"buffer size must be within [0, 1], got {value}")
        self._size_fraction = value

    def radius(self) -> Optional[float]:
        """Current buffer radius in the projected unit, ``None`` without extent."""
        extent = self._extent_source()
        if extent is None:
            return None
        projected = project_extent(extent, self._target_crs)
        return buffer_radius(projected, self._size_fraction)

    def build(self, map_point: Point) -> Optional[BaseGeometry]:
        extent = self._extent_source()
        if extent is None:
            logger.warning("Could not get a viewport extent, buffer not built")
            return None
        projected = project_extent(extent, self._target_crs)
        size = buffer_radius(projected, self._size_fraction)
        unit = linear_unit_of(projected.crs)
        return geodetic_buffer(map_point, size, unit, crs=extent.crs)
