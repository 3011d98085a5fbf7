"""
Swarm of particles bouncing inside the visible map, classified against a
geodesic buffer.

The ``Simulation`` class owns the mutable state of the demo: the particle
set, the one-slot buffer overlay and the animation timer.  Each timer tick
moves every particle (reflecting at the edges of the current viewport
extent) and then recounts how many particles lie inside the buffer.  Taps
and drags from the interaction handler end up in ``place_buffer`` and
``drag_buffer``.

A tick is skipped as a whole when the viewport cannot report an extent;
nothing is moved and the previous counts stay in place.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from shapely.geometry import Point

from buffer_region import DEFAULT_BUFFER_SIZE, BufferBuilder, BufferOverlay, BufferRegion
from containment import ContainmentStats, classify
from particles import ParticleSet
from timer import AnimationTimer
from viewport import MapViewport

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


class Simulation:
    """Particles, buffer and timer of the demo.

    Parameters
    ----------
    viewport: MapViewport
        Source of the extent used for spawning, bouncing and buffer sizing.
    buffer_size: float
        Fraction in [0, 1] of the smaller viewport side used as the buffer
        diameter.
    fps: float
        Animation cadence.
    max_particles: int or None
        Upper bound on the particle count; ``None`` means unbounded.
    rng: numpy Generator, optional
        Random source for spawning, mostly useful for tests.
    timer: AnimationTimer, optional
        Replaces the default pygame timer.
    """

    def __init__(
        self,
        viewport: MapViewport,
        *,
        buffer_size: float = DEFAULT_BUFFER_SIZE,
        fps: float = 30.0,
        max_particles: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        timer: Optional[AnimationTimer] = None,
    ):
        self.viewport = viewport
        self.particles = ParticleSet(rng)
        self.overlay = BufferOverlay()
        self.builder = BufferBuilder(viewport.current_extent, buffer_size)
        self.timer = timer if timer is not None else AnimationTimer(fps)
        self.max_particles = max_particles
        self.stats: Optional[ContainmentStats] = None
        self.tick_count: int = 0
        self._extent_missing = False

    # -------------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self.timer.is_valid

    @property
    def buffer_size(self) -> float:
        return self.builder.size_fraction

    @buffer_size.setter
    def buffer_size(self, value: float) -> None:
        self.builder.size_fraction = value

    @property
    def buffer(self) -> Optional[BufferRegion]:
        return self.overlay.region

    # -------------------------------------------------------------------------
    # Particles
    def add_particles(self, count: int = DEFAULT_BATCH_SIZE) -> int:
        """Spawn up to ``count`` particles and make sure the timer runs."""
        if self.max_particles is not None:
            count = min(int(count), self.max_particles - len(self.particles))
        if count <= 0:
            logger.info("Particle limit reached (%d)", len(self.particles))
            return 0
        added = self.particles.spawn(count, self.viewport)
        if added and not self.running:
            self.timer.start()
        logger.info("Added %d particles, %d in total", added, len(self.particles))
        return added

    def clear_particles(self) -> None:
        self.timer.invalidate()
        self.particles.clear()
        self.stats = None
        logger.info("Cleared particles")

    # -------------------------------------------------------------------------
    # Buffer
    def place_buffer(self, map_point: Point) -> Optional[BufferRegion]:
        """Install a fresh buffer around ``map_point``.

        Leaves the current region untouched when no geometry can be built.
        """
        geometry = self.builder.build(map_point)
        if geometry is None:
            return None
        region = self.overlay.place(geometry, map_point)
        self._reclassify()
        return region

    def drag_buffer(self, map_point: Point) -> bool:
        """Reshape the existing buffer around ``map_point``."""
        if self.overlay.region is None:
            return False
        geometry = self.builder.build(map_point)
        if geometry is None:
            return False
        self.overlay.move(geometry, map_point)
        self._reclassify()
        return True

    def clear_buffer(self) -> None:
        """Drop the buffer, flagging every particle as outside first."""
        self.overlay.move(None)
        self._reclassify()
        self.overlay.clear()
        logger.info("Cleared buffer")

    def resize_buffer(self) -> bool:
        """Rebuild the current buffer after ``buffer_size`` changed."""
        region = self.overlay.region
        if region is None or region.center is None:
            return False
        return self.drag_buffer(region.center)

    # -------------------------------------------------------------------------
    # Animation
    def tick(self) -> bool:
        """Advance one frame. Returns False when the tick was skipped."""
        extent = self.viewport.current_extent()
        if extent is None:
            if not self._extent_missing:
                logger.warning("Could not get a viewport extent, skipping ticks")
            self._extent_missing = True
            return False
        self._extent_missing = False

        self.particles.step(extent)
        self.stats = classify(self.particles, self.overlay)
        self.tick_count += 1
        return True

    def _reclassify(self) -> None:
        if len(self.particles):
            self.stats = classify(self.particles, self.overlay)
