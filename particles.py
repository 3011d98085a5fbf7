"""
Moving point markers.

Particles are stored column-wise like the rest of the numerical code:
positions and velocities as 2×N arrays in map units, and one boolean per
particle telling whether it was inside the buffer at the last
classification.  ``step`` moves every particle by its velocity and reflects
the velocity component whose axis left the viewport extent.  The reflection
is not a clamp: a particle may end a tick up to one step outside the extent
and comes back on the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np
from numpy import ndarray

from geometry import Envelope

logger = logging.getLogger(__name__)

# Speed range as a fraction of the extent width per tick.
MIN_SPEED_FRACTION = 1.0 / 1000.0
MAX_SPEED_FRACTION = 1.0 / 500.0


@dataclass(frozen=True)
class Particle:
    """Snapshot of a single particle."""

    x: float
    y: float
    dx: float
    dy: float
    in_buffer: bool


def random_velocities(count: int, speed_range: tuple[float, float], rng: np.random.Generator) -> ndarray:
    """Velocities with a uniform heading in [0°, 360°) and uniform speed.

    Headings are compass bearings: 0° points up (+y), 90° points right (+x).
    """
    if count <= 0:
        return np.zeros((2, 0))
    low, high = speed_range
    headings = np.radians(rng.uniform(0.0, 360.0, size=count))
    speeds = rng.uniform(low, high, size=count)
    return np.vstack((np.sin(headings) * speeds, np.cos(headings) * speeds))


def speed_range_for(extent: Envelope) -> tuple[float, float]:
    return extent.width * MIN_SPEED_FRACTION, extent.width * MAX_SPEED_FRACTION


class ParticleSet:
    """Collection of particles with their velocities and containment flags."""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self._rng = rng if rng is not None else np.random.default_rng()
        self._r: ndarray = np.zeros((2, 0), dtype=float)
        self._v: ndarray = np.zeros((2, 0), dtype=float)
        self._in_buffer: ndarray = np.zeros((0,), dtype=bool)

    # -------------------------------------------------------------------------
    @property
    def positions(self) -> ndarray:
        """Positions as a 2×N array."""
        return self._r

    @property
    def velocities(self) -> ndarray:
        """Per-tick displacements as a 2×N array."""
        return self._v

    @property
    def in_buffer(self) -> ndarray:
        return self._in_buffer

    def __len__(self) -> int:
        return self._r.shape[1]

    def __iter__(self) -> Iterator[Particle]:
        for i in range(len(self)):
            yield self[i]

    def __getitem__(self, index: int) -> Particle:
        return Particle(
            x=float(self._r[0, index]),
            y=float(self._r[1, index]),
            dx=float(self._v[0, index]),
            dy=float(self._v[1, index]),
            in_buffer=bool(self._in_buffer[index]),
        )

    # -------------------------------------------------------------------------
    def add(self, positions: ndarray, velocities: ndarray) -> int:
        """Append particles given as 2×K arrays; new particles start outside."""
        positions = np.asarray(positions, dtype=float).reshape(2, -1)
        velocities = np.asarray(velocities, dtype=float).reshape(2, -1)
        if positions.shape != velocities.shape:
            raise ValueError(
                f"positions and velocities must have the same shape, "
                f"got {positions.shape} and {velocities.shape}"
            )
        count = positions.shape[1]
        self._r = np.hstack((self._r, positions))
        self._v = np.hstack((self._v, velocities))
        self._in_buffer = np.concatenate((self._in_buffer, np.zeros(count, dtype=bool)))
        return count

    def spawn(self, count: int, viewport) -> int:
        """
        Add ``count`` particles at uniformly random screen positions inside
        ``viewport.bounds`` with random headings and speeds drawn from
        ``[width/1000, width/500]`` of the current extent.

        Returns the number of particles added (0 when the viewport has no
        extent).
        """
        count = int(count)
        if count <= 0:
            return 0
        extent = viewport.current_extent()
        if extent is None:
            logger.warning("Could not get a viewport extent, no particles spawned")
            return 0

        bounds = viewport.bounds
        screen_x = bounds.left + self._rng.uniform(0.0, bounds.width, size=count)
        screen_y = bounds.top + self._rng.uniform(0.0, bounds.height, size=count)
        positions = np.empty((2, count), dtype=float)
        for i, (sx, sy) in enumerate(zip(screen_x, screen_y)):
            location = viewport.screen_to_location((sx, sy))
            positions[0, i] = location.x
            positions[1, i] = location.y

        velocities = random_velocities(count, speed_range_for(extent), self._rng)
        added = self.add(positions, velocities)
        logger.debug("Spawned %d particles (total %d)", added, len(self))
        return added

    def step(self, extent: Envelope) -> None:
        """
        Advance every particle by one tick inside ``extent``.

        Particles past an edge get their velocity pointed back inwards, so
        those left outside by a pan or zoom drift home instead of jittering.
        """
        if len(self) == 0:
            return
        self._r += self._v
        x, y = self._r
        vx, vy = self._v
        vx[x < extent.xmin] = np.abs(vx[x < extent.xmin])
        vx[x > extent.xmax] = -np.abs(vx[x > extent.xmax])
        vy[y < extent.ymin] = np.abs(vy[y < extent.ymin])
        vy[y > extent.ymax] = -np.abs(vy[y > extent.ymax])

    def set_in_buffer(self, flags: ndarray) -> None:
        flags = np.asarray(flags, dtype=bool)
        if flags.shape != self._in_buffer.shape:
            raise ValueError(f"expected {self._in_buffer.shape[0]} flags, got {flags.shape}")
        self._in_buffer = flags.copy()

    def clear(self) -> None:
        self._r = np.zeros((2, 0), dtype=float)
        self._v = np.zeros((2, 0), dtype=float)
        self._in_buffer = np.zeros((0,), dtype=bool)

