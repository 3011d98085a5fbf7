"""Inside/outside classification of particles against the buffer region."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from buffer_region import BufferOverlay
from geometry import contains_xy
from particles import ParticleSet


@dataclass(frozen=True)
class ContainmentStats:
    """Result of one full recount."""

    inside: int
    outside: int
    has_buffer: bool

    @property
    def total(self) -> int:
        return self.inside + self.outside

    def __str__(self) -> str:
        if not self.has_buffer:
            return f"No buffer ({self.outside} outside)"
        return f"{self.inside} inside, {self.outside} outside"


def classify(particles: ParticleSet, overlay: BufferOverlay) -> ContainmentStats:
    """
    Flag each particle as inside or outside the buffer and count them.

    Containment includes the polygon boundary.  Without a buffer region, or
    with a region whose geometry is missing, every particle is outside.
    """
    geometry = overlay.geometry
    x, y = particles.positions
    flags = contains_xy(geometry, x, y)
    particles.set_in_buffer(flags)

    inside = int(np.count_nonzero(flags))
    return ContainmentStats(
        inside=inside,
        outside=len(particles) - inside,
        has_buffer=geometry is not None,
    )
