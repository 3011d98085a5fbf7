from __future__ import annotations

import numpy as np
from shapely.geometry import box

from buffer_region import BufferOverlay
from containment import ContainmentStats, classify
from particles import ParticleSet


def particles_at(*points) -> ParticleSet:
    particles = ParticleSet()
    positions = np.array(points, dtype=float).T
    particles.add(positions, np.zeros_like(positions))
    return particles


def test_no_buffer_means_everything_outside():
    particles = particles_at((0, 0), (1, 1), (2, 2))
    particles.set_in_buffer(np.array([True, True, False]))

    stats = classify(particles, BufferOverlay())

    assert stats == ContainmentStats(inside=0, outside=3, has_buffer=False)
    assert not particles.in_buffer.any()


def test_counts_and_flags_follow_polygon():
    particles = particles_at((1, 1), (5, 5), (20, 20), (10, 3))
    overlay = BufferOverlay()
    overlay.place(box(0, 0, 10, 10))

    stats = classify(particles, overlay)

    assert particles.in_buffer.tolist() == [True, True, False, True]
    assert (stats.inside, stats.outside, stats.has_buffer) == (3, 1, True)
    assert stats.total == len(particles)


def test_region_without_geometry_counts_as_no_buffer():
    particles = particles_at((1, 1))
    overlay = BufferOverlay()
    overlay.place(None)

    stats = classify(particles, overlay)

    assert not stats.has_buffer
    assert stats.outside == 1


def test_classify_recounts_from_scratch():
    particles = particles_at((1, 1), (5, 5))
    overlay = BufferOverlay()
    overlay.place(box(0, 0, 10, 10))
    assert classify(particles, overlay).inside == 2

    overlay.move(box(4, 4, 6, 6))
    stats = classify(particles, overlay)
    assert (stats.inside, stats.outside) == (1, 1)
    assert particles.in_buffer.tolist() == [False, True]


def test_empty_particle_set():
    overlay = BufferOverlay()
    overlay.place(box(0, 0, 1, 1))
    stats = classify(ParticleSet(), overlay)
    assert (stats.inside, stats.outside) == (0, 0)


def test_stats_string():
    assert str(ContainmentStats(3, 4, True)) == "3 inside, 4 outside"
    assert str(ContainmentStats(0, 4, False)) == "No buffer (4 outside)"
