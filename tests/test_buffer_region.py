from __future__ import annotations

import pytest
from shapely.geometry import Point, box

from buffer_region import BufferBuilder, BufferOverlay, buffer_radius
from geometry import Envelope


def test_buffer_radius_uses_smaller_side():
    extent = Envelope(0.0, 0.0, 400.0, 300.0)
    assert buffer_radius(extent, 0.5) == pytest.approx(75.0)
    assert buffer_radius(extent, 1.0) == pytest.approx(150.0)


def test_radius_scales_linearly_with_fraction(viewport):
    builder = BufferBuilder(viewport.current_extent, 0.2)
    small = builder.radius()
    builder.size_fraction = 0.4
    assert builder.radius() == pytest.approx(2 * small)


def test_radius_matches_viewport(viewport):
    extent = viewport.current_extent()
    builder = BufferBuilder(viewport.current_extent, 0.5)
    assert builder.radius() == pytest.approx(min(extent.width, extent.height) * 0.25)


@pytest.mark.parametrize("fraction", [-0.1, 1.5])
def test_builder_rejects_fraction_out_of_range(viewport, fraction):
    with pytest.raises(ValueError):
        BufferBuilder(viewport.current_extent, fraction)


def test_builder_default_fraction_is_half(viewport):
    assert BufferBuilder(viewport.current_extent).size_fraction == 0.5


def test_build_surrounds_map_point(viewport):
    builder = BufferBuilder(viewport.current_extent, 0.5)
    center = viewport.center
    polygon = builder.build(center)
    assert polygon is not None
    assert polygon.covers(center)
    minx, miny, maxx, maxy = polygon.bounds
    assert minx < center.x < maxx
    assert miny < center.y < maxy


def test_bigger_fraction_gives_bigger_buffer(viewport):
    builder = BufferBuilder(viewport.current_extent, 0.25)
    small = builder.build(viewport.center)
    builder.size_fraction = 0.5
    large = builder.build(viewport.center)
    assert large.area == pytest.approx(4 * small.area, rel=1e-3)


def test_build_without_extent_returns_none():
    builder = BufferBuilder(lambda: None, 0.5)
    assert builder.radius() is None
    assert builder.build(Point(0.0, 0.0)) is None


def test_place_replaces_region():
    overlay = BufferOverlay()
    first = overlay.place(box(0, 0, 1, 1))
    second = overlay.place(box(2, 2, 3, 3))
    assert overlay.region is second
    assert first is not second
    assert len(overlay) == 1


def test_move_keeps_region_identity():
    overlay = BufferOverlay()
    region = overlay.place(box(0, 0, 1, 1), Point(0.5, 0.5))
    new_geometry = box(5, 5, 6, 6)
    assert overlay.move(new_geometry, Point(5.5, 5.5))
    assert overlay.region is region
    assert region.geometry is new_geometry
    assert region.center == Point(5.5, 5.5)
    assert len(overlay) == 1


def test_move_without_region_does_nothing():
    overlay = BufferOverlay()
    assert not overlay.move(box(0, 0, 1, 1))
    assert overlay.region is None
    assert overlay.geometry is None


def test_clear_empties_overlay():
    overlay = BufferOverlay()
    overlay.place(box(0, 0, 1, 1))
    overlay.clear()
    assert overlay.region is None
    assert len(overlay) == 0
