from __future__ import annotations

import numpy as np
import pytest
from pyproj import Geod
from shapely.geometry import Point, box

from geometry import (
    WEB_MERCATOR,
    WGS84,
    CoordinateFormat,
    CoordinateFormatError,
    Envelope,
    LinearUnit,
    contains,
    contains_xy,
    format_coordinate,
    from_lon_lat,
    geodetic_buffer,
    linear_unit_of,
    project_extent,
    to_lon_lat,
    utm_band,
    utm_zone,
)

NYC = Point(-74.0060, 40.7128)
SYDNEY = Point(151.2093, -33.8688)


def test_envelope_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        Envelope(10.0, 0.0, 0.0, 5.0)


def test_project_extent_to_same_crs_is_identity():
    extent = Envelope(0.0, 0.0, 10.0, 10.0)
    assert project_extent(extent, WEB_MERCATOR) is extent


def test_project_extent_round_trip():
    extent = Envelope(-8240000.0, 4960000.0, -8230000.0, 4970000.0)
    geographic = project_extent(extent, WGS84)
    assert geographic.crs == WGS84
    assert -74.1 < geographic.xmin < geographic.xmax < -73.9
    back = project_extent(geographic, WEB_MERCATOR)
    assert back.xmin == pytest.approx(extent.xmin, abs=1e-3)
    assert back.ymax == pytest.approx(extent.ymax, abs=1e-3)


def test_linear_unit_of_web_mercator_is_meters():
    assert linear_unit_of(WEB_MERCATOR) is LinearUnit.METERS
    assert linear_unit_of(WGS84) is LinearUnit.METERS


def test_geodetic_buffer_vertices_lie_at_geodesic_distance():
    center = from_lon_lat(NYC.x, NYC.y)
    polygon = geodetic_buffer(center, 1500.0, LinearUnit.METERS)
    assert polygon is not None and polygon.is_valid
    assert contains(polygon, center)

    geod = Geod(ellps="WGS84")
    ring = np.asarray(polygon.exterior.coords)[:-1]
    for x, y in ring[::10]:
        lon, lat = to_lon_lat(Point(x, y))
        _, _, dist = geod.inv(NYC.x, NYC.y, lon, lat)
        assert dist == pytest.approx(1500.0, rel=1e-6)


def test_geodetic_buffer_respects_units():
    center = from_lon_lat(0.0, 0.0)
    in_km = geodetic_buffer(center, 2.0, LinearUnit.KILOMETERS)
    in_m = geodetic_buffer(center, 2000.0, LinearUnit.METERS)
    assert in_km.area == pytest.approx(in_m.area, rel=1e-9)


@pytest.mark.parametrize("distance", [0.0, -5.0, float("nan"), float("inf")])
def test_geodetic_buffer_without_positive_distance_is_none(distance):
    assert geodetic_buffer(Point(0.0, 0.0), distance) is None


def test_max_deviation_controls_vertex_count():
    center = from_lon_lat(0.0, 0.0)
    coarse = geodetic_buffer(center, 1000.0, max_deviation=50.0)
    fine = geodetic_buffer(center, 1000.0, max_deviation=0.5)
    assert len(fine.exterior.coords) > len(coarse.exterior.coords)


def test_contains_is_boundary_inclusive():
    square = box(0.0, 0.0, 10.0, 10.0)
    assert contains(square, Point(5.0, 5.0))
    assert contains(square, Point(10.0, 5.0))
    assert contains(square, Point(0.0, 0.0))
    assert not contains(square, Point(10.5, 5.0))
    assert not contains(None, Point(5.0, 5.0))


def test_contains_xy_matches_scalar_contains():
    square = box(0.0, 0.0, 10.0, 10.0)
    xs = np.array([5.0, 10.0, 11.0, -1.0])
    ys = np.array([5.0, 10.0, 5.0, 5.0])
    mask = contains_xy(square, xs, ys)
    assert mask.tolist() == [contains(square, Point(x, y)) for x, y in zip(xs, ys)]
    assert contains_xy(None, xs, ys).tolist() == [False] * 4
    assert contains_xy(square, np.array([]), np.array([])).shape == (0,)


def test_decimal_degrees():
    assert format_coordinate(NYC, CoordinateFormat.DECIMAL_DEGREES, crs=WGS84) == "40.7128N 074.0060W"
    assert format_coordinate(SYDNEY, CoordinateFormat.DECIMAL_DEGREES, crs=WGS84) == "33.8688S 151.2093E"


def test_decimal_degrees_from_web_mercator():
    mercator = from_lon_lat(NYC.x, NYC.y)
    assert format_coordinate(mercator, CoordinateFormat.DECIMAL_DEGREES) == "40.7128N 074.0060W"


def test_degrees_minutes_seconds():
    assert format_coordinate(NYC, CoordinateFormat.DEGREES_MINUTES_SECONDS, crs=WGS84) == "40 42 46.1N 074 00 21.6W"


def test_degrees_minutes_seconds_never_shows_sixty_seconds():
    text = format_coordinate(Point(0.0, 10.99999999), CoordinateFormat.DEGREES_MINUTES_SECONDS, crs=WGS84)
    assert text.startswith("11 00 00.0N")


def test_degrees_decimal_minutes():
    text = format_coordinate(NYC, CoordinateFormat.DEGREES_DECIMAL_MINUTES, crs=WGS84)
    assert text == "40 42.7680N 074 00.3600W"


def test_utm_new_york():
    text = format_coordinate(NYC, CoordinateFormat.UTM, crs=WGS84)
    zone, easting, northing = text.split(" ")
    assert zone == "18T"
    assert 583900 <= int(easting) <= 584020
    assert 4507250 <= int(northing) <= 4507450
    assert format_coordinate(NYC, CoordinateFormat.UTM, crs=WGS84, add_spaces=False) == zone + easting + northing


def test_mgrs_new_york():
    text = format_coordinate(NYC, CoordinateFormat.MGRS, crs=WGS84, precision=4)
    parts = text.split(" ")
    assert parts[:2] == ["18T", "WL"]
    assert len(parts[2]) == 4 and len(parts[3]) == 4
    assert parts[2].startswith("83") and parts[3].startswith("07")


def test_mgrs_precision_zero_has_no_digits():
    assert format_coordinate(NYC, CoordinateFormat.MGRS, crs=WGS84, precision=0) == "18T WL"


def test_mgrs_rejects_bad_precision():
    with pytest.raises(CoordinateFormatError):
        format_coordinate(NYC, CoordinateFormat.MGRS, crs=WGS84, precision=7)


def test_utm_southern_hemisphere():
    assert format_coordinate(SYDNEY, CoordinateFormat.UTM, crs=WGS84).startswith("56H ")


def test_utm_zone_exceptions():
    assert utm_zone(5.0, 60.0) == 32
    assert utm_zone(10.0, 78.0) == 33
    assert utm_zone(-74.006, 40.7128) == 18
    assert utm_zone(180.0, 0.0) == 60


def test_utm_outside_coverage_raises():
    with pytest.raises(CoordinateFormatError):
        utm_band(84.5)
    with pytest.raises(CoordinateFormatError):
        format_coordinate(Point(10.0, -82.0), CoordinateFormat.MGRS, crs=WGS84)


def test_buffer_radius_holds_at_high_latitude():
    geod = Geod(ellps="WGS84")
    polygon = geodetic_buffer(from_lon_lat(10.0, 70.0), 500.0)
    for x, y in np.asarray(polygon.exterior.coords)[:-1:15]:
        lon, lat = to_lon_lat(Point(x, y))
        _, _, dist = geod.inv(10.0, 70.0, lon, lat)
        assert dist == pytest.approx(500.0, rel=1e-6)


def _geodesic_inside(center_lon, center_lat, radius_m, lon, lat):
    _, _, dist = Geod(ellps="WGS84").inv(center_lon, center_lat, lon, lat)
    return dist <= radius_m


@pytest.mark.parametrize(
    "lon, lat",
    [(-179.5, 0.0), (179.9, 0.5), (178.5, -1.0), (-177.0, 0.0), (176.0, 0.0), (179.5, 3.0)],
)
def test_buffer_across_antimeridian(lon, lat):
    center_lon, center_lat, radius = 179.5, 0.0, 200_000.0
    geometry = geodetic_buffer(from_lon_lat(center_lon, center_lat), radius)
    assert geometry.geom_type == "MultiPolygon"
    assert geometry.is_valid
    expected = _geodesic_inside(center_lon, center_lat, radius, lon, lat)
    assert contains(geometry, from_lon_lat(lon, lat)) == expected


@pytest.mark.parametrize("crs", [WEB_MERCATOR, WGS84])
@pytest.mark.parametrize(
    "lon, lat",
    [(180.0, 84.0), (90.0, 84.0), (-90.0, 80.0), (0.0, 70.0), (0.0, 60.0), (170.0, 75.0), (-120.0, 82.0)],
)
def test_buffer_around_north_pole(crs, lon, lat):
    center_lon, center_lat, radius = 0.0, 80.0, 2_000_000.0
    center = from_lon_lat(center_lon, center_lat, crs)
    geometry = geodetic_buffer(center, radius, crs=crs)
    assert geometry.is_valid
    expected = _geodesic_inside(center_lon, center_lat, radius, lon, lat)
    assert contains(geometry, from_lon_lat(lon, lat, crs)) == expected


@pytest.mark.parametrize(
    "lon, lat, expected",
    [(0.0, 0.0, True), (0.0, 89.0, True), (0.0, -89.0, True), (100.0, 0.0, True),
     (170.0, 0.0, False), (180.0, 0.0, False), (-175.0, 5.0, False)],
)
def test_buffer_reaching_past_both_poles_leaves_hole_at_antipode(lon, lat, expected):
    geometry = geodetic_buffer(Point(0.0, 0.0), 15_000_000.0, crs=WGS84)
    assert geometry.is_valid
    assert contains(geometry, Point(lon, lat)) == expected
