"""
Geometry provider for the buffer demo.

Everything that needs real geodesy lives here and is delegated to
``pyproj`` (datum transforms, UTM projection, geodesic forward problem on
the WGS84 ellipsoid) and ``shapely`` (polygons and containment).  The rest
of the application only ever works in Web Mercator map coordinates and asks
this module for:

* ``project_extent``  - reproject a viewport envelope,
* ``geodetic_buffer`` - a polygon of all points within a geodesic distance,
* ``contains`` / ``contains_xy`` - boundary-inclusive point-in-polygon,
* ``format_coordinate`` - human readable lat/lon, DMS, UTM and MGRS strings.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional

import numpy as np
import shapely
from pyproj import CRS, Geod, Transformer
from shapely import affinity
from shapely.geometry import Point, Polygon, box
from shapely.geometry.base import BaseGeometry

WGS84 = "EPSG:4326"
WEB_MERCATOR = "EPSG:3857"

# Vertex count of a buffer ring when no maximum deviation is requested;
# large rings get one vertex per BUFFER_VERTEX_SPACING_M up to the maximum.
DEFAULT_BUFFER_VERTICES = 90
MAX_BUFFER_VERTICES = 720
BUFFER_VERTEX_SPACING_M = 50_000.0
MIN_BUFFER_VERTICES = 8

MERCATOR_RADIUS = 6378137.0
MERCATOR_HALF_WORLD = math.pi * MERCATOR_RADIUS
# Ring vertices closer to a pole are pulled back to this latitude.
MAX_POLE_LATITUDE = 89.9

_GEOD = Geod(ellps="WGS84")

_UTM_BANDS = "CDEFGHJKLMNPQRSTUVWXX"
_MGRS_COLUMN_SETS = ("ABCDEFGH", "JKLMNPQR", "STUVWXYZ")
_MGRS_ROWS = "ABCDEFGHJKLMNPQRSTUV"


class CoordinateFormatError(ValueError):
    """Raised when a point cannot be expressed in the requested notation."""


class LinearUnit(Enum):
    """Linear units with their size in metres."""

    METERS = 1.0
    KILOMETERS = 1000.0
    FEET = 0.3048
    US_SURVEY_FEET = 1200.0 / 3937.0
    MILES = 1609.344
    NAUTICAL_MILES = 1852.0

    @property
    def meters(self) -> float:
        return float(self.value)


class CoordinateFormat(Enum):
    DECIMAL_DEGREES = "dd"
    DEGREES_DECIMAL_MINUTES = "ddm"
    DEGREES_MINUTES_SECONDS = "dms"
    UTM = "utm"
    MGRS = "mgrs"


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned rectangle in the coordinates of ``crs``."""

    xmin: float
    ymin: float
    xmax: float
    ymax: float
    crs: str = WEB_MERCATOR

    def __post_init__(self):
        if self.xmax < self.xmin or self.ymax < self.ymin:
            raise ValueError(
                f"Envelope max must not be below min, got "
                f"({self.xmin}, {self.ymin}, {self.xmax}, {self.ymax})"
            )

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center(self) -> Point:
        return Point((self.xmin + self.xmax) / 2.0, (self.ymin + self.ymax) / 2.0)

    def contains_xy(self, x: float, y: float) -> bool:
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax


@lru_cache(maxsize=32)
def _transformer(source: str, target: str) -> Transformer:
    return Transformer.from_crs(source, target, always_xy=True)


@lru_cache(maxsize=32)
def linear_unit_of(crs: str) -> LinearUnit:
    """Return the linear unit of a projected ``crs`` (metres if unknown)."""
    info = CRS.from_user_input(crs)
    if not info.is_projected or not info.axis_info:
        return LinearUnit.METERS
    factor = info.axis_info[0].unit_conversion_factor
    for unit in LinearUnit:
        if math.isclose(unit.meters, factor, rel_tol=1e-9):
            return unit
    return LinearUnit.METERS


def to_lon_lat(point: Point, crs: str = WEB_MERCATOR) -> tuple[float, float]:
    if crs == WGS84:
        return float(point.x), float(point.y)
    lon, lat = _transformer(crs, WGS84).transform(point.x, point.y)
    return float(lon), float(lat)


def from_lon_lat(lon: float, lat: float, crs: str = WEB_MERCATOR) -> Point:
    if crs == WGS84:
        return Point(lon, lat)
    x, y = _transformer(WGS84, crs).transform(lon, lat)
    return Point(x, y)


def project_extent(extent: Envelope, target_crs: str) -> Envelope:
    """Reproject ``extent`` to ``target_crs``, returning its bounding envelope."""
    if extent.crs == target_crs:
        return extent
    xmin, ymin, xmax, ymax = _transformer(extent.crs, target_crs).transform_bounds(
        extent.xmin, extent.ymin, extent.xmax, extent.ymax, densify_pts=21
    )
    return Envelope(xmin, ymin, xmax, ymax, crs=target_crs)


def _vertex_count(radius_m: float, max_deviation_m: Optional[float]) -> int:
    if max_deviation_m is None or not math.isfinite(max_deviation_m) or max_deviation_m <= 0:
        spaced = int(math.ceil(2.0 * math.pi * radius_m / BUFFER_VERTEX_SPACING_M))
        return min(MAX_BUFFER_VERTICES, max(DEFAULT_BUFFER_VERTICES, spaced))
    if max_deviation_m >= radius_m:
        return MIN_BUFFER_VERTICES
    # Sagitta of a chord spanning pi/n must not exceed the deviation.
    half_angle = math.acos(1.0 - max_deviation_m / radius_m)
    return max(MIN_BUFFER_VERTICES, int(math.ceil(math.pi / half_angle)))


def geodetic_buffer(
    center: Point,
    distance: float,
    unit: LinearUnit = LinearUnit.METERS,
    *,
    crs: str = WEB_MERCATOR,
    max_deviation: Optional[float] = None,
) -> Optional[BaseGeometry]:
    """
    Polygon of every location within ``distance`` of ``center`` along the
    WGS84 ellipsoid, returned in ``crs`` coordinates.

    In WGS84 and Web Mercator the result follows the world's wrap-around: a
    circle crossing the antimeridian comes back as a ``MultiPolygon`` with
    one part on each side, and a circle around a pole is closed through it.

    Args:
        center: Buffer centre in ``crs`` coordinates.
        distance: Radius, expressed in ``unit``.
        unit: Unit of ``distance`` (and of ``max_deviation``).
        crs: CRS of ``center`` and of the returned polygon.
        max_deviation: Largest allowed gap between the true geodesic circle
            and the polygon edges. ``None`` picks a vertex count from the
            radius.

    Returns:
        The buffer geometry, or ``None`` when ``distance`` is not a positive
        finite number.
    """
    if not math.isfinite(distance) or distance <= 0:
        return None

    radius_m = distance * unit.meters
    deviation_m = None if max_deviation is None else max_deviation * unit.meters
    count = _vertex_count(radius_m, deviation_m)

    lon, lat = to_lon_lat(center, crs)
    azimuths = np.linspace(0.0, 360.0, count, endpoint=False)
    lons, lats, _ = _GEOD.fwd(
        np.full(count, lon),
        np.full(count, lat),
        azimuths,
        np.full(count, radius_m),
    )
    if crs not in (WGS84, WEB_MERCATOR):
        xs, ys = _transformer(WGS84, crs).transform(lons, lats)
        return Polygon(np.column_stack((xs, ys)))
    return _wrapped_buffer(lon, lat, np.asarray(lons), np.asarray(lats), radius_m, crs)


def _reaches(lon: float, lat: float, target_lat: float, radius_m: float) -> bool:
    _, _, dist = _GEOD.inv(lon, lat, lon, target_lat)
    return dist <= radius_m


def _unwrap_about(lons: np.ndarray, reference: float) -> np.ndarray:
    """Shift each longitude by whole turns to within 180° of ``reference``."""
    return reference + (lons - reference + 180.0) % 360.0 - 180.0


def _world_coords(lams: np.ndarray, lats: np.ndarray, crs: str) -> tuple[np.ndarray, np.ndarray]:
    """Project possibly unwrapped longitudes without folding them back."""
    lats = np.clip(lats, -MAX_POLE_LATITUDE, MAX_POLE_LATITUDE)
    if crs == WGS84:
        return lams, lats
    # Web Mercator x is linear in longitude.
    _, ys = _transformer(WGS84, crs).transform(np.zeros_like(lats), lats)
    return MERCATOR_RADIUS * np.radians(lams), np.asarray(ys)


def world_bounds(crs: str) -> tuple[float, float, float, float]:
    """The whole map in ``crs``: ±180° by ±90°, or the square Mercator world."""
    if crs == WGS84:
        return -180.0, -90.0, 180.0, 90.0
    return -MERCATOR_HALF_WORLD, -MERCATOR_HALF_WORLD, MERCATOR_HALF_WORLD, MERCATOR_HALF_WORLD


def _wrapped_buffer(
    lon: float, lat: float, lons: np.ndarray, lats: np.ndarray, radius_m: float, crs: str
) -> BaseGeometry:
    xmin, ymin, xmax, ymax = world_bounds(crs)
    period = xmax - xmin
    # Closing ordinate for rings around a pole, beyond every clipped vertex.
    cap = 2.0 * ymax if crs == WGS84 else 3.0 * ymax

    north = _reaches(lon, lat, 90.0, radius_m)
    south = _reaches(lon, lat, -90.0, radius_m)
    if north and south:
        # Past both poles the ring circles the antipode; the buffer is
        # everything outside it.
        lams = _unwrap_about(lons, lon + 180.0)
        hole = Polygon(np.column_stack(_world_coords(lams, lats, crs)))
        shape = box(xmin - period, -cap, xmax + period, cap).difference(
            shapely.union_all([affinity.translate(hole, xoff=k * period) for k in (-1, 0, 1)])
        )
    elif north or south:
        lams = np.degrees(np.unwrap(np.radians(lons)))
        # Clockwise azimuths run west around the north pole, east around the south.
        turns = -1 if north else 1
        xs, ys = _world_coords(np.append(lams, lams[0] + 360.0 * turns), np.append(lats, lats[0]), crs)
        pole_y = cap if north else -cap
        ring = np.vstack((np.column_stack((xs, ys)), [(xs[-1], pole_y), (xs[0], pole_y)]))
        shape = Polygon(ring)
    else:
        lams = _unwrap_about(lons, lon)
        shape = Polygon(np.column_stack(_world_coords(lams, lats, crs)))

    if not shape.is_valid:
        shape = shapely.make_valid(shape)
    world = box(xmin, ymin, xmax, ymax)
    if world.contains(shape):
        return shape
    pieces = [affinity.translate(shape, xoff=k * period).intersection(world) for k in (-1, 0, 1)]
    return shapely.union_all(pieces)


def contains(polygon: Optional[BaseGeometry], point: Point) -> bool:
    """Boundary-inclusive containment; a missing polygon contains nothing."""
    if polygon is None or polygon.is_empty:
        return False
    return bool(polygon.covers(point))


def contains_xy(polygon: Optional[BaseGeometry], x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Vectorised :func:`contains` over coordinate arrays."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if polygon is None or polygon.is_empty or x.size == 0:
        return np.zeros(x.shape, dtype=bool)
    shapely.prepare(polygon)
    points = shapely.points(np.column_stack((x.ravel(), y.ravel())))
    return np.asarray(shapely.covers(polygon, points), dtype=bool).reshape(x.shape)


################################################################################
# Coordinate notation
################################################################################

def _hemisphere(value: float, positive: str, negative: str) -> str:
    return positive if value >= 0 else negative


def _split_degrees(value: float, parts: int, decimals: int) -> tuple:
    """Split ``abs(value)`` into degrees[, minutes[, seconds]] rounded once.

    Rounding happens on the smallest unit so 59.96" never renders as 60.0".
    """
    scale = 60 ** (parts - 1)
    total = round(abs(value) * scale, decimals)
    if parts == 2:
        degrees, minutes = divmod(total, 60)
        return int(degrees), minutes
    degrees, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return int(degrees), int(minutes), seconds


def _fraction_field(value: float, int_digits: int, decimals: int) -> str:
    width = int_digits + (decimals + 1 if decimals > 0 else 0)
    return f"{value:0{width}.{decimals}f}"


def _format_decimal_degrees(lon: float, lat: float, decimals: int) -> str:
    lat_text = _fraction_field(round(abs(lat), decimals), 2, decimals)
    lon_text = _fraction_field(round(abs(lon), decimals), 3, decimals)
    return f"{lat_text}{_hemisphere(lat, 'N', 'S')} {lon_text}{_hemisphere(lon, 'E', 'W')}"


def _format_ddm(lon: float, lat: float, decimals: int) -> str:
    lat_d, lat_m = _split_degrees(lat, 2, decimals)
    lon_d, lon_m = _split_degrees(lon, 2, decimals)
    return (
        f"{lat_d:02d} {_fraction_field(lat_m, 2, decimals)}{_hemisphere(lat, 'N', 'S')} "
        f"{lon_d:03d} {_fraction_field(lon_m, 2, decimals)}{_hemisphere(lon, 'E', 'W')}"
    )


def _format_dms(lon: float, lat: float, decimals: int) -> str:
    lat_d, lat_m, lat_s = _split_degrees(lat, 3, decimals)
    lon_d, lon_m, lon_s = _split_degrees(lon, 3, decimals)
    return (
        f"{lat_d:02d} {lat_m:02d} {_fraction_field(lat_s, 2, decimals)}{_hemisphere(lat, 'N', 'S')} "
        f"{lon_d:03d} {lon_m:02d} {_fraction_field(lon_s, 2, decimals)}{_hemisphere(lon, 'E', 'W')}"
    )


def utm_zone(lon: float, lat: float) -> int:
    """UTM zone number, including the Norway and Svalbard exceptions."""
    if 56.0 <= lat < 64.0 and 3.0 <= lon < 12.0:
        return 32
    if 72.0 <= lat <= 84.0 and 0.0 <= lon < 42.0:
        if lon < 9.0:
            return 31
        if lon < 21.0:
            return 33
        if lon < 33.0:
            return 35
        return 37
    zone = int((lon + 180.0) // 6.0) + 1
    return min(max(zone, 1), 60)


def utm_band(lat: float) -> str:
    if not -80.0 <= lat <= 84.0:
        raise CoordinateFormatError(f"Latitude {lat:.4f} is outside UTM coverage")
    return _UTM_BANDS[int((lat + 80.0) // 8.0)]


def _utm_easting_northing(lon: float, lat: float, zone: int) -> tuple[float, float]:
    epsg = (32600 if lat >= 0 else 32700) + zone
    easting, northing = _transformer(WGS84, f"EPSG:{epsg}").transform(lon, lat)
    return float(easting), float(northing)


def _format_utm(lon: float, lat: float, add_spaces: bool) -> str:
    band = utm_band(lat)
    zone = utm_zone(lon, lat)
    easting, northing = _utm_easting_northing(lon, lat, zone)
    parts = [f"{zone}{band}", f"{int(round(easting))}", f"{int(round(northing))}"]
    return " ".join(parts) if add_spaces else "".join(parts)


def _format_mgrs(lon: float, lat: float, precision: int, add_spaces: bool) -> str:
    if not 0 <= precision <= 5:
        raise CoordinateFormatError(f"MGRS precision must be 0..5, got {precision}")
    band = utm_band(lat)
    zone = utm_zone(lon, lat)
    easting, northing = _utm_easting_northing(lon, lat, zone)

    column_set = _MGRS_COLUMN_SETS[(zone - 1) % 3]
    column = column_set[int(easting // 100000) - 1]
    row_offset = 5 if zone % 2 == 0 else 0
    row = _MGRS_ROWS[(int(northing // 100000) + row_offset) % len(_MGRS_ROWS)]

    divisor = 10 ** (5 - precision)
    east = int(easting % 100000) // divisor
    north = int(northing % 100000) // divisor
    digits = [f"{east:0{precision}d}", f"{north:0{precision}d}"] if precision else []

    parts = [f"{zone}{band}", f"{column}{row}", *digits]
    return " ".join(parts) if add_spaces else "".join(parts)


def format_coordinate(
    point: Point,
    fmt: CoordinateFormat,
    *,
    crs: str = WEB_MERCATOR,
    decimal_places: Optional[int] = None,
    precision: int = 4,
    add_spaces: bool = True,
) -> str:
    """
    Render ``point`` in one of the supported notations.

    ``decimal_places`` applies to the angular formats (defaults: 4 for
    decimal degrees and minutes, 1 for DMS). ``precision`` is the number of
    MGRS digits per axis. ``add_spaces`` applies to UTM and MGRS.

    Raises:
        CoordinateFormatError: UTM/MGRS requested outside -80..84 latitude.
    """
    lon, lat = to_lon_lat(point, crs)
    if fmt is CoordinateFormat.DECIMAL_DEGREES:
        return _format_decimal_degrees(lon, lat, 4 if decimal_places is None else decimal_places)
    if fmt is CoordinateFormat.DEGREES_DECIMAL_MINUTES:
        return _format_ddm(lon, lat, 4 if decimal_places is None else decimal_places)
    if fmt is CoordinateFormat.DEGREES_MINUTES_SECONDS:
        return _format_dms(lon, lat, 1 if decimal_places is None else decimal_places)
    if fmt is CoordinateFormat.UTM:
        return _format_utm(lon, lat, add_spaces)
    if fmt is CoordinateFormat.MGRS:
        return _format_mgrs(lon, lat, precision, add_spaces)
    raise ValueError(f"Unknown coordinate format: {fmt!r}")
