"""
Coordinate normalization for heterogeneous location representations.

Storage round-trips geographic points through several external formats
depending on driver and version. Everything that touches a location goes
through ``normalize`` so downstream geometry code only sees ``GeoPoint``.

Recognized shapes, tried in order (first match wins):
1. object with ``lat``/``lng``
2. object with ``latitude``/``longitude``
3. object with ``x``/``y`` (x is longitude, y is latitude)
4. PostGIS point string ``"(lng,lat)"``
5. WKT string ``"POINT(lng lat)"``
6. bare ``"lng,lat"`` string
"""
import logging
import math
import re
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from pydantic import ValidationError

from farmproof.domain.models import GeoPoint, Polygon

logger = logging.getLogger(__name__)

_POSTGIS_POINT = re.compile(r"\(([^,]+),([^)]+)\)")
_WKT_POINT = re.compile(r"POINT\s*\(\s*(\S+)\s+(\S+)\s*\)", re.IGNORECASE)


class MalformedLocation(ValueError):
    """Raised when a location value matches no recognized shape."""

    def __init__(self, raw: Any):
        self.raw = raw
        super().__init__(f"Invalid location format: {raw!r}")


class LocationShape(str, Enum):
    """Supported external location representations."""
    LAT_LNG = "lat_lng"
    LATITUDE_LONGITUDE = "latitude_longitude"
    XY = "xy"
    POSTGIS = "postgis"
    WKT = "wkt"
    LNG_LAT_STRING = "lng_lat_string"


# A matcher returns (lat, lng) or None when the shape does not apply
LocationMatcher = Callable[[Any], Optional[Tuple[float, float]]]


def _to_float(value: Any) -> float:
    """Lenient numeric coercion; anything unparsable becomes NaN."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return math.nan


def _field(raw: Any, key: str) -> Tuple[bool, Any]:
    if isinstance(raw, Mapping):
        return (key in raw, raw.get(key))
    if isinstance(raw, (str, bytes)):
        return (False, None)
    if hasattr(raw, key):
        return (True, getattr(raw, key))
    return (False, None)


def _finite_pair(lat: float, lng: float) -> Optional[Tuple[float, float]]:
    if math.isnan(lat) or math.isnan(lng):
        return None
    return (lat, lng)


def _keyed_matcher(lat_key: str, lng_key: str) -> LocationMatcher:
    def match(raw: Any) -> Optional[Tuple[float, float]]:
        has_lat, lat = _field(raw, lat_key)
        has_lng, lng = _field(raw, lng_key)
        if not (has_lat and has_lng):
            return None
        return _finite_pair(_to_float(lat), _to_float(lng))

    match.__name__ = f"match_{lat_key}_{lng_key}"
    return match


def _match_postgis_point(raw: Any) -> Optional[Tuple[float, float]]:
    if not isinstance(raw, str):
        return None
    found = _POSTGIS_POINT.search(raw)
    if not found:
        return None
    lng, lat = _to_float(found.group(1)), _to_float(found.group(2))
    return _finite_pair(lat, lng)


def _match_wkt_point(raw: Any) -> Optional[Tuple[float, float]]:
    if not isinstance(raw, str):
        return None
    found = _WKT_POINT.search(raw)
    if not found:
        return None
    lng, lat = _to_float(found.group(1)), _to_float(found.group(2))
    return _finite_pair(lat, lng)


def _match_lng_lat_string(raw: Any) -> Optional[Tuple[float, float]]:
    if not isinstance(raw, str):
        return None
    parts = raw.split(",")
    if len(parts) != 2:
        return None
    lng, lat = _to_float(parts[0]), _to_float(parts[1])
    return _finite_pair(lat, lng)


LOCATION_MATCHERS: Tuple[LocationMatcher, ...] = (
    _keyed_matcher("lat", "lng"),
    _keyed_matcher("latitude", "longitude"),
    # Historical point type: x is longitude, y is latitude
    _keyed_matcher("y", "x"),
    _match_postgis_point,
    _match_wkt_point,
    _match_lng_lat_string,
)


def normalize(raw: Any) -> GeoPoint:
    """
    Parse a location of unknown shape into a canonical GeoPoint.

    Args:
        raw: Location value as returned by storage or a client

    Returns:
        GeoPoint instance

    Raises:
        MalformedLocation: If no recognized shape yields a valid coordinate
    """
    for matcher in LOCATION_MATCHERS:
        coords = matcher(raw)
        if coords is None:
            continue
        try:
            return GeoPoint(lat=coords[0], lng=coords[1])
        except ValidationError:
            logger.debug(f"{matcher.__name__} matched out-of-range coordinates {coords}")
            continue

    raise MalformedLocation(raw)


def try_normalize(raw: Any) -> Optional[GeoPoint]:
    """Like ``normalize`` but returns None instead of raising."""
    try:
        return normalize(raw)
    except MalformedLocation:
        return None


def format_location(point: GeoPoint, shape: LocationShape) -> Any:
    """
    Render a GeoPoint in one of the supported external representations.

    Args:
        point: Canonical location
        shape: Target representation

    Returns:
        Dict or string in the requested shape
    """
    if shape == LocationShape.LAT_LNG:
        return {"lat": point.lat, "lng": point.lng}
    if shape == LocationShape.LATITUDE_LONGITUDE:
        return {"latitude": point.lat, "longitude": point.lng}
    if shape == LocationShape.XY:
        return {"x": point.lng, "y": point.lat}
    if shape == LocationShape.POSTGIS:
        return f"({point.lng!r},{point.lat!r})"
    if shape == LocationShape.WKT:
        return f"POINT({point.lng!r} {point.lat!r})"
    return f"{point.lng!r},{point.lat!r}"


def _normalize_vertex(vertex: Any) -> GeoPoint:
    # GeoJSON positions are [lng, lat] (x, y order)
    if isinstance(vertex, Sequence) and not isinstance(vertex, str):
        if len(vertex) < 2:
            raise MalformedLocation(vertex)
        return normalize({"x": vertex[0], "y": vertex[1]})
    return normalize(vertex)


def parse_ring(raw_ring: Any) -> Polygon:
    """
    Normalize every vertex of a ring.

    Args:
        raw_ring: Sequence of GeoJSON positions or any recognized location shapes

    Returns:
        List of GeoPoint

    Raises:
        MalformedLocation: If the ring or any vertex cannot be parsed
    """
    if not isinstance(raw_ring, Sequence) or isinstance(raw_ring, str):
        raise MalformedLocation(raw_ring)
    return [_normalize_vertex(vertex) for vertex in raw_ring]


def polygon_from_geojson(geometry: Any) -> Polygon:
    """
    Convert a GeoJSON Polygon geometry to a domain Polygon (outer ring only).

    Raises:
        MalformedLocation: If the geometry is not a usable polygon
    """
    if not isinstance(geometry, Mapping):
        raise MalformedLocation(geometry)
    rings = geometry.get("coordinates")
    if not isinstance(rings, Sequence) or not rings:
        raise MalformedLocation(geometry)
    return parse_ring(rings[0])
