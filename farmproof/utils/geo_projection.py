"""
Geospatial projection utilities for coordinate transformations.
"""
from typing import List, Tuple
from pyproj import Transformer

from farmproof.domain.models import GeoPoint, Polygon


def get_local_crs(center: GeoPoint) -> str:
    """
    Get an azimuthal equidistant CRS centered on a location.

    Distances measured from the center in this projection are geodesic
    distances on the WGS84 ellipsoid, which makes it the right frame for
    metre-based buffers and point-to-boundary distances around one point.

    Args:
        center: Projection center

    Returns:
        PROJ definition string
    """
    return (
        f"+proj=aeqd +lat_0={center.lat} +lon_0={center.lng} "
        f"+datum=WGS84 +units=m +no_defs"
    )


def get_local_transformer(center: GeoPoint) -> Transformer:
    """
    Create a transformer from WGS84 to the local metric frame around ``center``.

    Args:
        center: Projection center

    Returns:
        Transformer taking (lng, lat) to (x, y) in meters
    """
    return Transformer.from_crs(
        "EPSG:4326",               # WGS84 (lat/lon)
        get_local_crs(center),     # Local equidistant frame
        always_xy=True             # Ensure (lon, lat) -> (x, y) order
    )


def project_to_meters(
    points: List[GeoPoint],
    transformer: Transformer
) -> List[Tuple[float, float]]:
    """
    Project canonical points to the planar frame of ``transformer``.

    Args:
        points: Points in degrees
        transformer: Transformer from get_local_transformer

    Returns:
        List of (x, y) coordinates in meters
    """
    projected = []
    for point in points:
        x, y = transformer.transform(point.lng, point.lat)
        projected.append((float(x), float(y)))

    return projected


def project_polygon_to_meters(
    polygon: Polygon,
    transformer: Transformer
) -> List[Tuple[float, float]]:
    """
    Project a polygon ring to meters.

    Args:
        polygon: Ring of GeoPoints
        transformer: Transformer from get_local_transformer

    Returns:
        List of (x, y) coordinates in meters
    """
    return project_to_meters(polygon, transformer)
