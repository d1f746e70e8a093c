"""
Spatial analysis helper functions.

Provides utilities for:
- Ring closing and degeneracy checks
- Polygon containment with an outward buffer
- Point-to-boundary distances
"""
from typing import Optional
from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry
import logging

logger = logging.getLogger(__name__)


def close_ring(coordinates: list[tuple[float, float]]) -> list[tuple[float, float]]:
    """
    Return the ring with its first point repeated at the end if missing.

    Args:
        coordinates: List of (x, y) coordinate tuples

    Returns:
        Closed ring (empty input stays empty)
    """
    if not coordinates:
        return []
    ring = list(coordinates)
    if ring[0] != ring[-1]:
        ring.append(ring[0])
    return ring


def distinct_vertex_count(coordinates: list[tuple[float, float]]) -> int:
    """Count the distinct vertices of a ring."""
    return len(set(coordinates))


def build_polygon(coordinates: list[tuple[float, float]]) -> Optional[Polygon]:
    """
    Build a shapely polygon from a ring.

    Args:
        coordinates: List of (x, y) coordinates defining the ring

    Returns:
        Polygon, or None when the ring has fewer than 3 distinct points
    """
    if distinct_vertex_count(coordinates) < 3:
        return None

    polygon = Polygon(close_ring(coordinates))
    if not polygon.is_valid:
        # Zero-width buffer repairs self-intersecting rings
        logger.debug("Repairing invalid polygon ring with zero-width buffer")
        polygon = polygon.buffer(0)
    return polygon


def buffer_polygon(polygon: Polygon, buffer_distance: float) -> BaseGeometry:
    """
    Grow a polygon outward.

    Args:
        polygon: Polygon in a metric frame
        buffer_distance: Outward buffer distance in meters

    Returns:
        Buffered geometry (the polygon itself when buffer is 0)
    """
    if buffer_distance > 0:
        return polygon.buffer(buffer_distance)
    return polygon


def point_in_polygon_with_buffer(
    point: tuple[float, float],
    polygon_coords: list[tuple[float, float]],
    buffer_distance: float = 0.0
) -> bool:
    """
    Check if a point is inside a polygon grown by an outward buffer.

    Points on the buffered boundary count as inside.

    Args:
        point: (x, y) coordinate tuple
        polygon_coords: List of (x, y) coordinates defining the polygon
        buffer_distance: Outward buffer distance in meters

    Returns:
        True if point is inside buffered polygon, False otherwise
    """
    polygon = build_polygon(polygon_coords)
    if polygon is None:
        return False

    buffered = buffer_polygon(polygon, buffer_distance)
    if buffered.is_empty:
        return False
    return buffered.covers(Point(point))


def distance_to_boundary(
    point: tuple[float, float],
    polygon_coords: list[tuple[float, float]]
) -> float:
    """
    Calculate the minimum distance from a point to any edge of a ring.

    Args:
        point: (x, y) coordinate tuple
        polygon_coords: Ring coordinates (closed or open)

    Returns:
        Distance in the frame's units, or infinity for an empty ring
    """
    ring = close_ring(polygon_coords)
    if not ring:
        return float("inf")

    target = Point(point)
    if len(ring) == 1:
        return float(target.distance(Point(ring[0])))

    min_distance = float("inf")
    for start, end in zip(ring[:-1], ring[1:]):
        if start == end:
            edge_distance = target.distance(Point(start))
        else:
            edge_distance = target.distance(LineString([start, end]))
        min_distance = min(min_distance, float(edge_distance))

    return min_distance
