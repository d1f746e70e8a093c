"""
Domain service: Farm area from boundary polygons.
"""
from dataclasses import dataclass
from typing import Optional
import logging
import numpy as np

from farmproof.domain.models import Polygon
from farmproof.config import settings

logger = logging.getLogger(__name__)

SQ_METERS_PER_HECTARE = 10_000.0


@dataclass
class AreaConfig:
    """Configuration for spherical area computation."""

    earth_radius_meters: float = 6371000.0


class AreaCalculator:
    """
    Computes polygon areas on a spherical Earth.

    Uses the spherical excess approximation
    ``R^2 / 2 * |sum (lng[i+1] - lng[i]) * (2 + sin(lat[i]) + sin(lat[i+1]))|``
    with angles in radians.
    """

    def __init__(self, config: Optional[AreaConfig] = None):
        self.config = config or AreaConfig(earth_radius_meters=settings.earth_radius_meters)

    def area(self, polygon: Polygon) -> float:
        """
        Area of a single polygon.

        Args:
            polygon: Ring of GeoPoints (closed or open)

        Returns:
            Area in hectares; 0 for fewer than 3 points
        """
        if not polygon or len(polygon) < 3:
            return 0.0

        ring = list(polygon)
        if ring[0] != ring[-1]:
            ring.append(ring[0])

        lats = np.radians([p.lat for p in ring])
        lngs = np.radians([p.lng for p in ring])

        terms = np.diff(lngs) * (2 + np.sin(lats[:-1]) + np.sin(lats[1:]))
        radius = self.config.earth_radius_meters
        area_m2 = abs(float(np.sum(terms)) * radius * radius / 2)

        return area_m2 / SQ_METERS_PER_HECTARE

    def total_area(self, polygons: list[Polygon]) -> float:
        """
        Sum of polygon areas. Overlapping parcels are counted twice.

        Args:
            polygons: Farm boundary polygons

        Returns:
            Total area in hectares
        """
        total = sum(self.area(polygon) for polygon in (polygons or []))
        logger.debug(f"Total area of {len(polygons or [])} polygons: {total:.4f} ha")
        return total
