"""
Domain service: Geofence validation for evidence capture locations.

A photo is accepted when its capture point falls inside any of the farm's
boundary polygons grown outward by a fixed buffer. Multi-parcel farms are a
union. Rejections are returned as data with the distance to the nearest
boundary edge so the caller can tell the user how far off they are.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from farmproof.domain.models import (
    GeoPoint,
    GeofenceFailure,
    GeofenceResult,
    Polygon,
)
from farmproof.utils.geo_projection import (
    get_local_transformer,
    project_polygon_to_meters,
    project_to_meters,
)
from farmproof.utils.spatial_helpers import (
    distance_to_boundary,
    point_in_polygon_with_buffer,
)
from farmproof.config import settings

logger = logging.getLogger(__name__)

NO_BOUNDARIES_MESSAGE = "No boundaries defined"


@dataclass
class GeofenceConfig:
    """Configuration for geofence validation."""

    buffer_meters: float = 20.0
    """Outward tolerance around each boundary polygon"""


class GeofenceValidator:
    """
    Domain service deciding whether a point lies within a farm's boundaries.

    Geometry is evaluated in an azimuthal equidistant frame centered on the
    point under test, so buffers and distances are in geodesic meters.
    """

    def __init__(
        self,
        config: Optional[GeofenceConfig] = None,
        buffer_meters: Optional[float] = None,
    ):
        """
        Initialize the validator.

        Args:
            config: Full configuration object (preferred)
            buffer_meters: Shortcut for overriding only the buffer
        """
        if config:
            self.config = config
        else:
            self.config = GeofenceConfig(
                buffer_meters=settings.geofence_buffer_meters if buffer_meters is None else buffer_meters
            )

    @property
    def buffer_meters(self) -> float:
        return self.config.buffer_meters

    def validate(
        self,
        point: GeoPoint,
        boundaries: list[Polygon],
        buffer_meters: Optional[float] = None,
    ) -> GeofenceResult:
        """
        Check a point against a set of boundary polygons.

        Args:
            point: Capture location
            boundaries: Farm boundary polygons
            buffer_meters: Per-call buffer override

        Returns:
            GeofenceResult; rejected results carry distance_meters
        """
        buffer = self.config.buffer_meters if buffer_meters is None else buffer_meters
        rings = [ring for ring in (boundaries or []) if ring]

        if not rings:
            logger.warning("Geofence check requested for a farm with no boundaries")
            return GeofenceResult(
                valid=False,
                failure=GeofenceFailure.NO_BOUNDARIES,
                message=NO_BOUNDARIES_MESSAGE,
            )

        transformer = get_local_transformer(point)
        origin = project_to_meters([point], transformer)[0]
        projected_rings = [project_polygon_to_meters(ring, transformer) for ring in rings]

        for index, ring in enumerate(projected_rings):
            if point_in_polygon_with_buffer(origin, ring, buffer):
                logger.debug(f"Point ({point.lat}, {point.lng}) inside boundary #{index} "
                             f"with {buffer}m buffer")
                return GeofenceResult(valid=True)

        # Distance is measured to the unbuffered edges
        distance = min(distance_to_boundary(origin, ring) for ring in projected_rings)
        logger.info(f"Point ({point.lat}, {point.lng}) rejected: {distance:.1f}m from "
                    f"nearest of {len(projected_rings)} boundaries")

        return GeofenceResult(
            valid=False,
            distance_meters=distance,
            failure=GeofenceFailure.OUTSIDE_BOUNDARY,
            message=(
                f"Photo location is outside farm boundaries. Distance to boundary: "
                f"{distance:.1f}m (maximum allowed: {buffer:g}m)"
            ),
        )
