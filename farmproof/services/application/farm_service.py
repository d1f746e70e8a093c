"""
Application service: Orchestration layer for farm geometry operations.
"""
from typing import Any, List, Tuple
import logging

from farmproof.domain.models import GeofenceResult, Polygon
from farmproof.infrastructure.storage_client import StorageClient
from farmproof.services.domain.area_calculator import AreaCalculator
from farmproof.services.domain.geofence_validator import GeofenceValidator
from farmproof.utils.coordinates import normalize

logger = logging.getLogger(__name__)


class FarmService:
    """
    Application service for farm boundary operations.

    Coordinates between the storage client and the geometry domain
    services; no business logic here.
    """

    def __init__(
        self,
        storage_client: StorageClient,
        geofence_validator: GeofenceValidator,
        area_calculator: AreaCalculator,
    ):
        """
        Initialize the service with dependencies.

        Args:
            storage_client: Storage API client for data fetching
            geofence_validator: Geofence validator for capture locations
            area_calculator: Area calculator for farm sizing
        """
        self.storage_client = storage_client
        self.geofence_validator = geofence_validator
        self.area_calculator = area_calculator

    def total_area(self, boundaries: List[Polygon]) -> Tuple[float, List[float]]:
        """
        Compute farm area from submitted boundaries.

        Args:
            boundaries: Farm boundary polygons

        Returns:
            Tuple of (total hectares, hectares per polygon)
        """
        per_polygon = [self.area_calculator.area(polygon) for polygon in boundaries]
        return self.area_calculator.total_area(boundaries), per_polygon

    async def validate_farm_location(self, farm_id: str, raw_location: Any) -> GeofenceResult:
        """
        Check a capture location against a farm's boundaries.

        Args:
            farm_id: Farm ID
            raw_location: Location in any recognized shape

        Returns:
            GeofenceResult

        Raises:
            MalformedLocation: If the location cannot be parsed
            StorageAPIError: If the farm cannot be fetched
        """
        point = normalize(raw_location)
        farm = await self.storage_client.get_farm(farm_id)
        return self.geofence_validator.validate(point, farm.boundaries)

    async def validate_photo_location(self, tree_id: str, raw_location: Any) -> GeofenceResult:
        """
        Check a photo location for a tree against the tree's farm.

        This is the precondition the upload flow runs before accepting a photo.

        Args:
            tree_id: Tree the photo documents
            raw_location: Location in any recognized shape

        Returns:
            GeofenceResult

        Raises:
            MalformedLocation: If the location cannot be parsed
            StorageAPIError: If the tree or farm cannot be fetched
        """
        point = normalize(raw_location)
        tree = await self.storage_client.get_tree(tree_id)
        farm = await self.storage_client.get_farm(tree.farm_id)

        result = self.geofence_validator.validate(point, farm.boundaries)
        if not result.valid:
            logger.info(f"Photo for tree {tree_id} rejected: {result.message}")
        return result
