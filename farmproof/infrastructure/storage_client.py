"""
Infrastructure layer: Storage API client with retry logic.

Reads farms, trees, process steps and photos from the PostgREST-style
storage collaborator. The core never writes.
"""
from typing import Any, Dict, List, Optional
import logging
import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from farmproof.config import settings
from farmproof.domain.models import Farm, Photo, Polygon, ProcessStep, Tree
from farmproof.infrastructure.api_constants import APIConstants, StorageEndpoints
from farmproof.utils.coordinates import MalformedLocation, normalize, polygon_from_geojson

logger = logging.getLogger(__name__)


class StorageAPIError(Exception):
    """Raised when the storage API cannot satisfy a request."""

    def __init__(self, message: str, status_code: int = 502):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class StorageClient:
    """
    Client for the farm records storage API.
    Implements retry logic with exponential backoff.
    """

    def __init__(self):
        """Initialize the API client with configuration."""
        self.base_url = settings.storage_api_base_url
        self.api_key = settings.storage_api_key
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "accept": APIConstants.CONTENT_TYPE_JSON,
            },
            timeout=APIConstants.DEFAULT_TIMEOUT,
        )

    async def __aenter__(self) -> "StorageClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        try:
            response = await self.client.request(method, endpoint, **kwargs)
            response.raise_for_status()
            try:
                return response.json()
            except ValueError:
                # Gateways in front of storage answer with HTML pages
                raise StorageAPIError(
                    f"Storage returned a non-JSON body for {endpoint}",
                    status_code=502,
                )
        except httpx.HTTPStatusError as e:
            # Retry on server errors (5xx)
            if e.response.status_code >= 500:
                raise
            # Don't retry on client errors (4xx)
            raise StorageAPIError(
                f"Storage request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON response

        Raises:
            StorageAPIError: If the request fails after retries
        """
        try:
            return await self._request_with_retry(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            raise StorageAPIError(
                f"Storage request failed: {e.response.status_code} - {e.response.text}",
                status_code=502,
            )
        except httpx.RequestError as e:
            raise StorageAPIError(f"Storage request error: {str(e)}", status_code=503)

    async def _select(self, endpoint: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        data = await self._make_request("GET", endpoint, params=params)
        if not isinstance(data, list):
            raise StorageAPIError(f"Unexpected response from {endpoint}", status_code=502)
        return data

    def parse_boundaries(self, raw_boundaries: Any) -> List[Polygon]:
        """
        Convert stored GeoJSON polygons to domain polygons.

        Malformed polygons are skipped.

        Args:
            raw_boundaries: List of GeoJSON Polygon objects

        Returns:
            List of polygons
        """
        polygons = []
        for index, geometry in enumerate(raw_boundaries or []):
            try:
                polygons.append(polygon_from_geojson(geometry))
            except MalformedLocation as e:
                logger.warning(f"Skipping malformed boundary polygon #{index}: {e}")
        return polygons

    def parse_tree(self, row: Dict[str, Any]) -> Optional[Tree]:
        """
        Build a Tree from a storage row, normalizing its location.

        Returns:
            Tree, or None if the row cannot be used
        """
        try:
            location = normalize(row.get("location"))
            return Tree(**{**row, "location": location})
        except (MalformedLocation, ValidationError) as e:
            logger.warning(f"Skipping tree {row.get('id')}: {e}")
            return None

    async def get_trees_by_farm(self, farm_id: str) -> List[Tree]:
        """
        Fetch the trees of a farm.

        Args:
            farm_id: Farm ID

        Returns:
            List of Tree instances (unparsable rows skipped)

        Raises:
            StorageAPIError: If the request fails
        """
        rows = await self._select(StorageEndpoints.TREES, StorageEndpoints.trees_by_farm_query(farm_id))
        trees = [tree for tree in (self.parse_tree(row) for row in rows) if tree is not None]
        logger.debug(f"Fetched {len(trees)}/{len(rows)} usable trees for farm {farm_id}")
        return trees

    async def get_tree(self, tree_id: str) -> Tree:
        """
        Fetch a single tree.

        Raises:
            StorageAPIError: If the tree is missing or unusable
        """
        rows = await self._select(StorageEndpoints.TREES, StorageEndpoints.tree_query(tree_id))
        if not rows:
            raise StorageAPIError(f"Tree {tree_id} not found", status_code=404)

        tree = self.parse_tree(rows[0])
        if tree is None:
            raise StorageAPIError(f"Tree {tree_id} has an invalid record", status_code=422)
        return tree

    async def get_farm(self, farm_id: str) -> Farm:
        """
        Fetch a farm with its boundaries and trees.

        Args:
            farm_id: Farm ID

        Returns:
            Farm instance

        Raises:
            StorageAPIError: If the request fails or the farm does not exist
        """
        rows = await self._select(StorageEndpoints.FARMS, StorageEndpoints.farm_query(farm_id))
        if not rows:
            raise StorageAPIError(f"Farm {farm_id} not found", status_code=404)

        row = rows[0]
        trees = await self.get_trees_by_farm(farm_id)

        try:
            return Farm(
                **{
                    **row,
                    "boundaries": self.parse_boundaries(row.get("boundaries")),
                    "trees": trees,
                }
            )
        except ValidationError as e:
            raise StorageAPIError(f"Farm {farm_id} has an invalid record: {e}", status_code=422)

    async def get_process_steps(
        self,
        farm_id: str,
        batch_id: Optional[str] = None,
    ) -> List[ProcessStep]:
        """
        Fetch process steps for a farm, optionally filtered by batch.

        Args:
            farm_id: Farm ID
            batch_id: Optional batch ID

        Returns:
            List of ProcessStep instances (invalid rows skipped)

        Raises:
            StorageAPIError: If the request fails
        """
        rows = await self._select(
            StorageEndpoints.PROCESS_STEPS,
            StorageEndpoints.process_steps_query(farm_id, batch_id),
        )

        steps = []
        for row in rows:
            try:
                steps.append(ProcessStep(**row))
            except ValidationError as e:
                logger.warning(f"Skipping process step {row.get('id')}: {e.error_count()} validation errors")
        return steps

    async def get_photos(self, photo_ids: List[str]) -> List[Photo]:
        """
        Fetch photos by id.

        Args:
            photo_ids: Photo IDs

        Returns:
            List of Photo instances ordered by capture time

        Raises:
            StorageAPIError: If the request fails
        """
        if not photo_ids:
            return []

        rows = await self._select(StorageEndpoints.TREE_PHOTOS, StorageEndpoints.photos_query(photo_ids))

        photos = []
        for row in rows:
            try:
                photos.append(Photo(**row))
            except ValidationError as e:
                logger.warning(f"Skipping photo {row.get('id')}: {e.error_count()} validation errors")
        return photos


# Singleton instance
_storage_client: Optional[StorageClient] = None


def get_storage_client() -> StorageClient:
    """
    Get or create the singleton storage client instance.

    Returns:
        StorageClient instance
    """
    global _storage_client
    if _storage_client is None:
        _storage_client = StorageClient()
    return _storage_client
