"""
Storage API endpoint constants and configuration.

This module contains the storage collaborator's REST paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""


# Storage REST Endpoints
class StorageEndpoints:
    """Table paths on the PostgREST-style storage API."""

    # Base path
    REST_BASE = "/rest/v1"

    # Tables
    FARMS = f"{REST_BASE}/farms"
    TREES = f"{REST_BASE}/trees"
    PROCESS_STEPS = f"{REST_BASE}/farm_process_steps"
    TREE_PHOTOS = f"{REST_BASE}/tree_photos"

    @staticmethod
    def eq(value: str) -> str:
        """Equality filter value."""
        return f"eq.{value}"

    @staticmethod
    def in_list(values: list[str]) -> str:
        """Membership filter value."""
        return f"in.({','.join(values)})"

    @classmethod
    def farm_query(cls, farm_id: str) -> dict[str, str]:
        return {"id": cls.eq(farm_id), "select": "*"}

    @classmethod
    def trees_by_farm_query(cls, farm_id: str) -> dict[str, str]:
        return {
            "farm_id": cls.eq(farm_id),
            "select": "*",
            "order": "created_at.desc",
        }

    @classmethod
    def tree_query(cls, tree_id: str) -> dict[str, str]:
        return {"id": cls.eq(tree_id), "select": "*"}

    @classmethod
    def process_steps_query(cls, farm_id: str, batch_id: str = None) -> dict[str, str]:
        """
        Query for a farm's process steps, optionally scoped to a batch.

        Args:
            farm_id: Farm ID
            batch_id: Optional batch ID to filter by

        Returns:
            Query parameters
        """
        params = {
            "farm_id": cls.eq(farm_id),
            "select": "*",
            "order": "step_number.asc.nullslast,created_at.asc",
        }
        if batch_id:
            params["batch_id"] = cls.eq(batch_id)
        return params

    @classmethod
    def photos_query(cls, photo_ids: list[str]) -> dict[str, str]:
        return {
            "id": cls.in_list(photo_ids),
            "select": "*",
            "order": "taken_at.asc",
        }


# API Configuration Constants
class APIConstants:
    """General API configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"

    # Timeouts (in seconds)
    DEFAULT_TIMEOUT = 30.0
