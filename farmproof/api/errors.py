"""
Translation of service-layer errors into HTTP errors.
"""
from fastapi import HTTPException

from farmproof.infrastructure.storage_client import StorageAPIError


def storage_error_to_http(error: StorageAPIError, resource: str) -> HTTPException:
    """
    Map a storage failure to the HTTP error the client should see.

    Args:
        error: Error raised by the storage client
        resource: Human-readable name of what was being fetched

    Returns:
        HTTPException to raise
    """
    error_msg = str(error)
    if error.status_code == 404 or "not found" in error_msg.lower():
        return HTTPException(
            status_code=404,
            detail=f"{resource} not found"
        )
    return HTTPException(
        status_code=500,
        detail=f"Failed to fetch farm records: {error_msg}"
    )
