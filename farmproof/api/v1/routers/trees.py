"""
API router for tree photo endpoints.
"""
from fastapi import APIRouter, HTTPException, Path, Request
from typing import Annotated

from farmproof.api.dependencies import FarmServiceDep
from farmproof.api.errors import storage_error_to_http
from farmproof.api.rate_limit import DEFAULT_LIMIT, limiter
from farmproof.api.v1.models.requests import LocationRequest
from farmproof.domain.models import GeofenceResult
from farmproof.infrastructure.storage_client import StorageAPIError
from farmproof.utils.coordinates import MalformedLocation


router = APIRouter(
    prefix="/trees",
    tags=["trees"],
)


@router.post(
    "/{tree_id}/photo-location",
    response_model=GeofenceResult,
    summary="Validate a photo location for a tree",
    description="""
    Upload precondition: resolve the tree's farm and check that the photo
    was captured within the farm's boundaries plus buffer. The upload flow
    rejects the photo when `valid` is false and shows `message` to the user.
    """,
    responses={
        400: {"description": "Location could not be parsed"},
        404: {"description": "Tree or farm not found"},
        429: {"description": "Rate limit exceeded"},
    }
)
@limiter.limit(DEFAULT_LIMIT)
async def validate_photo_location(
    request: Request,
    tree_id: Annotated[str, Path(description="Tree the photo documents")],
    body: LocationRequest,
    farm_service: FarmServiceDep,
) -> GeofenceResult:
    try:
        return await farm_service.validate_photo_location(tree_id, body.location)

    except MalformedLocation as e:
        raise HTTPException(status_code=400, detail=str(e))

    except StorageAPIError as e:
        raise storage_error_to_http(e, f"Tree with ID '{tree_id}'")
