"""
API router for farm geometry endpoints.
"""
from fastapi import APIRouter, HTTPException, Path, Request
from typing import Annotated

from farmproof.api.dependencies import FarmServiceDep
from farmproof.api.errors import storage_error_to_http
from farmproof.api.rate_limit import DEFAULT_LIMIT, limiter
from farmproof.api.v1.models.requests import AreaRequest, LocationRequest
from farmproof.api.v1.models.responses import AreaResponse
from farmproof.domain.models import GeofenceResult
from farmproof.infrastructure.storage_client import StorageAPIError
from farmproof.utils.coordinates import MalformedLocation, parse_ring


router = APIRouter(
    prefix="/farms",
    tags=["farms"],
)


@router.post(
    "/area",
    response_model=AreaResponse,
    summary="Compute farm area",
    description="""
    Compute the area of submitted farm boundaries in hectares.

    Each polygon is measured with a spherical-excess approximation and the
    farm total is the plain sum of its parcels. Polygons with fewer than
    three points measure 0 so drawing previews never fail.
    """,
    responses={
        400: {"description": "A boundary vertex could not be parsed"},
        429: {"description": "Rate limit exceeded"},
    }
)
@limiter.limit(DEFAULT_LIMIT)
async def compute_area(
    request: Request,
    body: AreaRequest,
    farm_service: FarmServiceDep,
) -> AreaResponse:
    """
    Compute total and per-polygon farm area.

    Args:
        request: Incoming request (used by the rate limiter)
        body: Boundaries to measure
        farm_service: Farm service (injected dependency)

    Returns:
        AreaResponse
    """
    try:
        boundaries = [parse_ring(ring) for ring in body.boundaries]
    except MalformedLocation as e:
        raise HTTPException(status_code=400, detail=str(e))

    total, per_polygon = farm_service.total_area(boundaries)
    return AreaResponse(total_hectares=total, polygon_hectares=per_polygon)


@router.post(
    "/{farm_id}/geofence",
    response_model=GeofenceResult,
    summary="Validate a capture location against a farm",
    description="""
    Check whether a location lies inside any of the farm's boundary polygons
    grown by the configured buffer (20 m by default).

    A rejection is a normal 200 response with `valid=false`. Outside points
    carry `distance_meters` to the nearest boundary edge; farms without
    boundaries report `failure="no_boundaries"`.
    """,
    responses={
        400: {"description": "Location could not be parsed"},
        404: {"description": "Farm not found"},
        429: {"description": "Rate limit exceeded"},
        500: {"description": "Internal server error or storage failure"},
    }
)
@limiter.limit(DEFAULT_LIMIT)
async def validate_farm_location(
    request: Request,
    farm_id: Annotated[str, Path(description="Unique identifier for the farm")],
    body: LocationRequest,
    farm_service: FarmServiceDep,
) -> GeofenceResult:
    """
    Validate a capture location for a farm.

    Args:
        request: Incoming request (used by the rate limiter)
        farm_id: Unique identifier for the farm
        body: Location to check
        farm_service: Farm service (injected dependency)

    Returns:
        GeofenceResult

    Raises:
        HTTPException: If the location is malformed or the farm cannot be fetched
    """
    try:
        return await farm_service.validate_farm_location(farm_id, body.location)

    except MalformedLocation as e:
        raise HTTPException(status_code=400, detail=str(e))

    except StorageAPIError as e:
        raise storage_error_to_http(e, f"Farm with ID '{farm_id}'")
