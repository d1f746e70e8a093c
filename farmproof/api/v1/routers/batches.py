"""
API router for batch progress and certification endpoints.
"""
from fastapi import APIRouter, Path, Query, Request
from typing import Annotated, Optional

from farmproof.api.dependencies import BatchServiceDep
from farmproof.api.errors import storage_error_to_http
from farmproof.api.rate_limit import DEFAULT_LIMIT, limiter
from farmproof.api.v1.models.responses import (
    BatchListResponse,
    BatchSummary,
    CertificateWindowResponse,
    MonthlyStatusResponse,
    ReadinessResponse,
)
from farmproof.domain.models import CertificatePreview, ProcessStatus
from farmproof.infrastructure.storage_client import StorageAPIError


router = APIRouter(
    prefix="/farms/{farm_id}",
    tags=["batches"],
)

FarmId = Annotated[str, Path(description="Unique identifier for the farm")]
BatchId = Annotated[str, Path(description="Unique identifier for the batch")]

COMMON_RESPONSES = {
    404: {"description": "Farm not found"},
    429: {"description": "Rate limit exceeded"},
    500: {"description": "Internal server error or storage failure"},
}


@router.get(
    "/batches",
    response_model=BatchListResponse,
    summary="List production batches",
    description="""
    Group the farm's process steps into batches. Batches are ordered most
    recent first; steps within a batch are ordered monthly updates, drying,
    final bag, completed, then by month number.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def list_batches(
    request: Request,
    farm_id: FarmId,
    batch_service: BatchServiceDep,
) -> BatchListResponse:
    try:
        batches = await batch_service.list_batches(farm_id)
    except StorageAPIError as e:
        raise storage_error_to_http(e, f"Farm with ID '{farm_id}'")

    return BatchListResponse(
        farm_id=farm_id,
        batches=[BatchSummary.from_batch(batch) for batch in batches],
    )


@router.get(
    "/monthly-status",
    response_model=MonthlyStatusResponse,
    summary="Per-tree monthly photo coverage",
    description="""
    For every tree of the farm, list the production months with a completed
    monthly update and the months still missing. Optionally scoped to a batch.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def get_monthly_status(
    request: Request,
    farm_id: FarmId,
    batch_service: BatchServiceDep,
    batch_id: Annotated[Optional[str], Query(description="Restrict to one batch")] = None,
) -> MonthlyStatusResponse:
    try:
        trees = await batch_service.tree_monthly_status(farm_id, batch_id)
    except StorageAPIError as e:
        raise storage_error_to_http(e, f"Farm with ID '{farm_id}'")

    return MonthlyStatusResponse(farm_id=farm_id, batch_id=batch_id, trees=trees)


@router.get(
    "/batches/{batch_id}/status",
    response_model=ProcessStatus,
    summary="Advisory process status of a batch",
    description="""
    Report the batch's current step and completed evidence. The current step
    is advisory: monthly updates, drying and final bag photos can always be
    added.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def get_process_status(
    request: Request,
    farm_id: FarmId,
    batch_id: BatchId,
    batch_service: BatchServiceDep,
) -> ProcessStatus:
    try:
        return await batch_service.process_status(farm_id, batch_id)
    except StorageAPIError as e:
        raise storage_error_to_http(e, f"Farm with ID '{farm_id}'")


@router.get(
    "/batches/{batch_id}/readiness",
    response_model=ReadinessResponse,
    summary="Certificate readiness of a batch",
    description="""
    Decide whether the batch has enough evidence for certificate issuance:
    at least one tree, a monthly photo for every tree, a drying photo and a
    final bag photo. The reason names the first unmet condition.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def get_readiness(
    request: Request,
    farm_id: FarmId,
    batch_id: BatchId,
    batch_service: BatchServiceDep,
) -> ReadinessResponse:
    try:
        result = await batch_service.readiness(farm_id, batch_id)
    except StorageAPIError as e:
        raise storage_error_to_http(e, f"Farm with ID '{farm_id}'")

    return ReadinessResponse(
        farm_id=farm_id,
        batch_id=batch_id,
        ready=result.ready,
        reason=result.reason,
    )


@router.get(
    "/batches/{batch_id}/certificate-window",
    response_model=CertificateWindowResponse,
    summary="Work period of a batch",
    description="""
    First and last capture dates of the batch's photos. `available` is false
    when no photo has a usable timestamp, which means there is not enough
    data to certify.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def get_certificate_window(
    request: Request,
    farm_id: FarmId,
    batch_id: BatchId,
    batch_service: BatchServiceDep,
) -> CertificateWindowResponse:
    try:
        window = await batch_service.certificate_window(farm_id, batch_id)
    except StorageAPIError as e:
        raise storage_error_to_http(e, f"Farm with ID '{farm_id}'")

    return CertificateWindowResponse(
        farm_id=farm_id,
        batch_id=batch_id,
        available=window is not None,
        window=window,
    )


@router.get(
    "/batches/{batch_id}/certificate-preview",
    response_model=CertificatePreview,
    summary="Preview certificate metadata for a batch",
    description="""
    Run the readiness gate and, when it passes, derive the work window and
    the descriptive metadata the certificate would carry. Nothing is minted.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def get_certificate_preview(
    request: Request,
    farm_id: FarmId,
    batch_id: BatchId,
    batch_service: BatchServiceDep,
) -> CertificatePreview:
    try:
        return await batch_service.certificate_preview(farm_id, batch_id)
    except StorageAPIError as e:
        raise storage_error_to_http(e, f"Farm with ID '{farm_id}'")
