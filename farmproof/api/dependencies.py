"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from farmproof.infrastructure.storage_client import (
    StorageClient,
    get_storage_client,
)
from farmproof.services.application.batch_service import BatchService
from farmproof.services.application.farm_service import FarmService
from farmproof.services.domain.area_calculator import AreaCalculator
from farmproof.services.domain.certificate_metadata import CertificateMetadataBuilder
from farmproof.services.domain.certificate_window import CertificateWindowDeriver
from farmproof.services.domain.geofence_validator import GeofenceValidator
from farmproof.services.domain.monthly_completion_tracker import MonthlyCompletionTracker
from farmproof.services.domain.process_step_aggregator import ProcessStepAggregator
from farmproof.services.domain.readiness_evaluator import ReadinessEvaluator


def get_geofence_validator() -> GeofenceValidator:
    """
    Dependency factory for GeofenceValidator.

    Returns:
        GeofenceValidator instance using the configured buffer
    """
    return GeofenceValidator()


def get_area_calculator() -> AreaCalculator:
    return AreaCalculator()


def get_farm_service(
    storage_client: Annotated[StorageClient, Depends(get_storage_client)],
    geofence_validator: Annotated[GeofenceValidator, Depends(get_geofence_validator)],
    area_calculator: Annotated[AreaCalculator, Depends(get_area_calculator)],
) -> FarmService:
    """
    Dependency factory for FarmService.

    Args:
        storage_client: Storage API client (injected)
        geofence_validator: Geofence validator (injected)
        area_calculator: Area calculator (injected)

    Returns:
        FarmService instance
    """
    return FarmService(
        storage_client=storage_client,
        geofence_validator=geofence_validator,
        area_calculator=area_calculator,
    )


def get_batch_service(
    storage_client: Annotated[StorageClient, Depends(get_storage_client)],
) -> BatchService:
    """
    Dependency factory for BatchService.

    Args:
        storage_client: Storage API client (injected)

    Returns:
        BatchService instance
    """
    return BatchService(
        storage_client=storage_client,
        aggregator=ProcessStepAggregator(),
        tracker=MonthlyCompletionTracker(),
        evaluator=ReadinessEvaluator(),
        window_deriver=CertificateWindowDeriver(),
        metadata_builder=CertificateMetadataBuilder(),
    )


# Type aliases for cleaner route signatures
FarmServiceDep = Annotated[FarmService, Depends(get_farm_service)]
BatchServiceDep = Annotated[BatchService, Depends(get_batch_service)]
