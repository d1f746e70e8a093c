"""
API response models using Pydantic.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from farmproof.domain.models import (
    Batch,
    CertificateWindow,
    ProcessStep,
    TreeMonthlyStatus,
)


class AreaResponse(BaseModel):
    """Response model for the farm area endpoint."""
    total_hectares: float = Field(
        description="Sum of all polygon areas in hectares"
    )
    polygon_hectares: List[float] = Field(
        description="Area of each submitted polygon in hectares"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "total_hectares": 1.2364,
                "polygon_hectares": [1.2364],
            }
        }


class BatchSummary(BaseModel):
    """A batch with its ordered steps."""
    batch_id: str
    batch_number: str = Field(description="Short batch identifier")
    created_at: datetime
    step_count: int
    steps: List[ProcessStep]

    @classmethod
    def from_batch(cls, batch: Batch) -> "BatchSummary":
        return cls(
            batch_id=batch.batch_id,
            batch_number=batch.batch_number,
            created_at=batch.created_at,
            step_count=len(batch.steps),
            steps=batch.steps,
        )


class BatchListResponse(BaseModel):
    """Response model for the batch listing endpoint."""
    farm_id: str
    batches: List[BatchSummary] = Field(
        description="Batches ordered most recent first"
    )


class MonthlyStatusResponse(BaseModel):
    """Response model for the monthly completion endpoint."""
    farm_id: str
    batch_id: Optional[str] = None
    trees: List[TreeMonthlyStatus]


class ReadinessResponse(BaseModel):
    """Response model for the readiness endpoint."""
    farm_id: str
    batch_id: str
    ready: bool
    reason: Optional[str] = Field(
        default=None,
        description="First unmet condition, shown to the user verbatim"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "farm_id": "b1c7...",
                "batch_id": "9f2e...",
                "ready": False,
                "reason": "Missing photo of the drying system",
            }
        }


class CertificateWindowResponse(BaseModel):
    """Response model for the certificate window endpoint."""
    farm_id: str
    batch_id: str
    available: bool = Field(
        description="False when no photo has a usable timestamp"
    )
    window: Optional[CertificateWindow] = None
