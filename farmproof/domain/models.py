"""
Domain models for farms, trees, process steps and derived batch facts.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.).
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator


class StepType(str, Enum):
    """Kind of evidence recorded by a process step."""
    MONTHLY_UPDATE = "monthly_update"
    DRYING = "drying"
    FINAL_BAG = "final_bag"
    COMPLETED = "completed"


class TreeStatus(str, Enum):
    ACTIVE = "active"
    DORMANT = "dormant"
    REMOVED = "removed"


class GeoPoint(BaseModel):
    """Canonical coordinate in degrees."""
    lat: float = Field(ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(ge=-180, le=180, allow_inf_nan=False)

    class Config:
        frozen = True


# Closed ring of points; first and last point conceptually coincide
Polygon = List[GeoPoint]


class Tree(BaseModel):
    """Individual tree owned by a farm."""
    id: str
    farm_id: str
    location: GeoPoint
    tree_number: Optional[str] = None
    variety: Optional[str] = None
    planting_date: Optional[date] = None
    status: TreeStatus = TreeStatus.ACTIVE
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        return TreeStatus.ACTIVE if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _default_metadata(cls, value):
        return {} if value is None else value


class Farm(BaseModel):
    """Farm with its boundary parcels and trees."""
    id: str
    farmer_id: Optional[str] = None
    name: str = ""
    boundaries: List[Polygon] = Field(default_factory=list)
    area_hectares: Optional[float] = Field(
        default=None,
        description="Derived from boundaries, never authoritative"
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)
    trees: List[Tree] = Field(default_factory=list)

    @field_validator("boundaries", "trees", mode="before")
    @classmethod
    def _missing_collection_is_empty(cls, value):
        return [] if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _default_metadata(cls, value):
        return {} if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value):
        return "" if value is None else value


class ProcessStep(BaseModel):
    """One recorded unit of production evidence."""
    id: str
    farm_id: str
    batch_id: str
    step_type: StepType
    step_number: Optional[int] = Field(
        default=None,
        description="Month number (1-12) for monthly updates"
    )
    tree_id: Optional[str] = None
    photo_id: Optional[str] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def has_photo(self) -> bool:
        return self.photo_id is not None


class Photo(BaseModel):
    """Photo record as supplied by storage."""
    id: str
    tree_id: Optional[str] = None
    ipfs_cid: Optional[str] = None
    ipfs_gateway_url: Optional[str] = None
    photo_type: Optional[str] = None
    taken_at: Union[datetime, str, None] = Field(
        default=None,
        description="Capture timestamp; may be unparsable"
    )


class Batch(BaseModel):
    """Derived grouping of process steps sharing a batch id."""
    batch_id: str
    farm_id: str
    created_at: datetime
    steps: List[ProcessStep]

    @property
    def batch_number(self) -> str:
        return self.batch_id[:8]


class TreeMonthlyStatus(BaseModel):
    """Monthly photo coverage for one tree."""
    tree_id: str
    tree_number: Optional[str] = None
    completed_months: List[int] = Field(default_factory=list)
    missing_months: List[int] = Field(default_factory=list)


class ReadinessResult(BaseModel):
    """Outcome of the certificate readiness check."""
    ready: bool
    reason: Optional[str] = None


class GeofenceFailure(str, Enum):
    NO_BOUNDARIES = "no_boundaries"
    OUTSIDE_BOUNDARY = "outside_boundary"


class GeofenceResult(BaseModel):
    """Outcome of a geofence check. A rejection is data, not an error."""
    valid: bool
    distance_meters: Optional[float] = Field(
        default=None,
        description="Distance to the nearest boundary edge when rejected"
    )
    failure: Optional[GeofenceFailure] = None
    message: Optional[str] = None


class CertificateWindow(BaseModel):
    """Inclusive work period derived from batch photo timestamps."""
    start: date
    end: date
    first_capture: datetime
    last_capture: datetime


class AvailableActions(BaseModel):
    can_start_monthly: bool = True
    can_start_drying: bool = True
    can_start_final_bag: bool = True


class ProcessStatus(BaseModel):
    """Advisory view of where a batch stands in the production cycle."""
    current_step: StepType
    completed_steps: List[ProcessStep] = Field(default_factory=list)
    available_actions: AvailableActions = Field(default_factory=AvailableActions)
    monthly_steps: List[ProcessStep] = Field(default_factory=list)
    drying_steps: List[ProcessStep] = Field(default_factory=list)
    final_bag_steps: List[ProcessStep] = Field(default_factory=list)
    tree_monthly_status: List[TreeMonthlyStatus] = Field(default_factory=list)


class CertificateMetadata(BaseModel):
    """Descriptive fields handed to the certificate-issuance collaborator."""
    name: str
    description: str
    work_scope: List[str]
    impact_scope: List[str]
    rights: List[str]
    contributors: List[str] = Field(default_factory=list)
    work_timeframe_start: int = Field(description="Unix seconds")
    work_timeframe_end: int = Field(description="Unix seconds")
    impact_timeframe_start: int
    impact_timeframe_end: int = Field(
        default=0,
        description="0 means indefinite"
    )
    tree_count: int


class CertificatePreview(BaseModel):
    """Readiness, window and metadata of a batch, as issuance would see them."""
    readiness: ReadinessResult
    window: Optional[CertificateWindow] = None
    metadata: Optional[CertificateMetadata] = None
