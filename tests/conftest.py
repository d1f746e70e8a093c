"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample farm geometry (a ~1.24 ha square on the equator)
- Sample trees and process steps
- Mock storage client
- FastAPI test client
"""
import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from farmproof.main import app
from farmproof.domain.models import Farm, GeoPoint, ProcessStep, StepType, Tree
from farmproof.infrastructure.storage_client import StorageClient


BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ============================================================
# Sample Geometry Fixtures
# ============================================================

@pytest.fixture
def square_boundary() -> list[GeoPoint]:
    """Closed 0.001 x 0.001 degree square with a corner at (0, 0)."""
    return [
        GeoPoint(lat=0.0, lng=0.0),
        GeoPoint(lat=0.001, lng=0.0),
        GeoPoint(lat=0.001, lng=0.001),
        GeoPoint(lat=0.0, lng=0.001),
        GeoPoint(lat=0.0, lng=0.0),
    ]


@pytest.fixture
def square_geojson() -> dict:
    """The same square as a stored GeoJSON polygon."""
    return {
        "type": "Polygon",
        "coordinates": [[[0, 0], [0, 0.001], [0.001, 0.001], [0.001, 0], [0, 0]]],
    }


# ============================================================
# Sample Farm Fixtures
# ============================================================

@pytest.fixture
def sample_trees() -> list[Tree]:
    """Two trees inside the square, one with a number and one without."""
    return [
        Tree(
            id="tree-aaaa-0001",
            farm_id="farm-1",
            location=GeoPoint(lat=0.0005, lng=0.0005),
            tree_number="T-01",
        ),
        Tree(
            id="tree-bbbb-0002",
            farm_id="farm-1",
            location=GeoPoint(lat=0.0002, lng=0.0007),
        ),
    ]


@pytest.fixture
def sample_farm(square_boundary, sample_trees) -> Farm:
    return Farm(
        id="farm-1",
        farmer_id="farmer-1",
        name="Finca Esperanza",
        boundaries=[square_boundary],
        trees=sample_trees,
    )


@pytest.fixture
def make_step() -> Callable[..., ProcessStep]:
    """Factory for process steps; completed, with a photo, unless told otherwise."""
    counter = {"n": 0}

    def _make(
        step_type: StepType,
        step_number: Optional[int] = None,
        tree_id: Optional[str] = None,
        batch_id: str = "batch-1234567890",
        completed: bool = True,
        photo: bool = True,
        created_offset_days: int = 0,
    ) -> ProcessStep:
        counter["n"] += 1
        n = counter["n"]
        created_at = BASE_TIME + timedelta(days=created_offset_days)
        return ProcessStep(
            id=f"step-{n}",
            farm_id="farm-1",
            batch_id=batch_id,
            step_type=step_type,
            step_number=step_number,
            tree_id=tree_id,
            photo_id=f"photo-{n}" if photo else None,
            completed_at=created_at if completed else None,
            created_at=created_at,
        )

    return _make


@pytest.fixture
def ready_batch_steps(make_step) -> list[ProcessStep]:
    """Steps satisfying every readiness condition for sample_farm."""
    return [
        make_step(StepType.MONTHLY_UPDATE, 1, tree_id="tree-aaaa-0001"),
        make_step(StepType.MONTHLY_UPDATE, 1, tree_id="tree-bbbb-0002", created_offset_days=1),
        make_step(StepType.DRYING, created_offset_days=30),
        make_step(StepType.FINAL_BAG, created_offset_days=60),
    ]


# ============================================================
# Mock Storage Client Fixtures
# ============================================================

@pytest.fixture
def mock_storage_client(sample_farm, sample_trees, ready_batch_steps):
    """Create a mock storage client."""
    mock_client = AsyncMock(spec=StorageClient)
    mock_client.get_farm.return_value = sample_farm
    mock_client.get_trees_by_farm.return_value = sample_trees
    mock_client.get_tree.return_value = sample_trees[0]
    mock_client.get_process_steps.return_value = ready_batch_steps
    mock_client.get_photos.return_value = []
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
