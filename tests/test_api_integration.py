"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle with mocked service dependencies.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from farmproof.main import app
from farmproof.api.dependencies import get_batch_service, get_farm_service
from farmproof.domain.models import (
    CertificatePreview,
    CertificateWindow,
    GeofenceFailure,
    GeofenceResult,
    ReadinessResult,
)
from farmproof.infrastructure.storage_client import StorageAPIError
from farmproof.services.application.batch_service import BatchService
from farmproof.services.application.farm_service import FarmService
from farmproof.services.domain.area_calculator import AreaCalculator
from farmproof.services.domain.process_step_aggregator import ProcessStepAggregator
from farmproof.utils.coordinates import MalformedLocation


@pytest.fixture
def mock_farm_service():
    service = AsyncMock(spec=FarmService)
    # total_area is synchronous; delegate to the real calculator
    calculator = AreaCalculator()
    service.total_area = MagicMock(side_effect=lambda boundaries: (
        calculator.total_area(boundaries),
        [calculator.area(polygon) for polygon in boundaries],
    ))
    app.dependency_overrides[get_farm_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def mock_batch_service():
    service = AsyncMock(spec=BatchService)
    app.dependency_overrides[get_batch_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# ============================================================
# Farm Endpoint Tests
# ============================================================

class TestFarmEndpoints:
    """Tests for area and geofence endpoints."""

    def test_compute_area(self, test_client, mock_farm_service):
        response = test_client.post("/api/v1/farms/area", json={
            "boundaries": [[[0, 0], [0, 0.001], [0.001, 0.001], [0.001, 0], [0, 0]]],
        })

        assert response.status_code == 200
        data = response.json()
        assert 1.2 < data["total_hectares"] < 1.3
        assert len(data["polygon_hectares"]) == 1

    def test_compute_area_malformed_vertex(self, test_client, mock_farm_service):
        response = test_client.post("/api/v1/farms/area", json={"boundaries": [[[0, 0], "nowhere"]]})

        assert response.status_code == 400
        assert "Invalid location format" in response.json()["detail"]

    def test_geofence_valid(self, test_client, mock_farm_service):
        mock_farm_service.validate_farm_location.return_value = GeofenceResult(valid=True)

        response = test_client.post("/api/v1/farms/farm-1/geofence", json={"location": "(0.00015,0.0005)"})

        assert response.status_code == 200
        assert response.json()["valid"] is True
        mock_farm_service.validate_farm_location.assert_awaited_once_with("farm-1", "(0.00015,0.0005)")

    def test_geofence_rejection_is_not_an_error(self, test_client, mock_farm_service):
        mock_farm_service.validate_farm_location.return_value = GeofenceResult(
            valid=False,
            distance_meters=1400.2,
            failure=GeofenceFailure.OUTSIDE_BOUNDARY,
            message="Photo location is outside farm boundaries.",
        )

        response = test_client.post("/api/v1/farms/farm-1/geofence", json={"location": {"lat": 0.01, "lng": 0.01}})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["failure"] == "outside_boundary"
        assert data["distance_meters"] == pytest.approx(1400.2)

    def test_geofence_malformed_location(self, test_client, mock_farm_service):
        mock_farm_service.validate_farm_location.side_effect = MalformedLocation("nowhere")

        response = test_client.post("/api/v1/farms/farm-1/geofence", json={"location": "nowhere"})

        assert response.status_code == 400

    def test_geofence_farm_not_found(self, test_client, mock_farm_service):
        mock_farm_service.validate_farm_location.side_effect = StorageAPIError(
            "Farm missing not found", status_code=404
        )

        response = test_client.post("/api/v1/farms/missing/geofence", json={"location": "0,0"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Farm with ID 'missing' not found"

    def test_geofence_storage_failure(self, test_client, mock_farm_service):
        mock_farm_service.validate_farm_location.side_effect = StorageAPIError("Storage request error", 503)

        response = test_client.post("/api/v1/farms/farm-1/geofence", json={"location": "0,0"})

        assert response.status_code == 500

    def test_photo_location(self, test_client, mock_farm_service):
        mock_farm_service.validate_photo_location.return_value = GeofenceResult(
            valid=False, failure=GeofenceFailure.NO_BOUNDARIES, message="No boundaries defined",
        )

        response = test_client.post("/api/v1/trees/tree-1/photo-location", json={"location": "POINT(0 0)"})

        assert response.status_code == 200
        assert response.json()["failure"] == "no_boundaries"


# ============================================================
# Batch Endpoint Tests
# ============================================================

class TestBatchEndpoints:
    """Tests for batch progress and certification endpoints."""

    def test_list_batches(self, test_client, mock_batch_service, ready_batch_steps):
        mock_batch_service.list_batches.return_value = ProcessStepAggregator().group_by_batch(ready_batch_steps)

        response = test_client.get("/api/v1/farms/farm-1/batches")

        assert response.status_code == 200
        data = response.json()
        assert data["farm_id"] == "farm-1"
        assert data["batches"][0]["batch_number"] == "batch-12"
        assert data["batches"][0]["step_count"] == 4

    def test_monthly_status(self, test_client, mock_batch_service):
        mock_batch_service.tree_monthly_status.return_value = []

        response = test_client.get("/api/v1/farms/farm-1/monthly-status", params={"batch_id": "b1"})

        assert response.status_code == 200
        assert response.json()["batch_id"] == "b1"
        mock_batch_service.tree_monthly_status.assert_awaited_once_with("farm-1", "b1")

    def test_process_status(self, test_client, mock_batch_service, ready_batch_steps):
        mock_batch_service.process_status.return_value = ProcessStepAggregator().process_status(ready_batch_steps)

        response = test_client.get("/api/v1/farms/farm-1/batches/b1/status")

        assert response.status_code == 200
        assert response.json()["current_step"] == "final_bag"

    def test_readiness(self, test_client, mock_batch_service):
        mock_batch_service.readiness.return_value = ReadinessResult(
            ready=False, reason="Missing photo of the final bag",
        )

        response = test_client.get("/api/v1/farms/farm-1/batches/b1/readiness")

        assert response.status_code == 200
        data = response.json()
        assert data["ready"] is False
        assert data["reason"] == "Missing photo of the final bag"

    def test_certificate_window_unavailable(self, test_client, mock_batch_service):
        mock_batch_service.certificate_window.return_value = None

        response = test_client.get("/api/v1/farms/farm-1/batches/b1/certificate-window")

        assert response.status_code == 200
        assert response.json()["available"] is False

    def test_certificate_window(self, test_client, mock_batch_service):
        mock_batch_service.certificate_window.return_value = CertificateWindow(
            start="2024-01-01",
            end="2024-06-30",
            first_capture="2024-01-01T08:00:00Z",
            last_capture="2024-06-30T17:00:00Z",
        )

        response = test_client.get("/api/v1/farms/farm-1/batches/b1/certificate-window")

        data = response.json()
        assert data["available"] is True
        assert data["window"]["start"] == "2024-01-01"

    def test_certificate_preview(self, test_client, mock_batch_service):
        mock_batch_service.certificate_preview.return_value = CertificatePreview(
            readiness=ReadinessResult(ready=False, reason="Farm must have at least one tree"),
        )

        response = test_client.get("/api/v1/farms/farm-1/batches/b1/certificate-preview")

        assert response.status_code == 200
        assert response.json()["metadata"] is None

    def test_farm_not_found(self, test_client, mock_batch_service):
        mock_batch_service.readiness.side_effect = StorageAPIError("Farm x not found", status_code=404)

        response = test_client.get("/api/v1/farms/x/batches/b1/readiness")

        assert response.status_code == 404


# ============================================================
# Error Middleware Tests
# ============================================================

class TestErrorMiddleware:
    """Exceptions escaping the routers get consistent JSON bodies."""

    def test_malformed_location_is_bad_request(self, test_client, mock_batch_service):
        mock_batch_service.list_batches.side_effect = MalformedLocation("POINT(east north)")

        response = test_client.get("/api/v1/farms/farm-1/batches")

        assert response.status_code == 400
        assert response.json() == {
            "error": "Invalid location",
            "detail": "Invalid location format: 'POINT(east north)'",
        }

    def test_plain_value_error_is_internal(self, test_client, mock_batch_service):
        """A ValueError that is not about caller input must not read as a 400."""
        mock_batch_service.list_batches.side_effect = ValueError("Expecting value: line 1 column 1")

        response = test_client.get("/api/v1/farms/farm-1/batches")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "detail": "An unexpected error occurred",
        }

    def test_non_json_storage_body_is_server_error(self, test_client, mock_batch_service):
        mock_batch_service.list_batches.side_effect = StorageAPIError(
            "Storage returned a non-JSON body for /rest/v1/process_steps", status_code=502
        )

        response = test_client.get("/api/v1/farms/farm-1/batches")

        assert response.status_code == 500
        assert "non-JSON" in response.json()["detail"]

    def test_unexpected_error_is_internal(self, test_client, mock_batch_service):
        mock_batch_service.list_batches.side_effect = RuntimeError("boom")

        response = test_client.get("/api/v1/farms/farm-1/batches")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"


# ============================================================
# Response Format Tests
# ============================================================

class TestResponseFormats:
    """Tests for API response formats."""

    def test_openapi_schema_available(self, test_client):
        response = test_client.get("/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/api/v1/farms/area" in paths
        assert "/api/v1/farms/{farm_id}/geofence" in paths
        assert "/api/v1/trees/{tree_id}/photo-location" in paths
        assert "/api/v1/farms/{farm_id}/batches/{batch_id}/readiness" in paths

    def test_docs_endpoint_available(self, test_client):
        response = test_client.get("/docs")

        assert response.status_code == 200
        assert "swagger" in response.text.lower() or "html" in response.headers.get("content-type", "")

    def test_redoc_endpoint_available(self, test_client):
        assert test_client.get("/redoc").status_code == 200


# ============================================================
# CORS Tests
# ============================================================

class TestCORS:
    """Tests for CORS configuration."""

    def test_cors_headers_present(self, test_client):
        response = test_client.options(
            "/api/v1/farms/farm-1/batches",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "GET",
            }
        )

        assert response.status_code in [200, 405, 400]


# ============================================================
# Rate Limiting Tests
# ============================================================

class TestRateLimiting:
    """Tests for rate limiting functionality."""

    def test_rate_limit_documented_in_openapi(self, test_client):
        paths = test_client.get("/openapi.json").json()["paths"]

        assert "429" in paths["/api/v1/farms/{farm_id}/geofence"]["post"]["responses"]
        assert "429" in paths["/api/v1/farms/{farm_id}/batches/{batch_id}/readiness"]["get"]["responses"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
