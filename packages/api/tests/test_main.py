"""Tests for API main module."""

import pytest
from fastapi.testclient import TestClient

from packages.core.errors import (
    AssetImportError,
    AssetNotFoundError,
    ClipNotFoundError,
    EncoderError,
    ExportError,
    ExportInProgressError,
    FrameCutError,
    OverlapError,
    ProjectLoadError,
    SplitRangeError,
    TrackNotFoundError,
)


class TestHealthEndpoint:
    """Tests for /api/health endpoint."""

    def test_health_check_returns_healthy(self):
        """Test that health check returns healthy status."""
        from packages.api.main import app

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_check_includes_all_services(self):
        """Test that health check lists the editor services."""
        from packages.api.main import API_VERSION, app

        client = TestClient(app, raise_server_exceptions=False)
        data = client.get("/api/health").json()

        assert data["version"] == API_VERSION
        assert data["services"] == {
            "api": "running",
            "timeline": "available",
            "compositor": "available",
            "export": "available",
        }


class TestRootEndpoint:
    """Tests for / root endpoint."""

    def test_root_returns_info(self):
        """Test that root endpoint points at the docs and health check."""
        from packages.api.main import app

        client = TestClient(app, raise_server_exceptions=False)
        data = client.get("/").json()

        assert "FrameCut" in data["message"]
        assert data["docs"] == "/docs"
        assert data["health"] == "/api/health"


class TestStatusFor:
    """Tests for the domain error to HTTP status mapping."""

    @pytest.mark.parametrize("error, status", [
        (ClipNotFoundError(3), 404),
        (TrackNotFoundError(9), 404),
        (AssetNotFoundError("media_9"), 404),
        (OverlapError(0, 1.0, 2.0), 409),
        (ExportInProgressError(), 409),
        (SplitRangeError(1, 0.01, 0.05), 422),
        (AssetImportError("a.txt", "unsupported"), 422),
        (ProjectLoadError("p.json", "bad json"), 422),
        (EncoderError("ffmpeg missing"), 500),
        (ExportError("boom"), 500),
        (FrameCutError("unknown"), 500),
    ])
    def test_mapping(self, error, status):
        from packages.api.main import status_for

        assert status_for(error) == status


class TestErrorHandler:
    """Tests for the FrameCutError exception handler."""

    def test_error_body_shape(self, client):
        """Domain errors are wrapped in a detail object like HTTPException."""
        response = client.delete("/api/timeline/clips/42")

        assert response.status_code == 404
        assert response.json() == {
            "detail": {
                "error": "clip_not_found",
                "message": "Clip 42 not found",
                "details": {"clip_id": 42},
            }
        }
