"""Tests for the health check endpoint."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    from boatrental.main import app

    return TestClient(app)


class TestHealthEndpoint:
    """Test suite for health check functionality."""

    def test_health_is_public(self, client):
        """No session is needed to probe health."""
        with patch("boatrental.api.health.check_db_connection", AsyncMock(return_value=True)):
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert isinstance(data["version"], str)

    def test_health_reports_database_down(self, client):
        with patch("boatrental.api.health.check_db_connection", AsyncMock(return_value=False)):
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["database"] == "disconnected"

    def test_health_against_real_database(self, client):
        """The test database file is reachable, so the real check passes."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"
