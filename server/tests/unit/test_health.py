"""Unit tests for health endpoints."""

import pytest
from sqlalchemy.exc import OperationalError

from travel_api.core.database import get_db


@pytest.mark.asyncio
async def test_health_check(test_client):
    """Test the health check endpoint."""
    response = await test_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "service" in data
    assert "version" in data


@pytest.mark.asyncio
async def test_ready_check(test_client):
    """Test the readiness check endpoint."""
    response = await test_client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok"}
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_ready_check_database_down(test_app, test_client):
    """Readiness reports degraded when the database does not answer."""

    class BrokenSession:
        async def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def broken_db():
        yield BrokenSession()

    test_app.dependency_overrides[get_db] = broken_db

    response = await test_client.get("/ready")
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["database"] == "unavailable"


@pytest.mark.asyncio
async def test_info_endpoint(test_client):
    """Test the service info endpoint."""
    response = await test_client.get("/info")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "travel-booking-api"
    assert "version" in data
    assert "features" in data


@pytest.mark.asyncio
async def test_request_id_echoed(test_client):
    response = await test_client.get("/health", headers={"X-Request-ID": "trace-me-123"})
    assert response.headers["x-request-id"] == "trace-me-123"

    response = await test_client.get("/health")
    assert response.headers["x-request-id"]


@pytest.mark.asyncio
async def test_openapi_docs(test_client):
    """Interactive docs are served in development."""
    response = await test_client.get("/docs")
    assert response.status_code == 200
