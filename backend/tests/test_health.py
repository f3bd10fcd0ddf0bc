"""
Tests for health checks, metrics and the shared error envelope.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["storage"] == "database"
    assert data["demoMode"] is True
    assert data["environment"] == "test"


@pytest.mark.asyncio
async def test_database_health(client: AsyncClient):
    response = await client.get("/api/health/database")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_database_health_degraded(client: AsyncClient, monkeypatch):
    storage = client.app.state.storage

    async def unreachable():
        return False

    monkeypatch.setattr(storage, "ping", unreachable)
    response = await client.get("/api/health/database")
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_memory_backend_health(memory_client: AsyncClient):
    response = await memory_client.get("/api/health")
    assert response.json()["storage"] == "memory"


@pytest.mark.asyncio
async def test_request_id_headers(client: AsyncClient):
    response = await client.get("/api/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient, booking_payload):
    await client.post("/api/guest/bookings", json=booking_payload())
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "booking_attempts_total" in response.text


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    response = await client.get("/api/nope")
    assert response.status_code == 404
    assert response.json()["success"] is False
