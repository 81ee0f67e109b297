"""Tests for health endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.main import app


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _gateway(available: bool) -> MagicMock:
    gateway = MagicMock()
    gateway.ping = AsyncMock(return_value=available)
    return gateway


async def test_root_health_check(async_client):
    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


async def test_api_health_check(async_client):
    response = await async_client.get("/api/health")

    assert response.status_code == 200
    assert "uptime_seconds" in response.json()
    assert "X-Request-ID" in response.headers


async def test_db_health_unreachable(async_client):
    with patch(
        "src.infrastructure.storage.sqlite.get_inventory_gateway", return_value=_gateway(False)
    ):
        response = await async_client.get("/api/health/db")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["database"]["available"] is False


async def test_full_health_degraded_when_monitor_stopped(async_client):
    monitor = MagicMock(is_running=False, queue_depth=4)
    with (
        patch(
            "src.infrastructure.storage.sqlite.get_inventory_gateway", return_value=_gateway(True)
        ),
        patch("src.application.services.get_reorder_monitor", return_value=monitor),
    ):
        response = await async_client.get("/api/health/full")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["reorder_monitor"] == {"enabled": True, "running": False, "queue_depth": 4}
    assert data["websocket_clients"] == 0
