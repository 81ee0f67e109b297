"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from src.application.dto.responses import (
    HealthResponse,
    ProviderHealthResponse,
    ReorderMonitorHealthResponse,
)
from src.config import get_settings

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


async def _database_status() -> ProviderHealthResponse:
    from src.infrastructure.storage.sqlite import get_inventory_gateway

    start = time.time()
    available = await get_inventory_gateway().ping()
    return ProviderHealthResponse(
        name="sqlite",
        available=available,
        latency_ms=(time.time() - start) * 1000 if available else None,
        error=None if available else "database unreachable",
    )


def _reorder_status() -> ReorderMonitorHealthResponse:
    from src.application.services import get_reorder_monitor

    settings = get_settings()
    if not settings.reorder.enabled:
        return ReorderMonitorHealthResponse(enabled=False, running=False, queue_depth=0)

    monitor = get_reorder_monitor()
    return ReorderMonitorHealthResponse(
        enabled=True,
        running=monitor.is_running,
        queue_depth=monitor.queue_depth,
    )


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns service status and uptime.
    """
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database health check.

    Tests SQLite connectivity and response time.
    """
    db_status = await _database_status()
    return HealthResponse(
        status="healthy" if db_status.available else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
        database=db_status,
    )


@router.get("/full", response_model=HealthResponse)
async def full_health_check() -> HealthResponse:
    """
    Full system health check.

    Database, reorder monitor and connected realtime clients.
    """
    from src.infrastructure.broadcast import get_websocket_hub

    db_status = await _database_status()
    reorder = _reorder_status()

    status_str = "healthy"
    if not db_status.available:
        status_str = "unhealthy"
    elif reorder.enabled and not reorder.running:
        status_str = "degraded"

    return HealthResponse(
        status=status_str,
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
        database=db_status,
        reorder_monitor=reorder,
        websocket_clients=get_websocket_hub().client_count,
    )
