"""
Health API endpoint.

Provides:
    GET /api/health - Database connectivity, implemented exchanges, cleanup
                      task state and uptime
"""

from datetime import datetime, timezone
from typing import List

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from services.portal.deps import get_state
from services.portal.state import AppState

logger = structlog.get_logger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health endpoint."""

    status: str = "unknown"
    postgres: str = "unknown"
    exchanges: List[str]
    cleanup_task: str = "stopped"
    uptime_seconds: int = 0
    timestamp: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "postgres": "connected",
                "exchanges": ["binance", "mexc"],
                "cleanup_task": "running",
                "uptime_seconds": 15780,
                "timestamp": "2025-01-26T12:34:57Z",
            }
        }
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Get system health status",
    description="Reports database connectivity and the exchanges with an adapter.",
)
async def get_health(state: AppState = Depends(get_state)) -> HealthResponse:
    now = datetime.now(timezone.utc)

    postgres_status = "connected" if await state.store.ping() else "disconnected"
    if postgres_status != "connected":
        logger.warning("health_check_degraded", postgres=postgres_status)

    return HealthResponse(
        status="healthy" if postgres_status == "connected" else "degraded",
        postgres=postgres_status,
        exchanges=state.registry.implemented_exchanges(),
        cleanup_task="running" if state.cleanup_task.is_running else "stopped",
        uptime_seconds=int((now - state.start_time).total_seconds()),
        timestamp=now.isoformat().replace("+00:00", "Z"),
    )
