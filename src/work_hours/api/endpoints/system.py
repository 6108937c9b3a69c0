"""System endpoints for health checks and status."""

import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from work_hours import __version__
from work_hours.api.auth import get_current_user
from work_hours.api.dependencies import get_config, get_ledger
from work_hours.api.models import HealthResponse, StatusResponse
from work_hours.core.config import ConfigManager
from work_hours.core.ledger import TimeLedger

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Note:
        This endpoint is public (no authentication required).
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )


@router.get("/status", response_model=StatusResponse)
async def get_status(
    config: ConfigManager = Depends(get_config),
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> StatusResponse:
    """Get system status, including how many shifts the caller has open.

    Example:
        >>> GET /api/v1/status
        {
            "api_enabled": true,
            "authentication_enabled": true,
            "cors_enabled": true,
            "authenticated": true,
            "open_entries": 1,
            "uptime_seconds": 3600.5
        }
    """
    return StatusResponse(
        api_enabled=config.get("api.enabled", False),
        authentication_enabled=config.get("api.authentication.enabled", True),
        cors_enabled=config.get("api.cors.enabled", True),
        authenticated=user is not None,
        open_entries=len(ledger.list_open(user)),
        uptime_seconds=time.time() - _server_start_time,
    )
