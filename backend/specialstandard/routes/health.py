"""
SpecialStandard Backend — Health Check Route
=============================================

What:  Liveness/readiness probe for Docker and load balancers.
Where: `/health` and `/api/v1/health` (the versioned path clients use).
How:   Runs `SELECT 1` through the engine. A reachable database means
       healthy (200); otherwise unhealthy (503) so traffic is routed away.
"""

import logging
import time

from fastapi import APIRouter, Response

from specialstandard import __version__
from specialstandard.database import ping_database
from specialstandard.routes import API_PREFIX
from specialstandard.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(f"{API_PREFIX}/health", response_model=HealthResponse, include_in_schema=False)
@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    connected = await ping_database()
    if not connected:
        logger.warning("Health check: database unreachable")
        response.status_code = 503
    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
