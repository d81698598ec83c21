"""
Build API — Health Check Route
================================

What:  Health check endpoint for monitoring and container probes.
How:   Runs `SELECT 1` against the store and reports status and uptime.
Who:   Docker health checks, load balancers, monitoring.

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from buildapi import __version__
from buildapi.database import Database, get_database
from buildapi.schemas.aggregate import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(database: Database = Depends(get_database)):
    connected = await database.ping()
    body = HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not connected:
        logger.warning("Health check: database unreachable")
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
