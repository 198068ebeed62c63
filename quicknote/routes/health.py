"""
QuickNote - Health Check Route
================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Probes the configured storage backend (directory writable / bucket
       reachable) without reading or writing any note.
Who:   Called by container health checks and uptime monitors.

Status levels:
    - healthy:   storage backend usable (HTTP 200)
    - unhealthy: storage backend unusable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from quicknote import __version__
from quicknote.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    storage = request.app.state.storage
    overall = "healthy"
    storage_status = "ok"

    try:
        usable = await storage.health_check()
    except Exception as e:
        usable = False
        logger.warning("Health check: %s storage probe raised: %s", storage.name, e)

    if not usable:
        overall = "unhealthy"
        storage_status = "unavailable"
        response.status_code = 503
        logger.warning("Health check: %s storage unavailable", storage.name)

    return HealthResponse(
        status=overall,
        version=__version__,
        storage=f"{storage.name}: {storage_status}",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
