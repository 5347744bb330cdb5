"""
PlaceBook Backend: Health Check Route
=====================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the database and reports whether the geocoder has an API key.
When:  Periodically (Docker health check, load balancer).

Status levels:
    - healthy:   database reachable and geocoder configured (HTTP 200)
    - degraded:  database reachable, no geocoding API key (HTTP 200);
                 reads still work, place creation will fail
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from placebook import __version__
from placebook.config import settings
from placebook.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Process start, for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    db_status = "connected"
    geocoding_status = "configured" if settings.google_api_key else "missing_api_key"
    overall = "healthy" if settings.google_api_key else "degraded"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        await request.app.state.database.ping()
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    health = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        geocoding=geocoding_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )

    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
