"""
VoterReg Backend — Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the two dependencies a submission needs end-to-end: the
       database (SELECT 1) and the upload buckets (directories present).
Who:   Called by Docker health checks, load balancers and monitoring.

Status levels:
    healthy    database connected, every bucket present   (HTTP 200)
    degraded   database connected, a bucket is missing    (HTTP 200)
    unhealthy  database unreachable                       (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from app import __version__
from app.config import settings
from app.database import engine
from app.schemas.application import HealthResponse
from app.services.bucket_storage import bucket_storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend service and its dependencies. "
        "Used by Docker health checks and load balancers to decide whether the "
        "service can accept submissions."
    ),
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    storage_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Buckets ─────────────────────────────────────────────────────
    missing = [b for b in settings.buckets if not (bucket_storage.root / b).is_dir()]
    if missing:
        storage_status = "missing_buckets"
        overall = "degraded" if overall != "unhealthy" else overall
        logger.warning("Health check: missing buckets: %s", ", ".join(missing))

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
