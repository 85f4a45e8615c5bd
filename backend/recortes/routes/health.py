"""
Recortes Backend - Health Check Route
======================================

What:  GET /health for container probes and load balancers.
How:   Lightweight checks only: SELECT 1 against the database, and whether
       storage credentials are present (no call to the storage API).

Status levels:
    healthy:    database reachable, storage configured        → 200
    degraded:   database reachable, storage not configured    → 200
    unhealthy:  database unreachable                          → 503
"""

import logging
import time

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from recortes import __version__
from recortes.database import engine
from recortes.schemas.common import HealthResponse
from recortes.services.blob_store import BlobStore, get_blob_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def database_reachable() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", e)
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    blobs: BlobStore = Depends(get_blob_store),
) -> HealthResponse:
    db_ok = await database_reachable()
    storage_ok = blobs.configured

    if not db_ok:
        overall = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif not storage_ok:
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        version=__version__,
        database="connected" if db_ok else "disconnected",
        storage="configured" if storage_ok else "unconfigured",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
