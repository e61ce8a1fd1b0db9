"""Health & Readiness Probes.

Invariants:
    - GET /health/ returns 200 whenever the process is up
    - GET /health/ready returns 503 while the database is unreachable or the
      rate tables are missing (migrations not applied)
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

import payrates.infrastructure.database as db_module
from payrates import __version__

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


def _not_ready(reason: str, **details) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason, **details},
    )


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Liveness probe."""
    return {"status": "healthy", "service": "payrates-api", "version": __version__}


@router.get("/ready")
async def readiness_check():
    """Readiness probe: database reachable and schema migrated."""
    manager = db_module.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")
    try:
        missing = await manager.missing_tables()
    except SQLAlchemyError as e:
        logger.error(f"Schema inspection failed: {e}")
        return _not_ready("database_unavailable")
    if missing:
        logger.warning(f"Readiness failed, missing tables: {missing}")
        return _not_ready("schema_missing", missing_tables=missing)
    return {"status": "ready", "checks": {"database": "healthy", "schema": "healthy"}}
