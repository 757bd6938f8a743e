"""Readiness check router."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..schemas.health import HealthStatus, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """
    Readiness check that verifies the database answers.

    Returns 200 when every check passes and 503 otherwise.
    """
    checks = {}
    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error("Readiness check failed - database unreachable", extra={"error": str(e)})
        checks["database"] = "unavailable"

    healthy = all(result == "ok" for result in checks.values())
    response_data = ReadinessResponse(
        status=HealthStatus.READY if healthy else HealthStatus.DEGRADED,
        timestamp=datetime.now(timezone.utc),
        checks=checks
    )

    return JSONResponse(
        status_code=200 if healthy else 503,
        content=response_data.model_dump(mode="json")
    )
