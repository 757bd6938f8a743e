"""Health-related Pydantic schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status enumeration."""
    READY = "ready"
    DEGRADED = "degraded"


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: HealthStatus = Field(..., description="Service readiness")
    timestamp: datetime = Field(..., description="Current server time (ISO 8601)")
    checks: dict[str, str] = Field(..., description="Per-dependency check results")
