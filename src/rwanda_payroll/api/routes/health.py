"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel

from rwanda_payroll.api.dependencies import AppSettings
from rwanda_payroll.calculators.tax_config import RWANDA_DEFAULT_TAX_CONFIG

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    engine_version: str
    default_rules_fingerprint: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(settings: AppSettings) -> HealthResponse:
    """Report engine version and which statutory rate table is deployed."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        engine_version=settings.engine_version,
        default_rules_fingerprint=RWANDA_DEFAULT_TAX_CONFIG.fingerprint(),
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    """Readiness check for container orchestration."""
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
