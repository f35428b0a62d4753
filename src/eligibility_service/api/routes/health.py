"""Health check endpoints."""

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from eligibility_service import __version__

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    detail: Optional[str] = None


@router.get("/", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(request: Request) -> HealthResponse:
    """Readiness check.

    Reports ``degraded`` when live eligibility is enabled but the upstream
    credential is missing; the catalog is always loaded by the time the app
    accepts requests.
    """
    configuration_error = getattr(request.app.state, "configuration_error", None)
    if configuration_error:
        return HealthResponse(status="degraded", version=__version__, detail=configuration_error)
    return HealthResponse(status="ready", version=__version__)


@router.get("/live", response_model=HealthResponse)
async def liveness_check() -> HealthResponse:
    """Liveness check for orchestration."""
    return HealthResponse(status="alive", version=__version__)
