"""Health check routes."""

from fastapi import APIRouter
from pydantic import BaseModel

from app import __version__

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is running.",
)
async def health_check() -> HealthResponse:
    """Return service health status."""
    return HealthResponse(status="healthy", version=__version__)


@router.get(
    "/live",
    summary="Liveness check",
    description="Kubernetes liveness probe endpoint.",
)
async def liveness_check() -> dict:
    """Return liveness status."""
    return {"status": "alive"}
