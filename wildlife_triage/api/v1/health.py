"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from wildlife_triage.api.deps import TriageServiceDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Returns service health status",
)
async def health_check() -> HealthResponse:
    """Check if the service is healthy.

    Returns:
        Health status response
    """
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns service readiness status for orchestrator readiness checks",
)
async def readiness_check(service: TriageServiceDep) -> HealthResponse:
    """Check if the service is ready to accept requests.

    Resolving the service loads the species catalog, level policy and
    contact directories, so a broken data file fails readiness.

    Returns:
        Readiness status response
    """
    return HealthResponse(status="ok")
