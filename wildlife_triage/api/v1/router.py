"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from wildlife_triage.api.v1 import health, triage

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Triage routing
api_router.include_router(
    triage.router,
    prefix="/triage",
    tags=["triage"],
)
