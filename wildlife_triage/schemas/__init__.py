"""Pydantic schemas for request/response validation."""

from wildlife_triage.schemas.triage import (
    CaseContextRequest,
    IntakeRequest,
    IntakeResponse,
    RouteResultPayload,
)

__all__ = [
    "CaseContextRequest",
    "IntakeRequest",
    "IntakeResponse",
    "RouteResultPayload",
]
