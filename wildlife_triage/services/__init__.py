"""Business logic services."""

from wildlife_triage.services.context_builder import (
    BuiltContext,
    CaseContextBuilder,
    OrgConfig,
)
from wildlife_triage.services.triage import TriageOutcome, TriagePatch, TriageService

__all__ = [
    "BuiltContext",
    "CaseContextBuilder",
    "OrgConfig",
    "TriageOutcome",
    "TriagePatch",
    "TriageService",
]
