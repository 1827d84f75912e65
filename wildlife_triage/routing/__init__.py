"""Deterministic wildlife triage router.

Routes an intake case to a decision (monitor, self_help, bring_in,
referral, dispatch) and an urgency level. All routing decisions are
deterministic and explainable; the LLM strategy must produce the same
RouteResult shape.
"""

from wildlife_triage.routing.engine import (
    apply_after_hours,
    assess_urgency,
    baseline_decision,
    route_decision,
)
from wildlife_triage.routing.models import (
    AfterHoursRule,
    CaseContext,
    Decision,
    RouteResult,
    Urgency,
)

__all__ = [
    "AfterHoursRule",
    "CaseContext",
    "Decision",
    "RouteResult",
    "Urgency",
    "apply_after_hours",
    "assess_urgency",
    "baseline_decision",
    "route_decision",
]
