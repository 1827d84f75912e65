"""Case context and route result models for the triage router.

Enumerations are closed sets. The router only ever emits the five
canonical decisions and four urgency levels defined here.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Decision(str, Enum):
    """Operational decision for an intake conversation."""

    MONITOR = "monitor"  # Observe from a distance
    SELF_HELP = "self_help"  # Caller contains and cares overnight
    BRING_IN = "bring_in"  # Caller transports the animal to the center
    REFERRAL = "referral"  # Partner organization takes the case
    DISPATCH = "dispatch"  # Public-health / public-safety escalation


class Urgency(str, Enum):
    """Qualitative severity, ordered low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return URGENCY_RANK[self]


URGENCY_RANK = {
    Urgency.LOW: 0,
    Urgency.MEDIUM: 1,
    Urgency.HIGH: 2,
    Urgency.CRITICAL: 3,
}


def raise_urgency(current: Urgency, candidate: Urgency) -> Urgency:
    """Return the higher-ranked of two urgency levels."""
    return candidate if candidate.rank > current.rank else current


class AfterHoursRule(str, Enum):
    """Per-organization after-hours policy."""

    DEFLECT = "deflect"
    INTAKE_LIMITED = "intake_limited"
    INFO_ONLY = "info_only"
    ESCALATE = "escalate"


class ObservedCondition(str, Enum):
    INJURED = "injured"
    SICK = "sick"
    STABLE = "stable"
    UNKNOWN = "unknown"


class Situation(str, Enum):
    SICK = "sick"
    INJURED = "injured"
    ORPHANED = "orphaned"
    ABANDONED = "abandoned"
    UNKNOWN = "unknown"


class AgeClass(str, Enum):
    NEONATE = "neonate"
    JUVENILE = "juvenile"
    ADULT = "adult"
    UNKNOWN = "unknown"


UNWELL_CONDITIONS = frozenset({ObservedCondition.INJURED, ObservedCondition.SICK})
ORPHAN_SITUATIONS = frozenset({Situation.ORPHANED, Situation.ABANDONED})
YOUNG_AGE_CLASSES = frozenset({AgeClass.NEONATE, AgeClass.JUVENILE})


@dataclass(frozen=True)
class SpeciesFlags:
    """Boolean risk profile for a species."""

    dangerous: bool = False
    rabies_vector: bool = False
    referral_required: bool = False
    intervention_needed: bool = False
    after_hours_allowed: bool = False


@dataclass(frozen=True)
class AnimalObservation:
    """What the caller reports about the animal."""

    observed_condition: ObservedCondition = ObservedCondition.UNKNOWN
    situation: Situation = Situation.UNKNOWN
    age_class: AgeClass = AgeClass.UNKNOWN
    aggressive_behavior: bool = False
    contained: bool = False
    species_slug: str | None = None
    species_text: str | None = None


@dataclass(frozen=True)
class ExposureSignals:
    """Possible human exposure to the animal."""

    human_bite_possible: bool = False
    bat_sleeping_area: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class OrgPolicy:
    """Organization after-hours state.

    ``after_hours_rule`` is usually an ``AfterHoursRule``; a raw string is
    kept when the configured value is not recognized.
    """

    after_hours: bool = False
    after_hours_rule: AfterHoursRule | str = AfterHoursRule.DEFLECT
    site_code: str | None = None
    timezone: str | None = None


@dataclass(frozen=True)
class CaseContext:
    """Normalized snapshot of the signals used for one routing pass."""

    species_flags: SpeciesFlags
    animal: AnimalObservation
    org: OrgPolicy
    exposure: ExposureSignals = field(default_factory=ExposureSignals)
    explicit_decision: Decision | None = None

    @property
    def species_slug(self) -> str:
        return self.animal.species_slug or ""


@dataclass(frozen=True)
class UrgencyAssessment:
    """Output of the urgency assessor."""

    urgency: Urgency
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class BaselineOutcome:
    """Output of the baseline decision resolver (pre after-hours)."""

    decision: Decision
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class AfterHoursOutcome:
    """Output of the after-hours adjuster."""

    decision: Decision
    reasons: tuple[str, ...] = ()
    note: str | None = None


@dataclass(frozen=True)
class RouteResult:
    """Final routing decision consumed by downstream collaborators."""

    decision: Decision
    urgency: Urgency
    reasons: tuple[str, ...]
    after_hours_note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape shared by every router strategy."""
        payload: dict[str, Any] = {
            "decision": self.decision.value,
            "urgency": self.urgency.value,
            "reasons": list(self.reasons),
        }
        if self.after_hours_note is not None:
            payload["afterHoursNote"] = self.after_hours_note
        return payload
