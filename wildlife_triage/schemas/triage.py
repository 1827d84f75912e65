"""Triage routing schemas.

Closed enumerations are validated here; anything outside the decision,
urgency or after-hours rule sets is rejected with a 422.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wildlife_triage.routing.models import (
    AfterHoursRule,
    AgeClass,
    AnimalObservation,
    CaseContext,
    Decision,
    ExposureSignals,
    ObservedCondition,
    OrgPolicy,
    RouteResult,
    Situation,
    SpeciesFlags,
    Urgency,
)


class CamelModel(BaseModel):
    """Base schema accepting camelCase or snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SpeciesFlagsIn(CamelModel):
    dangerous: bool = False
    rabies_vector: bool = False
    referral_required: bool = False
    intervention_needed: bool = False
    after_hours_allowed: bool = False


class AnimalIn(CamelModel):
    observed_condition: ObservedCondition = ObservedCondition.UNKNOWN
    situation: Situation = Situation.UNKNOWN
    age_class: AgeClass = AgeClass.UNKNOWN
    aggressive_behavior: bool = False
    contained: bool = False
    species_slug: str | None = Field(None, max_length=100)
    species_text: str | None = Field(None, max_length=500)

    def to_observation(self) -> AnimalObservation:
        return AnimalObservation(
            observed_condition=self.observed_condition,
            situation=self.situation,
            age_class=self.age_class,
            aggressive_behavior=self.aggressive_behavior,
            contained=self.contained,
            species_slug=self.species_slug,
            species_text=self.species_text,
        )


class ExposureIn(CamelModel):
    human_bite_possible: bool = False
    bat_sleeping_area: bool = False
    notes: str | None = Field(None, max_length=2000)

    def to_signals(self) -> ExposureSignals:
        return ExposureSignals(
            human_bite_possible=self.human_bite_possible,
            bat_sleeping_area=self.bat_sleeping_area,
            notes=self.notes,
        )


class OrgIn(CamelModel):
    after_hours: bool
    after_hours_rule: AfterHoursRule = AfterHoursRule.DEFLECT
    site_code: str | None = Field(None, max_length=50)
    timezone: str | None = Field(None, max_length=64)


class CaseContextRequest(CamelModel):
    """Schema for a fully specified case context."""

    species_flags: SpeciesFlagsIn
    animal: AnimalIn
    org: OrgIn
    exposure: ExposureIn = Field(default_factory=ExposureIn)
    explicit_decision: Decision | Literal["unknown"] | None = None

    def to_case_context(self) -> CaseContext:
        explicit = self.explicit_decision
        return CaseContext(
            species_flags=SpeciesFlags(**self.species_flags.model_dump()),
            animal=self.animal.to_observation(),
            exposure=self.exposure.to_signals(),
            org=OrgPolicy(
                after_hours=self.org.after_hours,
                after_hours_rule=self.org.after_hours_rule,
                site_code=self.org.site_code,
                timezone=self.org.timezone,
            ),
            explicit_decision=explicit if isinstance(explicit, Decision) else None,
        )

    @classmethod
    def from_case_context(cls, context: CaseContext) -> "CaseContextRequest":
        """Build the schema from a CaseContext.

        A configured rule outside the closed set is reported as ``deflect``,
        the behaviour the adjuster falls back to for it.
        """
        rule = context.org.after_hours_rule
        return cls(
            species_flags=SpeciesFlagsIn(**vars(context.species_flags)),
            animal=AnimalIn(**vars(context.animal)),
            exposure=ExposureIn(**vars(context.exposure)),
            org=OrgIn(
                after_hours=context.org.after_hours,
                after_hours_rule=rule if isinstance(rule, AfterHoursRule) else AfterHoursRule.DEFLECT,
                site_code=context.org.site_code,
                timezone=context.org.timezone,
            ),
            explicit_decision=context.explicit_decision,
        )


class RouteResultPayload(CamelModel):
    """Route result as returned by the API and by the LLM ``submit_route`` tool."""

    decision: Decision
    urgency: Urgency
    reasons: list[str] = Field(..., min_length=1)
    after_hours_note: str | None = None

    @classmethod
    def from_result(cls, result: RouteResult) -> "RouteResultPayload":
        return cls(
            decision=result.decision,
            urgency=result.urgency,
            reasons=list(result.reasons),
            after_hours_note=result.after_hours_note,
        )

    def to_result(self) -> RouteResult:
        return RouteResult(
            decision=self.decision,
            urgency=self.urgency,
            reasons=tuple(self.reasons),
            after_hours_note=self.after_hours_note,
        )


class CallerIn(CamelModel):
    zip: str | None = Field(None, max_length=10)
    county: str | None = Field(None, max_length=100)


class IntakeRequest(CamelModel):
    """Schema for an intake conversation turn.

    Species flags and org policy are filled in by the service from the
    species catalog and organization configuration.
    """

    caller: CallerIn = Field(default_factory=CallerIn)
    animal: AnimalIn = Field(default_factory=AnimalIn)
    exposure: ExposureIn = Field(default_factory=ExposureIn)
    after_hours: bool | None = None
    explicit_decision: Decision | Literal["unknown"] | None = None


class BlockOut(CamelModel):
    type: str
    title: str | None = None
    text: str | None = None
    lines: list[str] = Field(default_factory=list)


class ReferralOut(CamelModel):
    needed: bool
    validated: bool
    target_name: str | None = None
    target_phone: str | None = None
    target_url: str | None = None
    directions_url: str | None = None


class TriagePatchOut(CamelModel):
    decision: Decision
    urgency: Urgency
    caution_required: bool
    instructions_id: str | None = None
    referral: ReferralOut | None = None


class PolicyReferralOut(CamelModel):
    label: str
    phone: str | None = None
    url: str | None = None


class SpeciesPolicyOut(CamelModel):
    type: Literal["out_of_scope", "org_intake"]
    status: Literal["accept", "conditional", "not_supported"] | None = None
    public_message: str | None = None
    referrals: list[PolicyReferralOut] = Field(default_factory=list)


class IntakeResponse(CamelModel):
    """Response blocks and triage patch for an intake turn."""

    mode: Literal["triage"] = "triage"
    blocks: list[BlockOut]
    patch: TriagePatchOut
    route: RouteResultPayload
    strategy: str
    policy: SpeciesPolicyOut | None = None
