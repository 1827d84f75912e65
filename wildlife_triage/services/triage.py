"""Triage intake service.

Builds the case context, routes it through the configured strategy and
assembles the response blocks. Instead of patching a shared record in
place, the service returns an explicit TriagePatch for the caller to
persist.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from wildlife_triage.consumers.blocks import POLICY, REFERRAL, STEPS, SUMMARY, WARNING, Block
from wildlife_triage.consumers.instructions import CuratedInstructions, county_name
from wildlife_triage.consumers.public_health import PublicHealthDirectory, enrich_dispatch_steps
from wildlife_triage.consumers.referral import ReferralDirectory, ReferralResult, referral_needed
from wildlife_triage.core.logging import decision_logger
from wildlife_triage.routing.models import (
    AnimalObservation,
    CaseContext,
    Decision,
    ExposureSignals,
    RouteResult,
    Urgency,
)
from wildlife_triage.routing.strategies import FallbackRouter, Router
from wildlife_triage.services.context_builder import BuiltContext, CaseContextBuilder
from wildlife_triage.species.policy import SpeciesPolicy, SpeciesPolicyDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferralPatch:
    """Referral fields for the conversation record."""

    needed: bool
    validated: bool
    target_name: str | None = None
    target_phone: str | None = None
    target_url: str | None = None
    directions_url: str | None = None

    @classmethod
    def from_result(cls, result: ReferralResult) -> "ReferralPatch":
        target = result.target
        return cls(
            needed=result.needed,
            validated=result.needed,
            target_name=target.name if target else None,
            target_phone=target.phone if target else None,
            target_url=target.url if target else None,
            directions_url=result.directions_url,
        )


@dataclass(frozen=True)
class TriagePatch:
    """Typed diff to apply to the conversation's triage record."""

    decision: Decision
    urgency: Urgency
    caution_required: bool
    instructions_id: str | None = None
    referral: ReferralPatch | None = None


@dataclass(frozen=True)
class TriageOutcome:
    """Everything produced by one intake turn."""

    context: CaseContext
    route: RouteResult
    strategy: str
    blocks: list[Block]
    patch: TriagePatch
    policy: SpeciesPolicy | None = None


def caution_required(context: CaseContext, route: RouteResult) -> bool:
    """Caution applies to dangerous species, any exposure, and dispatch."""
    return (
        context.species_flags.dangerous
        or context.exposure.human_bite_possible
        or context.exposure.bat_sleeping_area
        or route.decision == Decision.DISPATCH
    )


class TriageService:
    """Service orchestrating routing and its downstream consumers.

    Handles:
    - Case context building from intake data
    - Routing via the configured strategy
    - Species intake policy, instruction, referral and public-health blocks
    """

    def __init__(
        self,
        builder: CaseContextBuilder,
        router: Router,
        instructions: CuratedInstructions,
        referrals: ReferralDirectory,
        public_health: PublicHealthDirectory,
        policies: SpeciesPolicyDirectory,
    ) -> None:
        self.builder = builder
        self.router = router
        self.instructions = instructions
        self.referrals = referrals
        self.public_health = public_health
        self.policies = policies

    def resolve_policy(self, context: CaseContext) -> SpeciesPolicy | None:
        """Resolve the intake policy for the case's species at this organization.

        Free text naming an out-of-scope animal (a dog, a cat) is matched when
        the wildlife catalog recognized no species.
        """
        slug = context.animal.species_slug or self.policies.detect(context.animal.species_text)
        return self.policies.resolve(slug, context.org.site_code)

    async def route(self, context: CaseContext) -> tuple[RouteResult, str]:
        """Route a case and report which strategy produced the result."""
        if isinstance(self.router, FallbackRouter):
            return await self.router.route_with_strategy(context)
        return await self.router.route(context), self.router.name

    async def run_intake(
        self,
        animal: AnimalObservation,
        exposure: ExposureSignals | None = None,
        zip_code: str | None = None,
        county: str | None = None,
        after_hours: bool | None = None,
        explicit_decision: Decision | None = None,
        now: datetime | None = None,
    ) -> TriageOutcome:
        """Run one intake turn from caller-supplied data.

        Args:
            animal: Caller's observation of the animal
            exposure: Human exposure signals
            zip_code: Caller ZIP code, for public-health lookup
            county: Caller county, for public-health lookup
            after_hours: Explicit after-hours state, computed when None
            explicit_decision: Upstream decision override
            now: Current time

        Returns:
            TriageOutcome with blocks and triage patch
        """
        built = self.builder.build(
            animal=animal,
            exposure=exposure,
            after_hours=after_hours,
            explicit_decision=explicit_decision,
            now=now,
        )
        return await self.run(built, zip_code=zip_code, county=county)

    async def run(
        self,
        built: BuiltContext,
        zip_code: str | None = None,
        county: str | None = None,
    ) -> TriageOutcome:
        """Route a built context and assemble the response."""
        context = built.context
        route, strategy = await self.route(context)

        decision_logger.log(
            decision=route.decision.value,
            urgency=route.urgency.value,
            strategy=strategy,
            species_slug=context.animal.species_slug,
            after_hours_note=route.after_hours_note,
        )

        species_label = (
            context.animal.species_text
            or (built.species.common_name if built.species else None)
            or context.animal.species_slug
            or "unknown species"
        )

        blocks: list[Block] = []
        policy = self.resolve_policy(context)
        # A plain "accept" with nothing to say adds no block
        if policy is not None and (policy.public_message or policy.referrals):
            blocks.append(Block(
                type=POLICY,
                title=policy.headline,
                text=policy.public_message,
                lines=tuple(referral.line() for referral in policy.referrals),
            ))
        if policy is not None and policy.blocks_intake:
            logger.info(f"Intake not possible for {species_label}: {policy.type}")

        if route.after_hours_note:
            blocks.append(Block(type=WARNING, title="After-hours policy", text=route.after_hours_note))

        steps = self.instructions.select(
            route.decision,
            species_slug=context.animal.species_slug,
            care_advice=built.species.care_advice if built.species else None,
            placeholders={
                "zip": zip_code,
                "county": county,
                "county_name": county_name(county),
                "species": species_label,
                "species_slug": context.animal.species_slug,
                "decision": route.decision.value,
                "urgency": route.urgency.value,
                "org_site": context.org.site_code,
                "org_timezone": context.org.timezone,
            },
        )

        blocks.append(Block(
            type=SUMMARY,
            title="Triage Summary",
            text=(
                f"Decision: {route.decision.value} for {species_label}. "
                f"Urgency: {route.urgency.value}."
            ),
        ))
        blocks.append(Block(type=STEPS, title=steps.title, lines=steps.lines))

        referral_patch = None
        if referral_needed(route, context.species_flags):
            referral = self.referrals.search(
                context.animal.species_slug,
                category=built.species.category if built.species else None,
                referral_required=context.species_flags.referral_required,
            )
            referral_patch = ReferralPatch.from_result(referral)
            if referral.needed:
                blocks.append(Block(type=REFERRAL, title="Referral", lines=tuple(referral.lines())))
            else:
                logger.info(f"No referral partner for {context.animal.species_slug or 'unknown species'}")

        blocks = enrich_dispatch_steps(
            blocks,
            route.decision,
            self.public_health,
            zip_code=zip_code,
            county=county,
        )

        patch = TriagePatch(
            decision=route.decision,
            urgency=route.urgency,
            caution_required=caution_required(context, route),
            instructions_id=steps.source,
            referral=referral_patch,
        )

        return TriageOutcome(
            context=context,
            route=route,
            strategy=strategy,
            blocks=blocks,
            patch=patch,
            policy=policy,
        )
