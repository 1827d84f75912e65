"""Triage routing endpoints."""

from fastapi import APIRouter, status

from wildlife_triage.api.deps import TriageServiceDep
from wildlife_triage.routing.models import Decision
from wildlife_triage.schemas.triage import (
    BlockOut,
    CaseContextRequest,
    IntakeRequest,
    IntakeResponse,
    PolicyReferralOut,
    ReferralOut,
    RouteResultPayload,
    SpeciesPolicyOut,
    TriagePatchOut,
)

router = APIRouter()


@router.post(
    "/route",
    response_model=RouteResultPayload,
    status_code=status.HTTP_200_OK,
    summary="Route a case context",
    description="Returns decision, urgency, reasons and after-hours note for a fully specified case",
)
async def route_case(body: CaseContextRequest, service: TriageServiceDep) -> RouteResultPayload:
    """Route a fully specified case context.

    Args:
        body: Case context with species flags, animal, org and exposure

    Returns:
        Route result
    """
    result, _ = await service.route(body.to_case_context())
    return RouteResultPayload.from_result(result)


@router.post(
    "/intake",
    response_model=IntakeResponse,
    status_code=status.HTTP_200_OK,
    summary="Run an intake turn",
    description="Builds the case from species metadata and org policy, routes it and returns response blocks",
)
async def run_intake(body: IntakeRequest, service: TriageServiceDep) -> IntakeResponse:
    """Run one intake turn.

    Returns:
        Response blocks, triage patch, species policy and the underlying route result
    """
    explicit = body.explicit_decision if isinstance(body.explicit_decision, Decision) else None

    outcome = await service.run_intake(
        animal=body.animal.to_observation(),
        exposure=body.exposure.to_signals(),
        zip_code=body.caller.zip,
        county=body.caller.county,
        after_hours=body.after_hours,
        explicit_decision=explicit,
    )

    patch = outcome.patch
    referral = None
    if patch.referral is not None:
        referral = ReferralOut(
            needed=patch.referral.needed,
            validated=patch.referral.validated,
            target_name=patch.referral.target_name,
            target_phone=patch.referral.target_phone,
            target_url=patch.referral.target_url,
            directions_url=patch.referral.directions_url,
        )

    policy = None
    if outcome.policy is not None:
        policy = SpeciesPolicyOut(
            type=outcome.policy.type,
            status=outcome.policy.status.value if outcome.policy.status else None,
            public_message=outcome.policy.public_message,
            referrals=[
                PolicyReferralOut(label=r.label, phone=r.phone, url=r.url)
                for r in outcome.policy.referrals
            ],
        )

    return IntakeResponse(
        blocks=[BlockOut(**block.to_dict()) for block in outcome.blocks],
        patch=TriagePatchOut(
            decision=patch.decision,
            urgency=patch.urgency,
            caution_required=patch.caution_required,
            instructions_id=patch.instructions_id,
            referral=referral,
        ),
        route=RouteResultPayload.from_result(outcome.route),
        strategy=outcome.strategy,
        policy=policy,
    )
