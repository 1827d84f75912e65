"""Deterministic triage routing engine.

Routes a case to a decision and urgency level. All routing is:
- Deterministic (same context = same result)
- Explainable (every fired rule appends a reason)
- Pure (no I/O, no shared state)

The engine never raises for a well-formed CaseContext. An unrecognized
after-hours rule falls back to the deflect behaviour.
"""

from wildlife_triage.routing.models import (
    ORPHAN_SITUATIONS,
    UNWELL_CONDITIONS,
    YOUNG_AGE_CLASSES,
    AfterHoursOutcome,
    AfterHoursRule,
    BaselineOutcome,
    CaseContext,
    Decision,
    RouteResult,
    Urgency,
    UrgencyAssessment,
    raise_urgency,
)

EXPLICIT_DECISION_REASON = "Explicit decision provided by upstream logic."

NOTE_DEFLECT_CRITICAL = "After-hours policy escalated critical case."
NOTE_DEFLECT_DEFER = "After-hours: defer intake; provide overnight guidance."
NOTE_LIMITED_DEFER = "After-hours limited intake; provide overnight guidance."
NOTE_ESCALATE_CRITICAL = "After-hours escalate: critical case routed to dispatch."
NOTE_DEFAULT_CRITICAL = "After-hours default: critical case escalated."
NOTE_DEFAULT_DEFER = "After-hours default: overnight guidance."


def assess_urgency(context: CaseContext) -> UrgencyAssessment:
    """Compute medical/public-safety urgency for a case.

    Each rule can only raise urgency. The merge is rank based, so the
    result is the highest-ranked rule that fired regardless of order.

    Args:
        context: Case context for this routing pass

    Returns:
        UrgencyAssessment with urgency and fired-rule reasons
    """
    reasons: list[str] = []
    urgency = Urgency.LOW

    flags = context.species_flags
    animal = context.animal
    exposure = context.exposure

    if exposure.human_bite_possible and flags.rabies_vector:
        urgency = raise_urgency(urgency, Urgency.CRITICAL)
        reasons.append("Possible human bite exposure to a rabies-vector species.")

    if exposure.bat_sleeping_area and (flags.rabies_vector or "bat" in context.species_slug):
        urgency = raise_urgency(urgency, Urgency.CRITICAL)
        reasons.append("Bat found near sleeping person; potential exposure.")

    if animal.aggressive_behavior and flags.dangerous and not animal.contained:
        urgency = raise_urgency(urgency, Urgency.HIGH)
        reasons.append("Aggressive behavior with dangerous species and not contained.")

    if animal.observed_condition in UNWELL_CONDITIONS and not animal.contained:
        urgency = raise_urgency(urgency, Urgency.MEDIUM)
        reasons.append("Animal appears injured/sick and is not contained.")

    if animal.situation in ORPHAN_SITUATIONS and animal.age_class in YOUNG_AGE_CLASSES:
        urgency = raise_urgency(urgency, Urgency.MEDIUM)
        reasons.append("Young animal potentially orphaned/abandoned.")

    return UrgencyAssessment(urgency=urgency, reasons=tuple(reasons))


def baseline_decision(context: CaseContext, urgency: Urgency) -> BaselineOutcome:
    """Derive the pre-policy decision from species flags and situation.

    First matching rule wins. Each branch records exactly one reason.
    """
    flags = context.species_flags
    animal = context.animal

    # Hard overrides from species flags
    if flags.referral_required:
        return BaselineOutcome(
            decision=Decision.REFERRAL,
            reasons=("Species requires referral per org policy/partners.",),
        )

    if flags.intervention_needed:
        return BaselineOutcome(
            decision=Decision.BRING_IN,
            reasons=("Species flagged as 'intervention needed'.",),
        )

    if animal.observed_condition in UNWELL_CONDITIONS:
        return BaselineOutcome(
            decision=Decision.BRING_IN,
            reasons=("Observed condition indicates injury/illness.",),
        )

    if animal.situation in ORPHAN_SITUATIONS:
        if animal.age_class in YOUNG_AGE_CLASSES:
            return BaselineOutcome(
                decision=Decision.SELF_HELP,
                reasons=("Likely orphaned juvenile/neonate; containment and self care.",),
            )
        return BaselineOutcome(
            decision=Decision.MONITOR,
            reasons=("Possible misinterpretation; monitor adult/unknown age first.",),
        )

    # Public safety escalation
    if urgency == Urgency.CRITICAL and flags.dangerous and not animal.contained:
        return BaselineOutcome(
            decision=Decision.DISPATCH,
            reasons=("Critical, dangerous and uncontained; dispatch.",),
        )

    return BaselineOutcome(
        decision=Decision.BRING_IN,
        reasons=("Default to bring_in if uncertain with non-trivial concern.",),
    )


def _resolve_rule(rule: AfterHoursRule | str) -> AfterHoursRule | None:
    if isinstance(rule, AfterHoursRule):
        return rule
    try:
        return AfterHoursRule(rule)
    except ValueError:
        return None


def apply_after_hours(
    context: CaseContext,
    decision: Decision,
    urgency: Urgency,
) -> AfterHoursOutcome:
    """Adjust a decision according to the organization's after-hours rule.

    Pass-through when the organization is open. Referral is never altered.
    A note is only attached when the decision actually changes.

    Args:
        context: Case context (org policy is read from here)
        decision: Baseline or explicit decision
        urgency: Urgency computed for this pass

    Returns:
        AfterHoursOutcome with the final decision, reasons and optional note
    """
    if not context.org.after_hours:
        return AfterHoursOutcome(decision=decision)

    # Referral partners may still accept after hours
    if decision == Decision.REFERRAL:
        return AfterHoursOutcome(
            decision=decision,
            reasons=("After-hours OK: referral handled by partner.",),
        )

    raw_rule = context.org.after_hours_rule
    rule = _resolve_rule(raw_rule)
    final = decision
    note: str | None = None

    if rule in (AfterHoursRule.DEFLECT, AfterHoursRule.INFO_ONLY):
        if urgency == Urgency.CRITICAL:
            reason = f"After-hours '{rule.value}': critical case; escalate to dispatch."
            final = Decision.DISPATCH
            note = NOTE_DEFLECT_CRITICAL
        else:
            reason = f"After-hours '{rule.value}': provide safe overnight care."
            if decision == Decision.BRING_IN:
                final = Decision.SELF_HELP
                note = NOTE_DEFLECT_DEFER

    elif rule == AfterHoursRule.INTAKE_LIMITED:
        if urgency in (Urgency.HIGH, Urgency.CRITICAL):
            reason = "After-hours 'intake_limited': allow bring_in for high/critical."
            final = Decision.DISPATCH if decision == Decision.DISPATCH else Decision.BRING_IN
        else:
            reason = "After-hours 'intake_limited': defer non-urgent to overnight care."
            if decision == Decision.BRING_IN:
                final = Decision.SELF_HELP
                note = NOTE_LIMITED_DEFER

    elif rule == AfterHoursRule.ESCALATE:
        reason = "After-hours 'escalate': honor decision; escalate if critical."
        if urgency == Urgency.CRITICAL and decision != Decision.DISPATCH:
            final = Decision.DISPATCH
            note = NOTE_ESCALATE_CRITICAL

    else:
        reason = "Unknown after-hours rule; defaulting to 'deflect'."
        if urgency == Urgency.CRITICAL:
            final = Decision.DISPATCH
            note = NOTE_DEFAULT_CRITICAL
        elif decision == Decision.BRING_IN:
            final = Decision.SELF_HELP
            note = NOTE_DEFAULT_DEFER

    if final == decision:
        note = None

    return AfterHoursOutcome(decision=final, reasons=(reason,), note=note)


def route_decision(context: CaseContext) -> RouteResult:
    """Run one routing pass: urgency, baseline (or explicit), after-hours.

    An explicit upstream decision replaces the baseline resolver but still
    carries a computed urgency and is still subject to after-hours policy.

    Args:
        context: Case context

    Returns:
        RouteResult with decision, urgency, ordered reasons and optional note
    """
    assessment = assess_urgency(context)

    if context.explicit_decision is not None:
        base = BaselineOutcome(
            decision=context.explicit_decision,
            reasons=(EXPLICIT_DECISION_REASON,),
        )
    else:
        base = baseline_decision(context, assessment.urgency)

    adjusted = apply_after_hours(context, base.decision, assessment.urgency)

    return RouteResult(
        decision=adjusted.decision,
        urgency=assessment.urgency,
        reasons=assessment.reasons + base.reasons + adjusted.reasons,
        after_hours_note=adjusted.note,
    )
