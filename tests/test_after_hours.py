"""Tests for the after-hours policy adjuster."""

import pytest

from wildlife_triage.routing.engine import (
    NOTE_DEFAULT_CRITICAL,
    NOTE_DEFAULT_DEFER,
    NOTE_DEFLECT_CRITICAL,
    NOTE_DEFLECT_DEFER,
    NOTE_ESCALATE_CRITICAL,
    NOTE_LIMITED_DEFER,
    apply_after_hours,
)
from wildlife_triage.routing.models import AfterHoursRule, Decision, Urgency

ALL_RULES = [
    AfterHoursRule.DEFLECT,
    AfterHoursRule.INFO_ONLY,
    AfterHoursRule.INTAKE_LIMITED,
    AfterHoursRule.ESCALATE,
    "overnight_magic",
]


def _closed(make_case, rule):
    return make_case(org={"after_hours": True, "after_hours_rule": rule})


class TestOpenHours:
    """Organization open: pass-through."""

    @pytest.mark.parametrize("decision", list(Decision))
    def test_open_is_pass_through(self, make_case, decision):
        """No change, no reasons, no note when the org is open."""
        case = make_case(org={"after_hours": False})

        outcome = apply_after_hours(case, decision, Urgency.CRITICAL)

        assert outcome.decision == decision
        assert outcome.reasons == ()
        assert outcome.note is None


class TestReferral:
    """Referral is never altered after hours."""

    @pytest.mark.parametrize("rule", ALL_RULES)
    @pytest.mark.parametrize("urgency", list(Urgency))
    def test_referral_unchanged(self, make_case, rule, urgency):
        """Referral passes through every rule at every urgency."""
        outcome = apply_after_hours(_closed(make_case, rule), Decision.REFERRAL, urgency)

        assert outcome.decision == Decision.REFERRAL
        assert outcome.reasons == ("After-hours OK: referral handled by partner.",)
        assert outcome.note is None


class TestDeflect:
    """deflect and info_only behave identically."""

    @pytest.mark.parametrize("rule", [AfterHoursRule.DEFLECT, AfterHoursRule.INFO_ONLY])
    def test_critical_escalates_to_dispatch(self, make_case, rule):
        """Critical cases are escalated to dispatch with a note."""
        outcome = apply_after_hours(_closed(make_case, rule), Decision.BRING_IN, Urgency.CRITICAL)

        assert outcome.decision == Decision.DISPATCH
        assert outcome.note == NOTE_DEFLECT_CRITICAL
        assert outcome.reasons == (
            f"After-hours '{rule.value}': critical case; escalate to dispatch.",
        )

    @pytest.mark.parametrize("rule", [AfterHoursRule.DEFLECT, AfterHoursRule.INFO_ONLY])
    def test_bring_in_deferred_to_self_help(self, make_case, rule):
        """Non-critical bring_in becomes self_help overnight."""
        outcome = apply_after_hours(_closed(make_case, rule), Decision.BRING_IN, Urgency.HIGH)

        assert outcome.decision == Decision.SELF_HELP
        assert outcome.note == NOTE_DEFLECT_DEFER
        assert outcome.reasons == (f"After-hours '{rule.value}': provide safe overnight care.",)

    def test_monitor_unchanged_without_note(self, make_case):
        """Decisions other than bring_in keep their value and get no note."""
        outcome = apply_after_hours(
            _closed(make_case, AfterHoursRule.DEFLECT), Decision.MONITOR, Urgency.LOW
        )

        assert outcome.decision == Decision.MONITOR
        assert outcome.note is None
        assert len(outcome.reasons) == 1

    def test_dispatch_critical_has_no_note(self, make_case):
        """A note is only set when the decision actually changes."""
        outcome = apply_after_hours(
            _closed(make_case, AfterHoursRule.DEFLECT), Decision.DISPATCH, Urgency.CRITICAL
        )

        assert outcome.decision == Decision.DISPATCH
        assert outcome.note is None


class TestIntakeLimited:
    """intake_limited admits high/critical cases."""

    @pytest.mark.parametrize("urgency", [Urgency.HIGH, Urgency.CRITICAL])
    def test_high_or_critical_bring_in(self, make_case, urgency):
        """High/critical cases are brought in."""
        outcome = apply_after_hours(
            _closed(make_case, AfterHoursRule.INTAKE_LIMITED), Decision.SELF_HELP, urgency
        )

        assert outcome.decision == Decision.BRING_IN
        assert outcome.reasons == (
            "After-hours 'intake_limited': allow bring_in for high/critical.",
        )

    def test_dispatch_preserved(self, make_case):
        """Dispatch is never downgraded to bring_in."""
        outcome = apply_after_hours(
            _closed(make_case, AfterHoursRule.INTAKE_LIMITED), Decision.DISPATCH, Urgency.CRITICAL
        )

        assert outcome.decision == Decision.DISPATCH

    @pytest.mark.parametrize("urgency", [Urgency.LOW, Urgency.MEDIUM])
    def test_non_urgent_bring_in_deferred(self, make_case, urgency):
        """Low/medium bring_in becomes self_help."""
        outcome = apply_after_hours(
            _closed(make_case, AfterHoursRule.INTAKE_LIMITED), Decision.BRING_IN, urgency
        )

        assert outcome.decision == Decision.SELF_HELP
        assert outcome.note == NOTE_LIMITED_DEFER


class TestEscalate:
    """escalate honors decisions and escalates critical cases."""

    def test_critical_escalates(self, make_case):
        """Critical non-dispatch decision becomes dispatch."""
        outcome = apply_after_hours(
            _closed(make_case, AfterHoursRule.ESCALATE), Decision.MONITOR, Urgency.CRITICAL
        )

        assert outcome.decision == Decision.DISPATCH
        assert outcome.note == NOTE_ESCALATE_CRITICAL

    def test_non_critical_honored(self, make_case):
        """bring_in stays bring_in under escalate."""
        outcome = apply_after_hours(
            _closed(make_case, AfterHoursRule.ESCALATE), Decision.BRING_IN, Urgency.HIGH
        )

        assert outcome.decision == Decision.BRING_IN
        assert outcome.note is None
        assert outcome.reasons == ("After-hours 'escalate': honor decision; escalate if critical.",)


class TestUnknownRule:
    """Unknown rules fall back to deflect behaviour."""

    def test_unknown_critical(self, make_case):
        """Unknown rule escalates critical cases."""
        outcome = apply_after_hours(
            _closed(make_case, "overnight_magic"), Decision.BRING_IN, Urgency.CRITICAL
        )

        assert outcome.decision == Decision.DISPATCH
        assert outcome.note == NOTE_DEFAULT_CRITICAL
        assert outcome.reasons == ("Unknown after-hours rule; defaulting to 'deflect'.",)

    def test_unknown_defers_bring_in(self, make_case):
        """Unknown rule defers bring_in overnight."""
        outcome = apply_after_hours(
            _closed(make_case, "overnight_magic"), Decision.BRING_IN, Urgency.MEDIUM
        )

        assert outcome.decision == Decision.SELF_HELP
        assert outcome.note == NOTE_DEFAULT_DEFER

    def test_known_rule_as_plain_string(self, make_case):
        """A recognized rule given as a plain string is honored."""
        outcome = apply_after_hours(
            _closed(make_case, "escalate"), Decision.BRING_IN, Urgency.HIGH
        )

        assert outcome.decision == Decision.BRING_IN
        assert "escalate" in outcome.reasons[0]
