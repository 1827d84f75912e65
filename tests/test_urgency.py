"""Tests for the urgency assessor."""

import itertools

import pytest

from wildlife_triage.routing.engine import assess_urgency
from wildlife_triage.routing.models import (
    AgeClass,
    ObservedCondition,
    Situation,
    Urgency,
    raise_urgency,
)


class TestUrgencyRules:
    """Each urgency rule in isolation."""

    def test_no_signals_is_low(self, make_case):
        """A case with no risk signals stays low with no reasons."""
        assessment = assess_urgency(make_case())

        assert assessment.urgency == Urgency.LOW
        assert assessment.reasons == ()

    def test_bite_with_rabies_vector_is_critical(self, make_case):
        """Possible bite from a rabies vector = CRITICAL."""
        case = make_case(
            flags={"rabies_vector": True},
            exposure={"human_bite_possible": True},
        )

        assessment = assess_urgency(case)

        assert assessment.urgency == Urgency.CRITICAL
        assert assessment.reasons == (
            "Possible human bite exposure to a rabies-vector species.",
        )

    def test_bite_without_rabies_vector_does_not_fire(self, make_case):
        """Bite exposure alone does not raise urgency."""
        case = make_case(exposure={"human_bite_possible": True})

        assert assess_urgency(case).urgency == Urgency.LOW

    def test_bat_sleeping_area_with_bat_slug(self, make_case):
        """Bat near a sleeping person fires on slug even without the rabies flag."""
        case = make_case(
            animal={"species_slug": "big_brown_bat"},
            exposure={"bat_sleeping_area": True},
        )

        assessment = assess_urgency(case)

        assert assessment.urgency == Urgency.CRITICAL
        assert "Bat found near sleeping person; potential exposure." in assessment.reasons

    def test_bat_sleeping_area_with_rabies_vector(self, make_case):
        """Sleeping-area exposure fires for any rabies vector."""
        case = make_case(
            flags={"rabies_vector": True},
            animal={"species_slug": "raccoon"},
            exposure={"bat_sleeping_area": True},
        )

        assert assess_urgency(case).urgency == Urgency.CRITICAL

    def test_bat_sleeping_area_non_vector_non_bat(self, make_case):
        """Sleeping-area flag on a non-bat, non-vector species does not fire."""
        case = make_case(
            animal={"species_slug": "eastern_cottontail"},
            exposure={"bat_sleeping_area": True},
        )

        assert assess_urgency(case).urgency == Urgency.LOW

    def test_aggressive_dangerous_uncontained_is_high(self, make_case):
        """Aggressive dangerous animal that is loose = HIGH."""
        case = make_case(
            flags={"dangerous": True},
            animal={"aggressive_behavior": True, "contained": False},
        )

        assessment = assess_urgency(case)

        assert assessment.urgency == Urgency.HIGH
        assert assessment.reasons == (
            "Aggressive behavior with dangerous species and not contained.",
        )

    def test_aggressive_dangerous_contained_does_not_fire(self, make_case):
        """Containment suppresses the aggression rule."""
        case = make_case(
            flags={"dangerous": True},
            animal={"aggressive_behavior": True, "contained": True},
        )

        assert assess_urgency(case).urgency == Urgency.LOW

    @pytest.mark.parametrize("condition", [ObservedCondition.INJURED, ObservedCondition.SICK])
    def test_unwell_uncontained_is_medium(self, make_case, condition):
        """Injured or sick animal that is not contained = MEDIUM."""
        case = make_case(animal={"observed_condition": condition})

        assessment = assess_urgency(case)

        assert assessment.urgency == Urgency.MEDIUM
        assert assessment.reasons == ("Animal appears injured/sick and is not contained.",)

    def test_unwell_contained_does_not_fire(self, make_case):
        """A contained injured animal does not raise urgency."""
        case = make_case(
            animal={"observed_condition": ObservedCondition.INJURED, "contained": True}
        )

        assert assess_urgency(case).urgency == Urgency.LOW

    @pytest.mark.parametrize(
        "situation,age",
        [
            (Situation.ORPHANED, AgeClass.NEONATE),
            (Situation.ORPHANED, AgeClass.JUVENILE),
            (Situation.ABANDONED, AgeClass.NEONATE),
            (Situation.ABANDONED, AgeClass.JUVENILE),
        ],
    )
    def test_young_orphan_is_medium(self, make_case, situation, age):
        """Young orphaned/abandoned animal = MEDIUM."""
        case = make_case(animal={"situation": situation, "age_class": age})

        assessment = assess_urgency(case)

        assert assessment.urgency == Urgency.MEDIUM
        assert assessment.reasons == ("Young animal potentially orphaned/abandoned.",)

    def test_adult_orphan_does_not_fire(self, make_case):
        """Adult 'orphans' are not an urgency signal."""
        case = make_case(animal={"situation": Situation.ORPHANED, "age_class": AgeClass.ADULT})

        assert assess_urgency(case).urgency == Urgency.LOW


class TestUrgencyMerge:
    """Tests for rank-based urgency merging."""

    def test_raise_urgency_never_lowers(self):
        """raise_urgency returns the higher of two levels."""
        assert raise_urgency(Urgency.CRITICAL, Urgency.MEDIUM) == Urgency.CRITICAL
        assert raise_urgency(Urgency.LOW, Urgency.HIGH) == Urgency.HIGH
        assert raise_urgency(Urgency.HIGH, Urgency.HIGH) == Urgency.HIGH

    def test_rank_order(self):
        """Urgency ranks are strictly ordered."""
        ranks = [u.rank for u in (Urgency.LOW, Urgency.MEDIUM, Urgency.HIGH, Urgency.CRITICAL)]

        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4

    def test_multiple_rules_record_every_reason_in_order(self, make_case):
        """All fired rules contribute reasons in evaluation order."""
        case = make_case(
            flags={"rabies_vector": True, "dangerous": True},
            animal={
                "aggressive_behavior": True,
                "observed_condition": ObservedCondition.INJURED,
            },
            exposure={"human_bite_possible": True},
        )

        assessment = assess_urgency(case)

        assert assessment.urgency == Urgency.CRITICAL
        assert assessment.reasons == (
            "Possible human bite exposure to a rabies-vector species.",
            "Aggressive behavior with dangerous species and not contained.",
            "Animal appears injured/sick and is not contained.",
        )

    @pytest.mark.parametrize("fired", list(itertools.product([False, True], repeat=5)))
    def test_urgency_is_highest_fired_rule(self, make_case, fired):
        """Urgency equals the max of every fired rule, whatever the combination."""
        bite, bat, aggressive, unwell, orphan = fired
        case = make_case(
            flags={"rabies_vector": bite, "dangerous": True},
            animal={
                "species_slug": "big_brown_bat" if bat else None,
                "aggressive_behavior": aggressive,
                "observed_condition": (
                    ObservedCondition.INJURED if unwell else ObservedCondition.STABLE
                ),
                "situation": Situation.ORPHANED if orphan else Situation.UNKNOWN,
                "age_class": AgeClass.JUVENILE,
                "contained": False,
            },
            exposure={"human_bite_possible": bite, "bat_sleeping_area": bat},
        )

        expected = Urgency.LOW
        if unwell or orphan:
            expected = Urgency.MEDIUM
        if aggressive:
            expected = Urgency.HIGH
        if bite or bat:
            expected = Urgency.CRITICAL

        assessment = assess_urgency(case)

        assert assessment.urgency == expected
        assert len(assessment.reasons) == sum(fired)
