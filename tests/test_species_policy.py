"""Tests for out-of-scope species and organization intake policy."""

from pathlib import Path

import pytest

from wildlife_triage.species.policy import (
    ORG_INTAKE,
    OUT_OF_SCOPE,
    IntakeStatus,
    PolicyReferral,
    SpeciesPolicy,
    SpeciesPolicyDirectory,
)

DATA_DIR = Path(__file__).resolve().parent.parent / "wildlife_triage" / "data"


@pytest.fixture(scope="module")
def policies() -> SpeciesPolicyDirectory:
    """Load the seeded species policy tables."""
    return SpeciesPolicyDirectory.load(directory=DATA_DIR)


class TestResolve:
    """Tests for policy resolution."""

    def test_out_of_scope(self, policies):
        """Domestic animals resolve to the out-of-scope policy."""
        policy = policies.resolve("dog", "WRCMN")

        assert policy.type == OUT_OF_SCOPE
        assert policy.status is None
        assert "domestic animals" in policy.public_message
        assert policy.referrals[0].label == "Animal Humane Society"

    def test_out_of_scope_needs_no_org(self, policies):
        """Out-of-scope entries apply to every organization."""
        policy = policies.resolve("cat", None)

        assert policy.type == OUT_OF_SCOPE

    def test_org_not_supported(self, policies):
        """Org intake policy marks deer as not supported."""
        policy = policies.resolve("white_tailed_deer", "WRCMN")

        assert policy.type == ORG_INTAKE
        assert policy.status == IntakeStatus.NOT_SUPPORTED
        assert policy.blocks_intake is True
        assert policy.referrals[0].phone == "651-296-6157"

    def test_org_conditional(self, policies):
        """Conditional intake does not block admission."""
        policy = policies.resolve("snapping_turtle", "WRCMN")

        assert policy.status == IntakeStatus.CONDITIONAL
        assert policy.blocks_intake is False

    def test_org_accept_without_message(self, policies):
        """Accepted species may have no public message."""
        policy = policies.resolve("raccoon", "WRCMN")

        assert policy.status == IntakeStatus.ACCEPT
        assert policy.public_message is None
        assert policy.referrals == ()

    def test_org_slug_case_insensitive(self, policies):
        """Site codes match regardless of case."""
        assert policies.resolve("white_tailed_deer", "wrcmn").status == IntakeStatus.NOT_SUPPORTED

    def test_other_org_has_no_policy(self, policies):
        """Intake policies are per organization."""
        assert policies.resolve("white_tailed_deer", "OTHER") is None

    def test_no_org_no_intake_policy(self, policies):
        """Without a site code only out-of-scope entries apply."""
        assert policies.resolve("white_tailed_deer", None) is None

    @pytest.mark.parametrize("slug", [None, "", "american_robin"])
    def test_no_policy(self, policies, slug):
        """Species without an entry have no policy."""
        assert policies.resolve(slug, "WRCMN") is None

    def test_out_of_scope_checked_first(self):
        """An out-of-scope entry wins over an org intake entry for the same slug."""
        directory = SpeciesPolicyDirectory(
            out_of_scope=[{"slug": "dog", "public_message": "Not wildlife."}],
            org_intake=[{"org": "WRCMN", "species": "dog", "status": "accept"}],
        )

        policy = directory.resolve("dog", "WRCMN")

        assert policy.type == OUT_OF_SCOPE
        assert policy.public_message == "Not wildlife."


class TestDetect:
    """Tests for out-of-scope detection in free text."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a stray dog is limping", "dog"),
            ("found two kittens in the garage", "cat"),
            ("my neighbor's rooster is hurt", "chicken"),
            ("the cat is under the porch", "cat"),
        ],
    )
    def test_detects_out_of_scope(self, policies, text, expected):
        """Names and aliases are matched on word boundaries."""
        assert policies.detect(text) == expected

    @pytest.mark.parametrize("text", ["a bobcat in the yard", "then it ran off", "", None])
    def test_no_false_matches(self, policies, text):
        """Terms inside other words do not match."""
        assert policies.detect(text) is None


class TestPresentation:
    """Tests for headlines and referral lines."""

    def test_headlines(self):
        """Each policy kind has its own headline."""
        assert SpeciesPolicy(type=OUT_OF_SCOPE).headline == "Not a wildlife case we can admit"
        assert (
            SpeciesPolicy(type=ORG_INTAKE, status=IntakeStatus.NOT_SUPPORTED).headline
            == "We're not able to admit this species"
        )
        assert SpeciesPolicy(type=ORG_INTAKE, status=IntakeStatus.CONDITIONAL).headline.startswith(
            "Admission may be possible"
        )

    def test_referral_line_skips_missing_fields(self):
        """Only present contact fields are shown."""
        assert PolicyReferral(label="Animal control").line() == "Animal control"
        assert (
            PolicyReferral(label="AHS", phone="763-432-4527", url="https://ahs.test/").line()
            == "AHS | 763-432-4527 | https://ahs.test/"
        )

    def test_policy_hash_recorded(self, policies):
        """The loaded table carries its content hash."""
        assert len(policies.policy_hash) == 64
