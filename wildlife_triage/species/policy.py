"""Species intake policy.

Two tables decide whether the organization can admit an animal:

- out-of-scope species (pets and livestock) are never wildlife cases and
  carry a public message with referrals elsewhere;
- per-organization intake policies mark recognized wildlife species as
  accepted, conditionally accepted or not supported.

Out-of-scope entries are checked first. Policy never changes the routing
decision; it is shown to the caller alongside it.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from wildlife_triage.species.catalog import SpeciesRecord, detect_species_slug
from wildlife_triage.species.loader import load_yaml_document

OUT_OF_SCOPE = "out_of_scope"
ORG_INTAKE = "org_intake"


class IntakeStatus(str, Enum):
    """Organization intake status for a species."""

    ACCEPT = "accept"
    CONDITIONAL = "conditional"
    NOT_SUPPORTED = "not_supported"


@dataclass(frozen=True)
class PolicyReferral:
    """Where to send the caller instead."""

    label: str
    phone: str | None = None
    url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PolicyReferral":
        return cls(label=data["label"], phone=data.get("phone"), url=data.get("url"))

    def line(self) -> str:
        parts = [self.label]
        if self.phone:
            parts.append(self.phone)
        if self.url:
            parts.append(self.url)
        return " | ".join(parts)


@dataclass(frozen=True)
class SpeciesPolicy:
    """Resolved policy for one species."""

    type: str
    public_message: str | None = None
    status: IntakeStatus | None = None
    referrals: tuple[PolicyReferral, ...] = ()

    @property
    def blocks_intake(self) -> bool:
        """Whether the organization cannot admit this animal."""
        return self.type == OUT_OF_SCOPE or self.status == IntakeStatus.NOT_SUPPORTED

    @property
    def headline(self) -> str:
        if self.type == OUT_OF_SCOPE:
            return "Not a wildlife case we can admit"
        if self.status == IntakeStatus.NOT_SUPPORTED:
            return "We're not able to admit this species"
        return "Admission may be possible; let's evaluate together"


def _referrals(data: dict[str, Any]) -> tuple[PolicyReferral, ...]:
    return tuple(PolicyReferral.from_dict(item) for item in data.get("referrals") or [])


class SpeciesPolicyDirectory:
    """Out-of-scope species and per-organization intake policies."""

    def __init__(
        self,
        out_of_scope: list[dict[str, Any]],
        org_intake: list[dict[str, Any]],
        policy_hash: str = "",
    ) -> None:
        self._out_of_scope = {item["slug"]: item for item in out_of_scope}
        self._org_intake = {
            (item["org"].lower(), item["species"]): item for item in org_intake
        }
        # Out-of-scope animals are absent from the wildlife catalog, so they
        # carry their own names for free-text detection
        self._terms = [
            SpeciesRecord(
                slug=item["slug"],
                common_name=item.get("common_name", item["slug"]),
                aliases=tuple(item.get("aliases", [])),
            )
            for item in out_of_scope
        ]
        self.policy_hash = policy_hash

    @classmethod
    def load(
        cls, filename: str = "species_policy.yaml", directory: Path | None = None
    ) -> "SpeciesPolicyDirectory":
        document, policy_hash = load_yaml_document(filename, directory)
        return cls(
            document.get("out_of_scope", []),
            document.get("org_intake", []),
            policy_hash,
        )

    def detect(self, text: str | None) -> str | None:
        """Return the out-of-scope slug mentioned in free text, if any."""
        return detect_species_slug(text, self._terms)

    def resolve(self, species_slug: str | None, org_slug: str | None) -> SpeciesPolicy | None:
        """Resolve the policy for a species at an organization.

        Args:
            species_slug: Canonical slug (wildlife or out-of-scope)
            org_slug: Organization site code

        Returns:
            SpeciesPolicy, or None when no policy applies
        """
        if not species_slug:
            return None

        entry = self._out_of_scope.get(species_slug)
        if entry is not None:
            return SpeciesPolicy(
                type=OUT_OF_SCOPE,
                public_message=entry["public_message"],
                referrals=_referrals(entry),
            )

        if not org_slug:
            return None

        entry = self._org_intake.get((org_slug.lower(), species_slug))
        if entry is not None:
            return SpeciesPolicy(
                type=ORG_INTAKE,
                public_message=entry.get("public_message"),
                status=IntakeStatus(entry["status"]),
                referrals=_referrals(entry),
            )

        return None
