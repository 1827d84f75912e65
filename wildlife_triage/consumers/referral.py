"""Referral partner lookup.

Referral attachment has two triggers: the router chose ``referral``, or
the species itself requires referral. The second path stays in place even
when an upstream override made the router choose something else.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

from wildlife_triage.routing.models import Decision, RouteResult, SpeciesFlags
from wildlife_triage.species.loader import load_yaml_document


def referral_needed(result: RouteResult, flags: SpeciesFlags) -> bool:
    """Whether the referral lookup should run for a routed case."""
    return result.decision == Decision.REFERRAL or flags.referral_required


def maps_url_for(name: str) -> str:
    """Build a maps search URL for a partner name."""
    return f"https://www.google.com/maps/search/?api=1&query={quote(name)}"


@dataclass(frozen=True)
class ReferralPartner:
    """Partner organization that accepts referrals."""

    id: str
    name: str
    phone: str | None = None
    url: str | None = None
    coverage: str | None = None
    categories: tuple[str, ...] = ()
    species: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReferralPartner":
        return cls(
            id=data["id"],
            name=data["name"],
            phone=data.get("phone"),
            url=data.get("url"),
            coverage=data.get("coverage"),
            categories=tuple(c.lower() for c in data.get("categories", [])),
            species=tuple(data.get("species", [])),
        )

    @property
    def directions_url(self) -> str:
        return maps_url_for(self.name)


@dataclass(frozen=True)
class ReferralResult:
    """Outcome of a referral lookup."""

    needed: bool
    target: ReferralPartner | None = None
    matched_by: str = "none"

    @property
    def directions_url(self) -> str | None:
        return self.target.directions_url if self.target else None

    def lines(self) -> list[str]:
        """Human-readable lines for a referral block."""
        if self.target is None:
            return []
        lines = [self.target.name]
        if self.target.phone:
            lines.append(f"Phone: {self.target.phone}")
        if self.target.url:
            lines.append(f"Website: {self.target.url}")
        if self.target.coverage:
            lines.append(f"Notes: {self.target.coverage}")
        lines.append(f"Directions: {self.target.directions_url}")
        return lines


class ReferralDirectory:
    """Resolves referral partners by species slug, then category."""

    def __init__(self, partners: list[ReferralPartner], default_partner_id: str | None = None) -> None:
        self.partners = partners
        self.default_partner_id = default_partner_id

    @classmethod
    def load(cls, filename: str = "referral_partners.yaml", directory: Path | None = None) -> "ReferralDirectory":
        document, _ = load_yaml_document(filename, directory)
        partners = [ReferralPartner.from_dict(item) for item in document.get("partners", [])]
        return cls(partners, document.get("default_partner"))

    def _default(self) -> ReferralPartner | None:
        for partner in self.partners:
            if partner.id == self.default_partner_id:
                return partner
        return None

    def search(
        self,
        species_slug: str | None,
        category: str | None = None,
        referral_required: bool = False,
    ) -> ReferralResult:
        """Find the partner for a species.

        Args:
            species_slug: Canonical species slug
            category: Species category from metadata (e.g., "raptor")
            referral_required: Species-level referral requirement

        Returns:
            ReferralResult; ``needed`` is False when no partner applies
        """
        if species_slug:
            for partner in self.partners:
                if species_slug in partner.species:
                    return ReferralResult(needed=True, target=partner, matched_by="species")

        if category:
            for partner in self.partners:
                if category.lower() in partner.categories:
                    return ReferralResult(needed=True, target=partner, matched_by="category")

        if referral_required:
            partner = self._default()
            if partner is not None:
                return ReferralResult(needed=True, target=partner, matched_by="default")

        return ReferralResult(needed=False)
