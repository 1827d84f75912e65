"""Public-health contact lookup and dispatch enrichment.

Dispatch cases get a local public-health contact appended to the steps
block. The lookup prefers a ZIP match and falls back to the county.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wildlife_triage.consumers.blocks import STEPS, Block
from wildlife_triage.routing.models import Decision
from wildlife_triage.species.loader import load_yaml_document

logger = logging.getLogger(__name__)

PUBLIC_HEALTH_STEPS_TITLE = "Public Health: do this now"
CONTACT_SEPARATOR = "--"


@dataclass(frozen=True)
class PublicHealthContact:
    """Public-health contact for a ZIP code or county."""

    id: str
    region_type: str
    region_value: str
    name: str
    phone: str | None = None
    url: str | None = None
    hours: str | None = None
    notes: str | None = None
    priority: int = 100
    active: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublicHealthContact":
        return cls(
            id=data["id"],
            region_type=data["region_type"],
            region_value=str(data["region_value"]),
            name=data["name"],
            phone=data.get("phone"),
            url=data.get("url"),
            hours=data.get("hours"),
            notes=data.get("notes"),
            priority=int(data.get("priority", 100)),
            active=bool(data.get("active", True)),
        )


@dataclass(frozen=True)
class PublicHealthMatch:
    """Best contact and how it was found ("zip", "county" or "none")."""

    best: PublicHealthContact | None
    via: str = "none"


class PublicHealthDirectory:
    """In-memory public-health contact directory."""

    def __init__(self, contacts: list[PublicHealthContact]) -> None:
        self.contacts = contacts

    @classmethod
    def load(
        cls,
        filename: str = "public_health_contacts.yaml",
        directory: Path | None = None,
    ) -> "PublicHealthDirectory":
        document, _ = load_yaml_document(filename, directory)
        return cls([PublicHealthContact.from_dict(item) for item in document.get("contacts", [])])

    def _find_by(self, region_type: str, region_value: str) -> PublicHealthContact | None:
        candidates = [
            c for c in self.contacts
            if c.active
            and c.region_type == region_type
            and c.region_value.lower() == region_value.strip().lower()
        ]
        candidates.sort(key=lambda c: (c.priority, c.name))
        return candidates[0] if candidates else None

    def lookup(self, zip_code: str | None = None, county: str | None = None) -> PublicHealthMatch:
        """Look up a contact by ZIP first, county second."""
        if zip_code:
            hit = self._find_by("zip", zip_code)
            if hit:
                return PublicHealthMatch(best=hit, via="zip")
        if county:
            hit = self._find_by("county", county)
            if hit:
                return PublicHealthMatch(best=hit, via="county")
        return PublicHealthMatch(best=None)


def _contact_header(contact: PublicHealthContact, via: str) -> str:
    return f"Local contact ({via}): {contact.name}"


def contact_lines(contact: PublicHealthContact, via: str) -> list[str]:
    """Readable lines for one contact, kept together as a group."""
    lines = [CONTACT_SEPARATOR, _contact_header(contact, via)]
    if contact.phone:
        lines.append(f"Phone: {contact.phone}")
    if contact.hours:
        lines.append(f"Hours: {contact.hours}")
    if contact.url:
        lines.append(f"URL: {contact.url}")
    if contact.notes:
        lines.append(f"Notes: {contact.notes}")
    return lines


def _already_listed(block: Block, contact: PublicHealthContact) -> bool:
    suffix = f"): {contact.name}"
    return any(
        line.startswith("Local contact (") and line.endswith(suffix)
        for line in block.lines
    )


def append_contact(blocks: list[Block], contact: PublicHealthContact, via: str) -> list[Block]:
    """Append contact lines to the first steps block, exactly once.

    Creates a public-health steps block when none exists. Returns a new
    list; the input blocks are not modified. A contact whose name is
    already listed is not appended again.
    """
    result = list(blocks)
    for index, block in enumerate(result):
        if block.type == STEPS:
            if _already_listed(block, contact):
                return result
            result[index] = block.with_lines(*contact_lines(contact, via))
            return result

    result.append(Block(type=STEPS, title=PUBLIC_HEALTH_STEPS_TITLE, lines=tuple(contact_lines(contact, via))))
    return result


def enrich_dispatch_steps(
    blocks: list[Block],
    decision: Decision,
    directory: PublicHealthDirectory,
    zip_code: str | None = None,
    county: str | None = None,
) -> list[Block]:
    """Add the local public-health contact to a dispatch response.

    Non-dispatch decisions and lookups without a match return the blocks
    unchanged.
    """
    if decision != Decision.DISPATCH:
        return list(blocks)

    match = directory.lookup(zip_code=zip_code, county=county)
    if match.best is None:
        logger.info(f"No public-health contact for zip={zip_code} county={county}")
        return list(blocks)

    return append_contact(blocks, match.best, match.via)
