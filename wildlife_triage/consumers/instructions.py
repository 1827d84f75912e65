"""Instruction steps selection for a routed case.

Selection order:
1. ``dispatch`` only: the public-health exposure playbook
2. Curated markdown ``triage/<decision>.<species_slug>.md``
3. Curated markdown ``triage/<decision>.default.md``
4. The species' care advice, split into short lines
5. Built-in generic steps for the decision

Curated lines support ``{{placeholder}}`` substitution.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from wildlife_triage.routing.models import Decision

logger = logging.getLogger(__name__)

DISPATCH_PLAYBOOK = "public_health/exposure.md"
DISPATCH_STEPS_TITLE = "Public Health: do this now"
DEFAULT_STEPS_TITLE = "Do this next"
MAX_CARE_ADVICE_LINES = 8

GENERIC_STEPS: dict[Decision, tuple[str, ...]] = {
    Decision.MONITOR: (
        "Observe from a distance for 2-4 hours.",
        "Keep people and pets away.",
        "If condition worsens, start containment and call back.",
    ),
    Decision.SELF_HELP: (
        "Prepare a ventilated cardboard box with a soft towel.",
        "Place the animal inside, keep in a dark, quiet room.",
        "Do not feed or give water unless specifically instructed.",
    ),
    Decision.BRING_IN: (
        "Line a ventilated box/kennel with a towel; no wire cages.",
        "Gently place the animal inside; keep dark, quiet, and warm.",
        "Transport directly to the center; avoid loud music and stops.",
    ),
    Decision.REFERRAL: (
        "Do not handle unless absolutely necessary and safe.",
        "Use a towel/blanket to cover and gently contain if required.",
        "Contact the referral partner for intake instructions.",
    ),
    Decision.DISPATCH: (
        "For immediate safety, call local non-emergency dispatch or Animal Control.",
        "Provide exact location and species description.",
        "Maintain safe distance until responders arrive.",
    ),
}

COUNTY_SUFFIXES = (" County", " Parish", " Borough", " Census Area", " Municipality")

PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-zA-Z0-9_.-]+)\s*\}\}")


@dataclass(frozen=True)
class InstructionSteps:
    """Selected steps and where they came from."""

    decision: Decision
    title: str
    lines: tuple[str, ...]
    source: str


def parse_markdown(markdown: str) -> tuple[str | None, list[str]]:
    """Parse curated markdown into an optional title and step lines.

    A leading ``#`` heading becomes the title. Bulleted and numbered items
    become one line each; other text is merged into paragraphs.
    """
    rows = markdown.splitlines()
    title: str | None = None
    start = 0

    if rows and rows[0].strip().startswith("#"):
        title = rows[0].lstrip("#").strip()
        start = 1

    lines: list[str] = []
    paragraph: list[str] = []

    def flush() -> None:
        text = " ".join(paragraph).strip()
        if text:
            lines.append(text)
        paragraph.clear()

    for row in rows[start:]:
        if not row.strip():
            flush()
            continue
        match = re.match(r"^\s*(?:[-*]\s+|\d+\.\s+)(.+)$", row)
        if match:
            flush()
            lines.append(match.group(1).strip())
        else:
            paragraph.append(row.strip())
    flush()

    return title, lines


def county_name(raw: str | None) -> str | None:
    """Strip a trailing "County"/"Parish"/... suffix."""
    if not raw:
        return raw
    out = raw
    for suffix in COUNTY_SUFFIXES:
        if out.lower().endswith(suffix.lower()):
            out = out[: -len(suffix)]
    return out.strip()


def apply_placeholders(lines: list[str], values: Mapping[str, str | None]) -> list[str]:
    """Replace ``{{key}}`` tokens; unknown or empty keys are left in place."""

    def substitute(match: re.Match[str]) -> str:
        value = values.get(match.group(1))
        return str(value) if value else match.group(0)

    return [PLACEHOLDER_RE.sub(substitute, line) for line in lines]


def split_care_advice(advice: str) -> list[str]:
    """Split free-form care advice into at most eight concise lines."""
    parts = [part.strip() for part in re.split(r"[\n\r▸]", advice)]
    return [part for part in parts if part][:MAX_CARE_ADVICE_LINES]


class CuratedInstructions:
    """Instruction lookup backed by a directory of curated markdown files."""

    def __init__(self, content_dir: Path) -> None:
        self.content_dir = content_dir

    def _read(self, relative: str) -> tuple[str | None, list[str]] | None:
        path = self.content_dir / relative
        if not path.is_file():
            return None
        try:
            return parse_markdown(path.read_text(encoding="utf-8"))
        except OSError as exc:
            logger.warning(f"Could not read curated instructions {relative}: {exc}")
            return None

    def candidates(self, decision: Decision, species_slug: str | None) -> list[str]:
        """Curated files to try, most specific first."""
        names: list[str] = []
        if decision == Decision.DISPATCH:
            names.append(DISPATCH_PLAYBOOK)
        if species_slug:
            names.append(f"triage/{decision.value}.{species_slug}.md")
        names.append(f"triage/{decision.value}.default.md")
        return names

    def select(
        self,
        decision: Decision,
        species_slug: str | None = None,
        care_advice: str | None = None,
        placeholders: Mapping[str, str | None] | None = None,
    ) -> InstructionSteps:
        """Select steps for a decision.

        Args:
            decision: Final routed decision
            species_slug: Canonical species slug, if known
            care_advice: Species care advice from metadata
            placeholders: Values for ``{{key}}`` substitution

        Returns:
            InstructionSteps with title, lines and source
        """
        default_title = DISPATCH_STEPS_TITLE if decision == Decision.DISPATCH else DEFAULT_STEPS_TITLE

        for name in self.candidates(decision, species_slug):
            parsed = self._read(name)
            if parsed is None:
                continue
            title, lines = parsed
            if not lines:
                continue
            lines = apply_placeholders(lines, placeholders or {})
            return InstructionSteps(
                decision=decision,
                title=title or default_title,
                lines=tuple(lines),
                source=name,
            )

        # The dispatch playbook always takes precedence over species advice
        if care_advice and decision != Decision.DISPATCH:
            lines = split_care_advice(care_advice)
            if lines:
                return InstructionSteps(
                    decision=decision,
                    title=default_title,
                    lines=tuple(lines),
                    source="species.care_advice",
                )

        return InstructionSteps(
            decision=decision,
            title=default_title,
            lines=GENERIC_STEPS[decision],
            source="generic",
        )
