"""Case context builder.

Combines caller-supplied observations with species metadata and the
organization's policy into the immutable CaseContext the router needs.
Species lookups go through an injected read-through cache, outside the
pure router.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from wildlife_triage.routing.context import parse_after_hours_rule
from wildlife_triage.routing.models import (
    AfterHoursRule,
    AnimalObservation,
    CaseContext,
    Decision,
    ExposureSignals,
    OrgPolicy,
    SpeciesFlags,
)
from wildlife_triage.species.cache import CachedSpeciesLookup
from wildlife_triage.species.catalog import SpeciesNotFoundError, SpeciesRecord, detect_species_slug
from wildlife_triage.species.levels import LevelPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrgConfig:
    """Organization settings used to fill in the org section."""

    site_code: str
    timezone: str
    after_hours_rule: str = "deflect"
    open_hour: int = 8
    close_hour: int = 20


@dataclass(frozen=True)
class BuiltContext:
    """A case context plus the species record it was built from."""

    context: CaseContext
    species: SpeciesRecord | None = None


def is_after_hours(now: datetime, tz_name: str, open_hour: int, close_hour: int) -> bool:
    """Check whether ``now`` falls outside opening hours in the org timezone.

    Opening hours are [open_hour, close_hour). A close hour earlier than the
    open hour spans midnight (22 to 6 is open overnight). Equal hours mean
    open around the clock.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(ZoneInfo(tz_name))
    hour = local.hour
    if open_hour == close_hour:
        return False
    if open_hour < close_hour:
        return not (open_hour <= hour < close_hour)
    return close_hour <= hour < open_hour


class CaseContextBuilder:
    """Builds CaseContext records from intake data."""

    def __init__(
        self,
        species: CachedSpeciesLookup,
        level_policy: LevelPolicy,
        org: OrgConfig,
    ) -> None:
        self.species = species
        self.level_policy = level_policy
        self.org = org

        rule = parse_after_hours_rule(org.after_hours_rule)
        if not isinstance(rule, AfterHoursRule):
            logger.warning(
                f"Unrecognized after-hours rule {org.after_hours_rule!r}; "
                "routing will default to deflect"
            )
        self.after_hours_rule = rule

    def resolve_species(self, animal: AnimalObservation) -> SpeciesRecord | None:
        """Find the species record by slug, or detect it from free text."""
        slug = animal.species_slug
        if not slug and animal.species_text:
            slug = detect_species_slug(animal.species_text, self.species.all())
        if not slug:
            return None

        try:
            return self.species.get(slug)
        except SpeciesNotFoundError:
            logger.warning(f"Species {slug!r} not in catalog; using default flags")
            return None

    def species_flags(self, record: SpeciesRecord | None) -> SpeciesFlags:
        """Map a species record to flags through the level policy table."""
        if record is None:
            return SpeciesFlags()

        mapping = self.level_policy.map_flags(record.levels)
        for resolution in mapping.ambiguous:
            logger.warning(
                f"Ambiguous level {resolution.level!r} for {resolution.flag} "
                f"on {record.slug}; mapped to {resolution.value} "
                f"(policy v{self.level_policy.version}, needs review)",
                extra={"species_slug": record.slug},
            )
        return mapping.flags

    def build(
        self,
        animal: AnimalObservation,
        exposure: ExposureSignals | None = None,
        after_hours: bool | None = None,
        explicit_decision: Decision | None = None,
        now: datetime | None = None,
    ) -> BuiltContext:
        """Build a case context for one routing pass.

        Args:
            animal: Caller's observation of the animal
            exposure: Human exposure signals
            after_hours: Caller-supplied after-hours state; computed from
                         the org's opening hours when None
            explicit_decision: Upstream decision override
            now: Current time, for the after-hours computation

        Returns:
            BuiltContext with the CaseContext and resolved species record
        """
        record = self.resolve_species(animal)
        if record is not None and animal.species_slug != record.slug:
            animal = replace(animal, species_slug=record.slug)

        if after_hours is None:
            after_hours = is_after_hours(
                now or datetime.now(timezone.utc),
                self.org.timezone,
                self.org.open_hour,
                self.org.close_hour,
            )

        context = CaseContext(
            species_flags=self.species_flags(record),
            animal=animal,
            exposure=exposure or ExposureSignals(),
            org=OrgPolicy(
                after_hours=after_hours,
                after_hours_rule=self.after_hours_rule,
                site_code=self.org.site_code,
                timezone=self.org.timezone,
            ),
            explicit_decision=explicit_decision,
        )
        return BuiltContext(context=context, species=record)
