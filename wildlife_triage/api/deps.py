"""FastAPI dependency injection utilities."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from wildlife_triage.consumers.instructions import CuratedInstructions
from wildlife_triage.consumers.public_health import PublicHealthDirectory
from wildlife_triage.consumers.referral import ReferralDirectory
from wildlife_triage.core.config import Settings, get_settings
from wildlife_triage.routing.strategies import build_router
from wildlife_triage.services.context_builder import CaseContextBuilder, OrgConfig
from wildlife_triage.services.triage import TriageService
from wildlife_triage.species.cache import CachedSpeciesLookup
from wildlife_triage.species.catalog import YamlSpeciesCatalog
from wildlife_triage.species.levels import LevelPolicy
from wildlife_triage.species.policy import SpeciesPolicyDirectory


def create_triage_service(settings: Settings) -> TriageService:
    """Wire a TriageService from settings.

    Args:
        settings: Application settings

    Returns:
        Configured TriageService
    """
    species = CachedSpeciesLookup(
        YamlSpeciesCatalog.load(directory=settings.data_dir),
        ttl_seconds=settings.species_cache_ttl_seconds,
    )
    builder = CaseContextBuilder(
        species=species,
        level_policy=LevelPolicy.load(settings.species_levels_ruleset),
        org=OrgConfig(
            site_code=settings.org_site_code,
            timezone=settings.org_timezone,
            after_hours_rule=settings.org_after_hours_rule,
            open_hour=settings.org_open_hour,
            close_hour=settings.org_close_hour,
        ),
    )
    return TriageService(
        builder=builder,
        router=build_router(settings),
        instructions=CuratedInstructions(settings.content_dir),
        referrals=ReferralDirectory.load(directory=settings.data_dir),
        public_health=PublicHealthDirectory.load(directory=settings.data_dir),
        policies=SpeciesPolicyDirectory.load(directory=settings.data_dir),
    )


@lru_cache
def get_triage_service() -> TriageService:
    """Get the process-wide TriageService."""
    return create_triage_service(get_settings())


TriageServiceDep = Annotated[TriageService, Depends(get_triage_service)]
