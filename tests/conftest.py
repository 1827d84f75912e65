"""Pytest configuration and fixtures."""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from wildlife_triage.api.deps import create_triage_service, get_triage_service
from wildlife_triage.consumers.instructions import CuratedInstructions
from wildlife_triage.consumers.public_health import PublicHealthDirectory
from wildlife_triage.consumers.referral import ReferralDirectory
from wildlife_triage.core.config import Settings
from wildlife_triage.main import app
from wildlife_triage.routing.models import (
    AnimalObservation,
    CaseContext,
    Decision,
    ExposureSignals,
    OrgPolicy,
    SpeciesFlags,
)
from wildlife_triage.routing.strategies import DeterministicRouter
from wildlife_triage.services.context_builder import CaseContextBuilder, OrgConfig
from wildlife_triage.services.triage import TriageService
from wildlife_triage.species.cache import CachedSpeciesLookup
from wildlife_triage.species.catalog import YamlSpeciesCatalog
from wildlife_triage.species.levels import LevelPolicy
from wildlife_triage.species.policy import SpeciesPolicyDirectory

PACKAGE_DIR = Path(__file__).resolve().parent.parent / "wildlife_triage"
DATA_DIR = PACKAGE_DIR / "data"
CONTENT_DIR = PACKAGE_DIR / "content" / "instructions"

CaseFactory = Callable[..., CaseContext]


@pytest.fixture
def make_case() -> CaseFactory:
    """Factory for CaseContext records with safe defaults."""

    def _make(
        flags: dict[str, Any] | None = None,
        animal: dict[str, Any] | None = None,
        exposure: dict[str, Any] | None = None,
        org: dict[str, Any] | None = None,
        explicit: Decision | None = None,
    ) -> CaseContext:
        return CaseContext(
            species_flags=SpeciesFlags(**(flags or {})),
            animal=AnimalObservation(**(animal or {})),
            exposure=ExposureSignals(**(exposure or {})),
            org=OrgPolicy(**(org or {})),
            explicit_decision=explicit,
        )

    return _make


@pytest.fixture(scope="session")
def level_policy() -> LevelPolicy:
    """Load the species level policy table."""
    return LevelPolicy.load("species-levels-v1.yaml")


@pytest.fixture(scope="session")
def species_catalog() -> YamlSpeciesCatalog:
    """Load the seeded species catalog."""
    return YamlSpeciesCatalog.load(directory=DATA_DIR)


@pytest.fixture
def org_config() -> OrgConfig:
    """Organization config with deflect after-hours policy."""
    return OrgConfig(
        site_code="WRCMN",
        timezone="America/Chicago",
        after_hours_rule="deflect",
        open_hour=8,
        close_hour=20,
    )


@pytest.fixture
def context_builder(
    species_catalog: YamlSpeciesCatalog,
    level_policy: LevelPolicy,
    org_config: OrgConfig,
) -> CaseContextBuilder:
    """Context builder over the seeded catalog."""
    return CaseContextBuilder(
        species=CachedSpeciesLookup(species_catalog, ttl_seconds=60),
        level_policy=level_policy,
        org=org_config,
    )


@pytest.fixture
def triage_service(context_builder: CaseContextBuilder) -> TriageService:
    """Deterministic triage service over the seeded data files."""
    return TriageService(
        builder=context_builder,
        router=DeterministicRouter(),
        instructions=CuratedInstructions(CONTENT_DIR),
        referrals=ReferralDirectory.load(directory=DATA_DIR),
        public_health=PublicHealthDirectory.load(directory=DATA_DIR),
        policies=SpeciesPolicyDirectory.load(directory=DATA_DIR),
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests (deterministic router, test env)."""
    return Settings(env="test", router_strategy="deterministic", org_after_hours_rule="deflect")


@pytest.fixture
def client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Create FastAPI test client with overridden dependencies."""
    service = create_triage_service(test_settings)
    app.dependency_overrides[get_triage_service] = lambda: service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
