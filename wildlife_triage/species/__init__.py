"""Species metadata, risk level policy, intake policy and lookup cache."""

from wildlife_triage.species.cache import CachedSpeciesLookup
from wildlife_triage.species.catalog import (
    SpeciesLookup,
    SpeciesNotFoundError,
    SpeciesRecord,
    YamlSpeciesCatalog,
    detect_species_slug,
)
from wildlife_triage.species.levels import FlagMapping, LevelPolicy, LevelResolution
from wildlife_triage.species.policy import (
    IntakeStatus,
    SpeciesPolicy,
    SpeciesPolicyDirectory,
)

__all__ = [
    "CachedSpeciesLookup",
    "FlagMapping",
    "IntakeStatus",
    "LevelPolicy",
    "LevelResolution",
    "SpeciesLookup",
    "SpeciesNotFoundError",
    "SpeciesPolicy",
    "SpeciesPolicyDirectory",
    "SpeciesRecord",
    "YamlSpeciesCatalog",
    "detect_species_slug",
]
