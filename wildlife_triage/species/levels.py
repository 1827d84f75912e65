"""Species risk level policy table.

Maps free-form metadata levels ("always", "conditional", ...) to the
boolean flags the router consumes. The table lives in a versioned YAML
ruleset so the mapping of ambiguous levels is explicit and reviewable.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wildlife_triage.routing.models import SpeciesFlags
from wildlife_triage.species.loader import load_yaml_document

FLAG_NAMES = (
    "dangerous",
    "rabies_vector",
    "referral_required",
    "intervention_needed",
    "after_hours_allowed",
)


@dataclass(frozen=True)
class LevelResolution:
    """How one metadata level was resolved to a flag."""

    flag: str
    level: str
    value: bool
    ambiguous: bool


@dataclass(frozen=True)
class FlagMapping:
    """Species flags plus any ambiguous resolutions that need review."""

    flags: SpeciesFlags
    ambiguous: tuple[LevelResolution, ...] = ()


@dataclass
class LevelPolicy:
    """Level-to-boolean policy loaded from a ruleset."""

    truthy: frozenset[str]
    falsy: frozenset[str]
    ambiguous_levels: frozenset[str]
    ambiguous_defaults: dict[str, bool] = field(default_factory=dict)
    version: str = "unknown"
    policy_hash: str = ""

    @classmethod
    def from_document(cls, document: dict[str, Any], policy_hash: str = "") -> "LevelPolicy":
        levels = document.get("levels", {})
        return cls(
            truthy=frozenset(str(v).lower() for v in levels.get("truthy", [])),
            falsy=frozenset(str(v).lower() for v in levels.get("falsy", [])),
            ambiguous_levels=frozenset(str(v).lower() for v in levels.get("ambiguous", [])),
            ambiguous_defaults={
                k: bool(v) for k, v in document.get("ambiguous_defaults", {}).items()
            },
            version=str(document.get("version", "unknown")),
            policy_hash=policy_hash,
        )

    @classmethod
    def load(cls, filename: str, directory: Path | None = None) -> "LevelPolicy":
        document, policy_hash = load_yaml_document(filename, directory)
        return cls.from_document(document, policy_hash)

    def resolve(self, flag: str, level: Any) -> LevelResolution:
        """Resolve a single metadata level for a flag.

        Booleans pass through; missing values are false. Anything not in
        the truthy or falsy lists takes the flag's ambiguous default.
        """
        if level is None:
            return LevelResolution(flag=flag, level="", value=False, ambiguous=False)
        if isinstance(level, bool):
            return LevelResolution(flag=flag, level=str(level).lower(), value=level, ambiguous=False)

        normalized = str(level).strip().lower()
        if normalized in self.truthy:
            return LevelResolution(flag=flag, level=normalized, value=True, ambiguous=False)
        if normalized in self.falsy:
            return LevelResolution(flag=flag, level=normalized, value=False, ambiguous=False)

        return LevelResolution(
            flag=flag,
            level=normalized,
            value=self.ambiguous_defaults.get(flag, False),
            ambiguous=True,
        )

    def map_flags(self, levels: dict[str, Any]) -> FlagMapping:
        """Map a species' metadata levels to SpeciesFlags."""
        resolutions = [self.resolve(name, levels.get(name)) for name in FLAG_NAMES]
        return FlagMapping(
            flags=SpeciesFlags(**{r.flag: r.value for r in resolutions}),
            ambiguous=tuple(r for r in resolutions if r.ambiguous),
        )
