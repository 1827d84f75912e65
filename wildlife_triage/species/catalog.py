"""Species metadata catalog.

The catalog is a lookup collaborator: the router never touches it
directly. The context builder reads species records through a cache and
maps their risk levels to flags.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from wildlife_triage.species.levels import FLAG_NAMES
from wildlife_triage.species.loader import load_yaml_document


class SpeciesNotFoundError(LookupError):
    """Raised when a species slug is not in the catalog."""

    pass


@dataclass(frozen=True)
class SpeciesRecord:
    """Species metadata row."""

    slug: str
    common_name: str
    category: str | None = None
    levels: dict[str, Any] = field(default_factory=dict)
    care_advice: str | None = None
    aliases: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpeciesRecord":
        return cls(
            slug=data["slug"],
            common_name=data.get("common_name", data["slug"]),
            category=data.get("category"),
            levels={name: data.get(name) for name in FLAG_NAMES if name in data},
            care_advice=data.get("care_advice"),
            aliases=tuple(data.get("aliases", [])),
        )


class SpeciesLookup(Protocol):
    """Read interface for species metadata."""

    def get(self, slug: str) -> SpeciesRecord: ...

    def all(self) -> list[SpeciesRecord]: ...


class YamlSpeciesCatalog:
    """Species catalog backed by a YAML seed file."""

    def __init__(self, records: list[SpeciesRecord], catalog_hash: str = "") -> None:
        self._records = {record.slug: record for record in records}
        self.catalog_hash = catalog_hash

    @classmethod
    def load(cls, filename: str = "species.yaml", directory: Path | None = None) -> "YamlSpeciesCatalog":
        document, catalog_hash = load_yaml_document(filename, directory)
        records = [SpeciesRecord.from_dict(item) for item in document.get("species", [])]
        return cls(records, catalog_hash)

    def get(self, slug: str) -> SpeciesRecord:
        try:
            return self._records[slug]
        except KeyError:
            raise SpeciesNotFoundError(f"Unknown species: {slug}") from None

    def all(self) -> list[SpeciesRecord]:
        return list(self._records.values())


def _term_pattern(term: str) -> re.Pattern[str]:
    # Word boundary that also treats "_" and "-" as separators and allows a plural "s"
    return re.compile(
        rf"(?:^|\b|_|-){re.escape(term)}(?:\b|_|-|s\b|$)",
        re.IGNORECASE,
    )


def detect_species_slug(text: str | None, records: list[SpeciesRecord]) -> str | None:
    """Return the first canonical slug mentioned in free text.

    Slugs, common names and aliases are matched on word boundaries,
    longest term first, so "cat" never matches inside "bobcat".
    """
    query = (text or "").lower()
    if not query:
        return None

    terms: list[tuple[str, str]] = []
    for record in records:
        candidates = [record.slug, record.slug.replace("_", " "), record.common_name, *record.aliases]
        for term in candidates:
            if term:
                terms.append((term.lower(), record.slug))

    terms.sort(key=lambda item: len(item[0]), reverse=True)

    for term, slug in terms:
        if _term_pattern(term).search(query):
            return slug

    return None
