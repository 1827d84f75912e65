"""Read-through cache for species lookups."""

import time
from collections.abc import Callable

from wildlife_triage.species.catalog import SpeciesLookup, SpeciesRecord


class CachedSpeciesLookup:
    """Read-through TTL cache in front of a species lookup.

    Entries expire ``ttl_seconds`` after they were fetched. Misses
    (unknown species) are not cached so a later seed is picked up on the
    next request. ``invalidate`` and ``clear`` drop entries explicitly,
    e.g. after the catalog is reseeded.
    """

    def __init__(
        self,
        source: SpeciesLookup,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, SpeciesRecord]] = {}
        self._all: tuple[float, list[SpeciesRecord]] | None = None

    def _fresh(self, fetched_at: float) -> bool:
        return self._clock() - fetched_at < self.ttl_seconds

    def get(self, slug: str) -> SpeciesRecord:
        entry = self._entries.get(slug)
        if entry is not None and self._fresh(entry[0]):
            return entry[1]

        record = self.source.get(slug)
        self._entries[slug] = (self._clock(), record)
        return record

    def all(self) -> list[SpeciesRecord]:
        if self._all is not None and self._fresh(self._all[0]):
            return self._all[1]

        records = self.source.all()
        self._all = (self._clock(), records)
        return records

    def invalidate(self, slug: str) -> None:
        """Drop one cached species and the cached full listing."""
        self._entries.pop(slug, None)
        self._all = None

    def clear(self) -> None:
        """Drop every cached entry."""
        self._entries.clear()
        self._all = None
