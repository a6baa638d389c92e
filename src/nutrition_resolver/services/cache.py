"""Nutrition cache keyed by normalized query text."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from nutrition_resolver.domain.nutrition import NutritionData

_logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=7)


def normalize_query(query: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return " ".join(query.lower().split())


@dataclass(frozen=True)
class CacheEntry:
    """One cached lookup, unique per ``query_key``."""

    query_key: str
    normalized_name: str
    source: str
    payload: dict[str, object]
    expires_at: datetime


class CacheStore(Protocol):
    """Key-value store with TTL rows."""

    def get(self, keys: list[str], now: datetime) -> list[CacheEntry]:
        """Return entries for ``keys`` that expire after ``now``."""

    def upsert(self, entry: CacheEntry) -> None:
        """Insert or replace the entry for ``entry.query_key``."""


@dataclass
class InMemoryCacheStore(CacheStore):
    """Process-local cache store; expired rows are skipped, not swept."""

    _entries: dict[str, CacheEntry] = field(default_factory=dict)

    def get(self, keys: list[str], now: datetime) -> list[CacheEntry]:
        """Return unexpired entries for the given keys."""
        entries = (self._entries.get(key) for key in dict.fromkeys(keys))
        return [entry for entry in entries if entry and entry.expires_at > now]

    def upsert(self, entry: CacheEntry) -> None:
        """Store an entry, replacing any previous row for its key."""
        self._entries[entry.query_key] = entry


@dataclass
class NutritionCache:
    """TTL cache of text lookups shared by text, batch and barcode paths."""

    store: CacheStore
    ttl: timedelta = DEFAULT_TTL
    clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC)

    def get_many(self, queries: list[str]) -> dict[str, NutritionData]:
        """Return cached data keyed by the caller's original query strings."""
        if not queries:
            return {}
        keys = {query: normalize_query(query) for query in queries}
        try:
            entries = self.store.get(list(dict.fromkeys(keys.values())), self.clock())
        except Exception:
            _logger.exception("Nutrition cache read failed")
            return {}

        by_key: dict[str, NutritionData] = {}
        for entry in entries:
            try:
                by_key[entry.query_key] = NutritionData.from_dict(entry.payload)
            except ValueError:
                _logger.warning("Ignoring malformed cache row for %r", entry.query_key)
        return {query: by_key[key] for query, key in keys.items() if key in by_key}

    def get(self, query: str) -> NutritionData | None:
        """Return cached data for one query."""
        return self.get_many([query]).get(query)

    def put(self, query: str, data: NutritionData) -> None:
        """Upsert data for a query; write failures are logged and skipped."""
        entry = CacheEntry(
            query_key=normalize_query(query),
            normalized_name=data.name,
            source=data.source.value,
            payload=data.to_dict(),
            expires_at=self.clock() + self.ttl,
        )
        try:
            self.store.upsert(entry)
        except Exception:
            _logger.exception("Nutrition cache write failed for %r", entry.query_key)
