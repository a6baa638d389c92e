"""Supabase-backed nutrition cache store."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from nutrition_resolver.services.cache import CacheEntry, CacheStore

_TABLE = "nutrition_cache"


@dataclass
class SupabaseCacheStore(CacheStore):
    """Cache rows in the ``nutrition_cache`` table, unique on ``query_key``."""

    client: Client

    def get(self, keys: list[str], now: datetime) -> list[CacheEntry]:
        """Return unexpired rows for the given keys in one query."""
        if not keys:
            return []
        response = (
            self.client.table(_TABLE)
            .select("query_key, normalized_name, source, data, expires_at")
            .in_("query_key", keys)
            .gt("expires_at", now.isoformat())
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def upsert(self, entry: CacheEntry) -> None:
        """Insert or refresh the row for the entry's key."""
        self.client.table(_TABLE).upsert(
            {
                "query_key": entry.query_key,
                "normalized_name": entry.normalized_name,
                "source": entry.source,
                "data": entry.payload,
                "expires_at": entry.expires_at.isoformat(),
            },
            on_conflict="query_key",
        ).execute()


def _parse_entry(row: dict[str, object]) -> CacheEntry:
    """Parse a cache row into an entry."""
    data = row.get("data")
    return CacheEntry(
        query_key=str(row["query_key"]),
        normalized_name=str(row.get("normalized_name", "")),
        source=str(row.get("source", "")),
        payload=data if isinstance(data, dict) else {},
        expires_at=datetime.fromisoformat(str(row["expires_at"])),
    )
