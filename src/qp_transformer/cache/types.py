"""Data types for the lookup cache."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_TTL_MS = 24 * 60 * 60 * 1000  # 24 hours
DEFAULT_MAX_MEMORY_ENTRIES = 1000


@dataclass(frozen=True)
class CacheEntry:
    """One cached lookup payload plus the parameters that produced it.

    Entries are replaced wholesale on update, never mutated.
    """

    key: str
    payload: Any
    created_at: int  # epoch milliseconds
    ttl: int  # milliseconds
    original_query: str
    language: str
    limit: int
    kind_filter: str

    def is_valid(self, now_ms: int) -> bool:
        if self.ttl <= 0:
            return False
        return now_ms - self.created_at < self.ttl

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.created_at

    def to_record(self) -> dict[str, Any]:
        """Serializable record used by the durable tiers."""
        return {
            "key": self.key,
            "payload": self.payload,
            "created_at": self.created_at,
            "ttl_millis": self.ttl,
            "original_query": self.original_query,
            "language": self.language,
            "limit": self.limit,
            "kind_filter": self.kind_filter,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> CacheEntry:
        """Rebuild an entry from a durable record. Raises KeyError/ValueError on bad data."""
        return cls(
            key=str(record["key"]),
            payload=record["payload"],
            created_at=int(record["created_at"]),
            ttl=int(record["ttl_millis"]),
            original_query=str(record.get("original_query", "")),
            language=str(record.get("language", "en")),
            limit=int(record.get("limit", 0)),
            kind_filter=str(record.get("kind_filter", "both")),
        )
