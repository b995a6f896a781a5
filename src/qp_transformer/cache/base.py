"""Lookup cache interface and the two-tier (memory + durable) implementation."""

from __future__ import annotations

import asyncio
import copy
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from enum import Enum
from typing import Any

from qp_transformer.cache.keys import cache_key, kind_value
from qp_transformer.cache.types import (
    DEFAULT_MAX_MEMORY_ENTRIES,
    DEFAULT_TTL_MS,
    CacheEntry,
)
from qp_transformer.core.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class LookupCache(ABC):
    """Common interface for all cache backends.

    Callers depend only on this interface, so the durable backend can be
    swapped (or caching disabled) without touching the lookup client.
    """

    @abstractmethod
    async def get(
        self,
        query: str,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
    ) -> Any | None:
        """Return the cached payload, or None on miss/expiry. Never raises."""
        ...

    @abstractmethod
    async def set(
        self,
        query: str,
        payload: Any,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
        ttl_ms: int | None = None,
    ) -> None:
        """Store a payload. Durable write failures are logged, not raised."""
        ...

    @abstractmethod
    async def delete(
        self,
        query: str,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
    ) -> None:
        """Remove one entry from every tier."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove all entries from every tier."""
        ...

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """Occupancy and age information for observability."""
        ...

    async def clean_expired(self) -> int:
        """Sweep expired and corrupt entries. Returns the number removed."""
        return 0

    async def export_entries(self) -> dict[str, dict[str, Any]]:
        """Valid durable entries keyed by their original query."""
        return {}

    async def import_entries(self, entries: dict[str, dict[str, Any]]) -> int:
        """Re-store exported entries. Returns the number imported."""
        return 0

    async def close(self) -> None:
        """Release backend resources."""
        return None


class MemoryTier:
    """Bounded in-memory map with insertion-order eviction.

    Thread-safe: concurrent lookups share one tier, and durable reads run in
    worker threads before promoting into it.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_MEMORY_ENTRIES) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            if entry.key in self._entries:
                del self._entries[entry.key]
            elif len(self._entries) >= self._max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[entry.key] = entry

    def discard(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self, now_ms: int) -> list[str]:
        """Drop expired entries. Returns the removed keys."""
        with self._lock:
            expired = [k for k, e in self._entries.items() if not e.is_valid(now_ms)]
            for key in expired:
                del self._entries[key]
            return expired


class DurableStore(ABC):
    """Synchronous durable tier. TieredCache runs these calls off the event loop."""

    kind: str = "durable"

    @abstractmethod
    def read(self, key: str) -> dict[str, Any] | None:
        """Return the stored record, None if absent. Raises CacheError if corrupt."""
        ...

    @abstractmethod
    def write(self, record: dict[str, Any]) -> None:
        """Insert or fully replace the record stored under record['key']."""
        ...

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Delete the record. Returns False if there was nothing to delete."""
        ...

    @abstractmethod
    def purge(self) -> None:
        """Remove every record."""
        ...

    @abstractmethod
    def records(self) -> Iterator[tuple[str, dict[str, Any] | None]]:
        """Yield (key, record) pairs; record is None when it cannot be decoded."""
        ...

    @abstractmethod
    def size_bytes(self) -> int:
        """Approximate storage footprint."""
        ...

    def close(self) -> None:
        return None


class TieredCache(LookupCache):
    """Memory tier in front of a durable store, with TTL expiry."""

    def __init__(
        self,
        store: DurableStore,
        *,
        max_memory_entries: int = DEFAULT_MAX_MEMORY_ENTRIES,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._memory = MemoryTier(max_memory_entries)
        self._default_ttl_ms = default_ttl_ms
        self._clock = clock or SystemClock()

    @property
    def store(self) -> DurableStore:
        return self._store

    @property
    def memory(self) -> MemoryTier:
        return self._memory

    async def get(
        self,
        query: str,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
    ) -> Any | None:
        key = cache_key(query, language, limit, kind_filter)
        now = self._clock.now_ms()

        cached = self._memory.get(key)
        if cached is not None:
            if cached.is_valid(now):
                logger.debug("Memory cache hit for %r", query)
                return copy.deepcopy(cached.payload)
            self._memory.discard(key)

        try:
            record = await asyncio.to_thread(self._store.read, key)
            if record is None:
                return None
            entry = CacheEntry.from_record(record)
        except Exception:
            logger.warning("Durable cache read failed for %r", query, exc_info=True)
            return None

        if entry.is_valid(now):
            self._memory.put(entry)
            logger.debug("Durable cache hit for %r", query)
            return copy.deepcopy(entry.payload)

        await self._remove_durable(key)
        return None

    async def set(
        self,
        query: str,
        payload: Any,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
        ttl_ms: int | None = None,
    ) -> None:
        entry = CacheEntry(
            key=cache_key(query, language, limit, kind_filter),
            payload=copy.deepcopy(payload),
            created_at=self._clock.now_ms(),
            ttl=self._default_ttl_ms if ttl_ms is None else ttl_ms,
            original_query=query,
            language=language,
            limit=limit,
            kind_filter=kind_value(kind_filter),
        )
        self._memory.put(entry)

        try:
            await asyncio.to_thread(self._store.write, entry.to_record())
        except Exception:
            logger.warning("Durable cache write failed for %r", query, exc_info=True)

    async def delete(
        self,
        query: str,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
    ) -> None:
        key = cache_key(query, language, limit, kind_filter)
        self._memory.discard(key)
        await self._remove_durable(key)

    async def clear(self) -> None:
        self._memory.clear()
        try:
            await asyncio.to_thread(self._store.purge)
        except Exception:
            logger.warning("Failed to clear %s cache", self._store.kind, exc_info=True)

    async def get_stats(self) -> dict[str, Any]:
        now = self._clock.now_ms()
        entries = 0
        corrupt = 0
        size_bytes = 0
        oldest: CacheEntry | None = None
        newest: CacheEntry | None = None

        try:
            records = await asyncio.to_thread(lambda: list(self._store.records()))
            size_bytes = await asyncio.to_thread(self._store.size_bytes)
        except Exception:
            logger.warning("Failed to read %s cache stats", self._store.kind, exc_info=True)
            records = []

        # undecodable records are reported as corrupt, not as entries
        for _, record in records:
            if record is None:
                corrupt += 1
                continue
            try:
                entry = CacheEntry.from_record(record)
            except (KeyError, TypeError, ValueError):
                corrupt += 1
                continue
            entries += 1
            if oldest is None or entry.created_at < oldest.created_at:
                oldest = entry
            if newest is None or entry.created_at > newest.created_at:
                newest = entry

        return {
            "memory_cache": {
                "size": len(self._memory),
                "max_size": self._memory.max_size,
            },
            "durable_cache": {
                "type": self._store.kind,
                "entries": entries,
                "corrupt": corrupt,
                "total_size_bytes": size_bytes,
                "oldest_entry": _describe(oldest, now),
                "newest_entry": _describe(newest, now),
            },
        }

    async def clean_expired(self) -> int:
        """Remove expired entries from both tiers and corrupt durable records.

        Returns the number of distinct keys removed; an entry held in both
        tiers counts once.
        """
        now = self._clock.now_ms()
        removed = set(self._memory.sweep(now))

        try:
            records = await asyncio.to_thread(lambda: list(self._store.records()))
        except Exception:
            logger.warning("Failed to scan %s cache", self._store.kind, exc_info=True)
            return len(removed)

        for key, record in records:
            if record is not None:
                try:
                    if CacheEntry.from_record(record).is_valid(now):
                        continue
                except (KeyError, TypeError, ValueError):
                    pass
            if await self._remove_durable(key):
                removed.add(key)

        logger.info("Cache sweep removed %d entries", len(removed))
        return len(removed)

    async def export_entries(self) -> dict[str, dict[str, Any]]:
        now = self._clock.now_ms()
        exported: dict[str, dict[str, Any]] = {}
        try:
            records = await asyncio.to_thread(lambda: list(self._store.records()))
        except Exception:
            logger.warning("Failed to export %s cache", self._store.kind, exc_info=True)
            return exported

        for _, record in records:
            if record is None:
                continue
            try:
                entry = CacheEntry.from_record(record)
            except (KeyError, TypeError, ValueError):
                continue
            if entry.is_valid(now):
                exported[entry.original_query] = entry.to_record()
        return exported

    async def import_entries(self, entries: dict[str, dict[str, Any]]) -> int:
        imported = 0
        for query, record in entries.items():
            if "payload" not in record:
                logger.warning("Skipping import of %r: no payload", query)
                continue
            await self.set(
                query,
                record["payload"],
                record.get("language", "en"),
                record.get("limit", 50),
                record.get("kind_filter", "both"),
                record.get("ttl_millis", self._default_ttl_ms),
            )
            imported += 1
        return imported

    async def close(self) -> None:
        await asyncio.to_thread(self._store.close)

    async def _remove_durable(self, key: str) -> bool:
        try:
            return await asyncio.to_thread(self._store.remove, key)
        except Exception:
            logger.warning("Failed to remove durable cache entry %s", key, exc_info=True)
            return False


class DisabledCache(LookupCache):
    """No-op cache: every read misses, every write is dropped."""

    async def get(
        self,
        query: str,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
    ) -> Any | None:
        return None

    async def set(
        self,
        query: str,
        payload: Any,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
        ttl_ms: int | None = None,
    ) -> None:
        return None

    async def delete(
        self,
        query: str,
        language: str = "en",
        limit: int = 50,
        kind_filter: str | Enum = "both",
    ) -> None:
        return None

    async def clear(self) -> None:
        return None

    async def get_stats(self) -> dict[str, Any]:
        return {
            "memory_cache": {"size": 0, "max_size": 0},
            "durable_cache": {
                "type": "disabled",
                "entries": 0,
                "corrupt": 0,
                "total_size_bytes": 0,
                "oldest_entry": None,
                "newest_entry": None,
            },
        }


def _describe(entry: CacheEntry | None, now_ms: int) -> dict[str, Any] | None:
    if entry is None:
        return None
    return {"key": entry.original_query, "age_ms": entry.age_ms(now_ms)}
