"""Tests for the two-tier lookup cache.

Covers:
- Key derivation
- Memory tier bounds and eviction
- TTL expiry against a fake clock (and once against real time)
- Durable promotion, corrupt records, and failing stores
- Stats, sweep, export/import, and backend selection
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any

import pytest

from qp_transformer.cache.base import (
    DisabledCache,
    DurableStore,
    LookupCache,
    MemoryTier,
    TieredCache,
)
from qp_transformer.cache.config import CacheConfig
from qp_transformer.cache.factory import (
    CacheBackendKind,
    create_cache,
    create_cache_from_config,
)
from qp_transformer.cache.file_store import FileCacheStore
from qp_transformer.cache.keys import cache_key
from qp_transformer.cache.sqlite_store import SqliteCacheStore
from qp_transformer.cache.types import CacheEntry
from qp_transformer.core.types import KindFilter


PAYLOAD = {
    "exact": [{"id": "Q90", "label": "Paris", "description": "capital city of France",
               "kind": "entity", "match_type": "exact"}],
    "fuzzy": [],
}


def _entry(key: str, created_at: int = 0, ttl: int = 1000) -> CacheEntry:
    return CacheEntry(
        key=key,
        payload={"v": key},
        created_at=created_at,
        ttl=ttl,
        original_query=key,
        language="en",
        limit=10,
        kind_filter="both",
    )


class BrokenStore(DurableStore):
    """Durable store whose every operation fails."""

    kind = "broken"

    def read(self, key: str) -> dict[str, Any] | None:
        raise OSError("disk unavailable")

    def write(self, record: dict[str, Any]) -> None:
        raise OSError("disk unavailable")

    def remove(self, key: str) -> bool:
        raise OSError("disk unavailable")

    def purge(self) -> None:
        raise OSError("disk unavailable")

    def records(self):
        raise OSError("disk unavailable")

    def size_bytes(self) -> int:
        raise OSError("disk unavailable")


# ============================================================================
# Keys
# ============================================================================


class TestCacheKey:
    """Tests for cache_key."""

    def test_deterministic(self):
        assert cache_key("Paris", "en", 10, "both") == cache_key("Paris", "en", 10, "both")

    def test_every_parameter_matters(self):
        base = cache_key("Paris", "en", 10, "both")
        assert cache_key("paris", "en", 10, "both") != base
        assert cache_key("Paris", "fr", 10, "both") != base
        assert cache_key("Paris", "en", 5, "both") != base
        assert cache_key("Paris", "en", 10, "property") != base

    def test_enum_and_string_filters_agree(self):
        assert cache_key("born", "en", 10, KindFilter.PROPERTY) == cache_key("born", "en", 10, "property")

    def test_safe_as_file_name(self):
        key = cache_key("../../etc/passwd?*")
        assert len(key) == 32
        assert all(c in "0123456789abcdef" for c in key)


# ============================================================================
# Memory tier
# ============================================================================


class TestMemoryTier:
    """Tests for MemoryTier."""

    def test_evicts_first_inserted_when_full(self):
        tier = MemoryTier(max_size=2)
        tier.put(_entry("a"))
        tier.put(_entry("b"))
        tier.put(_entry("c"))
        assert len(tier) == 2
        assert tier.get("a") is None
        assert tier.get("b") is not None
        assert tier.get("c") is not None

    def test_replacing_key_does_not_evict(self):
        tier = MemoryTier(max_size=2)
        tier.put(_entry("a"))
        tier.put(_entry("b"))
        tier.put(_entry("a", created_at=5))
        assert len(tier) == 2
        assert tier.get("a").created_at == 5
        assert tier.get("b") is not None

    def test_sweep_removes_expired(self):
        tier = MemoryTier()
        tier.put(_entry("old", created_at=0, ttl=100))
        tier.put(_entry("new", created_at=0, ttl=10_000))
        assert tier.sweep(now_ms=500) == ["old"]
        assert tier.get("old") is None
        assert tier.get("new") is not None

    def test_rejects_zero_size(self):
        with pytest.raises(ValueError):
            MemoryTier(max_size=0)


class TestCacheEntry:
    """Tests for CacheEntry validity."""

    def test_valid_until_ttl_elapses(self):
        entry = _entry("a", created_at=1000, ttl=500)
        assert entry.is_valid(1499)
        assert not entry.is_valid(1500)

    def test_zero_ttl_never_valid(self):
        assert not _entry("a", created_at=1000, ttl=0).is_valid(1000)

    def test_record_round_trip(self):
        entry = _entry("a", created_at=42, ttl=7)
        assert CacheEntry.from_record(entry.to_record()) == entry


# ============================================================================
# Tiered cache over both durable stores
# ============================================================================


@pytest.fixture(params=["file", "sqlite"])
def tiered(request, tmp_path, fake_clock) -> TieredCache:
    if request.param == "file":
        store = FileCacheStore(tmp_path / "files")
    else:
        store = SqliteCacheStore(tmp_path / "cache.sqlite3")
    cache = TieredCache(store, clock=fake_clock)
    yield cache
    store.close()


class TestTieredCache:
    """Behaviour shared by the file and structured durable tiers."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tiered):
        await tiered.set("Paris", PAYLOAD, "en", 10, "both", 1000)
        assert await tiered.get("Paris", "en", 10, "both") == PAYLOAD

    @pytest.mark.asyncio
    async def test_miss_for_unknown_query(self, tiered):
        assert await tiered.get("Nowhere") is None

    @pytest.mark.asyncio
    async def test_parameters_are_part_of_key(self, tiered):
        await tiered.set("Paris", PAYLOAD, "en", 10, "both")
        assert await tiered.get("Paris", "en", 5, "both") is None
        assert await tiered.get("Paris", "fr", 10, "both") is None

    @pytest.mark.asyncio
    async def test_expires_after_ttl(self, tiered, fake_clock):
        await tiered.set("Paris", PAYLOAD, ttl_ms=1000)
        fake_clock.advance(milliseconds=999)
        assert await tiered.get("Paris") == PAYLOAD
        fake_clock.advance(milliseconds=1)
        assert await tiered.get("Paris") is None

    @pytest.mark.asyncio
    async def test_expired_durable_entry_removed_on_read(self, tiered, fake_clock):
        await tiered.set("Paris", PAYLOAD, ttl_ms=1000)
        fake_clock.advance(seconds=2)
        assert await tiered.get("Paris") is None
        assert tiered.store.read(cache_key("Paris")) is None

    @pytest.mark.asyncio
    async def test_durable_hit_promoted_to_memory(self, tiered, fake_clock):
        await tiered.set("Paris", PAYLOAD)
        fresh = TieredCache(tiered.store, clock=fake_clock)
        assert len(fresh.memory) == 0

        assert await fresh.get("Paris") == PAYLOAD
        assert len(fresh.memory) == 1

    @pytest.mark.asyncio
    async def test_payload_isolated_from_callers(self, tiered):
        payload = {"exact": [{"id": "Q90"}], "fuzzy": []}
        await tiered.set("Paris", payload)
        payload["exact"].append({"id": "Q1"})

        first = await tiered.get("Paris")
        assert first == {"exact": [{"id": "Q90"}], "fuzzy": []}
        first["fuzzy"].append({"id": "Q2"})
        assert await tiered.get("Paris") == {"exact": [{"id": "Q90"}], "fuzzy": []}

    @pytest.mark.asyncio
    async def test_set_replaces_existing(self, tiered):
        await tiered.set("Paris", {"v": 1})
        await tiered.set("Paris", {"v": 2})
        assert await tiered.get("Paris") == {"v": 2}

    @pytest.mark.asyncio
    async def test_delete(self, tiered):
        await tiered.set("Paris", PAYLOAD)
        await tiered.delete("Paris")
        assert await tiered.get("Paris") is None

    @pytest.mark.asyncio
    async def test_clear(self, tiered):
        await tiered.set("Paris", PAYLOAD)
        await tiered.set("Hawaii", PAYLOAD)
        await tiered.clear()
        stats = await tiered.get_stats()
        assert stats["memory_cache"]["size"] == 0
        assert stats["durable_cache"]["entries"] == 0

    @pytest.mark.asyncio
    async def test_stats(self, tiered, fake_clock):
        await tiered.set("Paris", PAYLOAD)
        fake_clock.advance(seconds=5)
        await tiered.set("Hawaii", PAYLOAD)

        stats = await tiered.get_stats()
        assert stats["memory_cache"] == {"size": 2, "max_size": 1000}
        durable = stats["durable_cache"]
        assert durable["type"] == tiered.store.kind
        assert durable["entries"] == 2
        assert durable["total_size_bytes"] > 0
        assert durable["oldest_entry"] == {"key": "Paris", "age_ms": 5000}
        assert durable["newest_entry"] == {"key": "Hawaii", "age_ms": 0}

    @pytest.mark.asyncio
    async def test_clean_expired(self, tiered, fake_clock):
        await tiered.set("short", PAYLOAD, ttl_ms=1000)
        await tiered.set("long", PAYLOAD, ttl_ms=60_000)
        fake_clock.advance(seconds=2)

        removed = await tiered.clean_expired()
        assert removed == 1
        assert await tiered.get("long") == PAYLOAD
        stats = await tiered.get_stats()
        assert stats["durable_cache"]["entries"] == 1

    @pytest.mark.asyncio
    async def test_clean_expired_counts_keys_once(self, tiered, fake_clock):
        await tiered.set("Paris", PAYLOAD, ttl_ms=1000)
        fake_clock.advance(seconds=2)

        assert await tiered.clean_expired() == 1
        assert await tiered.clean_expired() == 0

    @pytest.mark.asyncio
    async def test_clean_expired_durable_only(self, tiered, fake_clock):
        await tiered.set("Paris", PAYLOAD, ttl_ms=1000)
        fresh = TieredCache(tiered.store, clock=fake_clock)
        fake_clock.advance(seconds=2)

        assert await fresh.clean_expired() == 1

    def test_store_remove_reports_missing(self, tiered):
        assert tiered.store.remove(cache_key("Nowhere")) is False

    @pytest.mark.asyncio
    async def test_export_import(self, tiered, tmp_path, fake_clock):
        await tiered.set("Paris", PAYLOAD, "en", 10, "both")
        await tiered.set("born", {"exact": [], "fuzzy": []}, "en", 10, "property")

        exported = await tiered.export_entries()
        assert set(exported) == {"Paris", "born"}

        target = TieredCache(SqliteCacheStore(":memory:"), clock=fake_clock)
        assert await target.import_entries(exported) == 2
        assert await target.get("Paris", "en", 10, "both") == PAYLOAD
        assert await target.get("born", "en", 10, "property") == {"exact": [], "fuzzy": []}

    @pytest.mark.asyncio
    async def test_export_skips_expired(self, tiered, fake_clock):
        await tiered.set("Paris", PAYLOAD, ttl_ms=1000)
        fake_clock.advance(seconds=2)
        assert await tiered.export_entries() == {}


class TestFileStore:
    """File-tier specifics."""

    @pytest.mark.asyncio
    async def test_one_file_per_key(self, file_cache, cache_dir):
        await file_cache.set("Paris", PAYLOAD)
        path = cache_dir / f"{cache_key('Paris')}.json"
        assert path.exists()

    @pytest.mark.asyncio
    async def test_corrupt_file_is_a_miss(self, file_cache, cache_dir):
        path = file_cache.store.path_for(cache_key("Paris"))
        path.write_text("{not json", encoding="utf-8")
        assert await file_cache.get("Paris") is None

    @pytest.mark.asyncio
    async def test_sweep_removes_corrupt_files(self, file_cache):
        path = file_cache.store.path_for(cache_key("Paris"))
        path.write_text("{not json", encoding="utf-8")
        assert await file_cache.clean_expired() == 1
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_corrupt_files_reported_separately(self, file_cache):
        await file_cache.set("Hawaii", PAYLOAD)
        file_cache.store.path_for(cache_key("Paris")).write_text("{not json", encoding="utf-8")

        durable = (await file_cache.get_stats())["durable_cache"]
        assert durable["entries"] == 1
        assert durable["corrupt"] == 1
        assert durable["oldest_entry"]["key"] == "Hawaii"


class TestRealTimeExpiry:
    """TTL against the system clock."""

    @pytest.mark.asyncio
    async def test_entry_expires(self):
        cache = TieredCache(SqliteCacheStore(":memory:"))
        await cache.set("Paris", PAYLOAD, ttl_ms=50)
        assert await cache.get("Paris") == PAYLOAD
        await asyncio.sleep(0.1)
        assert await cache.get("Paris") is None


class TestFailingStore:
    """Durable failures degrade to memory-only behaviour."""

    @pytest.mark.asyncio
    async def test_write_failure_keeps_memory_entry(self, fake_clock):
        cache = TieredCache(BrokenStore(), clock=fake_clock)
        await cache.set("Paris", PAYLOAD)
        assert await cache.get("Paris") == PAYLOAD

    @pytest.mark.asyncio
    async def test_read_failure_is_a_miss(self, fake_clock):
        cache = TieredCache(BrokenStore(), clock=fake_clock)
        assert await cache.get("Paris") is None

    @pytest.mark.asyncio
    async def test_maintenance_does_not_raise(self, fake_clock):
        cache = TieredCache(BrokenStore(), clock=fake_clock)
        await cache.clear()
        await cache.delete("Paris")
        assert await cache.clean_expired() == 0
        assert await cache.export_entries() == {}
        stats = await cache.get_stats()
        assert stats["durable_cache"]["entries"] == 0


# ============================================================================
# Disabled cache and factory
# ============================================================================


class TestDisabledCache:
    """Tests for DisabledCache."""

    @pytest.mark.asyncio
    async def test_always_misses(self):
        cache = DisabledCache()
        await cache.set("Paris", PAYLOAD)
        assert await cache.get("Paris") is None
        assert await cache.clean_expired() == 0

    @pytest.mark.asyncio
    async def test_stats(self):
        stats = await DisabledCache().get_stats()
        assert stats["durable_cache"]["type"] == "disabled"
        assert stats["durable_cache"]["entries"] == 0
        assert stats["durable_cache"]["corrupt"] == 0

    @pytest.mark.parametrize("method", ["get", "set", "delete"])
    def test_signatures_match_interface(self, method):
        assert inspect.signature(getattr(DisabledCache, method)) == inspect.signature(
            getattr(LookupCache, method)
        )


class TestFactory:
    """Tests for create_cache and create_cache_from_config."""

    def test_disabled(self):
        assert isinstance(create_cache("disabled"), DisabledCache)

    def test_file(self, tmp_path):
        cache = create_cache(CacheBackendKind.FILE, cache_dir=tmp_path / "c")
        assert isinstance(cache, TieredCache)
        assert cache.store.kind == "file"

    def test_structured(self, tmp_path):
        cache = create_cache("structured", db_path=tmp_path / "c.sqlite3", max_memory_entries=5)
        assert cache.store.kind == "structured"
        assert cache.memory.max_size == 5
        cache.store.close()

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            create_cache("redis")

    @pytest.mark.asyncio
    async def test_from_config_ttl(self, tmp_path, fake_clock):
        config = CacheConfig(backend="structured", db_path=tmp_path / "c.sqlite3", default_ttl_seconds=1)
        cache = create_cache_from_config(config, clock=fake_clock)
        await cache.set("Paris", PAYLOAD)
        fake_clock.advance(seconds=1)
        assert await cache.get("Paris") is None
        await cache.close()
