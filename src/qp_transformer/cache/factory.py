"""Explicit cache backend selection."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from qp_transformer.cache.base import DisabledCache, LookupCache, TieredCache
from qp_transformer.cache.config import CacheConfig
from qp_transformer.cache.file_store import FileCacheStore
from qp_transformer.cache.sqlite_store import SqliteCacheStore
from qp_transformer.cache.types import DEFAULT_MAX_MEMORY_ENTRIES, DEFAULT_TTL_MS
from qp_transformer.core.clock import Clock

logger = logging.getLogger(__name__)


class CacheBackendKind(Enum):
    """Durable tier chosen by the embedding application."""

    FILE = "file"
    STRUCTURED = "structured"
    DISABLED = "disabled"


def create_cache(
    kind: CacheBackendKind | str = CacheBackendKind.FILE,
    *,
    cache_dir: str | Path = "./data/wikidata-cache",
    db_path: str | Path = "./data/wikidata-cache.sqlite3",
    max_memory_entries: int = DEFAULT_MAX_MEMORY_ENTRIES,
    default_ttl_ms: int = DEFAULT_TTL_MS,
    clock: Clock | None = None,
) -> LookupCache:
    """Build a cache for the requested backend kind.

    Raises ValueError for an unknown kind.
    """
    kind = CacheBackendKind(kind)

    if kind is CacheBackendKind.DISABLED:
        logger.info("Lookup cache disabled")
        return DisabledCache()

    if kind is CacheBackendKind.FILE:
        store = FileCacheStore(cache_dir)
    else:
        store = SqliteCacheStore(db_path)

    logger.info("Lookup cache using %s backend", store.kind)
    return TieredCache(
        store,
        max_memory_entries=max_memory_entries,
        default_ttl_ms=default_ttl_ms,
        clock=clock,
    )


def create_cache_from_config(config: CacheConfig, clock: Clock | None = None) -> LookupCache:
    """Build a cache from a CacheConfig."""
    return create_cache(
        config.backend,
        cache_dir=config.cache_dir,
        db_path=config.db_path,
        max_memory_entries=config.max_memory_entries,
        default_ttl_ms=int(config.default_ttl_seconds * 1000),
        clock=clock,
    )
