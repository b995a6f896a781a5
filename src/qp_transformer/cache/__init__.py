"""Two-tier lookup cache with pluggable durable backends."""

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

__all__ = [
    "CacheBackendKind",
    "CacheConfig",
    "CacheEntry",
    "DisabledCache",
    "DurableStore",
    "FileCacheStore",
    "LookupCache",
    "MemoryTier",
    "SqliteCacheStore",
    "TieredCache",
    "cache_key",
    "create_cache",
    "create_cache_from_config",
]
