"""Configuration for the lookup cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from qp_transformer.cache.types import DEFAULT_MAX_MEMORY_ENTRIES, DEFAULT_TTL_MS


@dataclass
class CacheConfig:
    """Which durable backend to use and how big the memory tier is.

    ``backend`` is one of "file", "structured" or "disabled".
    """

    backend: str = "file"
    cache_dir: Path = field(default_factory=lambda: Path("./data/wikidata-cache"))
    db_path: Path = field(default_factory=lambda: Path("./data/wikidata-cache.sqlite3"))
    max_memory_entries: int = DEFAULT_MAX_MEMORY_ENTRIES
    default_ttl_seconds: float = DEFAULT_TTL_MS / 1000
