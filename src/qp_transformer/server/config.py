"""Server configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from qp_transformer.cache.config import CacheConfig
from qp_transformer.search.config import SearchConfig


@dataclass
class ServerConfig:
    """Configuration for the Q/P transformer server."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8430

    # Lookup backend + cache
    search: SearchConfig = field(default_factory=SearchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
