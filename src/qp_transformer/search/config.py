"""Configuration for the lookup backend and client."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SearchConfig:
    """Configuration for the Wikidata search backend.

    Defaults target the public Wikidata action API.
    """

    base_url: str = "https://www.wikidata.org/w/api.php"
    user_agent: str = "qp-transformer/0.1 (text to Wikidata Q/P sequences)"
    timeout: float = 15.0  # per HTTP request
    lookup_timeout: float = 10.0  # per span lookup, cache included
    cache_ttl_seconds: float | None = None  # None = cache default
    coalesce_inflight: bool = False
