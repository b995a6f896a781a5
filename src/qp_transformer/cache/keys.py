"""Deterministic cache key derivation."""

from __future__ import annotations

import hashlib
from enum import Enum


def kind_value(kind_filter: str | Enum) -> str:
    """Normalize a kind filter (enum or plain string) to its string value."""
    if isinstance(kind_filter, Enum):
        return str(kind_filter.value)
    return str(kind_filter)


def cache_key(
    query: str,
    language: str = "en",
    limit: int = 50,
    kind_filter: str | Enum = "both",
) -> str:
    """MD5 hex digest of the lookup parameters.

    Identical parameters always map to the same key, and the key is safe to
    use as a file name or primary key regardless of the query text.
    """
    raw = f"{query}|{language}|{limit}|{kind_value(kind_filter)}"
    return hashlib.md5(raw.encode("utf-8")).hexdigest()
