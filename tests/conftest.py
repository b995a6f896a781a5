"""Pytest fixtures for qp-transformer tests.

Provides fixtures for:
- Fake clock for TTL testing
- A static lookup backend loaded with a small Wikidata-shaped table
- Tiered caches over file and SQLite stores
- Lookup client and transformer wired to the static backend
"""

from __future__ import annotations

from pathlib import Path

import pytest

from qp_transformer.cache.base import TieredCache
from qp_transformer.cache.file_store import FileCacheStore
from qp_transformer.cache.sqlite_store import SqliteCacheStore
from qp_transformer.core.clock import FakeClock
from qp_transformer.core.types import (
    CandidateHit,
    EntityKind,
    MatchType,
    SearchResults,
)
from qp_transformer.search.backends import StaticSearchBackend
from qp_transformer.search.client import LookupClient
from qp_transformer.transform.transformer import TextToQPTransformer


def _entity(id: str, label: str, description: str = "", fuzzy: bool = False) -> CandidateHit:
    return CandidateHit(
        id=id,
        label=label,
        description=description,
        kind=EntityKind.ENTITY,
        match_type=MatchType.FUZZY if fuzzy else MatchType.EXACT,
    )


def _property(id: str, label: str, description: str = "") -> CandidateHit:
    return CandidateHit(id=id, label=label, description=description, kind=EntityKind.PROPERTY)


BIRTH = _property("P569", "date of birth", "date on which the subject was born")

WIKIDATA_TABLE = {
    "Barack Obama": SearchResults(exact=[
        _entity("Q76", "Barack Obama", "44th President of the United States"),
    ]),
    "Hawaii": SearchResults(exact=[
        _entity("Q782", "Hawaii", "state of the United States of America"),
        _entity("Q18094", "Hawaii", "island"),
        _entity("Q131750", "Hawaii", "volcanic island chain"),
    ]),
    "born": SearchResults(exact=[BIRTH]),
    "was born": SearchResults(exact=[BIRTH]),
    "Albert Einstein": SearchResults(exact=[
        _entity("Q937", "Albert Einstein", "German-born theoretical physicist"),
    ]),
    "Paris": SearchResults(exact=[_entity("Q90", "Paris", "capital city of France")]),
}


# ============================================================================
# Clock
# ============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a fake clock for testing."""
    return FakeClock(1_700_000_000_000)


# ============================================================================
# Lookup backend
# ============================================================================


@pytest.fixture
def wikidata_table() -> dict[str, SearchResults]:
    return dict(WIKIDATA_TABLE)


@pytest.fixture
def static_backend(wikidata_table: dict[str, SearchResults]) -> StaticSearchBackend:
    """Static backend answering the Wikidata fixture table."""
    return StaticSearchBackend(wikidata_table)


# ============================================================================
# Caches
# ============================================================================


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "wikidata-cache"


@pytest.fixture
def file_cache(cache_dir: Path, fake_clock: FakeClock) -> TieredCache:
    return TieredCache(FileCacheStore(cache_dir), clock=fake_clock)


@pytest.fixture
def sqlite_cache(tmp_path: Path, fake_clock: FakeClock) -> TieredCache:
    cache = TieredCache(SqliteCacheStore(tmp_path / "cache.sqlite3"), clock=fake_clock)
    yield cache
    cache.store.close()


# ============================================================================
# Client / transformer
# ============================================================================


@pytest.fixture
def client(static_backend: StaticSearchBackend, file_cache: TieredCache) -> LookupClient:
    return LookupClient(static_backend, file_cache)


@pytest.fixture
def transformer(client: LookupClient) -> TextToQPTransformer:
    return TextToQPTransformer(client)
