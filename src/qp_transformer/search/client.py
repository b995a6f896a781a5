"""LookupClient — cache-first disambiguation search over a SearchBackend."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from qp_transformer.cache.base import DisabledCache, LookupCache
from qp_transformer.cache.keys import cache_key
from qp_transformer.core.protocols import SearchBackend
from qp_transformer.core.types import (
    CandidateHit,
    KindFilter,
    MatchType,
    SearchResults,
)

logger = logging.getLogger(__name__)


def merge_results(results: SearchResults) -> SearchResults:
    """Deduplicate by id and tag match types. Exact wins over fuzzy."""
    seen: set[str] = set()
    exact: list[CandidateHit] = []
    fuzzy: list[CandidateHit] = []

    for hit in results.exact:
        if hit.id not in seen:
            seen.add(hit.id)
            exact.append(hit.with_match_type(MatchType.EXACT))
    for hit in results.fuzzy:
        if hit.id not in seen:
            seen.add(hit.id)
            fuzzy.append(hit.with_match_type(MatchType.FUZZY))

    return SearchResults(exact=exact, fuzzy=fuzzy)


class LookupClient:
    """Serves phrase lookups from the cache or the backend, filling the cache.

    With ``coalesce_inflight`` enabled, concurrent lookups for the same
    parameters share one upstream call instead of each issuing their own.
    """

    def __init__(
        self,
        backend: SearchBackend,
        cache: LookupCache | None = None,
        *,
        ttl_ms: int | None = None,
        coalesce_inflight: bool = False,
    ) -> None:
        self._backend = backend
        self._cache = cache or DisabledCache()
        self._ttl_ms = ttl_ms
        self._coalesce = coalesce_inflight
        self._inflight: dict[str, asyncio.Task[SearchResults]] = {}
        self._cache_hits = 0
        self._upstream_calls = 0

    @property
    def cache(self) -> LookupCache:
        return self._cache

    @property
    def backend(self) -> SearchBackend:
        return self._backend

    def stats(self) -> dict[str, Any]:
        return {
            "cache_hits": self._cache_hits,
            "upstream_calls": self._upstream_calls,
            "inflight": len(self._inflight),
        }

    async def search(
        self,
        phrase: str,
        language: str = "en",
        limit: int = 10,
        kind_filter: KindFilter = KindFilter.BOTH,
    ) -> SearchResults:
        """Disambiguation search: merged exact + fuzzy hits for a phrase.

        Backend errors propagate; the caller decides how to degrade.
        """
        cached = await self._cache.get(phrase, language, limit, kind_filter.value)
        if cached is not None:
            try:
                if not isinstance(cached, dict):
                    raise TypeError(f"expected an object, got {type(cached).__name__}")
                results = SearchResults.from_dict(cached)
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.warning("Discarding malformed cached results for %r", phrase)
                await self._cache.delete(phrase, language, limit, kind_filter.value)
            else:
                self._cache_hits += 1
                logger.debug("Cache hit for %r", phrase)
                return results

        if not self._coalesce:
            return await self._fetch(phrase, language, limit, kind_filter)

        key = cache_key(phrase, language, limit, kind_filter)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(phrase, language, limit, kind_filter))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._on_fetch_done(k, t))
        return await asyncio.shield(task)

    async def prepopulate(
        self,
        phrases: Iterable[str],
        language: str = "en",
        limit: int = 10,
        kind_filter: KindFilter = KindFilter.BOTH,
    ) -> int:
        """Warm the cache for a list of phrases. Returns how many succeeded."""
        warmed = 0
        for phrase in phrases:
            try:
                await self.search(phrase, language, limit, kind_filter)
                warmed += 1
            except Exception:
                logger.warning("Failed to prepopulate cache for %r", phrase, exc_info=True)
        logger.info("Prepopulated %d lookups", warmed)
        return warmed

    async def _fetch(
        self,
        phrase: str,
        language: str,
        limit: int,
        kind_filter: KindFilter,
    ) -> SearchResults:
        self._upstream_calls += 1
        logger.debug("Upstream lookup for %r (%s)", phrase, kind_filter.value)
        raw = await self._backend.search(phrase, language, limit, kind_filter)
        results = merge_results(raw)
        await self._cache.set(
            phrase, results.as_dict(), language, limit, kind_filter.value, self._ttl_ms
        )
        return results

    def _on_fetch_done(self, key: str, task: asyncio.Task[SearchResults]) -> None:
        self._inflight.pop(key, None)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Coalesced lookup %s failed: %s", key, task.exception())
