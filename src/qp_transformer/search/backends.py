"""Lookup backends: the Wikidata action API and a static in-memory table."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from qp_transformer.core.exceptions import SearchBackendError
from qp_transformer.core.types import (
    CandidateHit,
    EntityKind,
    KindFilter,
    MatchType,
    SearchResults,
)
from qp_transformer.search.config import SearchConfig

logger = logging.getLogger(__name__)

_WIKIBASE_TYPES = {
    EntityKind.ENTITY: "item",
    EntityKind.PROPERTY: "property",
}


def _kinds_for(kind_filter: KindFilter) -> list[EntityKind]:
    if kind_filter is KindFilter.ENTITY:
        return [EntityKind.ENTITY]
    if kind_filter is KindFilter.PROPERTY:
        return [EntityKind.PROPERTY]
    return [EntityKind.ENTITY, EntityKind.PROPERTY]


class WikidataSearchBackend:
    """SearchBackend backed by ``wbsearchentities``.

    A hit is exact when the label or alias Wikidata matched on equals the
    phrase case-insensitively; everything else the API returns is fuzzy.
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or SearchConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._config.timeout,
            headers={"User-Agent": self._config.user_agent},
        )

    async def search(
        self,
        phrase: str,
        language: str,
        limit: int,
        kind_filter: KindFilter,
    ) -> SearchResults:
        kinds = _kinds_for(kind_filter)
        batches = await asyncio.gather(
            *(self._search_kind(phrase, language, limit, kind) for kind in kinds)
        )

        results = SearchResults()
        folded = phrase.casefold()
        for kind, items in zip(kinds, batches):
            for item in items:
                hit = _item_to_hit(item, kind, folded)
                if hit.match_type is MatchType.EXACT:
                    results.exact.append(hit)
                else:
                    results.fuzzy.append(hit)
        logger.debug(
            "Wikidata search %r (%s): %d exact, %d fuzzy",
            phrase, kind_filter.value, len(results.exact), len(results.fuzzy),
        )
        return results

    async def _search_kind(
        self, phrase: str, language: str, limit: int, kind: EntityKind
    ) -> list[dict[str, Any]]:
        params = {
            "action": "wbsearchentities",
            "search": phrase,
            "language": language,
            "uselang": language,
            "type": _WIKIBASE_TYPES[kind],
            "limit": str(limit),
            "format": "json",
        }
        try:
            resp = await self._client.get(self._config.base_url, params=params)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SearchBackendError(phrase, f"Wikidata search failed for {phrase!r}: {e}") from e

        if "error" in data:
            info = data["error"].get("info", "unknown error")
            raise SearchBackendError(phrase, f"Wikidata API error for {phrase!r}: {info}")
        return list(data.get("search", []))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _item_to_hit(item: dict[str, Any], kind: EntityKind, folded_phrase: str) -> CandidateHit:
    label = item.get("label") or ""
    matched_text = (item.get("match") or {}).get("text") or label
    exact = matched_text.casefold() == folded_phrase or label.casefold() == folded_phrase
    return CandidateHit(
        id=item["id"],
        label=label,
        description=item.get("description") or "",
        kind=kind,
        match_type=MatchType.EXACT if exact else MatchType.FUZZY,
    )


class StaticSearchBackend:
    """SearchBackend over a fixed phrase → hits table.

    Phrases are matched case-insensitively. Useful offline and in tests.
    """

    def __init__(self, table: dict[str, SearchResults] | None = None) -> None:
        self._table: dict[str, SearchResults] = {}
        self.calls: list[tuple[str, str, int, KindFilter]] = []
        for phrase, results in (table or {}).items():
            self.add(phrase, results)

    def add(self, phrase: str, results: SearchResults) -> None:
        self._table[phrase.casefold()] = results

    async def search(
        self,
        phrase: str,
        language: str,
        limit: int,
        kind_filter: KindFilter,
    ) -> SearchResults:
        self.calls.append((phrase, language, limit, kind_filter))
        stored = self._table.get(phrase.casefold())
        if stored is None:
            return SearchResults()

        def allowed(hit: CandidateHit) -> bool:
            return hit.kind in _kinds_for(kind_filter)

        return SearchResults(
            exact=[h for h in stored.exact if allowed(h)][:limit],
            fuzzy=[h for h in stored.fuzzy if allowed(h)][:limit],
        )
