"""CandidateResolver — concurrent per-span lookups joined before matching."""

from __future__ import annotations

import asyncio
import logging

from qp_transformer.core.types import KindFilter, MatchedSpan, SearchResults, Span
from qp_transformer.search.client import LookupClient
from qp_transformer.transform.ngrams import iter_spans
from qp_transformer.transform.vocabulary import ENGLISH, Vocabulary

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_TIMEOUT = 10.0  # seconds


class CandidateResolver:
    """Issues one lookup per span, all at once, and keeps spans with hits.

    A lookup that fails or exceeds ``lookup_timeout`` counts as zero hits;
    the error is logged and never reaches the caller.
    """

    def __init__(
        self,
        client: LookupClient,
        vocabulary: Vocabulary = ENGLISH,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    ) -> None:
        self._client = client
        self._vocabulary = vocabulary
        self._lookup_timeout = lookup_timeout

    def kind_filter_for(self, phrase: str, prefer_properties: bool = False) -> KindFilter:
        if prefer_properties or self._vocabulary.is_likely_relation(phrase):
            return KindFilter.PROPERTY
        return KindFilter.BOTH

    async def resolve(
        self,
        ngrams: dict[int, list[Span]],
        *,
        prefer_properties: bool = False,
        limit: int = 10,
        language: str = "en",
    ) -> list[MatchedSpan]:
        spans = list(iter_spans(ngrams))
        if not spans:
            return []

        results = await asyncio.gather(
            *(self._lookup(span, prefer_properties, limit, language) for span in spans)
        )

        matched = [
            MatchedSpan(span=span, results=found)
            for span, found in zip(spans, results)
            if not found.is_empty()
        ]
        logger.debug("Resolved %d/%d spans with hits", len(matched), len(spans))
        return matched

    async def _lookup(
        self,
        span: Span,
        prefer_properties: bool,
        limit: int,
        language: str,
    ) -> SearchResults:
        kind_filter = self.kind_filter_for(span.text, prefer_properties)
        try:
            return await asyncio.wait_for(
                self._client.search(span.text, language, limit, kind_filter),
                timeout=self._lookup_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Lookup for %r timed out after %.1fs", span.text, self._lookup_timeout
            )
        except Exception as exc:
            logger.warning("Lookup for %r failed: %s", span.text, exc)
        return SearchResults()
