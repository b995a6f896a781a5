"""TextToQPTransformer — orchestrates tokenize → n-grams → lookup → match → format."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from qp_transformer.core.exceptions import (
    InvalidInputError,
    TransformationError,
    TransformerError,
)
from qp_transformer.core.types import MatchedItem, TransformResult
from qp_transformer.search.client import LookupClient
from qp_transformer.transform.config import TransformOptions
from qp_transformer.transform.formatter import (
    build_item,
    format_candidates,
    format_sequence,
    format_sequence_with_links,
    generate_alternatives,
)
from qp_transformer.transform.matcher import select_spans
from qp_transformer.transform.ngrams import generate_ngrams
from qp_transformer.transform.resolver import DEFAULT_LOOKUP_TIMEOUT, CandidateResolver
from qp_transformer.transform.tokenizer import tokenize
from qp_transformer.transform.vocabulary import ENGLISH, Vocabulary

logger = logging.getLogger(__name__)


class TextToQPTransformer:
    """Turns free text into a sequence of Wikidata entity (Q) and property (P) ids.

    Pipeline:
      1. Tokenize, stripping sentence punctuation
      2. Generate n-gram spans, skipping stop-word-only spans
      3. Look up every span concurrently (cache first)
      4. Keep the longest non-overlapping spans
      5. Format each as a single id or an ``[A or B]`` disambiguation set
    """

    def __init__(
        self,
        client: LookupClient,
        vocabulary: Vocabulary = ENGLISH,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    ) -> None:
        self.client = client
        self.vocabulary = vocabulary
        self._resolver = CandidateResolver(client, vocabulary, lookup_timeout)

    async def transform(
        self,
        text: str,
        options: TransformOptions | Mapping[str, Any] | None = None,
    ) -> TransformResult:
        """Transform text into a Q/P sequence.

        Raises InvalidInputError for non-string text or malformed options.
        Finding nothing is not an error: the sequence is simply empty.
        """
        if not isinstance(text, str):
            raise InvalidInputError("text", f"text must be a string, got {type(text).__name__}")
        opts = TransformOptions.coerce(options)

        result = TransformResult(original=text)
        try:
            result.tokens = tokenize(text)
            if not result.tokens:
                return result

            ngrams = generate_ngrams(result.tokens, opts.max_ngram_size, self.vocabulary)
            found = await self._resolver.resolve(
                ngrams,
                prefer_properties=opts.prefer_properties,
                limit=opts.search_limit,
                language=opts.language,
            )

            sequence: list[MatchedItem] = []
            for matched in select_spans(found):
                item = build_item(matched, opts.max_candidates, opts.include_labels)
                if item is not None:
                    sequence.append(item)
            result.sequence = sequence
        except TransformerError:
            raise
        except Exception as e:
            logger.exception("Error transforming text")
            raise TransformationError(f"Transformation failed: {e}") from e

        self._render(result)
        logger.info(
            "Transformed %d tokens into %d items: %s",
            len(result.tokens), len(result.sequence), result.formatted,
        )
        return result

    async def transform_with_context(
        self,
        text: str,
        context: Mapping[str, Any] | None = None,
        options: TransformOptions | Mapping[str, Any] | None = None,
    ) -> TransformResult:
        """Transform, then narrow ambiguous items to alternatives matching ``context['domain']``.

        An ambiguous item whose alternatives all miss the domain is left as is.
        """
        result = await self.transform(text, options)
        domain = (context or {}).get("domain")
        if not domain:
            return result

        opts = TransformOptions.coerce(options)
        needle = str(domain).casefold()
        narrowed: list[MatchedItem] = []
        for item in result.sequence:
            if item.is_ambiguous:
                filtered = [
                    alt for alt in item.alternatives
                    if alt.description and needle in alt.description.casefold()
                ]
                replacement = format_candidates(filtered, opts.include_labels)
                if replacement is not None:
                    replacement.position = item.position
                    replacement.ngram_size = item.ngram_size
                    replacement.original_text = item.original_text
                    item = replacement
            narrowed.append(item)

        result.sequence = narrowed
        self._render(result)
        return result

    @staticmethod
    def _render(result: TransformResult) -> None:
        result.formatted = format_sequence(result.sequence)
        result.formatted_with_links = format_sequence_with_links(result.sequence)
        result.alternatives = generate_alternatives(result.sequence)
