"""Candidate span generation."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from qp_transformer.core.types import Span, Token
from qp_transformer.transform.vocabulary import ENGLISH, Vocabulary


def generate_ngrams(
    tokens: Sequence[Token],
    max_size: int = 3,
    vocabulary: Vocabulary = ENGLISH,
) -> dict[int, list[Span]]:
    """All contiguous spans of 1..max_size tokens, grouped by size.

    A span is dropped only when every token in it is a stop-word, so
    positions stay intact for matching.
    """
    words = [t.text for t in tokens]
    ngrams: dict[int, list[Span]] = {}

    for size in range(1, max_size + 1):
        ngrams[size] = []
        for start in range(len(words) - size + 1):
            window = tuple(words[start:start + size])
            if all(vocabulary.is_stop_word(w) for w in window):
                continue
            ngrams[size].append(Span(start=start, end=start + size - 1, tokens=window))

    return ngrams


def iter_spans(ngrams: dict[int, list[Span]]) -> Iterator[Span]:
    """Flatten grouped spans, shortest first."""
    for size in sorted(ngrams):
        yield from ngrams[size]
