"""Longest-match-first selection of non-overlapping spans."""

from __future__ import annotations

from collections.abc import Iterable

from qp_transformer.core.types import MatchedSpan


def select_spans(candidates: Iterable[MatchedSpan]) -> list[MatchedSpan]:
    """Greedy non-overlapping covering, returned in reading order.

    Spans are visited longest first (ties: leftmost first); a span is
    accepted only if none of its token indices is already consumed.
    """
    ordered = sorted(candidates, key=lambda m: (-m.span.size, m.span.start))
    consumed: set[int] = set()
    accepted: list[MatchedSpan] = []

    for matched in ordered:
        indices = matched.span.indices
        if any(i in consumed for i in indices):
            continue
        consumed.update(indices)
        accepted.append(matched)

    accepted.sort(key=lambda m: m.span.start)
    return accepted
