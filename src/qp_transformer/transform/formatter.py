"""Candidate formatting: single ids, disambiguation sets, and sequence rendering."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from qp_transformer.core.types import (
    AlternativeSequence,
    CandidateHit,
    EntityKind,
    ItemType,
    MatchedItem,
    MatchedSpan,
    SearchResults,
)

ENTITY_LINK = '<a href="../entities.html#{id}" target="_blank">{id}</a>'
PROPERTY_LINK = '<a href="../properties.html#{id}" target="_blank">{id}</a>'

_ID_RE = re.compile(r"[QP]\d+")


def process_candidates(results: SearchResults, max_candidates: int) -> list[CandidateHit]:
    """Exact hits in returned order, then fuzzy hits; deduplicated and capped."""
    candidates: list[CandidateHit] = []
    seen: set[str] = set()

    for hit in results.combined:
        if len(candidates) >= max_candidates:
            break
        if hit.id in seen:
            continue
        seen.add(hit.id)
        candidates.append(hit)

    return candidates


def format_candidates(
    candidates: Sequence[CandidateHit],
    include_labels: bool = False,
) -> MatchedItem | None:
    """One candidate → plain id; several → ``[A or B or C]``; none → None."""
    if not candidates:
        return None

    if len(candidates) == 1:
        hit = candidates[0]
        return MatchedItem(
            id=hit.id,
            type=ItemType.PROPERTY if hit.kind is EntityKind.PROPERTY else ItemType.ENTITY,
            label=hit.label if include_labels else None,
        )

    return MatchedItem(
        id="[" + " or ".join(c.id for c in candidates) + "]",
        type=ItemType.AMBIGUOUS,
        label="[" + " or ".join(c.label for c in candidates) + "]" if include_labels else None,
        alternatives=list(candidates),
    )


def build_item(
    matched: MatchedSpan,
    max_candidates: int,
    include_labels: bool = False,
) -> MatchedItem | None:
    """Format a matched span and attach its originating position."""
    item = format_candidates(process_candidates(matched.results, max_candidates), include_labels)
    if item is None:
        return None
    item.position = matched.span.start
    item.ngram_size = matched.span.size
    item.original_text = matched.span.text
    return item


def format_sequence(sequence: Iterable[MatchedItem | None]) -> str:
    return " ".join(item.id for item in sequence if item is not None)


def link_id(identifier: str) -> str:
    if identifier.startswith("Q"):
        return ENTITY_LINK.format(id=identifier)
    if identifier.startswith("P"):
        return PROPERTY_LINK.format(id=identifier)
    return identifier


def format_sequence_with_links(sequence: Iterable[MatchedItem | None]) -> str:
    """HTML rendering with entity/property links; ambiguity brackets kept."""
    rendered: list[str] = []
    for item in sequence:
        if item is None:
            continue
        if item.is_ambiguous:
            ids = _ID_RE.findall(item.id)
            rendered.append("[" + " or ".join(link_id(i) for i in ids) + "]")
        else:
            rendered.append(link_id(item.id))
    return " ".join(rendered)


def generate_alternatives(sequence: Sequence[MatchedItem | None]) -> list[AlternativeSequence]:
    """A single low-confidence path taking the first choice of each ambiguous item."""
    if not any(item is not None and item.is_ambiguous for item in sequence):
        return []

    ids: list[str] = []
    for item in sequence:
        if item is None:
            continue
        if item.is_ambiguous and item.alternatives:
            ids.append(item.alternatives[0].id)
        else:
            ids.append(item.id)

    if not ids:
        return []
    return [AlternativeSequence(sequence=" ".join(ids), confidence="low")]
