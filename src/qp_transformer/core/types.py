"""Core data types for the Q/P transformer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class EntityKind(Enum):
    """Kind of knowledge-base identifier."""

    ENTITY = "entity"  # Q-prefixed items
    PROPERTY = "property"  # P-prefixed relations

    @classmethod
    def from_id(cls, identifier: str) -> EntityKind:
        """Derive the kind from the identifier prefix."""
        return cls.PROPERTY if identifier.startswith("P") else cls.ENTITY


class MatchType(Enum):
    """How a candidate matched the searched phrase."""

    EXACT = "exact"
    FUZZY = "fuzzy"


class KindFilter(Enum):
    """Restricts a lookup to entities, properties, or both."""

    ENTITY = "entity"
    PROPERTY = "property"
    BOTH = "both"


class ItemType(Enum):
    """Type of a matched output item."""

    ENTITY = "entity"
    PROPERTY = "property"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Token:
    """A word token and its position in the tokenized text."""

    text: str
    index: int


@dataclass(frozen=True)
class Span:
    """Contiguous run of tokens looked up as a single phrase."""

    start: int
    end: int  # inclusive
    tokens: tuple[str, ...]

    @property
    def text(self) -> str:
        return " ".join(self.tokens)

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    @property
    def indices(self) -> range:
        return range(self.start, self.end + 1)

    def overlaps(self, other: Span) -> bool:
        return self.start <= other.end and other.start <= self.end


@dataclass(frozen=True)
class CandidateHit:
    """One identifier returned by the lookup backend for a phrase."""

    id: str
    label: str = ""
    description: str = ""
    kind: EntityKind = EntityKind.ENTITY
    match_type: MatchType = MatchType.EXACT

    def with_match_type(self, match_type: MatchType) -> CandidateHit:
        return replace(self, match_type=match_type)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "kind": self.kind.value,
            "match_type": self.match_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CandidateHit:
        identifier = str(data["id"])
        kind = data.get("kind")
        return cls(
            id=identifier,
            label=data.get("label") or "",
            description=data.get("description") or "",
            kind=EntityKind(kind) if kind else EntityKind.from_id(identifier),
            match_type=MatchType(data.get("match_type", MatchType.EXACT.value)),
        )


@dataclass
class SearchResults:
    """Exact and fuzzy hits for one phrase lookup."""

    exact: list[CandidateHit] = field(default_factory=list)
    fuzzy: list[CandidateHit] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.exact) + len(self.fuzzy)

    @property
    def combined(self) -> list[CandidateHit]:
        return [*self.exact, *self.fuzzy]

    def is_empty(self) -> bool:
        return not self.exact and not self.fuzzy

    def as_dict(self) -> dict[str, Any]:
        return {
            "exact": [hit.as_dict() for hit in self.exact],
            "fuzzy": [hit.as_dict() for hit in self.fuzzy],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchResults:
        return cls(
            exact=[CandidateHit.from_dict(h) for h in data.get("exact", [])],
            fuzzy=[CandidateHit.from_dict(h) for h in data.get("fuzzy", [])],
        )


@dataclass
class MatchedSpan:
    """A span that survived lookup, with its hits attached."""

    span: Span
    results: SearchResults


@dataclass
class MatchedItem:
    """One element of the output sequence."""

    id: str
    type: ItemType
    label: str | None = None
    alternatives: list[CandidateHit] = field(default_factory=list)
    position: int = 0
    ngram_size: int = 1
    original_text: str = ""

    @property
    def is_ambiguous(self) -> bool:
        return self.type is ItemType.AMBIGUOUS

    @property
    def candidate_ids(self) -> list[str]:
        if self.alternatives:
            return [c.id for c in self.alternatives]
        return [self.id]

    @property
    def token_indices(self) -> range:
        return range(self.position, self.position + self.ngram_size)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "alternatives": [c.as_dict() for c in self.alternatives],
            "position": self.position,
            "ngram_size": self.ngram_size,
            "original_text": self.original_text,
        }


@dataclass(frozen=True)
class AlternativeSequence:
    """A best-effort single-path rendering of an ambiguous sequence."""

    sequence: str
    confidence: str = "low"


@dataclass
class TransformResult:
    """Output of a text → Q/P transformation."""

    original: str
    tokens: list[Token] = field(default_factory=list)
    sequence: list[MatchedItem] = field(default_factory=list)
    formatted: str = ""
    formatted_with_links: str = ""
    alternatives: list[AlternativeSequence] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "original": self.original,
            "tokens": [t.text for t in self.tokens],
            "sequence": [item.as_dict() for item in self.sequence],
            "formatted": self.formatted,
            "formatted_with_links": self.formatted_with_links,
            "alternatives": [
                {"sequence": a.sequence, "confidence": a.confidence}
                for a in self.alternatives
            ],
        }
