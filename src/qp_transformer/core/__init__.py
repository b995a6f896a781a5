"""Core types, protocols and exceptions for the Q/P transformer."""

from qp_transformer.core.types import (
    AlternativeSequence,
    CandidateHit,
    EntityKind,
    ItemType,
    KindFilter,
    MatchedItem,
    MatchedSpan,
    MatchType,
    SearchResults,
    Span,
    Token,
    TransformResult,
)
from qp_transformer.core.protocols import SearchBackend
from qp_transformer.core.clock import Clock, FakeClock, SystemClock
from qp_transformer.core.exceptions import (
    CacheError,
    InvalidInputError,
    SearchBackendError,
    TransformationError,
    TransformerError,
)

__all__ = [
    # Types
    "AlternativeSequence",
    "CandidateHit",
    "EntityKind",
    "ItemType",
    "KindFilter",
    "MatchedItem",
    "MatchedSpan",
    "MatchType",
    "SearchResults",
    "Span",
    "Token",
    "TransformResult",
    # Protocols
    "SearchBackend",
    # Clock
    "Clock",
    "FakeClock",
    "SystemClock",
    # Exceptions
    "CacheError",
    "InvalidInputError",
    "SearchBackendError",
    "TransformationError",
    "TransformerError",
]
