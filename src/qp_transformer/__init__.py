"""Q/P Transformer - free text to Wikidata entity/property sequences.

Turns English text into an ordered sequence of Wikidata identifiers
(Q for entities, P for properties), with:
- Longest-match-first phrase matching over n-gram spans
- Concurrent per-phrase lookups with per-lookup timeouts
- Bracketed disambiguation sets ("[Q1 or Q2 or Q3]") for ambiguous phrases
- A two-tier TTL cache (memory + file / SQLite / disabled)

Example:
    >>> from qp_transformer import (
    ...     LookupClient, TextToQPTransformer, WikidataSearchBackend, create_cache,
    ... )
    >>>
    >>> cache = create_cache("file", cache_dir="./data/wikidata-cache")
    >>> client = LookupClient(WikidataSearchBackend(), cache)
    >>> transformer = TextToQPTransformer(client)
    >>>
    >>> result = await transformer.transform("Barack Obama was born in Hawaii")
    >>> print(result.formatted)
    Q76 P569 [Q782 or Q18094 or Q131750]
"""

__version__ = "0.1.0"

from qp_transformer.core.types import (
    AlternativeSequence,
    CandidateHit,
    EntityKind,
    ItemType,
    KindFilter,
    MatchedItem,
    MatchType,
    SearchResults,
    Span,
    Token,
    TransformResult,
)
from qp_transformer.core.exceptions import (
    CacheError,
    InvalidInputError,
    SearchBackendError,
    TransformationError,
    TransformerError,
)
from qp_transformer.cache import (
    CacheBackendKind,
    CacheConfig,
    LookupCache,
    create_cache,
)
from qp_transformer.search import (
    LookupClient,
    SearchConfig,
    StaticSearchBackend,
    WikidataSearchBackend,
)
from qp_transformer.transform import (
    TextToQPTransformer,
    TransformOptions,
    Vocabulary,
)

__all__ = [
    # Main interface
    "TextToQPTransformer",
    "TransformOptions",
    "Vocabulary",
    # Lookup
    "LookupClient",
    "SearchConfig",
    "StaticSearchBackend",
    "WikidataSearchBackend",
    # Cache
    "CacheBackendKind",
    "CacheConfig",
    "LookupCache",
    "create_cache",
    # Core types
    "AlternativeSequence",
    "CandidateHit",
    "EntityKind",
    "ItemType",
    "KindFilter",
    "MatchedItem",
    "MatchType",
    "SearchResults",
    "Span",
    "Token",
    "TransformResult",
    # Exceptions
    "CacheError",
    "InvalidInputError",
    "SearchBackendError",
    "TransformationError",
    "TransformerError",
]
