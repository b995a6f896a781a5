"""Per-call transformation options."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from qp_transformer.core.exceptions import InvalidInputError

MAX_NGRAM_CAP = 8

# camelCase spellings accepted from JSON callers
_ALIASES = {
    "maxCandidates": "max_candidates",
    "includeLabels": "include_labels",
    "searchLimit": "search_limit",
    "preferProperties": "prefer_properties",
    "maxNgramSize": "max_ngram_size",
    "maxSpanSize": "max_ngram_size",
    "max_span_size": "max_ngram_size",
}


@dataclass(frozen=True)
class TransformOptions:
    """Options recognised by TextToQPTransformer.transform."""

    max_candidates: int = 3
    include_labels: bool = False
    search_limit: int = 10
    prefer_properties: bool = False
    max_ngram_size: int = 3
    language: str = "en"

    def __post_init__(self) -> None:
        for name in ("max_candidates", "search_limit", "max_ngram_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidInputError(name, f"{name} must be a positive integer, got {value!r}")
        if self.max_ngram_size > MAX_NGRAM_CAP:
            raise InvalidInputError(
                "max_ngram_size", f"max_ngram_size must be at most {MAX_NGRAM_CAP}"
            )
        for name in ("include_labels", "prefer_properties"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidInputError(name, f"{name} must be a boolean")
        if not isinstance(self.language, str) or not self.language:
            raise InvalidInputError("language", "language must be a non-empty string")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TransformOptions:
        """Build options from a dict, accepting snake_case or camelCase keys."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for raw_key, value in data.items():
            key = _ALIASES.get(raw_key, raw_key)
            if key not in known:
                raise InvalidInputError(raw_key, f"Unknown option: {raw_key!r}")
            kwargs[key] = value
        return cls(**kwargs)

    @classmethod
    def coerce(cls, options: TransformOptions | Mapping[str, Any] | None) -> TransformOptions:
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            return cls.from_mapping(options)
        raise InvalidInputError(
            "options", f"options must be TransformOptions or a mapping, got {type(options).__name__}"
        )
