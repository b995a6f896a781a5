"""Stop-words and relation indicators used to shape span lookups."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

DEFAULT_STOP_WORDS = frozenset({
    # articles
    "the", "a", "an",
    # conjunctions
    "and", "or", "but",
    # prepositions
    "in", "on", "at", "to", "for", "of", "with", "by",
    # copulas
    "is", "was", "are", "were",
})

DEFAULT_RELATION_INDICATORS = (
    "is", "was", "are", "were", "has", "have", "had",
    "born", "died", "located", "created", "founded",
    "married", "wrote", "directed", "invented", "discovered",
    "contains", "belongs", "relates", "connects", "instance of",
    "part of", "member of", "capital of", "owned by", "child of",
    "parent of", "spouse of", "sibling of",
)


@dataclass(frozen=True)
class Vocabulary:
    """Closed word lists for one language. English by default."""

    stop_words: frozenset[str] = DEFAULT_STOP_WORDS
    relation_indicators: tuple[str, ...] = DEFAULT_RELATION_INDICATORS
    _relation_pattern: re.Pattern[str] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "stop_words", frozenset(w.casefold() for w in self.stop_words)
        )
        if self.relation_indicators:
            alternation = "|".join(
                r"\s+".join(re.escape(part) for part in indicator.split())
                for indicator in sorted(self.relation_indicators, key=len, reverse=True)
            )
            object.__setattr__(
                self,
                "_relation_pattern",
                re.compile(rf"(?<!\w)(?:{alternation})(?!\w)", re.IGNORECASE),
            )

    def is_stop_word(self, word: str) -> bool:
        return word.casefold() in self.stop_words

    def is_likely_relation(self, phrase: str) -> bool:
        """True if the phrase contains a relation indicator as a whole word or phrase."""
        if self._relation_pattern is None:
            return False
        return self._relation_pattern.search(phrase) is not None


ENGLISH = Vocabulary()
