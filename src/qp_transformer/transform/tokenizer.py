"""Whitespace tokenizer with sentence-punctuation stripping."""

from __future__ import annotations

import re

from qp_transformer.core.types import Token

PUNCTUATION = ".,!?;:"
_PUNCTUATION_RE = re.compile(f"[{re.escape(PUNCTUATION)}]")


def tokenize(text: str) -> list[Token]:
    """Strip punctuation, split on whitespace runs, drop empty pieces."""
    stripped = _PUNCTUATION_RE.sub("", text)
    return [Token(text=word, index=i) for i, word in enumerate(stripped.split())]
