"""Text → Q/P transformation pipeline."""

from qp_transformer.transform.config import MAX_NGRAM_CAP, TransformOptions
from qp_transformer.transform.formatter import (
    build_item,
    format_candidates,
    format_sequence,
    format_sequence_with_links,
    generate_alternatives,
    process_candidates,
)
from qp_transformer.transform.matcher import select_spans
from qp_transformer.transform.ngrams import generate_ngrams, iter_spans
from qp_transformer.transform.resolver import CandidateResolver
from qp_transformer.transform.tokenizer import tokenize
from qp_transformer.transform.transformer import TextToQPTransformer
from qp_transformer.transform.vocabulary import ENGLISH, Vocabulary

__all__ = [
    "CandidateResolver",
    "ENGLISH",
    "MAX_NGRAM_CAP",
    "TextToQPTransformer",
    "TransformOptions",
    "Vocabulary",
    "build_item",
    "format_candidates",
    "format_sequence",
    "format_sequence_with_links",
    "generate_alternatives",
    "generate_ngrams",
    "iter_spans",
    "process_candidates",
    "select_spans",
    "tokenize",
]
