"""Lookup backends and the caching lookup client."""

from qp_transformer.search.backends import StaticSearchBackend, WikidataSearchBackend
from qp_transformer.search.client import LookupClient, merge_results
from qp_transformer.search.config import SearchConfig

__all__ = [
    "LookupClient",
    "SearchConfig",
    "StaticSearchBackend",
    "WikidataSearchBackend",
    "merge_results",
]
