"""Dependency injection: build and fetch the shared transformer."""

from __future__ import annotations

import logging

from fastapi import Request

from qp_transformer.cache.base import LookupCache
from qp_transformer.cache.factory import create_cache_from_config
from qp_transformer.core.protocols import SearchBackend
from qp_transformer.search.backends import WikidataSearchBackend
from qp_transformer.search.client import LookupClient
from qp_transformer.server.config import ServerConfig
from qp_transformer.server.errors import TransformerUnavailableError
from qp_transformer.transform.transformer import TextToQPTransformer

logger = logging.getLogger(__name__)


def build_transformer(
    config: ServerConfig,
    backend: SearchBackend | None = None,
    cache: LookupCache | None = None,
) -> TextToQPTransformer:
    """Wire cache → lookup client → transformer from configuration."""
    search = config.search
    ttl_ms = None if search.cache_ttl_seconds is None else int(search.cache_ttl_seconds * 1000)
    client = LookupClient(
        backend or WikidataSearchBackend(search),
        cache or create_cache_from_config(config.cache),
        ttl_ms=ttl_ms,
        coalesce_inflight=search.coalesce_inflight,
    )
    logger.info(
        "Transformer ready (cache=%s, coalesce=%s)",
        config.cache.backend, search.coalesce_inflight,
    )
    return TextToQPTransformer(client, lookup_timeout=search.lookup_timeout)


def get_transformer(request: Request) -> TextToQPTransformer:
    """Get the TextToQPTransformer from app state."""
    transformer: TextToQPTransformer | None = getattr(request.app.state, "transformer", None)
    if transformer is None:
        raise TransformerUnavailableError("Transformer not initialized")
    return transformer
