"""Lookup cache maintenance endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from qp_transformer.server.dependencies import get_transformer
from qp_transformer.server.schemas import CacheStatsResponse, CacheSweepResponse
from qp_transformer.transform.transformer import TextToQPTransformer

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/cache/stats")
async def cache_stats(
    transformer: TextToQPTransformer = Depends(get_transformer),
) -> CacheStatsResponse:
    stats = await transformer.client.cache.get_stats()
    return CacheStatsResponse(
        memory_cache=stats["memory_cache"],
        durable_cache=stats["durable_cache"],
        client=transformer.client.stats(),
    )


@router.post("/cache/sweep")
async def sweep_cache(
    transformer: TextToQPTransformer = Depends(get_transformer),
) -> CacheSweepResponse:
    """Remove expired and corrupt cache entries."""
    removed = await transformer.client.cache.clean_expired()
    return CacheSweepResponse(removed=removed)


@router.delete("/cache", status_code=204)
async def clear_cache(
    transformer: TextToQPTransformer = Depends(get_transformer),
) -> None:
    await transformer.client.cache.clear()
    logger.info("Lookup cache cleared")
