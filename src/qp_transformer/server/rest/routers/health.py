"""Liveness endpoint with a summary of the lookup setup."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request

from qp_transformer import __version__
from qp_transformer.server.dependencies import get_transformer
from qp_transformer.server.schemas import HealthResponse
from qp_transformer.transform.transformer import TextToQPTransformer

router = APIRouter()


@router.get("/health")
async def health(
    request: Request,
    transformer: TextToQPTransformer = Depends(get_transformer),
) -> HealthResponse:
    config = request.app.state.config
    stats = await transformer.client.cache.get_stats()
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(time.monotonic() - request.app.state.start_time, 1),
        cache_backend=stats["durable_cache"]["type"],
        coalesce_inflight=config.search.coalesce_inflight,
    )
