"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qp_transformer import __version__
from qp_transformer.cache.base import LookupCache
from qp_transformer.core.protocols import SearchBackend
from qp_transformer.server.config import ServerConfig
from qp_transformer.server.dependencies import build_transformer
from qp_transformer.server.errors import EXCEPTION_HANDLERS
from qp_transformer.server.rest.middleware import RequestLoggingMiddleware
from qp_transformer.server.rest.routers import cache, health, transform

logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig,
    *,
    backend: SearchBackend | None = None,
    lookup_cache: LookupCache | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``backend`` and ``lookup_cache`` override what the config would build.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        app.state.config = config
        app.state.start_time = time.monotonic()
        app.state.transformer = build_transformer(config, backend, lookup_cache)
        logger.info("Q/P transformer server started")
        yield

        # Shutdown
        client = app.state.transformer.client
        await client.cache.close()
        aclose = getattr(client.backend, "aclose", None)
        if aclose is not None:
            await aclose()
        logger.info("Q/P transformer server stopped")

    app = FastAPI(
        title="Q/P Transformer",
        description="Text to Wikidata entity/property sequences",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    # Routers
    prefix = "/api/v1"
    app.include_router(health.router, prefix=prefix, tags=["health"])
    app.include_router(transform.router, prefix=prefix, tags=["transform"])
    app.include_router(cache.router, prefix=prefix, tags=["cache"])

    return app
