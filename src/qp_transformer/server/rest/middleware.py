"""Per-request timing and access logging."""

from __future__ import annotations

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger(__name__)

TIMING_HEADER = "X-Process-Time-Ms"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Time each request, expose the duration as a header, and log it.

    Server errors are logged at WARNING so upstream lookup failures stand
    out from routine traffic.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[TIMING_HEADER] = f"{elapsed_ms:.1f}"
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
