"""Exception-to-HTTP mapping for the server."""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from qp_transformer.core.exceptions import (
    InvalidInputError,
    SearchBackendError,
    TransformationError,
)


class TransformerUnavailableError(Exception):
    """The transformer was not initialised by the app lifespan."""


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "invalid_input", "detail": str(exc), "field": exc.field},
    )


async def search_backend_error_handler(request: Request, exc: SearchBackendError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"error": "search_backend_failed", "detail": str(exc), "phrase": exc.phrase},
    )


async def transformation_error_handler(request: Request, exc: TransformationError) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "transformation_failed", "detail": str(exc)},
    )


async def unavailable_handler(request: Request, exc: TransformerUnavailableError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"error": "service_unavailable", "detail": str(exc)},
    )


EXCEPTION_HANDLERS = {
    InvalidInputError: invalid_input_handler,
    SearchBackendError: search_backend_error_handler,
    TransformationError: transformation_error_handler,
    TransformerUnavailableError: unavailable_handler,
}
