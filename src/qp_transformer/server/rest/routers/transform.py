"""Text → Q/P transformation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from qp_transformer.core.types import TransformResult
from qp_transformer.server.dependencies import get_transformer
from qp_transformer.server.schemas import (
    ContextTransformRequest,
    ErrorResponse,
    TransformRequest,
    TransformResponse,
)
from qp_transformer.transform.transformer import TextToQPTransformer

router = APIRouter()

_ERRORS = {
    422: {"model": ErrorResponse, "description": "Invalid text or options"},
    502: {"model": ErrorResponse, "description": "Lookup backend failed"},
}


def _to_response(result: TransformResult) -> TransformResponse:
    return TransformResponse.model_validate(result.as_dict())


@router.post("/transform", responses=_ERRORS)
async def transform_text(
    body: TransformRequest,
    transformer: TextToQPTransformer = Depends(get_transformer),
) -> TransformResponse:
    """Transform text into a Q/P sequence."""
    result = await transformer.transform(body.text, body.options.model_dump())
    return _to_response(result)


@router.post("/transform/context", responses=_ERRORS)
async def transform_text_with_context(
    body: ContextTransformRequest,
    transformer: TextToQPTransformer = Depends(get_transformer),
) -> TransformResponse:
    """Transform text, narrowing ambiguous items to the given domain."""
    result = await transformer.transform_with_context(
        body.text,
        {"domain": body.domain},
        body.options.model_dump(),
    )
    return _to_response(result)
