"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# ========== Common ==========

class ErrorResponse(BaseModel):
    error: str
    detail: str
    field: str | None = None
    phrase: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    cache_backend: str
    coalesce_inflight: bool


# ========== Transform ==========

class TransformOptionsModel(BaseModel):
    max_candidates: int = Field(default=3, ge=1)
    include_labels: bool = False
    search_limit: int = Field(default=10, ge=1)
    prefer_properties: bool = False
    max_ngram_size: int = Field(default=3, ge=1)
    language: str = "en"


class TransformRequest(BaseModel):
    text: str
    options: TransformOptionsModel = Field(default_factory=TransformOptionsModel)


class ContextTransformRequest(TransformRequest):
    domain: str | None = Field(None, description="Keep ambiguous alternatives whose description mentions this")


class CandidateItem(BaseModel):
    id: str
    label: str
    description: str
    kind: str
    match_type: str


class SequenceItem(BaseModel):
    id: str
    type: str
    label: str | None = None
    alternatives: list[CandidateItem] = Field(default_factory=list)
    position: int
    ngram_size: int
    original_text: str


class AlternativeItem(BaseModel):
    sequence: str
    confidence: str


class TransformResponse(BaseModel):
    original: str
    tokens: list[str]
    sequence: list[SequenceItem]
    formatted: str
    formatted_with_links: str
    alternatives: list[AlternativeItem]


# ========== Cache ==========

class CacheStatsResponse(BaseModel):
    memory_cache: dict[str, Any]
    durable_cache: dict[str, Any]
    client: dict[str, Any]


class CacheSweepResponse(BaseModel):
    removed: int
