"""Pydantic response models for the API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SuggestionResponse(BaseModel):
    """A single autocomplete suggestion."""

    text: str
    score: float


class CacheStatsResponse(BaseModel):
    """Result cache counters."""

    hits: int
    misses: int
    evictions: int
    expirations: int
    stale: int
    size: int
    capacity: int
    ttl_seconds: float


class StatsResponse(BaseModel):
    """Engine statistics."""

    terms: int
    vocabulary_version: int
    cache: CacheStatsResponse
    closed: bool = False


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str = Field(..., description="Human readable error message")
