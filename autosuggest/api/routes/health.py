"""Health and stats routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

from autosuggest.api.schemas import StatsResponse

router = APIRouter(tags=["system"])


@router.get("/health")
def health(request: Request) -> dict:
    """Liveness check; reports whether the engine still serves."""
    engine = request.app.state.engine
    return {"status": "closed" if engine.closed else "ok"}


@router.get("/stats", response_model=StatsResponse)
def stats(request: Request) -> StatsResponse:
    """Vocabulary size and cache counters."""
    return StatsResponse(**request.app.state.engine.stats())
