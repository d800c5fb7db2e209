"""Autocomplete API route."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from autosuggest.api.schemas import ErrorResponse, SuggestionResponse
from autosuggest.engine.models import SuggestionRequest

router = APIRouter(tags=["autocomplete"])


@router.get(
    "/autocomplete",
    response_model=list[SuggestionResponse],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def autocomplete(
    request: Request,
    q: Optional[str] = Query(None, description="Text to complete"),
    limit: Optional[int] = Query(None, description="Max suggestions"),
):
    """Return ranked suggestions for *q* as a JSON array."""
    if not q or not q.strip():
        return JSONResponse(status_code=400, content={"error": "Query parameter is required"})

    engine = request.app.state.engine
    records = engine.suggest_request(SuggestionRequest(query=q, limit=limit))
    return [SuggestionResponse(text=r.text, score=r.score) for r in records]
