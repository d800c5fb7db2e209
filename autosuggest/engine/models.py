"""
Value types shared across the engine.

Plain dataclasses; nothing here does I/O or holds locks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Term:
    """
    A vocabulary entry.

    ``text`` is already normalized. The store swaps in a new Term when the
    weight changes, so a reference handed out to a reader never mutates.
    """

    text: str
    weight: float


@dataclass(frozen=True)
class SuggestionRecord:
    """A single ranked suggestion returned to callers."""

    text: str
    score: float

    def to_dict(self) -> dict:
        return {"text": self.text, "score": self.score}


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached result set for one normalized query.

    ``version`` is the term store version the results were computed from.
    """

    normalized_query: str
    results: tuple[SuggestionRecord, ...]
    inserted_at: float
    version: int = 0


@dataclass(frozen=True)
class SuggestionRequest:
    """
    Narrow typed input for one lookup.

    The web layer builds this from its transport object; the engine never
    sees request objects.
    """

    query: str
    limit: Optional[int] = None
    timeout: Optional[float] = None


@dataclass
class IngestReport:
    """Summary of a batch ingestion."""

    accepted: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }
