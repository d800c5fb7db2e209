"""
Exception hierarchy for the suggestion engine.

Caller-correctable problems derive from ``QueryError`` so the web layer
can map them to 4xx responses in one place; everything else is either
transient (``QueryTimeoutError``) or internal.
"""

from __future__ import annotations


class SuggestionError(Exception):
    """Base class for all engine errors."""


class QueryError(SuggestionError):
    """The request itself is wrong; the caller can fix it."""


class EmptyQueryError(QueryError, ValueError):
    """The query is empty after normalization."""

    def __init__(self, message: str = "Query is empty after normalization") -> None:
        super().__init__(message)


class InvalidLimitError(QueryError, ValueError):
    """The requested result limit is not a positive integer."""

    def __init__(self, limit: object) -> None:
        super().__init__(f"Limit must be a positive integer, got {limit!r}")
        self.limit = limit


class InvalidTermError(SuggestionError, ValueError):
    """A vocabulary entry cannot be ingested."""

    def __init__(self, text: object, reason: str = "empty after normalization") -> None:
        super().__init__(f"Invalid term {text!r}: {reason}")
        self.text = text
        self.reason = reason


class QueryTimeoutError(SuggestionError, TimeoutError):
    """The request deadline passed before a complete result was ready."""

    def __init__(self, stage: str, timeout: float | None = None) -> None:
        detail = f" after {timeout:.3f}s" if timeout is not None else ""
        super().__init__(f"Suggestion lookup timed out during {stage}{detail}")
        self.stage = stage
        self.timeout = timeout


class InternalIndexError(SuggestionError, RuntimeError):
    """The index is in a state it should never be in."""


class EngineClosedError(SuggestionError, RuntimeError):
    """The engine was used after ``close()``."""

    def __init__(self) -> None:
        super().__init__("Suggestion engine is closed")
