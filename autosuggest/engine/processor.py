"""
Query processor — one suggestion request end to end.

normalize -> cache -> prefix lookup (-> fuzzy fallback) -> rank -> top-K
-> cache -> return.

The cache always holds the ranked list up to ``max_limit`` for a query,
and each caller gets a slice of it, so a cached answer never depends on
the limit of whichever request filled it.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from autosuggest.config.settings import QuerySettings
from autosuggest.engine.cache import ResultCache
from autosuggest.engine.errors import (
    EmptyQueryError,
    InternalIndexError,
    InvalidLimitError,
    QueryTimeoutError,
    SuggestionError,
)
from autosuggest.engine.models import SuggestionRecord, SuggestionRequest
from autosuggest.engine.normalize import normalize, truncate
from autosuggest.engine.ranker import Ranker
from autosuggest.engine.term_store import TermStore

logger = logging.getLogger(__name__)


class _Deadline:
    """Monotonic deadline for a single request."""

    def __init__(self, timeout: Optional[float]) -> None:
        self.timeout = timeout
        self._expires = None if timeout is None else time.monotonic() + timeout

    def remaining(self) -> Optional[float]:
        if self._expires is None:
            return None
        return self._expires - time.monotonic()

    def check(self, stage: str) -> None:
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise QueryTimeoutError(stage, self.timeout)


class QueryProcessor:
    """Turns a raw query into a bounded, ranked list of suggestions."""

    def __init__(
        self,
        term_store: TermStore,
        ranker: Optional[Ranker] = None,
        cache: Optional[ResultCache] = None,
        settings: Optional[QuerySettings] = None,
    ) -> None:
        self._store = term_store
        self._ranker = ranker or Ranker()
        self._cache = cache
        self._settings = settings or QuerySettings()

    @property
    def settings(self) -> QuerySettings:
        return self._settings

    def normalize_query(self, raw_query: str) -> str:
        """
        Normalize and length-cap *raw_query*.

        Raises:
            EmptyQueryError: nothing is left after normalization.
        """
        if raw_query is None:
            raise EmptyQueryError()
        if not isinstance(raw_query, str):
            raise TypeError(f"Query must be str, got {type(raw_query).__name__}")
        query = normalize(raw_query)
        if not query:
            raise EmptyQueryError()
        capped = truncate(query, self._settings.max_query_length)
        if capped != query:
            logger.debug(
                "Query truncated from %d to %d characters", len(query), len(capped)
            )
        return capped

    def resolve_limit(self, limit: Optional[int]) -> int:
        """
        Validate *limit* and clamp it to ``max_limit``.

        Raises:
            InvalidLimitError: not an int, a bool, or below 1.
        """
        if limit is None:
            limit = self._settings.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidLimitError(limit)
        return min(limit, self._settings.max_limit)

    def suggest(
        self,
        raw_query: str,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> list[SuggestionRecord]:
        """
        Return at most *limit* suggestions for *raw_query*.

        Output is ordered by descending score, ties by ascending text.
        When *timeout* (or the configured default) passes before the
        result is complete, ``QueryTimeoutError`` is raised; partial
        results are never returned.
        """
        query = self.normalize_query(raw_query)
        n = self.resolve_limit(limit)
        deadline = _Deadline(timeout if timeout is not None else self._settings.default_timeout)
        deadline.check("start")

        # Read before the lookup so a concurrent mutation marks the entry stale
        version = self._store.version
        if self._cache is not None:
            cached = self._cache.get(query, version)
            if cached is not None:
                deadline.check("cache lookup")
                return cached[:n]

        try:
            ranked = self._lookup(query, deadline)
        except InternalIndexError:
            logger.exception("Index corruption detected for query %r", query)
            raise
        except SuggestionError:
            raise
        except Exception as exc:
            logger.exception("Index lookup failed for query %r", query)
            raise InternalIndexError(f"Lookup failed for {query!r}: {exc}") from exc

        deadline.check("ranking")
        if self._cache is not None:
            self._cache.put(query, ranked, version)
        return ranked[:n]

    def suggest_request(self, request: SuggestionRequest) -> list[SuggestionRecord]:
        """``suggest`` for a typed request built by the web layer."""
        return self.suggest(request.query, limit=request.limit, timeout=request.timeout)

    def _lookup(self, query: str, deadline: _Deadline) -> list[SuggestionRecord]:
        s = self._settings
        deadline.check("prefix search")
        candidates = self._store.prefix_search(query, timeout=deadline.remaining())

        if not candidates and s.fuzzy_enabled:
            deadline.check("fuzzy search")
            candidates = self._store.fuzzy_search(
                query,
                max_distance=s.max_fuzzy_distance,
                scan_limit=s.fuzzy_scan_limit,
                timeout=deadline.remaining(),
            )
            if candidates:
                logger.debug("Fuzzy fallback for %r found %d candidates", query, len(candidates))

        deadline.check("ranking")
        return self._ranker.rank(query, candidates, limit=s.max_limit)
