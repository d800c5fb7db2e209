"""
Suggestion engine — the object the rest of the process holds on to.

Built once at startup, filled through ingestion, closed at shutdown.
Each instance owns its own store and cache, so tests (or several
vocabularies in one process) never share state.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from autosuggest.config.settings import Settings, get_settings
from autosuggest.engine.cache import ResultCache
from autosuggest.engine.errors import EngineClosedError
from autosuggest.engine.models import IngestReport, SuggestionRecord, SuggestionRequest, Term
from autosuggest.engine.processor import QueryProcessor
from autosuggest.engine.ranker import Ranker
from autosuggest.engine.term_store import TermStore

logger = logging.getLogger(__name__)


class SuggestionEngine:
    """Wires term store, ranker, cache and query processor together."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        term_store: Optional[TermStore] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = term_store if term_store is not None else TermStore()
        self._ranker = Ranker(self._settings.ranking)
        self._cache = ResultCache(self._settings.cache)
        self._processor = QueryProcessor(
            self._store,
            ranker=self._ranker,
            cache=self._cache if self._cache.enabled else None,
            settings=self._settings.query,
        )
        self._closed = threading.Event()
        logger.info(
            "Suggestion engine ready (%d terms, cache capacity %d, fuzzy %s)",
            self._store.size,
            self._cache.capacity,
            "on" if self._settings.query.fuzzy_enabled else "off",
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def term_store(self) -> TermStore:
        return self._store

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def processor(self) -> QueryProcessor:
        return self._processor

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    # ---- vocabulary ----

    def ingest(self, text: str, weight: float = 1.0) -> Term:
        self._ensure_open()
        return self._store.ingest(text, weight)

    def ingest_many(self, pairs: Iterable[tuple[str, float]]) -> IngestReport:
        self._ensure_open()
        report = self._store.ingest_many(pairs)
        logger.info("Ingested %d terms (%d skipped)", report.accepted, report.skipped)
        return report

    def record_usage(self, text: str, delta: float = 1.0) -> Term:
        """Bump a term's popularity after it was picked by a user."""
        self._ensure_open()
        return self._store.increment(text, delta)

    def remove(self, text: str) -> bool:
        self._ensure_open()
        return self._store.remove(text)

    def refresh(self, pairs: Iterable[tuple[str, float]]) -> IngestReport:
        """
        Swap in a whole new vocabulary and drop every cached result.
        """
        self._ensure_open()
        report = self._store.replace_all(pairs)
        self._cache.clear()
        return report

    # ---- queries ----

    def suggest(
        self,
        query: str,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> list[SuggestionRecord]:
        self._ensure_open()
        return self._processor.suggest(query, limit=limit, timeout=timeout)

    def suggest_request(self, request: SuggestionRequest) -> list[SuggestionRecord]:
        self._ensure_open()
        return self._processor.suggest_request(request)

    def get_autocomplete_suggestions(self, query: str) -> list[dict]:
        """Suggestions for *query* at the default limit, as plain dicts."""
        return [r.to_dict() for r in self.suggest(query)]

    # ---- lifecycle ----

    def stats(self) -> dict:
        return {
            "terms": self._store.size,
            "vocabulary_version": self._store.version,
            "cache": self._cache.stats(),
            "closed": self.closed,
        }

    def close(self) -> None:
        """Release the vocabulary and cache. Idempotent."""
        if self._closed.is_set():
            return
        self._closed.set()
        self._cache.clear()
        self._store.clear()
        logger.info("Suggestion engine closed")

    def __enter__(self) -> "SuggestionEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed.is_set():
            raise EngineClosedError()
