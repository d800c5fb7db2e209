"""
Candidate scoring and ordering.

score = popularity weight * match factor, where the factor depends on
whether the term is a true prefix match or came from the fuzzy pass.
Ordering is by descending score, then ascending text, so equal input
always produces the same output.
"""

from __future__ import annotations

import heapq
import logging
from typing import Iterable, Optional

from autosuggest.config.settings import RankingSettings
from autosuggest.engine.models import SuggestionRecord, Term

logger = logging.getLogger(__name__)


def _order_key(record: SuggestionRecord) -> tuple[float, str]:
    return (-record.score, record.text)


class Ranker:
    """Scores candidate terms for a query and orders them."""

    def __init__(self, settings: Optional[RankingSettings] = None) -> None:
        self._settings = settings or RankingSettings()

    @property
    def settings(self) -> RankingSettings:
        return self._settings

    def match_factor(self, query: str, text: str) -> float:
        """1.0-style factor for prefix matches, the discounted one otherwise."""
        if text.startswith(query):
            return self._settings.prefix_match_factor
        return self._settings.fuzzy_match_factor

    def score(self, query: str, term: Term) -> float:
        return term.weight * self.match_factor(query, term.text)

    def rank(
        self,
        query: str,
        candidates: Iterable[Term],
        limit: Optional[int] = None,
    ) -> list[SuggestionRecord]:
        """
        Score *candidates* against the normalized *query* and order them.

        A text appearing more than once keeps only its best score. With
        *limit*, only the top *limit* records are returned; the result is
        the same as sorting everything and slicing.
        """
        best: dict[str, float] = {}
        for term in candidates:
            s = self.score(query, term)
            prev = best.get(term.text)
            if prev is None or s > prev:
                best[term.text] = s

        records = [SuggestionRecord(text=t, score=s) for t, s in best.items()]
        if limit is not None and limit < len(records):
            return heapq.nsmallest(limit, records, key=_order_key)
        records.sort(key=_order_key)
        return records
