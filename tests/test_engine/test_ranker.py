"""Tests for the Ranker."""

from __future__ import annotations

from autosuggest.config.settings import RankingSettings
from autosuggest.engine.models import SuggestionRecord, Term
from autosuggest.engine.ranker import Ranker


class TestRanker:
    def test_orders_by_weight_for_prefix_matches(self):
        r = Ranker()
        out = r.rank("app", [Term("apple", 50), Term("app", 80), Term("application", 30)])
        assert out == [
            SuggestionRecord("app", 80.0),
            SuggestionRecord("apple", 50.0),
            SuggestionRecord("application", 30.0),
        ]

    def test_ties_broken_by_text(self):
        r = Ranker()
        out = r.rank("b", [Term("bz", 5), Term("ba", 5), Term("bm", 5)])
        assert [s.text for s in out] == ["ba", "bm", "bz"]

    def test_fuzzy_candidates_discounted(self):
        r = Ranker(RankingSettings(prefix_match_factor=1.0, fuzzy_match_factor=0.5))
        out = r.rank("aple", [Term("apple", 50)])
        assert out == [SuggestionRecord("apple", 25.0)]

    def test_factors_are_configurable(self):
        r = Ranker(RankingSettings(prefix_match_factor=2.0, fuzzy_match_factor=0.1))
        assert r.score("ap", Term("apple", 10)) == 20.0
        assert r.score("xp", Term("apple", 10)) == 1.0

    def test_duplicates_collapsed_to_best(self):
        r = Ranker()
        out = r.rank("a", [Term("ab", 1), Term("ab", 9), Term("ac", 3)])
        assert out == [SuggestionRecord("ab", 9.0), SuggestionRecord("ac", 3.0)]

    def test_limit_matches_sort_then_slice(self):
        r = Ranker()
        terms = [Term(f"t{i:02d}", float(i % 7)) for i in range(40)]
        full = r.rank("t", terms)
        assert r.rank("t", terms, limit=10) == full[:10]

    def test_limit_larger_than_candidates(self):
        r = Ranker()
        assert len(r.rank("a", [Term("ab", 1)], limit=10)) == 1

    def test_empty_candidates(self):
        assert Ranker().rank("a", []) == []

    def test_deterministic(self):
        r = Ranker()
        terms = [Term("ab", 2), Term("aa", 2), Term("ac", 1)]
        assert r.rank("a", terms) == r.rank("a", list(reversed(terms)))
