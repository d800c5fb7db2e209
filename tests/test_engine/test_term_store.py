"""Tests for the TermStore (trie-backed vocabulary)."""

from __future__ import annotations

from pathlib import Path

import msgpack
import pytest

from autosuggest.engine.errors import InternalIndexError, InvalidTermError, QueryTimeoutError
from autosuggest.engine.models import Term
from autosuggest.engine.term_store import TermStore


def _texts(terms: list[Term]) -> set[str]:
    return {t.text for t in terms}


class TestIngest:
    def test_single_term(self):
        s = TermStore()
        term = s.ingest("python", 5.0)
        assert term == Term("python", 5.0)
        assert s.size == 1
        assert len(s) == 1

    def test_text_is_normalized(self):
        s = TermStore()
        s.ingest("  New   York ", 3)
        assert "new york" in s
        assert s.get("NEW YORK").text == "new york"

    def test_reingest_overwrites_weight(self):
        s = TermStore()
        s.ingest("app", 80)
        s.ingest("app", 90)
        assert s.size == 1
        assert s.terms() == [Term("app", 90.0)]

    def test_case_variants_are_one_term(self):
        s = TermStore()
        s.ingest("Python", 3)
        s.ingest("PYTHON", 7)
        assert s.size == 1
        assert s.get("python").weight == 7.0

    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    def test_empty_text_rejected(self, text):
        s = TermStore()
        with pytest.raises(InvalidTermError):
            s.ingest(text, 1)
        assert s.size == 0

    @pytest.mark.parametrize("weight", [-1, float("nan"), float("inf"), "heavy", None, True])
    def test_bad_weight_rejected(self, weight):
        s = TermStore()
        with pytest.raises(InvalidTermError):
            s.ingest("word", weight)
        assert "word" not in s

    def test_non_string_text_rejected(self):
        with pytest.raises(InvalidTermError):
            TermStore().ingest(42, 1)

    def test_version_increments_on_mutation(self):
        s = TermStore()
        v0 = s.version
        s.ingest("a", 1)
        s.ingest("a", 2)
        assert s.version == v0 + 2


class TestIngestMany:
    def test_invalid_entries_skipped_batch_continues(self):
        s = TermStore()
        report = s.ingest_many([("good", 1), ("", 5), ("also good", 2), ("bad", -3), ("x",)])
        assert report.accepted == 2
        assert report.skipped == 3
        assert len(report.errors) == 3
        assert _texts(s.terms()) == {"good", "also good"}

    def test_constructor_accepts_pairs(self, store: TermStore):
        assert store.size == 6


class TestPrefixSearch:
    def test_returns_all_matches(self, store: TermStore):
        assert _texts(store.prefix_search("app")) == {"app", "apple", "application"}

    def test_prefix_is_normalized(self, store: TermStore):
        assert _texts(store.prefix_search("  BAN ")) == {"banana", "band", "bandana"}

    def test_exact_term_included(self, store: TermStore):
        assert "band" in _texts(store.prefix_search("band"))

    def test_unmatched_returns_empty(self, store: TermStore):
        assert store.prefix_search("xyz") == []

    def test_empty_prefix_returns_empty(self, store: TermStore):
        assert store.prefix_search("") == []
        assert store.prefix_search("   ") == []

    def test_prefix_longer_than_any_term(self, store: TermStore):
        assert store.prefix_search("applications") == []

    def test_membership_matches_startswith(self, store: TermStore):
        all_terms = store.terms()
        for prefix in ["a", "ap", "appl", "b", "ba", "band", "bandan", "c", "apple"]:
            expected = {t.text for t in all_terms if t.text.startswith(prefix)}
            assert _texts(store.prefix_search(prefix)) == expected

    def test_store_order_is_depth_first_insertion(self):
        s = TermStore([("b", 1), ("ab", 1), ("a", 1), ("ac", 1)])
        assert [t.text for t in s.prefix_search("a")] == ["a", "ab", "ac"]

    def test_expired_timeout_raises(self, store: TermStore):
        with pytest.raises(QueryTimeoutError):
            store.prefix_search("app", timeout=0)

    def test_long_term_does_not_recurse(self):
        s = TermStore()
        long_text = "a" * 5000
        s.ingest(long_text, 1)
        assert [t.text for t in s.prefix_search("aaa")] == [long_text]

    def test_corrupt_node_raises_internal_error(self, store: TermStore):
        node = store._find(store._root, "ban")
        node.term = Term("zzz", 1.0)
        with pytest.raises(InternalIndexError):
            store.prefix_search("ba")


class TestFuzzySearch:
    def test_one_typo(self, store: TermStore):
        # "appl" and "appli" are both 2 edits away; only "apple" gets within 1
        assert _texts(store.fuzzy_search("aple", max_distance=1)) == {"apple"}

    def test_substitution(self, store: TermStore):
        assert "banana" in _texts(store.fuzzy_search("bonana", max_distance=1))

    def test_too_far(self, store: TermStore):
        assert store.fuzzy_search("xyz", max_distance=1) == []

    def test_distance_two(self, store: TermStore):
        assert "band" in _texts(store.fuzzy_search("bnd", max_distance=1))
        assert "band" in _texts(store.fuzzy_search("bxnx", max_distance=2))

    def test_scan_limit_caps_results(self, store: TermStore):
        assert len(store.fuzzy_search("ban", max_distance=1, scan_limit=2)) == 2

    def test_short_query_within_distance_matches_everything(self, store: TermStore):
        results = store.fuzzy_search("q", max_distance=1, scan_limit=100)
        assert len(results) == store.size

    def test_no_duplicates(self, store: TermStore):
        texts = [t.text for t in store.fuzzy_search("bana", max_distance=2, scan_limit=100)]
        assert len(texts) == len(set(texts))


class TestIncrementAndRemove:
    def test_increment_existing(self, store: TermStore):
        store.increment("band", 5)
        assert store.get("band").weight == 30.0

    def test_increment_creates_missing(self):
        s = TermStore()
        s.increment("new", 2)
        assert s.get("new") == Term("new", 2.0)

    def test_increment_below_zero_rejected(self, store: TermStore):
        with pytest.raises(InvalidTermError):
            store.increment("band", -100)
        assert store.get("band").weight == 25.0

    def test_remove(self, store: TermStore):
        assert store.remove("apple") is True
        assert "apple" not in store
        assert store.size == 5
        assert _texts(store.prefix_search("app")) == {"app", "application"}

    def test_remove_prunes_branch(self):
        s = TermStore([("ab", 1), ("abcd", 1)])
        s.remove("abcd")
        node = s._find(s._root, "ab")
        assert node.children == {}

    def test_remove_missing(self, store: TermStore):
        assert store.remove("cherry") is False
        assert store.remove("ap") is False
        assert store.size == 6


class TestReplaceAll:
    def test_swaps_vocabulary(self, store: TermStore):
        v = store.version
        report = store.replace_all([("cherry", 3), ("", 1)])
        assert report.accepted == 1
        assert report.skipped == 1
        assert _texts(store.terms()) == {"cherry"}
        assert store.size == 1
        assert store.version == v + 1

    def test_clear(self, store: TermStore):
        store.clear()
        assert store.size == 0
        assert store.prefix_search("a") == []


class TestPersistence:
    def test_save_and_load(self, tmp_path: Path, store: TermStore):
        path = tmp_path / "vocab.msgpack"
        store.save(path)
        loaded = TermStore.load(path)
        assert loaded.size == store.size
        assert {(t.text, t.weight) for t in loaded.terms()} == {
            (t.text, t.weight) for t in store.terms()
        }

    def test_load_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            TermStore.load(tmp_path / "no_such.msgpack")

    def test_load_rejects_foreign_payload(self, tmp_path: Path):
        path = tmp_path / "other.msgpack"
        path.write_bytes(msgpack.packb({"t": True, "c": {}}))
        with pytest.raises(ValueError):
            TermStore.load(path)
