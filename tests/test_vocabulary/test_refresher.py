"""Tests for the background vocabulary refresher."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path

from autosuggest.config.settings import VocabularySettings
from autosuggest.engine.service import SuggestionEngine
from autosuggest.vocabulary.loader import VocabularyLoader
from autosuggest.vocabulary.refresher import VocabularyRefresher


def _write(path: Path, data: dict, mtime: float) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")
    os.utime(path, (mtime, mtime))


class TestRefresherRunOnce:
    def test_first_run_loads(self, engine: SuggestionEngine, tmp_path: Path):
        seed = tmp_path / "seed.json"
        _write(seed, {"grape": 5}, mtime=1_000_000)
        r = VocabularyRefresher(VocabularyLoader(engine), seed)
        report = r.run_once()
        assert report is not None
        assert report.accepted == 1
        assert [s.text for s in engine.suggest("gr")] == ["grape"]

    def test_unchanged_file_not_reloaded(self, engine: SuggestionEngine, tmp_path: Path):
        seed = tmp_path / "seed.json"
        _write(seed, {"grape": 5}, mtime=1_000_000)
        r = VocabularyRefresher(VocabularyLoader(engine), seed)
        r.mark_loaded()
        assert r.run_once() is None
        assert r.run_once(force=True) is not None

    def test_changed_file_reloaded(self, engine: SuggestionEngine, tmp_path: Path):
        seed = tmp_path / "seed.json"
        _write(seed, {"grape": 5}, mtime=1_000_000)
        r = VocabularyRefresher(VocabularyLoader(engine), seed)
        r.run_once()
        _write(seed, {"grapefruit": 9}, mtime=1_000_100)
        assert r.run_once() is not None
        assert [s.text for s in engine.suggest("grape")] == ["grapefruit"]

    def test_missing_file_keeps_vocabulary(self, engine: SuggestionEngine, tmp_path: Path):
        r = VocabularyRefresher(VocabularyLoader(engine), tmp_path / "gone.json")
        assert r.run_once() is None
        assert engine.term_store.size == 6


class TestRefresherThread:
    def test_disabled_interval_does_not_start(self, engine: SuggestionEngine, tmp_path: Path):
        r = VocabularyRefresher(
            VocabularyLoader(engine), tmp_path / "seed.json",
            VocabularySettings(refresh_interval=0),
        )
        r.start()
        assert not r.is_running

    def test_thread_picks_up_changes(self, engine: SuggestionEngine, tmp_path: Path):
        seed = tmp_path / "seed.json"
        _write(seed, {"melon": 3}, mtime=1_000_000)
        r = VocabularyRefresher(
            VocabularyLoader(engine), seed, VocabularySettings(refresh_interval=0.02),
        )
        r.start()
        try:
            assert r.is_running
            deadline = time.monotonic() + 5
            while "melon" not in engine.term_store and time.monotonic() < deadline:
                time.sleep(0.01)
            assert "melon" in engine.term_store
        finally:
            r.stop()
        assert not r.is_running

    def test_loader_errors_do_not_kill_thread(self, engine: SuggestionEngine, tmp_path: Path):
        seed = tmp_path / "seed.json"
        _write(seed, {"melon": 3}, mtime=1_000_000)
        seed.write_text("{not json", encoding="utf-8")
        r = VocabularyRefresher(
            VocabularyLoader(engine), seed, VocabularySettings(refresh_interval=0.02),
        )
        r.start()
        try:
            time.sleep(0.1)
            assert r.is_running
        finally:
            r.stop()
        assert engine.term_store.size == 6
