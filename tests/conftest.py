"""
Shared test fixtures for the Autosuggest test suite.

Every test gets its own Settings rooted in a temporary directory and its
own TermStore / SuggestionEngine, so no state leaks between tests.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from autosuggest.config.settings import CacheSettings, QuerySettings, Settings
from autosuggest.engine.service import SuggestionEngine
from autosuggest.engine.term_store import TermStore

SAMPLE_VOCABULARY = [
    ("apple", 50),
    ("app", 80),
    ("application", 30),
    ("banana", 40),
    ("band", 25),
    ("bandana", 10),
]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temp dir, fuzzy fallback off by default."""
    s = Settings(
        project_root=tmp_path,
        query=QuerySettings(fuzzy_enabled=False),
    )
    s.ensure_dirs()
    return s


@pytest.fixture
def store() -> TermStore:
    """A TermStore holding SAMPLE_VOCABULARY."""
    return TermStore(SAMPLE_VOCABULARY)


@pytest.fixture
def engine(settings: Settings):
    """A SuggestionEngine holding SAMPLE_VOCABULARY, closed after the test."""
    eng = SuggestionEngine(settings)
    eng.ingest_many(SAMPLE_VOCABULARY)
    yield eng
    eng.close()


@pytest.fixture
def uncached_settings(settings: Settings) -> Settings:
    """Same as ``settings`` with the result cache disabled."""
    return dataclasses.replace(settings, cache=CacheSettings(capacity=0))
