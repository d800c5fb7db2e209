"""Vocabulary package — seed file loading and periodic refresh."""

from autosuggest.vocabulary.loader import VocabularyLoader, load_pairs
from autosuggest.vocabulary.refresher import VocabularyRefresher

__all__ = [
    "VocabularyLoader",
    "VocabularyRefresher",
    "load_pairs",
]
