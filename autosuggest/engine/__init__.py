"""Suggestion engine — trie-backed prefix completion with ranking and caching."""

from autosuggest.engine.cache import ResultCache
from autosuggest.engine.errors import (
    EmptyQueryError,
    EngineClosedError,
    InternalIndexError,
    InvalidLimitError,
    InvalidTermError,
    QueryError,
    QueryTimeoutError,
    SuggestionError,
)
from autosuggest.engine.models import SuggestionRecord, SuggestionRequest, Term
from autosuggest.engine.processor import QueryProcessor
from autosuggest.engine.ranker import Ranker
from autosuggest.engine.service import SuggestionEngine
from autosuggest.engine.term_store import TermStore

__all__ = [
    "EmptyQueryError",
    "EngineClosedError",
    "InternalIndexError",
    "InvalidLimitError",
    "InvalidTermError",
    "QueryError",
    "QueryProcessor",
    "QueryTimeoutError",
    "Ranker",
    "ResultCache",
    "SuggestionEngine",
    "SuggestionError",
    "SuggestionRecord",
    "SuggestionRequest",
    "Term",
    "TermStore",
]
