"""
Vocabulary loader.

Reads seed files and feeds them to a SuggestionEngine. Supported formats,
picked by file suffix:

* ``.msgpack`` — snapshot written by ``TermStore.save``
* ``.json``    — ``{"text": weight, ...}`` or ``[{"text": ..., "weight": ...}, ...]``
* ``.tsv`` / ``.txt`` — one ``text<TAB>weight`` per line; weight defaults
  to 1, blank lines and ``#`` comments are ignored
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Iterable

from autosuggest.engine.models import IngestReport
from autosuggest.engine.service import SuggestionEngine
from autosuggest.engine.term_store import TermStore

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".msgpack", ".json", ".tsv", ".txt")


def _pairs_from_json(data: Any, path: Path) -> list[tuple[Any, Any]]:
    if isinstance(data, dict):
        return list(data.items())
    if isinstance(data, list):
        pairs = []
        for item in data:
            if isinstance(item, dict):
                pairs.append((item.get("text"), item.get("weight", 1)))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                pairs.append((item[0], item[1]))
            else:
                # Let ingestion reject it so it is counted as skipped
                pairs.append((item, None))
        return pairs
    raise ValueError(f"{path}: expected a JSON object or array, got {type(data).__name__}")


def _pairs_from_tsv(path: Path) -> list[tuple[str, Any]]:
    pairs: list[tuple[str, Any]] = []
    with open(path, "r", encoding="utf-8", newline="") as f:
        for row in csv.reader(f, delimiter="\t", quoting=csv.QUOTE_NONE):
            if not row or not "".join(row).strip():
                continue
            if row[0].lstrip().startswith("#"):
                continue
            text = row[0]
            weight: Any = 1
            if len(row) > 1 and row[1].strip():
                try:
                    weight = float(row[1])
                except ValueError:
                    weight = row[1]
            pairs.append((text, weight))
    return pairs


def load_pairs(path: Path) -> list[tuple[Any, Any]]:
    """
    Read ``(text, weight)`` pairs from *path*.

    Pairs are returned as found; validation happens at ingestion.

    Raises:
        FileNotFoundError: *path* does not exist.
        ValueError: unsupported suffix or unreadable content.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported vocabulary file {path.name!r}; expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )
    if not path.exists():
        raise FileNotFoundError(path)

    if suffix == ".msgpack":
        pairs = TermStore.read_snapshot(path)
    elif suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            pairs = _pairs_from_json(json.load(f), path)
    else:
        pairs = _pairs_from_tsv(path)

    logger.info("Read %d vocabulary entries from %s", len(pairs), path)
    return pairs


class VocabularyLoader:
    """Loads seed files into an engine."""

    def __init__(self, engine: SuggestionEngine) -> None:
        self._engine = engine

    def load(self, path: Path) -> IngestReport:
        """Ingest *path* on top of the current vocabulary."""
        return self._engine.ingest_many(load_pairs(path))

    def load_all(self, paths: Iterable[Path]) -> IngestReport:
        """Ingest several files; later files overwrite earlier weights."""
        total = IngestReport()
        for path in paths:
            report = self.load(path)
            total.accepted += report.accepted
            total.skipped += report.skipped
            total.errors.extend(report.errors)
        return total

    def reload(self, path: Path) -> IngestReport:
        """Replace the whole vocabulary with the contents of *path*."""
        report = self._engine.refresh(load_pairs(path))
        logger.info(
            "Reloaded vocabulary from %s: %d accepted, %d skipped",
            path, report.accepted, report.skipped,
        )
        return report
