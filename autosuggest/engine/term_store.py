"""
Term store: the vocabulary and its prefix index.

Terms live in a character trie keyed on normalized text. A node that
ends a stored word holds a reference to the ``Term``; changing a weight
replaces that reference, so readers either see the old Term or the new
one, never a half-written one.

Reads (prefix/fuzzy search, lookups) share a readers-writer lock;
mutations take it exclusively for the duration of the structural change
only. Bulk refreshes build a complete new trie without holding the lock
and swap the root in.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import msgpack

from autosuggest.engine.errors import InternalIndexError, InvalidTermError, QueryTimeoutError
from autosuggest.engine.fuzzy import advance_row, initial_row, prunable, within
from autosuggest.engine.locks import ReadWriteLock
from autosuggest.engine.models import IngestReport, Term
from autosuggest.engine.normalize import normalize

logger = logging.getLogger(__name__)

# Bump when the on-disk snapshot layout changes
SNAPSHOT_FORMAT = 1


@dataclass
class TrieNode:
    """Single node in the trie."""

    children: dict[str, "TrieNode"] = field(default_factory=dict)
    term: Optional[Term] = None


def _check_text(text: object) -> str:
    if not isinstance(text, str):
        raise InvalidTermError(text, reason=f"expected str, got {type(text).__name__}")
    normalized = normalize(text)
    if not normalized:
        raise InvalidTermError(text)
    return normalized


def _check_weight(text: object, weight: object) -> float:
    if isinstance(weight, bool):
        raise InvalidTermError(text, reason="weight must be a number, got bool")
    try:
        value = float(weight)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidTermError(text, reason=f"weight must be a number, got {weight!r}") from None
    if not math.isfinite(value) or value < 0:
        raise InvalidTermError(text, reason=f"weight must be finite and >= 0, got {weight!r}")
    return value


def _insert(root: TrieNode, term: Term) -> bool:
    """Place *term* under *root*. Returns True if the text was new."""
    node = root
    for ch in term.text:
        child = node.children.get(ch)
        if child is None:
            child = TrieNode()
            node.children[ch] = child
        node = child
    is_new = node.term is None
    node.term = term
    return is_new


class TermStore:
    """Thread-safe weighted vocabulary with prefix and fuzzy lookup."""

    def __init__(self, pairs: Optional[Iterable[tuple[str, float]]] = None) -> None:
        self._root = TrieNode()
        self._size = 0
        self._version = 0
        self._lock = ReadWriteLock()
        if pairs is not None:
            self.ingest_many(pairs)

    # ---- introspection ----

    @property
    def size(self) -> int:
        """Number of distinct terms stored."""
        return self._size

    def __len__(self) -> int:
        return self._size

    @property
    def version(self) -> int:
        """Incremented on every successful mutation."""
        return self._version

    def __contains__(self, text: object) -> bool:
        if not isinstance(text, str):
            return False
        return self.get(text) is not None

    def get(self, text: str) -> Optional[Term]:
        """Return the stored Term for *text*, or None."""
        key = normalize(text)
        if not key:
            return None
        with self._lock.read_locked():
            node = self._find(self._root, key)
            return node.term if node is not None else None

    def terms(self) -> list[Term]:
        """All stored terms in store order."""
        with self._lock.read_locked():
            return self._collect(self._root, "")

    # ---- mutation ----

    def ingest(self, text: str, weight: float = 1.0) -> Term:
        """
        Add *text* with *weight*, or overwrite the weight if it exists.

        Raises:
            InvalidTermError: empty text after normalization, or a weight
                that is not a finite non-negative number.
        """
        key = _check_text(text)
        term = Term(text=key, weight=_check_weight(text, weight))
        with self._lock.write_locked():
            if _insert(self._root, term):
                self._size += 1
            self._version += 1
        logger.debug("Ingested %r (weight=%s)", key, term.weight)
        return term

    def ingest_many(self, pairs: Iterable[tuple[str, float]]) -> IngestReport:
        """
        Ingest every ``(text, weight)`` pair.

        Invalid entries are logged and skipped; the rest of the batch
        still goes in.
        """
        report = IngestReport()
        for pair in pairs:
            try:
                text, weight = pair
                self.ingest(text, weight)
            except InvalidTermError as e:
                report.skipped += 1
                report.errors.append(str(e))
                logger.warning("Skipping vocabulary entry: %s", e)
            except (TypeError, ValueError) as e:
                # Malformed pair, e.g. wrong arity
                report.skipped += 1
                report.errors.append(f"Malformed entry {pair!r}: {e}")
                logger.warning("Skipping malformed vocabulary entry %r: %s", pair, e)
            else:
                report.accepted += 1
        return report

    def increment(self, text: str, delta: float = 1.0) -> Term:
        """
        Add *delta* to the weight of *text* (usage telemetry).

        Unknown texts are created with weight *delta*.
        """
        key = _check_text(text)
        if isinstance(delta, bool) or not isinstance(delta, (int, float)) or not math.isfinite(delta):
            raise InvalidTermError(text, reason=f"delta must be a finite number, got {delta!r}")
        with self._lock.write_locked():
            node = self._find(self._root, key)
            current = node.term.weight if node is not None and node.term is not None else 0.0
            new_weight = current + delta
            if new_weight < 0:
                raise InvalidTermError(text, reason=f"weight would drop below 0 ({new_weight})")
            term = Term(text=key, weight=new_weight)
            if _insert(self._root, term):
                self._size += 1
            self._version += 1
        return term

    def remove(self, text: str) -> bool:
        """Delete *text*. Returns False if it was not stored."""
        key = normalize(text)
        if not key:
            return False
        with self._lock.write_locked():
            path: list[tuple[TrieNode, str]] = []
            node = self._root
            for ch in key:
                child = node.children.get(ch)
                if child is None:
                    return False
                path.append((node, ch))
                node = child
            if node.term is None:
                return False
            node.term = None
            # Prune branches that no longer lead to any term
            for parent, ch in reversed(path):
                child = parent.children[ch]
                if child.term is not None or child.children:
                    break
                del parent.children[ch]
            self._size -= 1
            self._version += 1
        logger.debug("Removed %r", key)
        return True

    def replace_all(self, pairs: Iterable[tuple[str, float]]) -> IngestReport:
        """
        Replace the whole vocabulary with *pairs*.

        The new trie is built without holding the lock; readers keep using
        the old one until the root reference is swapped.
        """
        staging = TermStore()
        report = staging.ingest_many(pairs)
        with self._lock.write_locked():
            self._root = staging._root
            self._size = staging._size
            self._version += 1
        logger.info(
            "Vocabulary replaced: %d terms (%d entries skipped)",
            staging.size, report.skipped,
        )
        return report

    def clear(self) -> None:
        with self._lock.write_locked():
            self._root = TrieNode()
            self._size = 0
            self._version += 1

    # ---- lookup ----

    def prefix_search(self, prefix: str, timeout: Optional[float] = None) -> list[Term]:
        """
        Return every term whose text starts with *prefix*.

        Order is depth-first over the trie (children in insertion order);
        no ranking happens here. An empty or unmatched prefix gives ``[]``.

        Raises:
            QueryTimeoutError: the read lock was not granted within *timeout*.
        """
        key = normalize(prefix)
        if not key:
            return []
        self._acquire_read(timeout, stage="prefix search")
        try:
            node = self._find(self._root, key)
            if node is None:
                return []
            return self._collect(node, key)
        finally:
            self._lock.release_read()

    def fuzzy_search(
        self,
        prefix: str,
        max_distance: int = 1,
        scan_limit: int = 500,
        timeout: Optional[float] = None,
    ) -> list[Term]:
        """
        Return terms having some prefix within *max_distance* edits of
        *prefix*, collecting at most *scan_limit* of them.

        Walks the trie carrying one Levenshtein row per node. Once the path
        to a node is within range, its whole subtree matches; once every
        cell of a row exceeds the range, the subtree is skipped.
        """
        key = normalize(prefix)
        if not key or scan_limit <= 0 or max_distance < 0:
            return []
        self._acquire_read(timeout, stage="fuzzy search")
        try:
            matches: list[Term] = []
            first = initial_row(key)
            if within(first, max_distance):
                return self._collect(self._root, "", limit=scan_limit)
            stack: list[tuple[TrieNode, list[int]]] = [(self._root, first)]
            while stack and len(matches) < scan_limit:
                node, row = stack.pop()
                pending: list[tuple[TrieNode, list[int]]] = []
                for ch, child in node.children.items():
                    child_row = advance_row(row, key, ch)
                    if within(child_row, max_distance):
                        remaining = scan_limit - len(matches)
                        if remaining <= 0:
                            break
                        matches.extend(self._collect(child, None, limit=remaining))
                    elif not prunable(child_row, max_distance):
                        pending.append((child, child_row))
                # Reverse so children pop in insertion order
                stack.extend(reversed(pending))
            return matches
        finally:
            self._lock.release_read()

    # ---- persistence ----

    def save(self, path: Path) -> None:
        """Write a msgpack snapshot of all terms."""
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "format": SNAPSHOT_FORMAT,
            "terms": [[t.text, t.weight] for t in self.terms()],
        }
        with open(path, "wb") as f:
            msgpack.pack(data, f)
        logger.info("Saved vocabulary snapshot (%d terms) to %s", len(data["terms"]), path)

    @staticmethod
    def read_snapshot(path: Path) -> list[tuple[str, float]]:
        """Read the ``(text, weight)`` pairs of a snapshot without building a store."""
        with open(path, "rb") as f:
            data = msgpack.unpack(f, raw=False)
        if not isinstance(data, dict) or data.get("format") != SNAPSHOT_FORMAT:
            raise ValueError(f"Unsupported vocabulary snapshot: {path}")
        return [(text, weight) for text, weight in data["terms"]]

    @classmethod
    def load(cls, path: Path) -> "TermStore":
        """Build a store from a msgpack snapshot."""
        store = cls()
        store.replace_all(cls.read_snapshot(path))
        logger.info("Loaded vocabulary snapshot (%d terms) from %s", store.size, path)
        return store

    # ---- internals ----

    def _acquire_read(self, timeout: Optional[float], stage: str) -> None:
        if timeout is not None and timeout <= 0:
            raise QueryTimeoutError(stage, timeout)
        if not self._lock.acquire_read(timeout):
            raise QueryTimeoutError(f"{stage} (waiting for read lock)", timeout)

    @staticmethod
    def _find(root: TrieNode, key: str) -> Optional[TrieNode]:
        node = root
        for ch in key:
            node = node.children.get(ch)
            if node is None:
                return None
        return node

    @staticmethod
    def _collect(
        start: TrieNode,
        prefix: Optional[str],
        limit: Optional[int] = None,
    ) -> list[Term]:
        """
        Depth-first collection of terms under *start*.

        When *prefix* is given, every collected term must start with it;
        anything else means the trie is corrupt.
        """
        out: list[Term] = []
        stack = [start]
        while stack:
            node = stack.pop()
            term = node.term
            if term is not None:
                if prefix is not None and not term.text.startswith(prefix):
                    raise InternalIndexError(
                        f"Term {term.text!r} stored under prefix {prefix!r}"
                    )
                out.append(term)
                if limit is not None and len(out) >= limit:
                    break
            if node.children:
                stack.extend(reversed(list(node.children.values())))
        return out
