"""
LRU + TTL cache of query results.

Entries are keyed by normalized query and stamped with the vocabulary
version they were computed from. An entry is served until it is pushed
out by newer queries (capacity), grows older than the TTL, or is looked
up against a different vocabulary version.

Lookups never wait on each other: ``get`` reads the dict without the
mutex and queues its recency update in a read buffer. The buffer is
replayed under the mutex by the next writer, by ``stats``, or by a
reader that finds the mutex free once the buffer fills up.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict, deque
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from autosuggest.config.settings import CacheSettings
from autosuggest.engine.models import CacheEntry, SuggestionRecord

logger = logging.getLogger(__name__)

# Pending reads that trigger an opportunistic drain
READ_BUFFER_SIZE = 64


@dataclass
class CacheStats:
    """Counters for monitoring."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    stale: int = 0

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "stale": self.stale,
        }


class ResultCache:
    """
    Fixed-capacity LRU cache with per-entry expiry.

    One mutex guards mutation of the ordered dict and is only held for
    O(1) dict operations plus a bounded buffer replay. ``capacity == 0``
    turns the cache into a no-op.
    """

    def __init__(
        self,
        settings: Optional[CacheSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or CacheSettings()
        if self._settings.capacity < 0:
            raise ValueError("Cache capacity must be >= 0")
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._stats = CacheStats()
        # (normalized_query, hit) pairs not yet applied to order and stats
        self._reads: deque[tuple[str, bool]] = deque()

    @property
    def enabled(self) -> bool:
        return self._settings.capacity > 0

    @property
    def capacity(self) -> int:
        return self._settings.capacity

    def get(
        self,
        normalized_query: str,
        version: Optional[int] = None,
    ) -> Optional[list[SuggestionRecord]]:
        """
        Return the cached results, or None on miss.

        Expired entries, and entries computed from a vocabulary version
        other than *version* (when given), are dropped and count as misses.
        """
        if not self.enabled:
            return None
        entry = self._entries.get(normalized_query)
        if entry is None:
            self._record_read(normalized_query, hit=False)
            return None
        if self._clock() - entry.inserted_at > self._settings.ttl_seconds:
            self._drop(entry, expired=True)
            return None
        if version is not None and entry.version != version:
            self._drop(entry, expired=False)
            return None
        self._record_read(normalized_query, hit=True)
        return list(entry.results)

    def put(
        self,
        normalized_query: str,
        results: Sequence[SuggestionRecord],
        version: int = 0,
    ) -> None:
        """Store *results*, evicting the least recently used entry if full."""
        if not self.enabled:
            return
        entry = CacheEntry(
            normalized_query=normalized_query,
            results=tuple(results),
            inserted_at=self._clock(),
            version=version,
        )
        with self._lock:
            self._drain()
            self._entries[normalized_query] = entry
            self._entries.move_to_end(normalized_query)
            while len(self._entries) > self._settings.capacity:
                evicted, _ = self._entries.popitem(last=False)
                self._stats.evictions += 1
                logger.debug("Evicted cached query %r", evicted)

    def invalidate(self, normalized_query: str) -> bool:
        with self._lock:
            return self._entries.pop(normalized_query, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._drain()
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, normalized_query: object) -> bool:
        return normalized_query in self._entries

    def stats(self) -> dict:
        with self._lock:
            self._drain()
            data = self._stats.to_dict()
            data["size"] = len(self._entries)
        data["capacity"] = self._settings.capacity
        data["ttl_seconds"] = self._settings.ttl_seconds
        return data

    def _record_read(self, normalized_query: str, hit: bool) -> None:
        self._reads.append((normalized_query, hit))
        if len(self._reads) >= READ_BUFFER_SIZE and self._lock.acquire(blocking=False):
            try:
                self._drain()
            finally:
                self._lock.release()

    def _drop(self, entry: CacheEntry, expired: bool) -> None:
        with self._lock:
            # A concurrent put may already have replaced it
            if self._entries.get(entry.normalized_query) is entry:
                del self._entries[entry.normalized_query]
            if expired:
                self._stats.expirations += 1
            else:
                self._stats.stale += 1
            self._stats.misses += 1

    def _drain(self) -> None:
        """Replay buffered reads. Caller holds the mutex."""
        while True:
            try:
                query, hit = self._reads.popleft()
            except IndexError:
                return
            if not hit:
                self._stats.misses += 1
                continue
            self._stats.hits += 1
            if query in self._entries:
                self._entries.move_to_end(query)
