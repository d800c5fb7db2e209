"""
Edit-distance rows for the fuzzy fallback.

The trie walk extends a candidate one character per edge; each step
turns the previous Levenshtein row into the next one. A row whose
minimum already exceeds the allowed distance can be pruned together
with the whole subtree below it, since row minima never decrease.
"""

from __future__ import annotations

from typing import Sequence


def initial_row(query: str) -> list[int]:
    """Distance row for the empty candidate: ``[0, 1, ..., len(query)]``."""
    return list(range(len(query) + 1))


def advance_row(prev: Sequence[int], query: str, ch: str) -> list[int]:
    """
    Next Levenshtein row after appending *ch* to the candidate.

    ``row[j]`` is the distance between the candidate so far and
    ``query[:j]``; ``row[-1]`` is the distance to the whole query.
    """
    row = [prev[0] + 1]
    for j, qc in enumerate(query, start=1):
        insert = row[j - 1] + 1
        delete = prev[j] + 1
        replace = prev[j - 1] + (0 if qc == ch else 1)
        row.append(min(insert, delete, replace))
    return row


def within(row: Sequence[int], max_distance: int) -> bool:
    """True when the candidate so far is within *max_distance* of the query."""
    return row[-1] <= max_distance


def prunable(row: Sequence[int], max_distance: int) -> bool:
    """True when no extension of the candidate can come within range."""
    return min(row) > max_distance
