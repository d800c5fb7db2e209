"""Text normalization shared by ingestion and querying."""

from __future__ import annotations

import unicodedata


def normalize(text: str) -> str:
    """
    Normalize *text* for storage and comparison.

    * Unicode NFKC (full-width letters, ligatures, composed accents)
    * leading/trailing whitespace trimmed
    * internal whitespace runs collapsed to one space
    * case-folded (``"Straße"`` -> ``"strasse"``)
    """
    if not isinstance(text, str):
        raise TypeError(f"Expected str, got {type(text).__name__}")
    text = unicodedata.normalize("NFKC", text)
    return " ".join(text.split()).casefold()


def truncate(text: str, max_length: int) -> str:
    """Cut *text* to *max_length* characters, dropping a dangling space."""
    if max_length <= 0 or len(text) <= max_length:
        return text
    return text[:max_length].rstrip()
