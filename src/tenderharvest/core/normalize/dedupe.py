"""
Order-preserving deduplication of listing rows.

Listing order usually reflects recency, so the first occurrence of a key
wins and later copies are dropped.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar

from .parsing import normalize_whitespace


class Keyed(Protocol):
    tender_number: str
    source_url: str
    description: str


RowT = TypeVar("RowT", bound=Keyed)


def dedupe_key(row: Keyed) -> str:
    """Case-insensitive, whitespace-collapsed ``number|url|description`` key."""
    parts = (row.tender_number, row.source_url, row.description)
    return "|".join(normalize_whitespace(part).lower() for part in parts)


def deduplicate(rows: Iterable[RowT]) -> list[RowT]:
    """Drop rows whose key was already seen, keeping the first."""
    seen: set[str] = set()
    unique: list[RowT] = []
    for row in rows:
        key = dedupe_key(row)
        if key in seen:
            continue
        seen.add(key)
        unique.append(row)
    return unique
