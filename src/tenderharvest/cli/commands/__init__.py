"""CLI command modules."""

from . import scrape, sources

__all__ = [
    "scrape",
    "sources",
]
