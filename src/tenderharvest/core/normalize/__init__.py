"""Normalization and canonicalization of extracted data."""

from .parsing import (
    CANONICAL_DATE,
    clean_html_text,
    format_date,
    is_canonical_date,
    month_number,
    normalize_date,
    normalize_whitespace,
)
from .canonical import (
    CSV_COLUMNS,
    TenderRecord,
    build_record,
    fallback_description,
)
from .dedupe import dedupe_key, deduplicate

__all__ = [
    # Parsing
    "CANONICAL_DATE",
    "clean_html_text",
    "format_date",
    "is_canonical_date",
    "month_number",
    "normalize_date",
    "normalize_whitespace",
    # Canonical
    "CSV_COLUMNS",
    "TenderRecord",
    "build_record",
    "fallback_description",
    # Dedupe
    "dedupe_key",
    "deduplicate",
]
