"""Extraction of tender rows from listing pages and documents."""

from .base import CandidateBlock, DocumentEnrichment, ListingRow
from .patterns import (
    FieldPattern,
    try_patterns,
    valid_description,
    valid_email,
    valid_tender_number,
)
from .classifier import (
    CandidateClassifier,
    is_navigation_noise,
    is_real_tender_row,
    looks_tender_like,
    to_absolute_url,
)
from .documents import (
    DocumentTextExtractor,
    DocxTextBackend,
    PdfTextBackend,
    TextBackend,
    extract_document_fields,
    merge_enrichment,
)

__all__ = [
    # Data
    "CandidateBlock",
    "DocumentEnrichment",
    "ListingRow",
    # Patterns
    "FieldPattern",
    "try_patterns",
    "valid_description",
    "valid_email",
    "valid_tender_number",
    # Classifier
    "CandidateClassifier",
    "is_navigation_noise",
    "is_real_tender_row",
    "looks_tender_like",
    "to_absolute_url",
    # Documents
    "DocumentTextExtractor",
    "DocxTextBackend",
    "PdfTextBackend",
    "TextBackend",
    "extract_document_fields",
    "merge_enrichment",
]
