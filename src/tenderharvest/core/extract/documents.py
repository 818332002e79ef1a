"""
Document text extraction and enrichment.

Converts a linked tender document (PDF or DOCX) into lossy plain text,
runs the document field cascades over it and merges the result into the
listing row. Every failure mode degrades to an empty enrichment; the
listing row stays authoritative.
"""

from __future__ import annotations

import io
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import replace
from urllib.parse import urlparse

from ..normalize.parsing import is_canonical_date
from .base import DocumentEnrichment, ListingRow
from .patterns import (
    BRIEFING_DATE_PATTERNS,
    CONTACT_PERSON_PATTERNS,
    DOCUMENT_ADVERTISED_PATTERNS,
    DOCUMENT_CLOSING_PATTERNS,
    DOCUMENT_DESCRIPTION_PATTERNS,
    DOCUMENT_TENDER_NUMBER_PATTERNS,
    EMAIL_PATTERNS,
    TELEPHONE_PATTERNS,
    VENUE_PATTERNS,
    briefing_compulsory,
    try_patterns,
    valid_contact_person,
    valid_description,
    valid_email,
    valid_telephone,
    valid_tender_number,
    valid_venue,
)


logger = logging.getLogger(__name__)


# Less text than this usually means a scanned, image-only document.
MIN_TEXT_LENGTH = 40

PDF_CONTENT_TYPES = frozenset({"application/pdf", "application/x-pdf"})
DOCX_CONTENT_TYPES = frozenset({
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})


# =============================================================================
# Text Backends
# =============================================================================


class TextBackend(ABC):
    """Converts document bytes to plain text."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def available(self) -> bool:
        """Whether the backing library is installed."""
        pass

    @abstractmethod
    def handles(self, content_type: str, url: str, content: bytes) -> bool:
        pass

    @abstractmethod
    def extract_text(self, content: bytes) -> str:
        pass


class PdfTextBackend(TextBackend):
    """PDF text via pdfplumber."""

    def __init__(self) -> None:
        try:
            import pdfplumber
            self._pdfplumber = pdfplumber
            self._available = True
        except ImportError as e:
            self._pdfplumber = None
            self._available = False
            logger.debug("pdfplumber not available: %s", e)

    @property
    def name(self) -> str:
        return "pdf"

    @property
    def available(self) -> bool:
        return self._available

    def handles(self, content_type: str, url: str, content: bytes) -> bool:
        if content_type in PDF_CONTENT_TYPES or content[:5] == b"%PDF-":
            return True
        return _url_suffix(url) == ".pdf"

    def extract_text(self, content: bytes) -> str:
        pages: list[str] = []
        with self._pdfplumber.open(io.BytesIO(content)) as pdf:
            for page in pdf.pages:
                pages.append(page.extract_text() or "")
        return "\n".join(pages)


class DocxTextBackend(TextBackend):
    """DOCX paragraphs and table cells via python-docx."""

    def __init__(self) -> None:
        try:
            from docx import Document
            self._document = Document
            self._available = True
        except ImportError as e:
            self._document = None
            self._available = False
            logger.debug("python-docx not available: %s", e)

    @property
    def name(self) -> str:
        return "docx"

    @property
    def available(self) -> bool:
        return self._available

    def handles(self, content_type: str, url: str, content: bytes) -> bool:
        if content_type in DOCX_CONTENT_TYPES:
            return True
        return _url_suffix(url) == ".docx"

    def extract_text(self, content: bytes) -> str:
        doc = self._document(io.BytesIO(content))
        parts = [para.text for para in doc.paragraphs if para.text.strip()]

        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))

        return "\n".join(parts)


def _url_suffix(url: str) -> str:
    path = urlparse(url or "").path.lower()
    match = re.search(r"\.[a-z0-9]+$", path)
    return match.group(0) if match else ""


# =============================================================================
# Extractor
# =============================================================================


class DocumentTextExtractor:
    """Pick a backend for a document and turn it into an enrichment."""

    def __init__(self, backends: list[TextBackend] | None = None) -> None:
        self.backends = backends if backends is not None else [PdfTextBackend(), DocxTextBackend()]

    @property
    def available(self) -> bool:
        """True if at least one backend can run."""
        return any(backend.available for backend in self.backends)

    def select_backend(self, content_type: str, url: str, content: bytes = b"") -> TextBackend | None:
        for backend in self.backends:
            if backend.handles(content_type, url, content):
                return backend
        return None

    def extract_text(self, content: bytes, content_type: str = "", url: str = "") -> str:
        """Plain text of a document, or "" when it cannot be read."""
        if not content:
            return ""

        backend = self.select_backend(content_type, url, content)
        if backend is None:
            logger.debug("No text backend for %s (%s)", url, content_type or "unknown type")
            return ""
        if not backend.available:
            logger.debug("Backend %s unavailable for %s", backend.name, url)
            return ""

        try:
            return backend.extract_text(content)
        except Exception as e:
            logger.debug("Backend %s failed on %s: %s", backend.name, url, e)
            return ""

    def enrich(self, content: bytes, content_type: str = "", url: str = "") -> DocumentEnrichment:
        """Extract document fields, or an empty enrichment."""
        text = self.extract_text(content, content_type, url)
        if len(text.strip()) < MIN_TEXT_LENGTH:
            return DocumentEnrichment()
        return extract_document_fields(text)


def extract_document_fields(text: str) -> DocumentEnrichment:
    """Run the document cascades over extracted text.

    Text keeps its line breaks; several label patterns read to end of line.
    """
    return DocumentEnrichment(
        tender_number=try_patterns(text, DOCUMENT_TENDER_NUMBER_PATTERNS),
        description=try_patterns(text, DOCUMENT_DESCRIPTION_PATTERNS),
        advertised=try_patterns(text, DOCUMENT_ADVERTISED_PATTERNS),
        closing=try_patterns(text, DOCUMENT_CLOSING_PATTERNS),
        contact_person=try_patterns(text, CONTACT_PERSON_PATTERNS),
        email=try_patterns(text, EMAIL_PATTERNS),
        telephone=try_patterns(text, TELEPHONE_PATTERNS),
        briefing_compulsory=briefing_compulsory(text),
        briefing_date_time=try_patterns(text, BRIEFING_DATE_PATTERNS),
        briefing_venue=try_patterns(text, VENUE_PATTERNS),
    )


# =============================================================================
# Merge
# =============================================================================


_MERGE_VALIDATORS = {
    "tender_number": valid_tender_number,
    "description": valid_description,
    "advertised": is_canonical_date,
    "closing": is_canonical_date,
    "contact_person": valid_contact_person,
    "email": valid_email,
    "telephone": valid_telephone,
    "briefing_compulsory": lambda value: value in ("Yes", "No"),
    "briefing_date_time": is_canonical_date,
    "briefing_venue": valid_venue,
}


def merge_enrichment(row: ListingRow, enrichment: DocumentEnrichment) -> ListingRow:
    """Overlay plausible document values onto a listing row.

    A document value replaces the listing value only when it is non-empty
    and passes the field's validator, so an empty or failed enrichment
    never blanks a usable listing value.

    Returns:
        New ListingRow; the input row is not modified
    """
    updates: dict[str, str] = {}
    for field_name, validator in _MERGE_VALIDATORS.items():
        value = getattr(enrichment, field_name)
        if value and validator(value):
            updates[field_name] = value

    if not updates:
        return row
    return replace(row, **updates)
