"""
Extraction data structures.

Shapes passed between page scanning, document enrichment and assembly.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from ..normalize.parsing import normalize_whitespace


@dataclass(frozen=True)
class CandidateBlock:
    """A page fragment being evaluated as a possible tender.

    Lives only for the duration of one page scan.
    """

    href: str
    link_text: str
    context_text: str = ""

    @property
    def text(self) -> str:
        """Combined link and context window."""
        return normalize_whitespace(f"{self.link_text} {self.context_text}")


@dataclass
class ListingRow:
    """Partial tender record derived from a listing page.

    Fields hold raw-but-cleaned strings; empty string means unknown.
    """

    tender_number: str = ""
    description: str = ""
    advertised: str = ""
    closing: str = ""
    source_url: str = ""

    # Document linked from the row, if any (defaults to source_url)
    document_url: str = ""
    tender_id: str = ""

    # Filled by document enrichment
    contact_person: str = ""
    email: str = ""
    telephone: str = ""
    briefing_session: str = ""
    briefing_compulsory: str = ""
    briefing_date_time: str = ""
    briefing_venue: str = ""

    @property
    def has_document(self) -> bool:
        return bool(self.document_url)


@dataclass(frozen=True)
class DocumentEnrichment:
    """Fields recovered from a tender document.

    ``DocumentEnrichment()`` is the empty enrichment returned whenever a
    document could not be read.
    """

    tender_number: str = ""
    description: str = ""
    advertised: str = ""
    closing: str = ""
    contact_person: str = ""
    email: str = ""
    telephone: str = ""
    briefing_compulsory: str = ""
    briefing_date_time: str = ""
    briefing_venue: str = ""

    @property
    def is_empty(self) -> bool:
        """True when no field was recovered."""
        return not any(getattr(self, f.name) for f in fields(self))
