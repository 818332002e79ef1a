"""
Canonical tender record.

The one record shape every source is normalized into, and the fixed
column layout it is written out with.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

from .parsing import normalize_whitespace

if TYPE_CHECKING:
    from ..config.models import SourceConfig
    from ..extract.base import ListingRow


MAX_DESCRIPTION_LENGTH = 500


# Column order and names are consumed downstream; do not reorder.
CSV_COLUMNS: tuple[str, ...] = (
    "Category",
    "Tender Number",
    "Tender Description",
    "Advertised",
    "Closing",
    "Organ Of State",
    "Tender Type",
    "Province",
    "Place where goods, works or services are required",
    "Special Conditions",
    "Contact Person",
    "Email",
    "Telephone number",
    "FAX Number",
    "Is there a briefing session?",
    "Is it compulsory?",
    "Briefing Date and Time",
    "Briefing Venue",
    "eSubmission",
    "Two Envelope Submission",
    "Source URL",
    "Tender ID",
    "Source",
)


@dataclass(frozen=True)
class TenderRecord:
    """Normalized tender ready for output.

    Field order matches CSV_COLUMNS.
    """

    category: str = "Municipal"
    tender_number: str = ""
    description: str = ""
    advertised: str = ""
    closing: str = ""
    organ_of_state: str = ""
    tender_type: str = "Request for Bid"
    province: str = ""
    place: str = ""
    special_conditions: str = ""
    contact_person: str = ""
    email: str = ""
    telephone: str = ""
    fax: str = ""
    briefing_session: str = ""
    briefing_compulsory: str = ""
    briefing_date_time: str = ""
    briefing_venue: str = ""
    e_submission: str = ""
    two_envelope_submission: str = ""
    source_url: str = ""
    tender_id: str = ""
    source: str = ""

    def to_row(self) -> dict[str, str]:
        """Map to an ordered dict keyed by output column name."""
        return {
            column: getattr(self, f.name)
            for column, f in zip(CSV_COLUMNS, fields(self))
        }


def fallback_description(tender_number: str, short_name: str) -> str:
    """Placeholder description for rows that only carry a link."""
    if tender_number:
        return f"{tender_number} (see document)"
    return f"{short_name} tender (see document)"


def build_record(row: "ListingRow", config: "SourceConfig") -> TenderRecord:
    """Combine a listing row with the static facts of its source.

    Args:
        row: Listing-derived (possibly document-enriched) row
        config: Source the row was scraped from

    Returns:
        Immutable TenderRecord
    """
    tender_number = normalize_whitespace(row.tender_number)
    description = normalize_whitespace(row.description) or fallback_description(
        tender_number, config.short_name
    )

    source_url = config.force_source_url or row.source_url or config.listing_urls[0]

    briefing_session = row.briefing_session
    if not briefing_session and (row.briefing_venue or row.briefing_date_time):
        briefing_session = "Yes"

    return TenderRecord(
        category=config.category,
        tender_number=tender_number,
        description=description[:MAX_DESCRIPTION_LENGTH],
        advertised=row.advertised,
        closing=row.closing,
        organ_of_state=config.organ_of_state,
        tender_type=config.tender_type,
        province=config.province,
        place=config.effective_place,
        contact_person=row.contact_person,
        email=row.email,
        telephone=row.telephone,
        briefing_session=briefing_session,
        briefing_compulsory=row.briefing_compulsory,
        briefing_date_time=row.briefing_date_time,
        briefing_venue=row.briefing_venue,
        source_url=source_url,
        tender_id=row.tender_id,
        source=config.short_name,
    )
