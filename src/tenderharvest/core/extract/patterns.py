"""
Field extraction by ordered pattern cascades.

Each field has a tuple of FieldPattern entries ordered from most to least
specific. ``try_patterns`` walks the cascade and returns the first value
that survives cleaning and validation, so an earlier pattern always wins
over a later one even when both match.

All cascades are immutable module constants; extraction functions are
pure and keep no state between calls.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..normalize.parsing import is_canonical_date, normalize_date, normalize_whitespace


# =============================================================================
# Pattern Cascade
# =============================================================================


@dataclass(frozen=True)
class FieldPattern:
    """One step of a field cascade.

    Attributes:
        regex: Compiled pattern searched against the text
        validator: Optional plausibility check on the cleaned value
        group: Match group holding the value (0 for the whole match)
        cleaner: Optional transform applied before validation
    """

    regex: re.Pattern[str]
    validator: Callable[[str], bool] | None = None
    group: int = 1
    cleaner: Callable[[str], str] | None = None

    def candidates(self, text: str):
        """Yield cleaned values for every match, in text order."""
        for match in self.regex.finditer(text):
            raw = match.group(self.group) or ""
            value = normalize_whitespace(raw)
            if self.cleaner is not None:
                value = self.cleaner(value)
            if value:
                yield value


def try_patterns(text: str | None, candidates: Sequence[FieldPattern]) -> str:
    """Return the first cascade value that passes its validator.

    Args:
        text: Text to search
        candidates: Cascade, highest precision first

    Returns:
        Extracted value, or "" when no pattern produced a valid value
    """
    if not text:
        return ""

    for pattern in candidates:
        for value in pattern.candidates(text):
            if pattern.validator is None or pattern.validator(value):
                return value
    return ""


# =============================================================================
# Validators
# =============================================================================


BARE_NUMBER_WORDS = frozenset({"BID", "TENDER", "DOCUMENT", "FWQ", "RFQ", "RFP", "NUMBER", "NO"})

BOILERPLATE = re.compile(
    r"(80/20|90/10|preference point system|to be completed by the organ of state"
    r"|lowest/\s*highest acceptable tender)",
    re.IGNORECASE,
)

GARBAGE_DESCRIPTION = re.compile(
    r"(?:Supply Chain|Tel:\s*\d|E-mail:|NAME OF BIDDER|PHYSICAL ADDRESS|Finance Dept"
    r"|Page\s+\d+|CIDB GRADING)",
    re.IGNORECASE,
)

EMAIL_SHAPE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$", re.IGNORECASE)

TENDER_VOCABULARY = re.compile(r"(tender|bid|rfq|quotation|procurement|scm)", re.IGNORECASE)


def clean_tender_number(value: str) -> str:
    """Strip trailing punctuation from a tender number."""
    return normalize_whitespace(value).rstrip(".,;:").strip()


def valid_tender_number(value: str) -> bool:
    """A tender number contains a digit, is 2-40 chars and is not a bare label."""
    n = normalize_whitespace(value)
    if not 2 <= len(n) <= 40:
        return False
    if n.upper() in BARE_NUMBER_WORDS:
        return False
    return any(ch.isdigit() for ch in n)


def valid_description(value: str) -> bool:
    """Descriptions are 15-350 chars and not form boilerplate."""
    d = normalize_whitespace(value)
    if not 15 <= len(d) <= 350:
        return False
    if BOILERPLATE.search(d) or GARBAGE_DESCRIPTION.search(d):
        return False
    return True


def valid_email(value: str) -> bool:
    return bool(EMAIL_SHAPE.match(value or ""))


def valid_telephone(value: str) -> bool:
    digits = sum(ch.isdigit() for ch in value or "")
    return 9 <= digits <= 15


def valid_contact_person(value: str) -> bool:
    """Names are short and carry no digits or addresses."""
    v = normalize_whitespace(value)
    if not 3 <= len(v) <= 80:
        return False
    if any(ch.isdigit() for ch in v) or "@" in v:
        return False
    return True


def valid_venue(value: str) -> bool:
    return 5 <= len(normalize_whitespace(value)) <= 200


def _lower(value: str) -> str:
    return value.lower()


def _upper_number(value: str) -> str:
    return clean_tender_number(value).upper()


def _clean_description(value: str) -> str:
    d = re.sub(r"^(?:DESCRIPTION|PROJECT NAME)\s*[:\-]\s*", "", value, flags=re.IGNORECASE)
    return d.rstrip(", ").strip()


def _clean_contact(value: str) -> str:
    return re.sub(r"\s+(?:TEL|EMAIL|E-MAIL|CELL)\b.*$", "", value, flags=re.IGNORECASE).strip()


def _clean_telephone(value: str) -> str:
    return normalize_whitespace(re.sub(r"[^\d\s+()/-]", "", value))


# =============================================================================
# Listing Cascades
# =============================================================================


LISTING_TENDER_NUMBER_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"\b(?:RFQ|RFP|BID|TENDER|SCM|SMT|SMQ|Q|TN|SC)\s*[:#-]?\s*[A-Z0-9./-]{2,}\b", re.IGNORECASE),
        validator=valid_tender_number,
        group=0,
        cleaner=clean_tender_number,
    ),
    FieldPattern(
        re.compile(r"\b[A-Z]{2,}/[A-Z0-9.-]{2,}/\d{2,4}(?:-\d{2,4})?\b", re.IGNORECASE),
        validator=valid_tender_number,
        group=0,
        cleaner=clean_tender_number,
    ),
    FieldPattern(
        re.compile(r"\b\d{1,4}[A-Z]?/\d{2,4}(?:-\d{2,4})?\b"),
        validator=valid_tender_number,
        group=0,
        cleaner=clean_tender_number,
    ),
)

# Windows around date labels on listing rows; dates are then normalized.
CLOSING_WINDOW = re.compile(r"(?:close|closing|deadline|end date)[^.\n]{0,60}", re.IGNORECASE)
ADVERTISED_WINDOW = re.compile(r"(?:open|advert|publish|posted|start date)[^.\n]{0,60}", re.IGNORECASE)


def extract_tender_number(text: str) -> str:
    """Tender number from a listing text window."""
    return try_patterns(normalize_whitespace(text), LISTING_TENDER_NUMBER_PATTERNS)


def extract_closing_date(text: str, *, day_first: bool = True) -> str:
    """Closing date near a closing label, else the first date in the text."""
    match = CLOSING_WINDOW.search(text)
    return normalize_date(match.group(0) if match else text, day_first=day_first)


def extract_advertised_date(text: str, *, day_first: bool = True) -> str:
    """Advertised date near an opening/publishing label, else ""."""
    match = ADVERTISED_WINDOW.search(text)
    if not match:
        return ""
    return normalize_date(match.group(0), day_first=day_first)


# =============================================================================
# Document Cascades
# =============================================================================


DOCUMENT_TENDER_NUMBER_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"(?:TENDER|BID|QUOTATION)\s+(?:NUMBER|NO\.?)\s*[:\-]?\s*([A-Z0-9][A-Z0-9/\-_.]*)", re.IGNORECASE),
        validator=valid_tender_number,
        cleaner=_upper_number,
    ),
    FieldPattern(
        re.compile(r"\b(?:REFERENCE|REF)\.?\s*(?:NUMBER|NO)\.?\s*[:\-]?\s*([A-Z0-9][A-Z0-9/\-_.]*)", re.IGNORECASE),
        validator=valid_tender_number,
        cleaner=_upper_number,
    ),
    FieldPattern(
        re.compile(r"\b(BID/[\d\-]+/[\d\-]+)", re.IGNORECASE),
        validator=valid_tender_number,
        cleaner=_upper_number,
    ),
    FieldPattern(
        re.compile(r"\b((?:T|FWQ)\d{1,3}/\d{4})\b", re.IGNORECASE),
        validator=valid_tender_number,
        cleaner=_upper_number,
    ),
    *LISTING_TENDER_NUMBER_PATTERNS,
)

DOCUMENT_DESCRIPTION_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"PROJECT\s+NAME\s*[:\-]?\s*([^\n]+)", re.IGNORECASE),
        validator=valid_description,
        cleaner=_clean_description,
    ),
    FieldPattern(
        re.compile(r"\bDESCRIPTION\s*[:\-]\s*([^\n]+)", re.IGNORECASE),
        validator=valid_description,
        cleaner=_clean_description,
    ),
    # Text between the number label and the first evaluation/closing section
    FieldPattern(
        re.compile(
            r"TENDER NUMBER:[^\n]*\n\s*([\s\S]+?)"
            r"(?=\d\.\s+MANDATORY|EVALUATION CRITERIA|R\s+[\d,]+\.\d{2}|CLOSING DATE)",
            re.IGNORECASE,
        ),
        validator=valid_description,
        cleaner=_clean_description,
    ),
    # Common opening phrases of a tender title
    FieldPattern(
        re.compile(
            r"((?:PANEL OF|APPOINTMENT OF|SUPPLY[, ]+(?:AND DELIVERY|OF)|DISPOSAL OF|PROVISION OF)[^.]+)",
            re.IGNORECASE,
        ),
        validator=valid_description,
        cleaner=_clean_description,
    ),
)

DOCUMENT_CLOSING_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"CLOSING\s+DATE(?:\s+AND\s+TIME)?\s*[:\-]?\s*([^\n]{0,60})", re.IGNORECASE),
        validator=is_canonical_date,
        cleaner=normalize_date,
    ),
    FieldPattern(
        re.compile(r"(\d{2}/\d{2}/\d{4})\s+(?:MONDAY|TUESDAY|WEDNESDAY|THURSDAY|FRIDAY)", re.IGNORECASE),
        validator=is_canonical_date,
        cleaner=normalize_date,
    ),
    FieldPattern(
        re.compile(r"Date:\s*(\w+day,?\s+\d{1,2}\s+\w+\s+\d{4})", re.IGNORECASE),
        validator=is_canonical_date,
        cleaner=normalize_date,
    ),
)

DOCUMENT_ADVERTISED_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"(?:Advertised|Date of issue|Published)(?:\s+on|\s+date)?\s*[:\s]\s*([^\n]{0,40})", re.IGNORECASE),
        validator=is_canonical_date,
        cleaner=normalize_date,
    ),
)

CONTACT_PERSON_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"CONTACT\s+PERSON(?:\s*\(TECHNICAL\))?\s*:\s*([^\n]+)", re.IGNORECASE),
        validator=valid_contact_person,
        cleaner=_clean_contact,
    ),
    FieldPattern(
        re.compile(r"\b((?:MR|MRS|MS|DR)\.?\s+[A-Z]\.?\s*[A-Z][A-Za-z]+)(?=\s+TEL)", re.IGNORECASE),
        validator=valid_contact_person,
    ),
)

TELEPHONE_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"\bTEL(?:EPHONE)?(?:\s+(?:NO\.?|NUMBER))?\s*[:\-]?\s*(\+?\(?\d[\d\s\-/()]{7,}\d)", re.IGNORECASE),
        validator=valid_telephone,
        cleaner=_clean_telephone,
    ),
    FieldPattern(
        re.compile(r"\b(0\d{2}\s+\d{3}\s+\d{4})\b"),
        validator=valid_telephone,
    ),
)

EMAIL_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"([A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,})", re.IGNORECASE),
        validator=valid_email,
        cleaner=_lower,
    ),
)

VENUE_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"\bVenue\s*:\s*([^\n]+)", re.IGNORECASE),
        validator=valid_venue,
    ),
)

BRIEFING_DATE_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        re.compile(r"(?:briefing|site)\s+(?:session|meeting|inspection)([^\n]{0,100})", re.IGNORECASE),
        validator=is_canonical_date,
        cleaner=normalize_date,
    ),
)

COMPULSORY_BRIEFING = re.compile(
    r"\b(non[-\s]?)?compulsory\s+(?:clarification\s+|virtual\s+)?(?:briefing|site)\s+(?:session|meeting|inspection)",
    re.IGNORECASE,
)


def briefing_compulsory(text: str) -> str:
    """Yes or No when the document says whether the briefing is compulsory."""
    match = COMPULSORY_BRIEFING.search(text or "")
    if not match:
        return ""
    return "No" if match.group(1) else "Yes"
