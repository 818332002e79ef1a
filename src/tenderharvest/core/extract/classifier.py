"""
Candidate classification for listing pages.

Scans a fetched page for links, builds a text window for each from the
link text and its surrounding block, and keeps only the candidates that
plausibly describe one tender. Classification is three ordered filters,
each short-circuiting:

1. looks_tender_like - document link or tender vocabulary
2. is_navigation_noise - site chrome that slipped through stage 1
3. is_real_tender_row - the resolved row has a usable URL and identity
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from lxml import etree
from lxml import html as lxml_html
from lxml.html import HtmlElement

from ..config.models import ListingStyle, SourceConfig
from ..normalize.dedupe import dedupe_key
from ..normalize.parsing import clean_html_text, normalize_whitespace
from .base import CandidateBlock, ListingRow
from .patterns import extract_advertised_date, extract_closing_date, extract_tender_number


logger = logging.getLogger(__name__)


FALLBACK_CONTEXT_SELECTOR = "li, tr, article, div"
MIN_LINK_TEXT_LENGTH = 8
MAX_WINDOW_DESCRIPTION = 260
MAX_PLAIN_NAV_TEXT = 220

DOCUMENT_EXTENSION = re.compile(r"\.(pdf|doc|docx|xlsx?)($|\?)")
TENDER_TEXT = re.compile(r"(tender|bid|rfq|quotation|procurement|scm|supply chain)")
TENDER_WORDS = re.compile(r"(tender|bid|rfq|quotation|procurement|scm)")
TENDER_CUES = re.compile(r"\b(rfq|bid|quotation|closing|deadline|scm)\b")
NAV_WORDS = re.compile(
    r"(leadership|services|investor relations|gallery|news|careers|contact us|tourism"
    r"|about us|home|login|register|a-z|faqs|events)"
)
NAV_HREFS = re.compile(
    r"(/leadership|/services|/investor-relations|/galleries?|/news|/careers|/contact"
    r"|/about|/tourism|/events|/login|/register)"
)
SITE_CHROME = ("login | register", "a-z index", "faqs about us")
UPLOAD_PATHS = ("/sites/default/files/", "/wp-content/uploads/")
DOWNLOAD_PATH = re.compile(r"(download|document|docman)")
NON_NAVIGABLE_SCHEMES = ("mailto:", "tel:", "javascript:", "#")
URL_STRIPPED_CHARS = re.compile(r"[\t\n\r]")
URL_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")

WEAK_LINK_TEXT = frozenset({
    "document",
    "bid document",
    "tender document",
    "download",
    "download document",
    "view",
    "view document",
    "click here",
    "read more",
})


# =============================================================================
# Classification Stages
# =============================================================================


def has_document_extension(href: str | None) -> bool:
    return bool(DOCUMENT_EXTENSION.search((href or "").lower()))


def looks_tender_like(text: str, href: str | None) -> bool:
    """Stage 1: link to a document file, or tender vocabulary in the text."""
    if has_document_extension(href):
        return True
    return bool(TENDER_TEXT.search(normalize_whitespace(text).lower()))


def is_navigation_noise(text: str, href: str | None) -> bool:
    """Stage 2: site navigation or chrome with no tender cue."""
    t = normalize_whitespace(text).lower()
    h = (href or "").lower()

    if not t and not h:
        return True
    if any(phrase in t for phrase in SITE_CHROME):
        return True
    if len(t) > MAX_PLAIN_NAV_TEXT and not TENDER_CUES.search(t):
        return True
    if NAV_WORDS.search(t) and not TENDER_WORDS.search(t):
        return True
    if NAV_HREFS.search(h) and not TENDER_WORDS.search(h):
        return True
    return False


def is_bare_root(url: str) -> bool:
    """True for a scheme with no host, or a host with no path or query."""
    parsed = urlparse(url)
    if not parsed.netloc:
        return True
    return parsed.path in ("", "/") and not parsed.query


def is_real_tender_row(tender_number: str, description: str, source_url: str) -> bool:
    """Stage 3: the resolved row identifies a tender."""
    d = normalize_whitespace(description)
    u = (source_url or "").lower()

    if not u or is_bare_root(u):
        return False
    if u.endswith("/") and not TENDER_WORDS.search(u):
        return False
    if DOCUMENT_EXTENSION.search(u):
        return True
    if any(path in u for path in UPLOAD_PATHS):
        return True
    if DOWNLOAD_PATH.search(u) and TENDER_WORDS.search(u):
        return True
    if tender_number and len(tender_number) >= 3:
        return True
    if len(d) >= 15 and TENDER_WORDS.search(d.lower()) and TENDER_WORDS.search(u):
        return True
    return False


# =============================================================================
# URL Helpers
# =============================================================================


def to_absolute_url(base_url: str, href: str | None) -> str:
    """Resolve a link against the site base URL.

    An empty href resolves to the base URL itself; mailto/tel/javascript
    links and bare fragments resolve to "". Tabs and line breaks are
    dropped and other control characters percent-encoded, as browsers do.
    """
    h = URL_STRIPPED_CHARS.sub("", href or "").strip()
    h = URL_CONTROL_CHARS.sub(lambda m: f"%{ord(m.group()):02X}", h)
    if not h:
        return base_url
    if h.lower().startswith(NON_NAVIGABLE_SCHEMES):
        return ""
    if re.match(r"^https?://", h, re.IGNORECASE):
        return h
    if h.startswith("//"):
        return f"https:{h}"
    base = base_url.rstrip("/")
    if h.startswith("/"):
        return f"{base}{h}"
    return f"{base}/{h.lstrip('/')}"


def description_from_filename(url: str) -> str:
    """Readable title recovered from a document file name."""
    name = PurePosixPath(unquote(urlparse(url).path)).stem
    return normalize_whitespace(re.sub(r"[_+\-]+", " ", name))


# =============================================================================
# Page Scanner
# =============================================================================


class CandidateClassifier:
    """Turn one listing page into accepted listing rows.

    Driven entirely by the source's selectors, listing style, skip
    keywords and date hints.
    """

    def __init__(self, config: SourceConfig) -> None:
        self.config = config
        self.base_url = config.base_url_str

    def scan(self, html: str | bytes, page_url: str | None = None) -> list[ListingRow]:
        """Scan a page and return accepted rows in document order.

        Args:
            html: Page markup
            page_url: URL the page was fetched from (for logging)

        Returns:
            Accepted rows, with page-level duplicates removed
        """
        if not html or not html.strip():
            return []
        if isinstance(html, str):
            # lxml rejects str input that declares an encoding
            html = XML_DECLARATION.sub("", html, count=1)

        try:
            tree = lxml_html.fromstring(html)
        except (etree.ParserError, ValueError) as e:
            logger.warning("Could not parse %s: %s", page_url or "page", e)
            return []

        elements = tree.cssselect(self.config.link_selector)
        context_nodes = set(tree.cssselect(self.config.context_selector))
        fallback_nodes = set(tree.cssselect(FALLBACK_CONTEXT_SELECTOR))
        row_nodes = set(tree.cssselect("tr")) if self.config.listing_style == ListingStyle.TABLE else set()

        rows: list[ListingRow] = []
        seen: set[str] = set()

        for element in elements:
            try:
                block = self._build_block(element, context_nodes, fallback_nodes, row_nodes)
                row = self.classify(block)
            except Exception as e:
                logger.debug("Skipping block on %s: %s", page_url or "page", e)
                continue

            if row is None:
                continue

            key = dedupe_key(row)
            if key in seen:
                continue
            seen.add(key)
            rows.append(row)

        return rows

    def classify(self, block: CandidateBlock) -> ListingRow | None:
        """Run the three stages on one block; None means rejected."""
        text = block.text
        href = block.href

        if self.config.listing_style == ListingStyle.DOCUMENTS:
            if not has_document_extension(href):
                return None
        elif not looks_tender_like(text, href):
            return None

        if is_navigation_noise(text, href):
            return None

        if any(keyword in href.lower() for keyword in self.config.skip_href_keywords):
            return None

        day_first = self.config.date_hints.day_first
        tender_number = extract_tender_number(text)
        closing = extract_closing_date(text, day_first=day_first)
        advertised = extract_advertised_date(text, day_first=day_first)
        source_url = to_absolute_url(self.base_url, href)
        description = self._describe(block, source_url)

        if not is_real_tender_row(tender_number, description, source_url):
            return None

        return ListingRow(
            tender_number=tender_number,
            description=description,
            advertised=advertised,
            closing=closing,
            source_url=source_url,
            document_url=source_url if has_document_extension(source_url) else "",
        )

    def _describe(self, block: CandidateBlock, source_url: str) -> str:
        link_text = normalize_whitespace(block.link_text)

        if link_text.lower() in WEAK_LINK_TEXT and has_document_extension(source_url):
            from_name = description_from_filename(source_url)
            if len(from_name) >= MIN_LINK_TEXT_LENGTH:
                return from_name

        if len(link_text) >= MIN_LINK_TEXT_LENGTH:
            return link_text
        return block.text[:MAX_WINDOW_DESCRIPTION]

    def _build_block(
        self,
        element: HtmlElement,
        context_nodes: set[HtmlElement],
        fallback_nodes: set[HtmlElement],
        row_nodes: set[HtmlElement],
    ) -> CandidateBlock:
        href = element.get("href")
        if href is None:
            anchors = element.cssselect("a[href]")
            href = anchors[0].get("href") if anchors else ""

        link_text = clean_html_text(element.text_content())

        context = None
        for candidates in (row_nodes, context_nodes, fallback_nodes):
            context = _closest(element, candidates)
            if context is not None:
                break

        context_text = clean_html_text(context.text_content()) if context is not None else ""
        return CandidateBlock(href=href or "", link_text=link_text, context_text=context_text)


def _closest(element: HtmlElement, candidates: set[HtmlElement]) -> HtmlElement | None:
    """Nearest ancestor-or-self contained in candidates."""
    if not candidates:
        return None
    node = element
    while node is not None:
        if node in candidates:
            return node
        node = node.getparent()
    return None
