from tenderharvest.core.extract import (
    DocumentEnrichment,
    DocumentTextExtractor,
    DocxTextBackend,
    ListingRow,
    PdfTextBackend,
    merge_enrichment,
)

from conftest import FakeTextBackend


def listing_row(**overrides) -> ListingRow:
    data = {
        "tender_number": "SCM 12/2025",
        "description": "Supply of cleaning chemicals",
        "closing": "14/03/2025",
        "source_url": "https://www.example-mun.gov.za/files/SCM-12-2025.pdf",
        "document_url": "https://www.example-mun.gov.za/files/SCM-12-2025.pdf",
    }
    data.update(overrides)
    return ListingRow(**data)


class TestBackendSelection:

    def test_pdf_by_magic_bytes(self):
        assert PdfTextBackend().handles("application/octet-stream", "https://x/doc", b"%PDF-1.7")

    def test_pdf_by_content_type(self):
        assert PdfTextBackend().handles("application/pdf", "https://x/doc", b"")

    def test_docx_by_extension(self):
        assert DocxTextBackend().handles("", "https://x/files/bid.DOCX", b"PK")

    def test_unknown_document(self):
        extractor = DocumentTextExtractor()
        assert extractor.select_backend("text/plain", "https://x/notes.txt", b"hello") is None
        assert extractor.extract_text(b"hello", "text/plain", "https://x/notes.txt") == ""


class TestDocumentTextExtractor:

    def test_enrich_runs_cascades(self, fake_text_backend):
        extractor = DocumentTextExtractor([fake_text_backend])
        enrichment = extractor.enrich(b"%PDF-1.4", "application/pdf", "https://x/a.pdf")

        assert enrichment.tender_number == "T12/2025"
        assert enrichment.closing == "17/03/2025"
        assert fake_text_backend.calls == 1

    def test_short_text_is_empty(self):
        extractor = DocumentTextExtractor([FakeTextBackend("scanned page")])
        assert extractor.enrich(b"%PDF-1.4").is_empty

    def test_backend_failure_is_empty(self):
        extractor = DocumentTextExtractor([FakeTextBackend(fail=True)])
        assert extractor.extract_text(b"%PDF-1.4") == ""
        assert extractor.enrich(b"%PDF-1.4").is_empty

    def test_no_content(self, fake_text_backend):
        extractor = DocumentTextExtractor([fake_text_backend])
        assert extractor.enrich(b"").is_empty
        assert fake_text_backend.calls == 0


class TestMergeEnrichment:

    def test_empty_enrichment_keeps_listing(self):
        row = listing_row()
        merged = merge_enrichment(row, DocumentEnrichment())
        assert merged.description == "Supply of cleaning chemicals"
        assert merged == row

    def test_valid_values_overlay(self):
        merged = merge_enrichment(
            listing_row(),
            DocumentEnrichment(
                tender_number="T12/2025",
                closing="17/03/2025",
                email="scm@example-mun.gov.za",
                briefing_compulsory="Yes",
            ),
        )
        assert merged.tender_number == "T12/2025"
        assert merged.closing == "17/03/2025"
        assert merged.email == "scm@example-mun.gov.za"
        assert merged.briefing_compulsory == "Yes"
        assert merged.description == "Supply of cleaning chemicals"

    def test_implausible_values_ignored(self):
        merged = merge_enrichment(
            listing_row(),
            DocumentEnrichment(
                tender_number="TENDER",
                description="80/20 preference point system",
                closing="31/02/2025",
                email="not-an-email",
            ),
        )
        assert merged.tender_number == "SCM 12/2025"
        assert merged.description == "Supply of cleaning chemicals"
        assert merged.closing == "14/03/2025"
        assert merged.email == ""

    def test_input_row_untouched(self):
        row = listing_row()
        merge_enrichment(row, DocumentEnrichment(closing="17/03/2025"))
        assert row.closing == "14/03/2025"
