from tenderharvest.core.extract import (
    CandidateBlock,
    CandidateClassifier,
    is_navigation_noise,
    is_real_tender_row,
    looks_tender_like,
    to_absolute_url,
)

from conftest import SAMPLE_DOCUMENTS_HTML, SAMPLE_TABLE_HTML, make_source


BASE = "https://www.example-mun.gov.za"


class TestStages:

    def test_document_link_is_tender_like(self):
        assert looks_tender_like("Annual report", "/files/report.pdf")
        assert looks_tender_like("Report", "/docs/report.DOCX?version=2")

    def test_tender_vocabulary_is_tender_like(self):
        assert looks_tender_like("Bid notice for fencing", None)
        assert looks_tender_like("Supply Chain Management", "/scm")

    def test_plain_link_is_not_tender_like(self):
        assert not looks_tender_like("Contact Us", "/contact-us")

    def test_navigation_noise(self):
        assert is_navigation_noise("Contact Us", "/contact-us")
        assert is_navigation_noise("Login | Register", "")
        assert is_navigation_noise("", "")
        assert is_navigation_noise("word " * 60, "/page")
        assert is_navigation_noise("Procurement", "/news/procurement-update") is False

    def test_navigation_words_allowed_with_tender_cue(self):
        assert not is_navigation_noise("Tender for security services", "/tenders/security")

    def test_real_tender_row(self):
        assert is_real_tender_row("", "", f"{BASE}/files/doc.pdf")
        assert is_real_tender_row("SCM 1/2025", "", f"{BASE}/page")
        assert is_real_tender_row("", "", f"{BASE}/sites/default/files/notice")
        assert is_real_tender_row("", "Invitation to tender for fencing", f"{BASE}/tenders/fencing")

    def test_rejected_rows(self):
        assert not is_real_tender_row("", "", "")
        assert not is_real_tender_row("SCM 1/2025", "", f"{BASE}/")
        assert not is_real_tender_row("", "Municipal news overview", f"{BASE}/news/")
        assert not is_real_tender_row("", "short", f"{BASE}/tenders/x")


class TestToAbsoluteUrl:

    def test_root_relative(self):
        assert to_absolute_url(f"{BASE}/", "/x.pdf") == f"{BASE}/x.pdf"

    def test_relative(self):
        assert to_absolute_url(BASE, "docs/a.pdf") == f"{BASE}/docs/a.pdf"

    def test_absolute_unchanged(self):
        assert to_absolute_url(BASE, "https://other.gov.za/x") == "https://other.gov.za/x"

    def test_protocol_relative(self):
        assert to_absolute_url(BASE, "//cdn.gov.za/y.pdf") == "https://cdn.gov.za/y.pdf"

    def test_empty_href_is_base(self):
        assert to_absolute_url(BASE, "") == BASE
        assert to_absolute_url(BASE, None) == BASE

    def test_non_navigable(self):
        assert to_absolute_url(BASE, "mailto:scm@example-mun.gov.za") == ""
        assert to_absolute_url(BASE, "javascript:void(0)") == ""
        assert to_absolute_url(BASE, "#top") == ""

    def test_control_characters(self):
        assert to_absolute_url(BASE, "/uploads/bid\n1.pdf") == f"{BASE}/uploads/bid1.pdf"
        assert to_absolute_url(BASE, "/uploads/b\x7f.pdf") == f"{BASE}/uploads/b%7F.pdf"


class TestCandidateClassifier:

    def test_scan_keeps_tenders_and_drops_navigation(self, source_config, listing_html):
        rows = CandidateClassifier(source_config).scan(listing_html)

        assert len(rows) == 2
        first, second = rows
        assert first.tender_number == "SCM 12/2025"
        assert first.description == "SCM 12/2025 Supply of cleaning chemicals"
        assert first.closing == "14/03/2025"
        assert first.source_url == f"{BASE}/wp-content/uploads/2025/03/SCM-12-2025.pdf"
        assert first.document_url == first.source_url
        assert second.tender_number == "RFQ 045/2025"
        assert second.closing == "02/04/2025"

    def test_scan_drops_page_duplicates(self, source_config):
        item = (
            '<li><a href="/wp-content/uploads/2025/03/SCM-12-2025.pdf">'
            "SCM 12/2025 Supply of cleaning chemicals</a></li>"
        )
        rows = CandidateClassifier(source_config).scan(f"<ul>{item}{item}</ul>")
        assert len(rows) == 1

    def test_document_first_acceptance(self, source_config):
        row = CandidateClassifier(source_config).classify(
            CandidateBlock(href="/docs/report.pdf", link_text="Report", context_text="Report")
        )
        assert row is not None
        assert row.source_url == f"{BASE}/docs/report.pdf"

    def test_contact_link_rejected(self, source_config):
        row = CandidateClassifier(source_config).classify(
            CandidateBlock(href="/contact-us", link_text="Contact Us")
        )
        assert row is None

    def test_navigation_link_rejected(self, source_config):
        row = CandidateClassifier(source_config).classify(
            CandidateBlock(href="/leadership", link_text="Leadership Services Investor Relations")
        )
        assert row is None

    def test_table_row_context(self):
        config = make_source(listing_style="table", link_selector="a[href]")
        rows = CandidateClassifier(config).scan(SAMPLE_TABLE_HTML)

        assert len(rows) == 1
        assert rows[0].tender_number == "SCM 07/2025"
        assert rows[0].description == "Construction of community hall"
        assert rows[0].closing == "07/05/2025"
        assert rows[0].document_url == ""

    def test_documents_style_and_skip_keywords(self):
        config = make_source(listing_style="documents", skip_href_keywords=["Extension"])
        rows = CandidateClassifier(config).scan(SAMPLE_DOCUMENTS_HTML)

        assert [row.source_url for row in rows] == [f"{BASE}/docs/report.pdf"]

    def test_weak_link_text_uses_file_name(self, source_config):
        html = (
            '<ul><li><a href="/wp-content/uploads/2025/05/Supply-of-Office-Furniture.pdf">'
            "Download</a></li></ul>"
        )
        rows = CandidateClassifier(source_config).scan(html)
        assert rows[0].description == "Supply of Office Furniture"

    def test_non_anchor_selector_uses_inner_link(self):
        config = make_source(link_selector="p")
        html = '<p>SCM 03/2025 Fencing tender <a href="/tenders/scm-03-2025">details</a> closing 01/06/2025</p>'
        rows = CandidateClassifier(config).scan(html)

        assert len(rows) == 1
        assert rows[0].source_url == f"{BASE}/tenders/scm-03-2025"
        assert rows[0].tender_number == "SCM 03/2025"

    def test_empty_page(self, source_config):
        assert CandidateClassifier(source_config).scan("") == []
        assert CandidateClassifier(source_config).scan("   ") == []

    def test_xml_declaration_is_tolerated(self, source_config, listing_html):
        page = '<?xml version="1.0" encoding="utf-8"?>\n' + listing_html
        rows = CandidateClassifier(source_config).scan(page)
        assert [row.tender_number for row in rows] == ["SCM 12/2025", "RFQ 045/2025"]

    def test_leftover_entities_cleaned(self, source_config):
        html = (
            '<ul><li><a href="/wp-content/uploads/2025/05/SCM-21-2025.pdf">'
            "SCM 21/2025 Roads &amp;amp; Stormwater upgrades</a></li></ul>"
        )
        rows = CandidateClassifier(source_config).scan(html)
        assert rows[0].description == "SCM 21/2025 Roads & Stormwater upgrades"
