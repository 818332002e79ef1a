from __future__ import annotations

import logging
import textwrap
from collections.abc import Callable

import httpx
import pytest

from tenderharvest.core.backends import HttpBackend
from tenderharvest.core.config import SourceConfig
from tenderharvest.core.extract import TextBackend


LISTING_URL = "https://www.example-mun.gov.za/tenders"
SECOND_LISTING_URL = "https://www.example-mun.gov.za/tenders/page/2"


SAMPLE_LISTING_HTML = """
<html><body>
<nav>
  <ul>
    <li><a href="/">Home</a></li>
    <li><a href="/contact-us">Contact Us</a></li>
  </ul>
</nav>
<div class="content">
  <ul>
    <li>
      <a href="/wp-content/uploads/2025/03/SCM-12-2025.pdf">SCM 12/2025 Supply of cleaning chemicals</a>
      Closing date: 14 March 2025
    </li>
    <li>
      <a href="/wp-content/uploads/2025/03/RFQ-045-2025.pdf">RFQ 045/2025 Repair of water pump station</a>
      Closing date: 2025-04-02
    </li>
  </ul>
</div>
</body></html>
"""

SAMPLE_SECOND_PAGE_HTML = """
<html><body>
<ul>
  <li>
    <a href="/wp-content/uploads/2025/03/SCM-12-2025.pdf">SCM 12/2025 Supply of cleaning chemicals</a>
    Closing date: 14 March 2025
  </li>
  <li>
    <a href="/wp-content/uploads/2025/04/SCM-19-2025.pdf">SCM 19/2025 Maintenance of municipal vehicles</a>
    Closing: 30/04/2025
  </li>
</ul>
</body></html>
"""

SAMPLE_TABLE_HTML = """
<html><body>
<table>
  <tr><th>Bid Number</th><th>Description</th><th>Closing</th></tr>
  <tr>
    <td>SCM 07/2025</td>
    <td><a href="/tenders/scm-07-2025">Construction of community hall</a></td>
    <td>Closing 07/05/2025</td>
  </tr>
</table>
</body></html>
"""

SAMPLE_DOCUMENTS_HTML = """
<html><body>
<p><a href="/docs/report.pdf">Report</a></p>
<p><a href="/docs/T05-2025-extension.pdf">Extension of closing date T05/2025</a></p>
<p><a href="/about">About the municipality</a></p>
</body></html>
"""

SAMPLE_DOCUMENT_TEXT = textwrap.dedent("""\
    WESTERN CAPE LOCAL MUNICIPALITY
    TENDER NUMBER: T12/2025
    DESCRIPTION: Supply and delivery of cleaning chemicals for municipal buildings
    Advertised: 03/03/2025
    CLOSING DATE: 17/03/2025 at 12:00
    CONTACT PERSON: Ms J Adams
    Telephone: 021 555 1234
    Email: SCM@Example-Mun.gov.za
    A compulsory briefing session will be held on 07/03/2025 at 10:00
    Venue: Council Chambers, Main Road
""")


class FakeTextBackend(TextBackend):
    """Text backend that returns canned text for any content."""

    def __init__(self, text: str = SAMPLE_DOCUMENT_TEXT, *, fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.calls = 0

    @property
    def name(self) -> str:
        return "fake"

    @property
    def available(self) -> bool:
        return True

    def handles(self, content_type: str, url: str, content: bytes) -> bool:
        return True

    def extract_text(self, content: bytes) -> str:
        self.calls += 1
        if self.fail:
            raise ValueError("corrupt document")
        return self.text


def make_source(**overrides) -> SourceConfig:
    data = {
        "id": "examplemun",
        "short_name": "Example",
        "organ_of_state": "Example Local Municipality",
        "province": "Western Cape",
        "base_url": "https://www.example-mun.gov.za",
        "listing_urls": [LISTING_URL],
        "context_selector": "li, tr, article, div",
    }
    data.update(overrides)
    return SourceConfig.model_validate(data)


def mock_backend(routes: dict[str, httpx.Response | Callable[[httpx.Request], httpx.Response]]) -> HttpBackend:
    """HttpBackend answering from a url -> response map; anything else is a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)
        return route

    return HttpBackend(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers that CLI runs attach to captured streams."""
    yield
    logger = logging.getLogger("tenderharvest")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def source_config() -> SourceConfig:
    return make_source()


@pytest.fixture
def listing_html() -> str:
    return SAMPLE_LISTING_HTML


@pytest.fixture
def document_text() -> str:
    return SAMPLE_DOCUMENT_TEXT


@pytest.fixture
def fake_text_backend() -> FakeTextBackend:
    return FakeTextBackend()


SOURCE_YAML = textwrap.dedent("""\
    id: examplemun
    short_name: Example
    organ_of_state: Example Local Municipality
    province: Western Cape
    base_url: https://www.example-mun.gov.za
    listing_urls:
      - https://www.example-mun.gov.za/tenders
""")


@pytest.fixture
def sources_dir(tmp_path):
    directory = tmp_path / "configs" / "sources"
    directory.mkdir(parents=True)
    (directory / "examplemun.yaml").write_text(SOURCE_YAML, encoding="utf-8")
    (directory / "othermun.yaml").write_text(
        SOURCE_YAML.replace("examplemun", "othermun").replace("Example", "Other"),
        encoding="utf-8",
    )
    return directory


@pytest.fixture
def cli_workspace(tmp_path, sources_dir, monkeypatch):
    """Working directory holding an app config that logs to the console only."""
    (tmp_path / "configs" / "app.yaml").write_text(
        textwrap.dedent("""\
            sources_dir: configs/sources
            output_dir: output
            logging:
              level: WARNING
              file: null
              rich_console: false
        """),
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path
