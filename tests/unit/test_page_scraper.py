"""Tests for the listing page scraper."""

import httpx
import pytest

from tender_scraper.core.http_client import HttpClient
from tender_scraper.core.models import NOT_SPECIFIED
from tender_scraper.parsers.page_scraper import (
    FALLBACK_ORGANISATION,
    FallbackReferenceFactory,
    PageScraper,
)


LISTING_HTML = """
<html>
<body>
    <table class="list_table">
        <tr><th>Title</th><th>Reference</th><th>Closing</th><th>Organisation</th></tr>
        <tr>
            <td>S.No</td><td>Ref</td><td>Date</td><td>Org</td>
        </tr>
        <tr>
            <td><a href="/tender/view/101">Construction of District Hospital Building Block A</a></td>
            <td>PWD/2024/TN/101</td>
            <td>15/10/2025</td>
            <td>Public Works Department</td>
        </tr>
        <tr>
            <td>Supply of Laboratory Equipment worth 2.5 crore</td>
            <td><a href="https://portal.test/docs/7781">NHM/2024/EQ/7781</a></td>
            <td>30-11-2025</td>
            <td>National Health Mission Board</td>
        </tr>
    </table>
</body>
</html>
"""

TEXT_ONLY_HTML = """
<html>
<body>
    <p>Tender for supply of water pumps closing 2025. Please check back.</p>
    <p>Another tender notice for road resurfacing 2026 is expected.</p>
</body>
</html>
"""


@pytest.fixture
def reference_factory():
    """Reference factory with a frozen clock."""
    return FallbackReferenceFactory(clock=lambda: 1_700_000_000.0)


class TestParse:
    """Tests for PageScraper.parse."""

    def test_table_rows(self):
        """Test valid rows are extracted and header rows dropped."""
        scraper = PageScraper()
        tenders = scraper.parse(LISTING_HTML, "https://portal.test/tenders")

        assert [t.ref for t in tenders] == ["PWD/2024/TN/101", "NHM/2024/EQ/7781"]
        assert tenders[0].link == "https://eprocure.gov.in/tender/view/101"
        assert tenders[0].closing_date == "2025-10-15"
        assert tenders[1].link == "https://portal.test/docs/7781"
        assert tenders[1].organisation == "National Health Mission Board"

    def test_inline_markup_in_reference(self):
        """Test inline tags inside a cell do not split its text."""
        html = """
        <table class="list_table">
            <tr>
                <td>Supply of <i>Office</i> Desks for Zilla Parishad Schools</td>
                <td>ZP/2024/<b>DESK</b>/0001</td>
                <td>15/10/2025</td>
                <td>Zilla Parishad Pune</td>
            </tr>
        </table>
        """
        tenders = PageScraper().parse(html, "https://portal.test/tenders")

        assert len(tenders) == 1
        assert tenders[0].title == "Supply of Office Desks for Zilla Parishad Schools"
        assert tenders[0].ref == "ZP/2024/DESK/0001"
        assert tenders[0].closing_date == "2025-10-15"
        assert tenders[0].organisation == "Zilla Parishad Pune"

    def test_first_yielding_selector_wins(self):
        """Test rows are not collected twice by lower-ranked selectors."""
        html = LISTING_HTML.replace('class="list_table"', 'class="table tender-list" id="tenders"')
        tenders = PageScraper().parse(html, "https://portal.test/tenders")

        assert len(tenders) == 2

    def test_text_fallback(self, reference_factory):
        """Test free-text mentions become records when no row matches."""
        scraper = PageScraper(reference_factory=reference_factory)
        tenders = scraper.parse(TEXT_ONLY_HTML, "https://portal.test/notices")

        assert len(tenders) == 2
        assert tenders[0].title == "Tender for supply of water pumps closing 2025"
        assert tenders[1].title == "tender notice for road resurfacing 2026"
        assert [t.ref for t in tenders] == ["REF-1700000000000-0", "REF-1700000000000-1"]
        assert all(t.organisation == FALLBACK_ORGANISATION for t in tenders)
        assert all(t.closing_date == NOT_SPECIFIED for t in tenders)
        assert all(t.link == "https://portal.test/notices" for t in tenders)

    def test_text_fallback_after_empty_rows(self, reference_factory):
        """Test rows that all fail the gate fall through to the text scan."""
        html = """
        <html><body>
            <table><tr><td>S.No</td><td>Ref</td><td>Date</td><td>Org</td></tr></table>
            <p>Tender for desks 2025.</p>
        </body></html>
        """
        tenders = PageScraper(reference_factory=reference_factory).parse(html, "https://portal.test")

        assert len(tenders) == 1
        assert tenders[0].ref.startswith("REF-")

    def test_text_fallback_limit(self, reference_factory):
        """Test at most five text matches are used."""
        html = "<html><body>" + "".join(
            f"<p>Tender number {n} for works {2000 + n}.</p>" for n in range(8)
        ) + "</body></html>"
        tenders = PageScraper(reference_factory=reference_factory).parse(html, "https://portal.test")

        assert len(tenders) == 5

    def test_fallback_refs_unique_across_pages(self, reference_factory):
        """Test refs stay unique when the clock does not move."""
        scraper = PageScraper(reference_factory=reference_factory)
        first = scraper.parse(TEXT_ONLY_HTML, "https://portal.test/1")
        second = scraper.parse(TEXT_ONLY_HTML, "https://portal.test/2")

        refs = [t.ref for t in first + second]
        assert len(set(refs)) == 4

    def test_nothing_found(self):
        """Test a page without tenders yields an empty list."""
        assert PageScraper().parse("<html><body><p>Maintenance</p></body></html>", "https://portal.test") == []


class TestScrape:
    """Tests for PageScraper.scrape over a fake transport."""

    @pytest.mark.asyncio
    async def test_scrape_uses_browser_headers(self):
        """Test fetched page is parsed and browser headers are sent."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["user_agent"] = request.headers.get("User-Agent")
            return httpx.Response(200, text=LISTING_HTML)

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            tenders = await PageScraper(http_client=client).scrape("https://portal.test/tenders")

        assert len(tenders) == 2
        assert "Mozilla/5.0" in seen["user_agent"]

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        """Test network failures are raised to the caller."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(httpx.ConnectError):
                await PageScraper(http_client=client).scrape("https://portal.test/tenders")

    @pytest.mark.asyncio
    async def test_error_status_propagates(self):
        """Test HTTP error statuses are raised to the caller."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await PageScraper(http_client=client).scrape("https://portal.test/tenders")

    @pytest.mark.asyncio
    async def test_requires_http_client(self):
        """Test scrape without a client is a usage error."""
        with pytest.raises(RuntimeError):
            await PageScraper().scrape("https://portal.test/tenders")
