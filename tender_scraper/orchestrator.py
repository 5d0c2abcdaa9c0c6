"""
Scrape-run orchestrator.

Coordinates:
- HTTP client lifetime for one run
- Page scraper and pagination driver wiring
- Test-mode fixture
- JSON output
"""

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx
import structlog

from .config.loader import ScraperSettings
from .core.http_client import HttpClient
from .core.models import ScrapedTender, ScrapeRun
from .navigators.pagination import PaginationDriver
from .parsers.page_scraper import FallbackReferenceFactory, PageScraper
from .parsers.row_extractor import RowExtractor

logger = structlog.get_logger(__name__)


MOCK_SOURCE = "test-mode"

MOCK_TENDERS = [
    ScrapedTender(
        title="Supply of Computer Equipment for Government Offices",
        ref="TENDER/2025/COMP/001",
        closing_date="2025-10-15",
        organisation="Ministry of Electronics and Information Technology",
        link="https://eprocure.gov.in/epublish/app/tender/001",
    ),
    ScrapedTender(
        title="Construction of Road Infrastructure Project",
        ref="TENDER/2025/INFRA/002",
        closing_date="2025-11-20",
        organisation="Ministry of Road Transport and Highways",
        link="https://eprocure.gov.in/epublish/app/tender/002",
    ),
    ScrapedTender(
        title="Medical Equipment Procurement for Hospitals",
        ref="TENDER/2025/MED/003",
        closing_date="2025-10-30",
        organisation="Ministry of Health and Family Welfare",
        link="https://eprocure.gov.in/epublish/app/tender/003",
    ),
]


class TenderScraper:
    """
    Runs one scrape of a tender portal.

    Each run opens its own HTTP client; pages are fetched one after
    another with the configured delay.
    """

    def __init__(
        self,
        settings: Optional[ScraperSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        reference_factory: Optional[FallbackReferenceFactory] = None,
    ):
        """
        Initialize scraper.

        Args:
            settings: Scraper settings (defaults if not provided)
            transport: Custom httpx transport for the HTTP client
            sleep: Awaitable sleep used between pages
            reference_factory: Source of synthetic refs for text matches
        """
        self.settings = settings or ScraperSettings()
        self.transport = transport
        self.sleep = sleep
        self.reference_factory = reference_factory or FallbackReferenceFactory()

    async def scrape(
        self,
        url: Optional[str] = None,
        max_pages: Optional[int] = None,
    ) -> ScrapeRun:
        """
        Scrape a listing across pages.

        Args:
            url: Listing URL (None = configured default source)
            max_pages: Page limit (None = configured default)

        Returns:
            ScrapeRun with tenders deduplicated by ref
        """
        listing_url = url or self.settings.source_url
        source = url or self.settings.source_name
        pages = max_pages or self.settings.max_pages

        logger.info("starting_scrape", url=listing_url, max_pages=pages)

        async with HttpClient(
            timeout=self.settings.request_timeout,
            max_retries=self.settings.max_retries,
            transport=self.transport,
        ) as client:
            page_scraper = PageScraper(
                http_client=client,
                extractor=RowExtractor(link_origin=self.settings.link_origin),
                reference_factory=self.reference_factory,
            )
            driver = PaginationDriver(
                page_scraper,
                page_delay=self.settings.page_delay,
                sleep=self.sleep,
            )
            tenders = await driver.collect(listing_url, max_pages=pages)

        logger.info("scrape_complete", source=source, count=len(tenders))
        return ScrapeRun(tenders=tenders, source=source)

    def mock_run(self) -> ScrapeRun:
        """Fixed three-tender run used by test mode; no network access."""
        return ScrapeRun(
            tenders=[ScrapedTender(**vars(t)) for t in MOCK_TENDERS],
            source=MOCK_SOURCE,
        )

    def save_json(self, run: ScrapeRun, output_dir: str = "output", filename: Optional[str] = None) -> str:
        """
        Save a scrape run envelope to JSON.

        Args:
            run: Scrape result
            output_dir: Output directory
            filename: Optional filename (auto-generated if not provided)

        Returns:
            Path to saved file
        """
        if not filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"tenders_{timestamp}.json"

        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        filepath = directory / filename

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(run.to_dict(), f, ensure_ascii=False, indent=2)

        logger.info("saved_json", path=str(filepath), tenders=run.count)
        return str(filepath)
