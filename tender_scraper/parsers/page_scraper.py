"""
Listing page scraper.

Fetches one page of a tender portal and recovers tender records from
whatever table structure it has. Falls back to scanning the page text
for tender mentions when no table row yields a record.
"""

import itertools
import time
from typing import Callable, Optional

from bs4 import BeautifulSoup

import structlog

from tender_scraper.core.http_client import HttpClient
from tender_scraper.core.models import NOT_SPECIFIED, ScrapedTender
from tender_scraper.core.normalizer import clean_text
from tender_scraper.core.selectors import (
    ROW_SELECTORS,
    find_tender_mentions,
    page_text,
    row_from_tag,
    select_rows,
)

from .row_extractor import RowExtractor

logger = structlog.get_logger(__name__)


FALLBACK_ORGANISATION = "Government of India"
FALLBACK_LIMIT = 5
FALLBACK_TITLE_LENGTH = 100


class FallbackReferenceFactory:
    """
    Generates REF-<millis>-<n> references for text-pattern matches.

    n counts across the factory's lifetime, so references stay unique
    within a run even when two pages are parsed in the same millisecond.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._counter = itertools.count()

    def __call__(self) -> str:
        millis = int(self.clock() * 1000)
        return f"REF-{millis}-{next(self._counter)}"


class PageScraper:
    """
    Scrapes tender records from one listing page.

    Only transport failures raise; a page without recognisable tenders
    simply returns an empty list.
    """

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        extractor: Optional[RowExtractor] = None,
        reference_factory: Optional[FallbackReferenceFactory] = None,
        selectors: Optional[list[str]] = None,
    ):
        """
        Initialize page scraper.

        Args:
            http_client: Shared HTTP client (must be entered before scrape)
            extractor: Row extractor (default portal origin if not provided)
            reference_factory: Source of synthetic refs for text matches
            selectors: Ranked row selectors
        """
        self.http_client = http_client
        self.extractor = extractor or RowExtractor()
        self.reference_factory = reference_factory or FallbackReferenceFactory()
        self.selectors = selectors or ROW_SELECTORS
        self.logger = logger.bind(parser=self.__class__.__name__)

    async def scrape(self, url: str, page: int = 1) -> list[ScrapedTender]:
        """
        Fetch and parse one listing page.

        Args:
            url: Page URL
            page: Page number (logging only)

        Returns:
            Tender records found on the page, possibly empty

        Raises:
            httpx.HTTPError: On timeout, network failure or error status
        """
        if not self.http_client:
            raise RuntimeError("Scraper has no HTTP client. Use 'async with' on the client first.")

        self.logger.info("scraping_page", page=page, url=url)
        html = await self.http_client.get_text(url)
        return self.parse(html, url, page)

    def parse(self, html: str, url: str, page: int = 1) -> list[ScrapedTender]:
        """
        Parse listing markup into tender records.

        Args:
            html: Page markup
            url: Page URL (used as link for text-pattern matches)
            page: Page number (logging only)

        Returns:
            Tender records, possibly empty
        """
        soup = BeautifulSoup(html, "lxml")

        tenders = self._parse_tables(soup)
        if not tenders:
            tenders = self._parse_text(soup, url)

        self.logger.info("page_parsed", page=page, count=len(tenders))
        return tenders

    def _parse_tables(self, soup: BeautifulSoup) -> list[ScrapedTender]:
        """Try row selectors in rank order until one yields records."""
        for selector in self.selectors:
            rows = select_rows(soup, selector)
            if not rows:
                continue

            self.logger.debug("rows_found", selector=selector, rows=len(rows))

            tenders: list[ScrapedTender] = []
            for row in rows:
                try:
                    tender = self.extractor.extract(row_from_tag(row))
                except Exception as e:
                    self.logger.warning("row_parse_failed", selector=selector, error=str(e))
                    continue
                if tender:
                    tenders.append(tender)

            if tenders:
                return tenders

        return []

    def _parse_text(self, soup: BeautifulSoup, url: str) -> list[ScrapedTender]:
        """Synthesize records from free-text tender mentions."""
        mentions = find_tender_mentions(page_text(soup), limit=FALLBACK_LIMIT)
        if mentions:
            self.logger.info("text_fallback_used", url=url, matches=len(mentions))

        return [
            ScrapedTender(
                title=clean_text(mention[:FALLBACK_TITLE_LENGTH]),
                ref=self.reference_factory(),
                closing_date=NOT_SPECIFIED,
                organisation=FALLBACK_ORGANISATION,
                link=url,
            )
            for mention in mentions
        ]
