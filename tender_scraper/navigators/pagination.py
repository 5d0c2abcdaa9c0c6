"""
Pagination driver: walks listing pages until one comes back empty.

Pages are fetched strictly one after another with a fixed delay in
between, to stay polite toward government portals.
"""

import asyncio
from functools import partial
from typing import Awaitable, Callable, Optional

import structlog

from tender_scraper.core.deduplicator import dedupe_by_reference
from tender_scraper.core.models import ScrapedTender
from tender_scraper.parsers.page_scraper import PageScraper

from .url_patterns import UrlBuilder, first_success, page_url_guesses

logger = structlog.get_logger(__name__)


DEFAULT_MAX_PAGES = 3
DEFAULT_PAGE_DELAY = 2.0


class PaginationDriver:
    """
    Drives a PageScraper across the pages of one listing.

    Stops at the first page for which no URL guess yields a record, or on
    an unexpected error, returning whatever was collected up to then.
    """

    def __init__(
        self,
        page_scraper: PageScraper,
        page_delay: float = DEFAULT_PAGE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        url_builders: Optional[list[UrlBuilder]] = None,
    ):
        """
        Initialize driver.

        Args:
            page_scraper: Scraper for single pages
            page_delay: Seconds to wait between pages
            sleep: Awaitable sleep (tests inject a recorder)
            url_builders: Pagination URL shapes in trial order
        """
        self.page_scraper = page_scraper
        self.page_delay = page_delay
        self.sleep = sleep
        self.url_builders = url_builders
        self.logger = logger.bind(navigator=self.__class__.__name__)

    async def collect(
        self,
        base_url: str,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> list[ScrapedTender]:
        """
        Collect tenders from up to max_pages pages.

        Args:
            base_url: Listing URL (page 1)
            max_pages: Page limit

        Returns:
            Tenders deduplicated by ref, in encounter order
        """
        self.logger.info("pagination_started", url=base_url, max_pages=max_pages)

        collected: list[ScrapedTender] = []

        for page in range(1, max_pages + 1):
            try:
                page_tenders = await self._scrape_page(base_url, page)

                if not page_tenders:
                    self.logger.info("empty_page_stopping", page=page)
                    break

                collected.extend(page_tenders)

                if page < max_pages:
                    await self.sleep(self.page_delay)

            except Exception as e:
                self.logger.error("page_failed", page=page, error=str(e))
                break

        unique = dedupe_by_reference(collected)
        self.logger.info(
            "pagination_complete",
            url=base_url,
            collected=len(collected),
            unique=len(unique),
        )
        return unique

    async def _scrape_page(self, base_url: str, page: int) -> list[ScrapedTender]:
        """Try each URL guess for a page, first non-empty result wins."""
        urls = page_url_guesses(base_url, page, self.url_builders)

        def report(index: int, error: Exception) -> None:
            self.logger.warning(
                "url_pattern_failed",
                page=page,
                url=urls[index],
                error=str(error),
            )

        return await first_success(
            (partial(self.page_scraper.scrape, url, page) for url in urls),
            on_error=report,
        )
