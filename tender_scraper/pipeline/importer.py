"""
Import of scraped tenders into storage.

Records are upserted by reference number: an existing reference is
skipped, never updated, so re-importing the same scrape is a no-op.
"""

from typing import Iterable, Optional, Union

import structlog

from tender_scraper.config.loader import ImportSettings
from tender_scraper.core.classifier import TenderClassifier
from tender_scraper.core.models import ImportResult, ScrapedTender, Tender
from tender_scraper.core.normalizer import parse_deadline
from tender_scraper.orchestrator import TenderScraper
from tender_scraper.storage import TenderRepository

logger = structlog.get_logger(__name__)


class TenderImporter:
    """
    Converts scraped records into persisted tenders.

    Records are processed one at a time; a failure on one record is
    logged and the rest of the batch continues.
    """

    def __init__(
        self,
        repository: TenderRepository,
        classifier: Optional[TenderClassifier] = None,
        scraper: Optional[TenderScraper] = None,
        settings: Optional[ImportSettings] = None,
    ):
        """
        Initialize importer.

        Args:
            repository: Tender storage
            classifier: Category/budget classifier
            scraper: Scraper used by refresh()
            settings: Text used for synthesized fields
        """
        self.repository = repository
        self.classifier = classifier or TenderClassifier()
        self.scraper = scraper or TenderScraper()
        self.settings = settings or ImportSettings()

    async def import_tenders(self, records: Iterable[Union[ScrapedTender, dict]]) -> ImportResult:
        """
        Import a batch of scraped tenders.

        Wire-format dicts are converted per record, so a malformed entry
        is counted in the total but does not fail the batch.

        Args:
            records: Scraped tenders or their wire-format dicts

        Returns:
            ImportResult with counts and newly created tenders
        """
        batch = list(records)
        imported: list[Tender] = []

        logger.info("import_started", total=len(batch))

        for item in batch:
            try:
                record = item if isinstance(item, ScrapedTender) else ScrapedTender.from_dict(item)
                tender = await self._import_one(record)
            except Exception as e:
                logger.error("tender_import_failed", ref=record_ref(item), error=str(e))
                continue
            if tender:
                imported.append(tender)

        result = ImportResult(imported=len(imported), total=len(batch), tenders=imported)
        logger.info("import_complete", imported=result.imported, total=result.total)
        return result

    async def refresh(self, max_pages: Optional[int] = None) -> ImportResult:
        """
        Scrape the default source and import the result.

        Args:
            max_pages: Page limit (None = configured default)

        Returns:
            ImportResult of the scraped batch
        """
        run = await self.scraper.scrape(max_pages=max_pages)
        logger.info("refresh_scraped", source=run.source, count=run.count)
        return await self.import_tenders(run.tenders)

    async def _import_one(self, record: ScrapedTender) -> Optional[Tender]:
        """Create one tender, or return None if its ref is already stored."""
        existing = await self.repository.find_by_reference(record.ref)
        if existing:
            logger.debug("tender_exists_skipped", ref=record.ref)
            return None

        deadline = parse_deadline(record.closing_date)
        category, budget = self.classifier.assess(record.title)

        return await self.repository.create(
            title=record.title,
            description=self.describe(record),
            budget=budget,
            deadline=deadline,
            category=category,
            location=infer_location(record.organisation),
            requirements=self.settings.requirements,
            reference_number=record.ref,
            source_url=record.link or self.settings.portal_url,
            organisation=record.organisation,
            is_scraped=True,
        )

    def describe(self, record: ScrapedTender) -> str:
        """Narrative description embedding the organisation."""
        return (
            f"{record.title}\n\n"
            f"Organisation: {record.organisation}\n\n"
            f"This tender has been imported from {self.scraper.settings.source_name}. "
            "For complete details and application, please visit the official tender portal."
        )


def record_ref(item) -> Optional[str]:
    """Reference of a record or wire dict, for log lines."""
    if isinstance(item, ScrapedTender):
        return item.ref
    return item.get("ref") if isinstance(item, dict) else None


def infer_location(organisation: str) -> str:
    """Central ministries sit in New Delhi; everything else is just India."""
    return "New Delhi" if "Ministry" in (organisation or "") else "India"
