"""
Reference-number deduplication for scraped tenders.

A scrape run may see the same tender on several pages (or on several
URL guesses of the same page); the reference number is the identity.
"""

from typing import Iterable

import structlog

from .models import ScrapedTender

logger = structlog.get_logger(__name__)


class Deduplicator:
    """
    Tracks seen reference numbers for one run.

    First occurrence wins; later records with the same ref are dropped.
    """

    def __init__(self):
        self._seen_refs: dict[str, ScrapedTender] = {}

    def process(self, tender: ScrapedTender) -> bool:
        """
        Register a tender.

        Args:
            tender: Scraped record

        Returns:
            True if kept, False if its ref was already seen
        """
        if tender.ref in self._seen_refs:
            logger.debug("tender_skipped_duplicate", ref=tender.ref)
            return False

        self._seen_refs[tender.ref] = tender
        return True

    def get_all(self) -> list[ScrapedTender]:
        """Unique tenders in encounter order."""
        return list(self._seen_refs.values())

    def __len__(self) -> int:
        return len(self._seen_refs)


def dedupe_by_reference(tenders: Iterable[ScrapedTender]) -> list[ScrapedTender]:
    """
    Remove tenders sharing a ref, keeping the first occurrence.

    Args:
        tenders: Records in encounter order

    Returns:
        Deduplicated list, order preserved
    """
    deduplicator = Deduplicator()
    total = 0
    for tender in tenders:
        total += 1
        deduplicator.process(tender)

    unique = deduplicator.get_all()
    if len(unique) < total:
        logger.info("duplicates_removed", total=total, unique=len(unique))
    return unique
