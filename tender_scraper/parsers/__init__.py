"""
Parsers - turn listing markup into tender records.

- row_extractor: field recognition for a single table row
- page_scraper: selector ranking and text-pattern fallback for a page
"""

from .row_extractor import RowExtractor
from .page_scraper import FallbackReferenceFactory, PageScraper

__all__ = ["RowExtractor", "PageScraper", "FallbackReferenceFactory"]
