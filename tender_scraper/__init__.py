"""
Tender Scraper - heuristic tender extraction and idempotent import.

Architecture:
- core/: Stable foundation (models, HTTP client, normalizers, classifier)
- parsers/: Extraction strategies (row heuristics, page selectors)
- navigators/: Pagination and URL-pattern discovery
- pipeline/: Import of scraped records into storage
- config/: YAML-driven settings
- web/: aiohttp trigger endpoints
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
