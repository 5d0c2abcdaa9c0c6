"""
Core layer - stable foundation for the scraping system.

Components:
- models: ScrapedTender, Tender, ImportResult dataclasses
- http_client: Retrying async HTTP client with browser headers
- selectors: Row selectors and text-pattern search
- normalizer: Text, date and Indian amount normalization
- classifier: Keyword category and budget estimation
- deduplicator: Reference-based deduplication
"""

from .models import (
    NOT_SPECIFIED,
    ImportResult,
    RawMarkupRow,
    ScrapedTender,
    ScrapeRun,
    Tender,
    TenderCategory,
)
from .normalizer import clean_text, format_date, parse_deadline, parse_indian_amount
from .classifier import TenderClassifier, TenderEstimator, classify_category
from .deduplicator import Deduplicator, dedupe_by_reference
from .http_client import HttpClient

__all__ = [
    "NOT_SPECIFIED",
    "ImportResult",
    "RawMarkupRow",
    "ScrapedTender",
    "ScrapeRun",
    "Tender",
    "TenderCategory",
    "clean_text",
    "format_date",
    "parse_deadline",
    "parse_indian_amount",
    "TenderClassifier",
    "TenderEstimator",
    "classify_category",
    "Deduplicator",
    "dedupe_by_reference",
    "HttpClient",
]
