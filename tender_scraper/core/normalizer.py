"""
Normalization utilities for tender listing data.

Handles:
- Whitespace cleanup of cell text
- Date strings (15/10/2025, 15-10-2025, 2025-10-15)
- Indian currency units in titles (5 crore, 12 lakh)
"""

import re
from datetime import datetime
from typing import Optional

import structlog
from dateutil import parser as date_parser

from .models import NOT_SPECIFIED

logger = structlog.get_logger(__name__)


# Tried in order; the ISO pattern is last because "2025-10-15" never
# satisfies the two-digit-first patterns.
DATE_FORMATS = [
    (re.compile(r"(\d{2})/(\d{2})/(\d{4})"), "dmy"),  # dd/mm/yyyy
    (re.compile(r"(\d{2})-(\d{2})-(\d{4})"), "dmy"),  # dd-mm-yyyy
    (re.compile(r"(\d{4})-(\d{2})-(\d{2})"), "ymd"),  # yyyy-mm-dd
]

# Rough shape of a listing date, used by the row heuristics
DATE_SHAPE = re.compile(r"\d{2}[/-]\d{2}[/-]\d{4}")

CRORE = 10_000_000
LAKH = 100_000

_CRORE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*crore", re.IGNORECASE)
_LAKH_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*lakh", re.IGNORECASE)


def clean_text(text: Optional[str]) -> str:
    """
    Collapse whitespace runs to single spaces and strip the ends.

    Args:
        text: Raw text (cell content, page text)

    Returns:
        Cleaned text, "" for None
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def format_date(text: str) -> str:
    """
    Normalize a listing date to yyyy-mm-dd.

    Supported formats:
    - "15/10/2025" -> "2025-10-15"
    - "15-10-2025" -> "2025-10-15"
    - "2025-10-15" -> "2025-10-15"

    Anything else comes back cleaned but otherwise unchanged, so the
    result is best-effort and not guaranteed to be a date.

    Args:
        text: Date-like string from a table cell

    Returns:
        ISO-ordered date or the cleaned input
    """
    try:
        cleaned = clean_text(text)
        for pattern, order in DATE_FORMATS:
            match = pattern.search(cleaned)
            if not match:
                continue
            if order == "ymd":
                year, month, day = match.groups()
            else:
                day, month, year = match.groups()
            return f"{year}-{month}-{day}"
        return cleaned
    except Exception as e:
        logger.warning("date_format_failed", text=text, error=str(e))
        return text


def parse_deadline(text: Optional[str]) -> Optional[datetime]:
    """
    Parse a closing date into a datetime.

    ISO-ordered dates are parsed directly; anything else (e.g. "30 Oct
    2025 11:00 AM") goes through dateutil with day-first ordering.

    Args:
        text: Closing date as produced by format_date

    Returns:
        datetime or None for "Not specified", empty or unparseable input
    """
    if not text or text == NOT_SPECIFIED:
        return None

    try:
        return datetime.strptime(format_date(text), "%Y-%m-%d")
    except ValueError:
        pass

    try:
        return date_parser.parse(clean_text(text), dayfirst=True)
    except (ValueError, OverflowError):
        pass

    logger.info("deadline_unparseable", text=text)
    return None


def parse_indian_amount(text: Optional[str]) -> Optional[int]:
    """
    Parse an amount expressed in crore or lakh.

    Supported formats:
    - "Road works worth 5 crore" -> 50000000
    - "Supply of desks 12 lakh" -> 1200000
    - "2.5 Crore" -> 25000000

    Crore takes precedence when both units appear.

    Args:
        text: Title or other free text

    Returns:
        Integer amount in rupees, None if no unit or no number before it
    """
    if not text:
        return None

    lowered = text.lower()

    if "crore" in lowered:
        pattern, multiplier = _CRORE_PATTERN, CRORE
    elif "lakh" in lowered:
        pattern, multiplier = _LAKH_PATTERN, LAKH
    else:
        return None

    match = pattern.search(text)
    if not match:
        return None

    try:
        return int(round(float(match.group(1)) * multiplier))
    except (ValueError, OverflowError):
        return None
