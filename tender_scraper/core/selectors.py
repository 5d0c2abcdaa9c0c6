"""
Selectors for locating tender rows in listing markup.

Listing pages have no common schema, so rows are found by trying a
ranked list of structural selectors, with a free-text pattern scan as
the last resort.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

from .models import RawMarkupRow

# Ranked: generic tables first, then tender-specific containers.
# Every selector only matches rows holding at least one data cell.
ROW_SELECTORS = [
    "table tr:has(td)",
    ".table tr:has(td)",
    "tbody tr:has(td)",
    '[class*="tender"] tr:has(td)',
    '[id*="tender"] tr:has(td)',
]

# Non-greedy up to the first 4-digit number (usually a year)
TENDER_TEXT_PATTERN = re.compile(r"tender[^.]*?(\d{4})", re.IGNORECASE)


def select_rows(soup: BeautifulSoup, selector: str) -> list[Tag]:
    """Select candidate rows with one selector."""
    return list(soup.select(selector))


def row_from_tag(row: Tag) -> RawMarkupRow:
    """
    Convert a <tr> into a RawMarkupRow.

    Args:
        row: Table row element

    Returns:
        Cell texts and per-cell first hyperlink
    """
    cells: list[str] = []
    links: list[Optional[str]] = []

    for cell in row.find_all("td"):
        cells.append(cell.get_text())
        anchor = cell.find("a", href=True)
        links.append(anchor["href"] if anchor else None)

    return RawMarkupRow(cells=cells, links=links)


def page_text(soup: BeautifulSoup) -> str:
    """Full visible text of the page body."""
    container = soup.body or soup
    return container.get_text(" ")


def find_tender_mentions(text: str, limit: int = 5) -> list[str]:
    """
    Scan free text for "tender ... <4-digit number>" mentions.

    Args:
        text: Page text
        limit: Maximum matches to return

    Returns:
        Matched substrings, in page order
    """
    return [m.group(0) for m in TENDER_TEXT_PATTERN.finditer(text)][:limit]
