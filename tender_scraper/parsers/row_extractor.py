"""
Heuristic field extraction from one listing row.

Tender tables differ from portal to portal, so fields are recognised by
the shape of their content first and by column position only when the
content heuristics find nothing.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urljoin

import structlog

from tender_scraper.core.models import NOT_SPECIFIED, RawMarkupRow, ScrapedTender
from tender_scraper.core.normalizer import DATE_SHAPE, clean_text, format_date

logger = structlog.get_logger(__name__)


MIN_CELLS = 4
MAX_TITLE_LENGTH = 200

REF_PATTERN = re.compile(r"^[A-Z0-9/\-_]{8,}$")

ORGANISATION_MARKERS = ["Ministry", "Department", "Corporation", "Ltd", "Authority", "Board"]

# Closing dates written out in words, e.g. "30 Oct 2025 11:00 AM"
YEAR_MARKER = "2025"


def _is_title(index: int, text: str) -> bool:
    if len(text) <= 10:
        return False
    return index == 0 or "tender" in text.lower() or len(text) > 50


def _is_ref(index: int, text: str) -> bool:
    return bool(REF_PATTERN.match(text))


def _is_closing_date(index: int, text: str) -> bool:
    return bool(DATE_SHAPE.search(text)) or YEAR_MARKER in text


def _is_organisation(index: int, text: str) -> bool:
    return any(marker in text for marker in ORGANISATION_MARKERS)


def _same(text: str) -> str:
    return text


@dataclass(frozen=True)
class FieldRule:
    """
    Content rule for one field.

    matches(index, cleaned_text) decides whether a cell fills the field;
    transform turns the cell text into the stored value.
    """
    field: str
    matches: Callable[[int, str], bool]
    transform: Callable[[str], str] = _same


@dataclass(frozen=True)
class PositionalFallback:
    """Column to use for a field the content rules did not fill."""
    field: str
    index: int
    accepts: Optional[Callable[[str], bool]] = None
    transform: Callable[[str], str] = _same


FIELD_RULES = (
    FieldRule("title", _is_title),
    FieldRule("ref", _is_ref),
    FieldRule("closing_date", _is_closing_date, format_date),
    FieldRule("organisation", _is_organisation),
)

POSITIONAL_FALLBACKS = (
    PositionalFallback("title", 0),
    PositionalFallback("ref", 1),
    PositionalFallback("closing_date", 2, lambda text: bool(DATE_SHAPE.search(text)), format_date),
    PositionalFallback("organisation", 3),
)


class RowExtractor:
    """
    Turns a RawMarkupRow into a ScrapedTender, or None for no match.

    Rules are evaluated once per cell in a single pass; the first cell
    matching a rule claims that field and later cells cannot overwrite it.
    """

    def __init__(
        self,
        link_origin: str = "https://eprocure.gov.in",
        rules: tuple[FieldRule, ...] = FIELD_RULES,
        fallbacks: tuple[PositionalFallback, ...] = POSITIONAL_FALLBACKS,
    ):
        self.link_origin = link_origin
        self.rules = rules
        self.fallbacks = fallbacks

    def extract(self, row: RawMarkupRow) -> Optional[ScrapedTender]:
        """
        Extract a tender from one row.

        Args:
            row: Cell texts and links of a table row

        Returns:
            ScrapedTender with title > 5 and ref > 3 characters, else None
        """
        if len(row) < MIN_CELLS:
            return None

        cells = [clean_text(text) for text in row.cells]
        fields = self.match_fields(cells)
        self.apply_fallbacks(cells, fields)

        title = fields.get("title", "")
        ref = fields.get("ref", "")
        if len(title) <= 5 or len(ref) <= 3:
            logger.debug("row_rejected", title=title[:50], ref=ref)
            return None

        return ScrapedTender(
            title=title[:MAX_TITLE_LENGTH],
            ref=ref,
            closing_date=fields.get("closing_date") or NOT_SPECIFIED,
            organisation=fields.get("organisation") or NOT_SPECIFIED,
            link=self.absolute_link(row.first_link),
        )

    def match_fields(self, cells: list[str]) -> dict[str, str]:
        """
        Apply the content rules in one pass over the cells.

        Args:
            cells: Cleaned cell texts

        Returns:
            Claimed fields mapped to their values
        """
        claimed: dict[str, str] = {}
        for index, text in enumerate(cells):
            for rule in self.rules:
                if rule.field in claimed:
                    continue
                if rule.matches(index, text):
                    claimed[rule.field] = rule.transform(text)
        return claimed

    def apply_fallbacks(self, cells: list[str], fields: dict[str, str]) -> None:
        """Fill unclaimed fields from fixed column positions."""
        for fallback in self.fallbacks:
            if fields.get(fallback.field) or fallback.index >= len(cells):
                continue
            text = cells[fallback.index]
            if fallback.accepts and not fallback.accepts(text):
                continue
            fields[fallback.field] = fallback.transform(text)

    def absolute_link(self, href: Optional[str]) -> str:
        """Resolve a cell link against the portal origin."""
        if not href:
            return ""
        href = href.strip()
        if href.startswith("http"):
            return href
        return urljoin(self.link_origin, href)
