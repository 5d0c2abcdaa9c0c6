"""
Data models for the tender scraper.

ScrapedTender is the extraction output, Tender is the persisted entity.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


NOT_SPECIFIED = "Not specified"


class TenderCategory(str, Enum):
    """Category tag derived from the tender title."""
    CONSTRUCTION = "Construction"
    PROCUREMENT = "Procurement"
    SERVICES = "Services"
    TECHNOLOGY = "Technology"
    HEALTHCARE = "Healthcare"
    OTHER = "Other"


@dataclass
class RawMarkupRow:
    """
    One structural table row: cell texts plus the hyperlink of each cell.

    Ephemeral - produced by the page scraper and consumed immediately
    by the row extractor.
    """
    cells: list[str]
    links: list[Optional[str]] = field(default_factory=list)

    @property
    def first_link(self) -> Optional[str]:
        """First hyperlink in row order."""
        for link in self.links:
            if link:
                return link
        return None

    def __len__(self) -> int:
        return len(self.cells)


@dataclass
class ScrapedTender:
    """A tender record recovered from listing markup."""

    title: str
    ref: str
    closing_date: str = NOT_SPECIFIED
    organisation: str = NOT_SPECIFIED
    link: str = ""

    def to_dict(self) -> dict:
        """Convert to the JSON wire format."""
        return {
            "title": self.title,
            "ref": self.ref,
            "closingDate": self.closing_date,
            "organisation": self.organisation,
            "link": self.link,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScrapedTender":
        """Create from wire format (e.g., an import request body)."""
        return cls(
            title=data["title"],
            ref=data["ref"],
            closing_date=data.get("closingDate") or NOT_SPECIFIED,
            organisation=data.get("organisation") or NOT_SPECIFIED,
            link=data.get("link") or "",
        )


@dataclass
class Tender:
    """
    Persisted tender entity.

    reference_number is unique across storage and is the idempotency
    key for imports.
    """

    id: str
    title: str
    reference_number: str
    description: str = ""
    budget: Optional[int] = None
    deadline: Optional[datetime] = None
    category: TenderCategory = TenderCategory.OTHER
    location: Optional[str] = None
    requirements: str = ""
    source_url: Optional[str] = None
    organisation: Optional[str] = None
    is_scraped: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to camelCase dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "budget": self.budget,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "category": self.category.value,
            "location": self.location,
            "requirements": self.requirements,
            "referenceNumber": self.reference_number,
            "sourceUrl": self.source_url,
            "organisation": self.organisation,
            "isScraped": self.is_scraped,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Tender":
        """Restore from the camelCase form written by to_dict."""
        deadline = data.get("deadline")
        return cls(
            id=data["id"],
            title=data["title"],
            reference_number=data["referenceNumber"],
            description=data.get("description", ""),
            budget=data.get("budget"),
            deadline=datetime.fromisoformat(deadline) if deadline else None,
            category=TenderCategory(data.get("category", TenderCategory.OTHER.value)),
            location=data.get("location"),
            requirements=data.get("requirements", ""),
            source_url=data.get("sourceUrl"),
            organisation=data.get("organisation"),
            is_scraped=data.get("isScraped", False),
            created_at=datetime.fromisoformat(data["createdAt"]),
        )


@dataclass
class ImportResult:
    """Outcome of one import batch."""
    imported: int
    total: int
    tenders: list[Tender] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Successfully imported {self.imported} out of {self.total} tenders"

    def to_dict(self) -> dict:
        return {
            "imported": self.imported,
            "total": self.total,
            "tenders": [t.to_dict() for t in self.tenders],
        }


@dataclass
class ScrapeRun:
    """Result of one scrape run across all pages of a source."""
    tenders: list[ScrapedTender]
    source: str
    scraped_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def count(self) -> int:
        return len(self.tenders)

    def to_dict(self) -> dict:
        """Success envelope returned by the scrape endpoints."""
        return {
            "success": True,
            "count": self.count,
            "tenders": [t.to_dict() for t in self.tenders],
            "scrapedAt": self.scraped_at.isoformat(),
            "source": self.source,
        }
