"""
Tender category classification and budget estimation.

Both work from the title alone. The budget fallback is a placeholder
drawn from a per-category range, not an estimate anyone should rely on.
"""

import random
import re
from typing import Optional

import structlog

from .models import TenderCategory
from .normalizer import parse_indian_amount

logger = structlog.get_logger(__name__)


# First matching rule wins, in this order
CATEGORY_KEYWORDS = [
    (TenderCategory.CONSTRUCTION, ["construction", "building", "infrastructure"]),
    (TenderCategory.PROCUREMENT, ["supply", "procurement", "equipment"]),
    (TenderCategory.SERVICES, ["service", "maintenance", "consulting"]),
    (TenderCategory.TECHNOLOGY, ["software", "technology", "computer"]),
    (TenderCategory.HEALTHCARE, ["medical", "health", "hospital"]),
]

# "IT" only as a standalone uppercase word - "it" is inside too many words
_IT_WORD = re.compile(r"\bIT\b")

BUDGET_RANGES: dict[TenderCategory, tuple[int, int]] = {
    TenderCategory.CONSTRUCTION: (5_000_000, 100_000_000),
    TenderCategory.PROCUREMENT: (500_000, 50_000_000),
    TenderCategory.SERVICES: (100_000, 10_000_000),
    TenderCategory.TECHNOLOGY: (1_000_000, 25_000_000),
    TenderCategory.HEALTHCARE: (2_000_000, 75_000_000),
    TenderCategory.OTHER: (500_000, 20_000_000),
}


def classify_category(title: str) -> TenderCategory:
    """
    Classify tender by keywords in its title.

    Args:
        title: Tender title

    Returns:
        First matching TenderCategory, OTHER if none match
    """
    lowered = (title or "").lower()

    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
        if category is TenderCategory.TECHNOLOGY and _IT_WORD.search(title or ""):
            return category

    return TenderCategory.OTHER


class TenderEstimator:
    """
    Budget estimator with an injected random source.

    Tests pass a seeded random.Random; production passes SystemRandom.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.SystemRandom()

    def estimate(self, title: str, category: TenderCategory) -> Optional[int]:
        """
        Estimate budget from title units or category range.

        Args:
            title: Tender title
            category: Category from classify_category

        Returns:
            Amount in rupees; None when a unit word has no number before it
        """
        lowered = (title or "").lower()
        if "crore" in lowered or "lakh" in lowered:
            return parse_indian_amount(title)

        low, high = BUDGET_RANGES.get(category, BUDGET_RANGES[TenderCategory.OTHER])
        return self.rng.randint(low, high)


class TenderClassifier:
    """Derives (category, budget) for a tender title."""

    def __init__(self, estimator: Optional[TenderEstimator] = None):
        self.estimator = estimator or TenderEstimator()

    def assess(self, title: str) -> tuple[TenderCategory, Optional[int]]:
        category = classify_category(title)
        budget = self.estimator.estimate(title, category)
        logger.debug("tender_classified", title=title[:50], category=category.value, budget=budget)
        return category, budget
