"""
Per-category effectiveness of a stack.
Each selected item contributes a base weight plus a share of its evidence score
to every category it is tagged with.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from evidence import item_score
from models import Category, Item
from utils import round_half_up


MAX_RATING = 10

# potency = sum(BASE_WEIGHT + score / SCORE_DIVISOR) over the category's items
BASE_WEIGHT = 2
SCORE_DIVISOR = 33


@dataclass
class CategoryCoverage:
    """Coverage of one category by the selected items"""
    category: Category
    rating: int
    max_rating: int = MAX_RATING
    item_names: List[str] = field(default_factory=list)
    count: int = 0
    potency: float = 0.0


def calculate_coverage(
    items: Iterable[Item],
    categories: Iterable[Category]
) -> Dict[str, CategoryCoverage]:
    """
    Rate each category the selection touches.

    Args:
        items: Selected items, in selection order
        categories: Category table (output keeps its order)

    Returns:
        Mapping of category id -> CategoryCoverage; categories with no
        selected items are left out
    """
    items = list(items)
    coverage: Dict[str, CategoryCoverage] = {}

    for category in categories:
        tagged = [item for item in items if item.in_category(category.id)]
        if not tagged:
            continue

        potency = sum(BASE_WEIGHT + item_score(item) / SCORE_DIVISOR for item in tagged)
        coverage[category.id] = CategoryCoverage(
            category=category,
            rating=min(MAX_RATING, round_half_up(potency)),
            item_names=[item.name for item in tagged],
            count=len(tagged),
            potency=potency,
        )

    return coverage


def sort_by_rating(coverage: Dict[str, CategoryCoverage]) -> List[CategoryCoverage]:
    """Coverage entries by rating, highest first. Ties keep table order."""
    return sorted(coverage.values(), key=lambda entry: -entry.rating)
