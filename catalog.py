"""
In-memory catalog of items and categories.
Lookup, id resolution, category listings and search for the picker.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from evidence import sort_alphabetically, sort_by_evidence
from models import Category, Item
from reference_lists import MEDICATION_CATEGORY
from utils import normalize_text

logger = logging.getLogger(__name__)

# Shorter queries return no results
MIN_QUERY_LENGTH = 2

SORT_MODES = ("evidence", "alpha")


class Catalog:
    """
    Read-only item and category tables.
    Item and category order is the order they were loaded in.
    """

    def __init__(self, items: Iterable[Item], categories: Iterable[Category]):
        self.items: List[Item] = []
        self._by_id: Dict[str, Item] = {}
        for item in items:
            if item.id in self._by_id:
                logger.warning("Duplicate item id %r, keeping the first record", item.id)
                continue
            self._by_id[item.id] = item
            self.items.append(item)

        self.categories: List[Category] = list(categories)
        self._categories_by_id: Dict[str, Category] = {c.id: c for c in self.categories}

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    @property
    def ids(self) -> List[str]:
        return [item.id for item in self.items]

    def get(self, item_id: str) -> Optional[Item]:
        return self._by_id.get(item_id)

    def get_category(self, category_id: str) -> Optional[Category]:
        return self._categories_by_id.get(category_id)

    def resolve(self, item_ids: Iterable[str]) -> List[Item]:
        """
        Items for a list of ids, in the given order.
        Unknown and repeated ids are dropped.
        """
        resolved: List[Item] = []
        for item_id in dict.fromkeys(item_ids):
            item = self._by_id.get(item_id)
            if item is None:
                logger.debug("Dropping unknown item id %r", item_id)
                continue
            resolved.append(item)
        return resolved

    def items_in_category(self, category_id: str, sort: str = "evidence") -> List[Item]:
        """
        Items tagged with a category.

        Args:
            category_id: Category to list
            sort: 'evidence' (score, highest first) or 'alpha' (by name)

        Raises:
            ValueError: If the sort mode is unknown
        """
        tagged = [item for item in self.items if item.in_category(category_id)]
        if sort == "evidence":
            return sort_by_evidence(tagged)
        if sort == "alpha":
            return sort_alphabetically(tagged)
        raise ValueError(f"Unknown sort mode {sort!r}, expected one of {SORT_MODES}")

    def search(self, query: str, limit: Optional[int] = None) -> List[Item]:
        """
        Items whose name, aliases, tagline or category ids contain the query.

        Args:
            query: Case-insensitive search text
            limit: Maximum number of results

        Returns:
            Matching items in catalog order; empty for queries under two characters
        """
        needle = normalize_text(query).strip()
        if len(needle) < MIN_QUERY_LENGTH:
            return []

        matches = []
        for item in self.items:
            haystack = normalize_text(" ".join([item.name, *item.aliases, item.tagline, *item.categories]))
            if needle in haystack:
                matches.append(item)
                if limit is not None and len(matches) >= limit:
                    break
        return matches

    def grouped_by_category(self) -> List[Tuple[Category, List[Item]]]:
        """
        Items grouped for the picker.
        Medications come last; categories without items are skipped.
        """
        ordered = [c for c in self.categories if c.id != MEDICATION_CATEGORY]
        ordered += [c for c in self.categories if c.id == MEDICATION_CATEGORY]

        groups = []
        for category in ordered:
            tagged = [item for item in self.items if item.in_category(category.id)]
            if tagged:
                groups.append((category, tagged))
        return groups
