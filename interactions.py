"""
Interaction matching between selected items.

Interaction declarations name the other substance in free text ("Trazodone",
"Blood thinners", "SSRIs"), so a declaration is matched against the other
selected items with a loose case-insensitive substring test.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from models import InteractionDeclaration, Item, severity_rank
from utils import first_token, normalize_text


@dataclass(frozen=True)
class InteractionRecord:
    """A declared risk between two selected items"""
    from_id: str
    from_name: str
    to_id: str
    to_name: str
    substance: str
    effect: str
    severity: str

    @property
    def pair_key(self) -> str:
        """Direction-independent key used for deduplication"""
        return ":".join(sorted((self.from_id, self.to_id))) + ":" + self.substance


def substance_matches(substance: str, item: Item) -> bool:
    """
    Does a declared substance refer to this item?

    True if, case-insensitively, the item name contains the substance, an
    alias contains it, the substance contains the item name, or the
    substance contains the first word of the item name.

    Examples:
        >>> substance_matches("Trazodone", Item(id="trazodone", name="Trazodone"))
        True
    """
    needle = normalize_text(substance)
    if not needle:
        return False

    name = normalize_text(item.name)
    if needle in name:
        return True
    if any(needle in normalize_text(alias) for alias in item.aliases):
        return True
    if name and name in needle:
        return True

    token = first_token(item.name)
    return bool(token) and token in needle


def _find_target(
    declaration: InteractionDeclaration,
    source: Item,
    items: Sequence[Item]
) -> Optional[Item]:
    """First other selected item the declaration matches, in selection order."""
    for candidate in items:
        if candidate.id == source.id:
            continue
        if substance_matches(declaration.substance, candidate):
            return candidate
    return None


def detect_interactions(items: Sequence[Item]) -> List[InteractionRecord]:
    """
    Find declared interactions between the selected items.

    Args:
        items: Selected items, in selection order

    Returns:
        Records sorted severe -> moderate -> mild -> other. A pair that
        declares the same substance from both sides is reported once.
    """
    found: List[InteractionRecord] = []
    seen: Set[str] = set()

    for source in items:
        for declaration in source.interactions:
            if not declaration.substance:
                continue
            target = _find_target(declaration, source, items)
            if target is None:
                continue

            record = InteractionRecord(
                from_id=source.id,
                from_name=source.name,
                to_id=target.id,
                to_name=target.name,
                substance=declaration.substance,
                effect=declaration.effect,
                severity=declaration.severity,
            )
            if record.pair_key in seen:
                continue
            seen.add(record.pair_key)
            found.append(record)

    return sorted(found, key=lambda record: severity_rank(record.severity))
