"""
Data models for supplement stack analysis.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from utils import as_str_list, coerce_count


class Severity(Enum):
    """Severity levels shared by interaction records and warnings"""
    SEVERE = "severe"
    MODERATE = "moderate"
    MILD = "mild"


SEVERITY_ORDER = {
    Severity.SEVERE.value: 0,
    Severity.MODERATE.value: 1,
    Severity.MILD.value: 2,
}

# Unknown severities sort after everything else
UNKNOWN_SEVERITY_RANK = 3


def severity_rank(severity: Any) -> int:
    """Sort position of a severity (Severity or exact lower-case string)."""
    if isinstance(severity, Severity):
        severity = severity.value
    if not isinstance(severity, str):
        return UNKNOWN_SEVERITY_RANK
    return SEVERITY_ORDER.get(severity, UNKNOWN_SEVERITY_RANK)


@dataclass(frozen=True)
class EvidenceCounts:
    """Study counts behind an item's evidence score."""
    total_studies: int = 0
    human_studies: int = 0
    rcts: int = 0
    meta_analyses: int = 0
    systematic_reviews: int = 0

    # catalog JSON key -> field name
    JSON_KEYS = {
        "totalStudies": "total_studies",
        "humanStudies": "human_studies",
        "rcts": "rcts",
        "metaAnalyses": "meta_analyses",
        "systematicReviews": "systematic_reviews",
    }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EvidenceCounts":
        """Build from catalog JSON (camelCase) or snake_case keys."""
        if not isinstance(data, Mapping):
            return cls()
        values = {}
        for json_key, attr in cls.JSON_KEYS.items():
            raw = data.get(json_key, data.get(attr))
            values[attr] = coerce_count(raw)
        return cls(**values)

    def to_dict(self) -> Dict[str, int]:
        return {json_key: getattr(self, attr) for json_key, attr in self.JSON_KEYS.items()}


@dataclass(frozen=True)
class InteractionDeclaration:
    """A risk an item declares when combined with a named substance."""
    substance: str
    effect: str = ""
    severity: str = Severity.MILD.value  # mild, moderate, severe

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InteractionDeclaration":
        return cls(
            substance=str(data.get("substance") or ""),
            effect=str(data.get("effect") or ""),
            severity=str(data.get("severity") or ""),
        )


@dataclass(frozen=True)
class Dosage:
    """Reference dosing text for an item."""
    standard: str = ""
    optimal: str = ""
    loading: str = ""
    timing: str = ""
    notes: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Dosage":
        if isinstance(data, str):
            return cls(standard=data)
        if not isinstance(data, Mapping):
            return cls()
        return cls(**{f.name: str(data.get(f.name) or "") for f in fields(cls)})


@dataclass(frozen=True)
class Category:
    """A use-case category (sleep, cognition, ...)."""
    id: str
    name: str
    icon: str = ""
    color: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Category":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            icon=str(data.get("icon") or ""),
            color=str(data.get("color") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class Item:
    """A catalog entry (supplement or medication). Immutable reference data."""
    id: str
    name: str
    aliases: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    tagline: str = ""
    dosage: Dosage = field(default_factory=Dosage)
    evidence: EvidenceCounts = field(default_factory=EvidenceCounts)
    mechanism: str = ""
    interactions: Tuple[InteractionDeclaration, ...] = ()
    benefits: Tuple[str, ...] = ()
    side_effects: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Item":
        """
        Build an item from a catalog record.

        Raises:
            KeyError: If the record has no id
        """
        item_id = str(data["id"])
        interactions = tuple(
            InteractionDeclaration.from_dict(entry)
            for entry in (data.get("interactions") or [])
            if isinstance(entry, Mapping)
        )
        return cls(
            id=item_id,
            name=str(data.get("name") or item_id),
            aliases=tuple(as_str_list(data.get("aliases"))),
            categories=tuple(as_str_list(data.get("categories"))),
            tagline=str(data.get("tagline") or ""),
            dosage=Dosage.from_dict(data.get("dosage")),
            evidence=EvidenceCounts.from_dict(data.get("evidence")),
            mechanism=str(data.get("mechanismOfAction") or data.get("mechanism") or ""),
            interactions=interactions,
            benefits=tuple(as_str_list(data.get("benefits"))),
            side_effects=tuple(as_str_list(data.get("sideEffects", data.get("side_effects")))),
        )

    def in_category(self, category_id: str) -> bool:
        return category_id in self.categories


@dataclass
class DoseConfig:
    """User-chosen dosing for one selected item. Empty strings mean 'not set'."""
    dose: str = ""
    unit: str = "mg"
    timing: str = ""
    with_food: str = ""
    frequency: str = ""
    notes: str = ""

    JSON_KEYS = {
        "dose": "dose",
        "unit": "unit",
        "timing": "timing",
        "withFood": "with_food",
        "frequency": "frequency",
        "notes": "notes",
    }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "DoseConfig":
        """Stored values are merged over the defaults."""
        config = cls()
        if not isinstance(data, Mapping):
            return config
        updates = {}
        for json_key, attr in cls.JSON_KEYS.items():
            value = data.get(json_key, data.get(attr))
            if value is not None:
                updates[attr] = str(value)
        return replace(config, **updates)

    def to_dict(self) -> Dict[str, str]:
        return {json_key: getattr(self, attr) for json_key, attr in self.JSON_KEYS.items()}

    @property
    def is_scheduled(self) -> bool:
        return bool(self.timing)


@dataclass
class SelectionEntry:
    """One selected item plus its dosing configuration."""
    item_id: str
    config: DoseConfig = field(default_factory=DoseConfig)


@dataclass
class Selection:
    """
    The user's working set of catalog items.
    Ids are unique; insertion order is kept for display.
    """
    entries: List[SelectionEntry] = field(default_factory=list)

    @classmethod
    def from_ids(cls, item_ids: Iterable[str]) -> "Selection":
        selection = cls()
        for item_id in item_ids:
            selection.add(item_id)
        return selection

    @property
    def ids(self) -> List[str]:
        """Selected ids in insertion order."""
        return [entry.item_id for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, item_id: object) -> bool:
        return any(entry.item_id == item_id for entry in self.entries)

    def add(self, item_id: str, config: Optional[DoseConfig] = None) -> bool:
        """Add an item; returns False if it was already selected."""
        if item_id in self:
            return False
        self.entries.append(SelectionEntry(item_id=item_id, config=config or DoseConfig()))
        return True

    def remove(self, item_id: str) -> bool:
        """Remove an item; returns False if it was not selected."""
        before = len(self.entries)
        self.entries = [entry for entry in self.entries if entry.item_id != item_id]
        return len(self.entries) != before

    def clear(self) -> None:
        self.entries = []

    def config_for(self, item_id: str) -> Optional[DoseConfig]:
        for entry in self.entries:
            if entry.item_id == item_id:
                return entry.config
        return None

    def set_config(self, item_id: str, config: DoseConfig) -> bool:
        for entry in self.entries:
            if entry.item_id == item_id:
                entry.config = config
                return True
        return False

    def update_config(self, item_id: str, **changes: str) -> bool:
        """Change individual config fields (dose='5', timing='morning', ...)."""
        config = self.config_for(item_id)
        if config is None:
            return False
        return self.set_config(item_id, replace(config, **changes))
