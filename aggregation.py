"""
Stack-level aggregation of benefits, side effects and evidence.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Sequence

from evidence import TIERS, EvidenceAssessment, TierInfo, assess, get_tier
from models import Item
from utils import dedup_key, round_half_up


@dataclass
class AggregatedText:
    """A benefit or side effect plus the items that list it"""
    text: str
    sources: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ItemEvidence:
    """An item's evidence assessment, labelled for display"""
    id: str
    name: str
    assessment: EvidenceAssessment

    @property
    def score(self) -> int:
        return self.assessment.score


@dataclass
class EvidenceSummary:
    """Evidence picture of the whole stack"""
    avg_score: int
    tier_info: TierInfo
    tier_counts: Dict[str, int]  # every tier letter, best first
    totals: Dict[str, int]
    strongest: List[ItemEvidence]
    weakest: List[ItemEvidence]
    individual: List[ItemEvidence]


# Items shown in the strongest / weakest lists
HIGHLIGHT_COUNT = 3


def _aggregate_texts(
    items: Iterable[Item],
    texts_of: Callable[[Item], Sequence[str]]
) -> List[AggregatedText]:
    merged: Dict[str, AggregatedText] = {}
    for item in items:
        for text in texts_of(item):
            key = dedup_key(text)
            entry = merged.get(key)
            if entry is None:
                merged[key] = AggregatedText(text=text, sources=[item.name])
            elif item.name not in entry.sources:
                entry.sources.append(item.name)
    return list(merged.values())


def aggregate_benefits(items: Iterable[Item]) -> List[AggregatedText]:
    """
    Merge benefits across the stack.

    Entries whose lower-cased first 40 characters match are treated as the
    same benefit; the first wording seen is kept.
    """
    return _aggregate_texts(items, lambda item: item.benefits)


def aggregate_side_effects(items: Iterable[Item]) -> List[AggregatedText]:
    """Merge side effects across the stack (same rules as benefits)."""
    return _aggregate_texts(items, lambda item: item.side_effects)


def aggregate_evidence(items: Sequence[Item]) -> EvidenceSummary:
    """
    Evidence summary for the selected items.

    Args:
        items: Selected items, in selection order

    Returns:
        EvidenceSummary; an empty stack averages 0 (tier D)
    """
    individual = [ItemEvidence(id=item.id, name=item.name, assessment=assess(item.evidence)) for item in items]

    tier_counts = {tier_info.tier: 0 for tier_info in TIERS}
    totals = {
        "total_studies": 0,
        "human_studies": 0,
        "rcts": 0,
        "meta_analyses": 0,
        "systematic_reviews": 0,
    }
    for entry in individual:
        tier_counts[entry.assessment.tier] += 1
        for key in totals:
            totals[key] += entry.assessment.breakdown[key]

    avg_score = round_half_up(sum(entry.score for entry in individual) / len(individual)) if individual else 0

    ranked = sorted(individual, key=lambda entry: -entry.score)
    strongest = ranked[:HIGHLIGHT_COUNT]
    weakest = list(reversed(ranked[-HIGHLIGHT_COUNT:]))

    return EvidenceSummary(
        avg_score=avg_score,
        tier_info=get_tier(avg_score),
        tier_counts=tier_counts,
        totals=totals,
        strongest=strongest,
        weakest=weakest,
        individual=individual,
    )
