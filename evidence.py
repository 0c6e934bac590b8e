"""
Evidence scoring module.
Turns study counts into a 0-100 composite score and a letter tier.

Scoring weights:
    - Meta-analyses:       10 points each (highest quality evidence)
    - Systematic reviews:   6 points each
    - RCTs:                 2 points each
    - Human studies (any):  0.2 points each (baseline breadth)

The weighted total is normalized with score = 100 * (1 - e^(-raw / 200)),
which gives diminishing returns at the top end.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Union

from models import EvidenceCounts, Item
from utils import coerce_count, round_half_up


WEIGHTS = {
    "meta_analyses": 10,
    "systematic_reviews": 6,
    "rcts": 2,
    "human_studies": 0.2,
}

# Controls the curve's inflection point; higher means more studies are
# needed to reach high scores.
NORM_FACTOR = 200

# Rounding pushes very large raw totals to 100; the score range is [0, 100).
MAX_SCORE = 99

CountsLike = Union[EvidenceCounts, Mapping[str, Any], None]


class Tier(Enum):
    """Evidence tier letters, best first"""
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


@dataclass(frozen=True)
class TierInfo:
    """Display data for one tier"""
    tier: str
    label: str
    color: str
    bg_color: str
    description: str
    min_score: int


TIERS: List[TierInfo] = [
    TierInfo(
        tier=Tier.S.value,
        label="Gold Standard",
        color="#FFD700",
        bg_color="rgba(255, 215, 0, 0.12)",
        description="Extensively studied with scientific consensus on efficacy. Supported by numerous meta-analyses and hundreds of RCTs.",
        min_score=90,
    ),
    TierInfo(
        tier=Tier.A.value,
        label="Strong Evidence",
        color="#4CAF50",
        bg_color="rgba(76, 175, 80, 0.12)",
        description="Robust clinical evidence from multiple high-quality trials. Well-established in the research literature.",
        min_score=70,
    ),
    TierInfo(
        tier=Tier.B.value,
        label="Moderate Evidence",
        color="#2196F3",
        bg_color="rgba(33, 150, 243, 0.12)",
        description="Growing body of clinical evidence. Multiple RCTs support efficacy, though more research would strengthen conclusions.",
        min_score=50,
    ),
    TierInfo(
        tier=Tier.C.value,
        label="Emerging Evidence",
        color="#FF9800",
        bg_color="rgba(255, 152, 0, 0.12)",
        description="Promising early clinical data. Some RCTs available, but the evidence base is still developing.",
        min_score=30,
    ),
    TierInfo(
        tier=Tier.D.value,
        label="Preliminary",
        color="#F44336",
        bg_color="rgba(244, 67, 54, 0.12)",
        description="Limited clinical evidence. Mostly preclinical or observational data. Requires significantly more human research.",
        min_score=0,
    ),
]


@dataclass(frozen=True)
class EvidenceAssessment:
    """Complete evidence assessment for one item"""
    score: int  # 0-99
    tier_info: TierInfo
    breakdown: Dict[str, int]  # raw counts + rounded weighted total

    @property
    def tier(self) -> str:
        return self.tier_info.tier

    @property
    def label(self) -> str:
        return self.tier_info.label

    @property
    def color(self) -> str:
        return self.tier_info.color

    @property
    def description(self) -> str:
        return self.tier_info.description


def _counts(evidence: CountsLike) -> EvidenceCounts:
    """Accept EvidenceCounts, a catalog mapping or None."""
    if isinstance(evidence, EvidenceCounts):
        return evidence
    return EvidenceCounts.from_dict(evidence)


def raw_score(evidence: CountsLike) -> float:
    """Weighted study total before normalization."""
    counts = _counts(evidence)
    return (
        coerce_count(counts.meta_analyses) * WEIGHTS["meta_analyses"]
        + coerce_count(counts.systematic_reviews) * WEIGHTS["systematic_reviews"]
        + coerce_count(counts.rcts) * WEIGHTS["rcts"]
        + coerce_count(counts.human_studies) * WEIGHTS["human_studies"]
    )


def calculate_score(evidence: CountsLike) -> int:
    """
    Normalized evidence score.

    Args:
        evidence: Study counts

    Returns:
        Integer score in [0, 100)

    Examples:
        >>> calculate_score({"metaAnalyses": 5, "systematicReviews": 10, "rcts": 50, "humanStudies": 200})
        71
    """
    raw = raw_score(evidence)
    score = 100 * (1 - math.exp(-raw / NORM_FACTOR))
    return min(MAX_SCORE, round_half_up(score))


def get_tier(score: Any) -> TierInfo:
    """
    Tier for a score.

    S (90+), A (70-89), B (50-69), C (30-49), D (everything else).
    """
    if isinstance(score, bool) or not isinstance(score, (int, float)) or math.isnan(score):
        return TIERS[-1]
    for tier_info in TIERS:
        if score >= tier_info.min_score:
            return tier_info
    return TIERS[-1]


def assess(evidence: CountsLike) -> EvidenceAssessment:
    """Score, tier and count breakdown. Never raises."""
    counts = _counts(evidence)
    score = calculate_score(counts)
    return EvidenceAssessment(
        score=score,
        tier_info=get_tier(score),
        breakdown={
            "total_studies": counts.total_studies,
            "human_studies": counts.human_studies,
            "rcts": counts.rcts,
            "meta_analyses": counts.meta_analyses,
            "systematic_reviews": counts.systematic_reviews,
            "raw_weighted": round_half_up(raw_score(counts)),
        },
    )


def item_score(item: Item) -> int:
    """Evidence score of a catalog item."""
    return calculate_score(item.evidence)


def sort_by_evidence(items: Iterable[Item]) -> List[Item]:
    """
    Items by evidence score, highest first.
    Returns a new list; ties keep their input order.
    """
    return sorted(items, key=lambda item: -item_score(item))


def sort_alphabetically(items: Iterable[Item]) -> List[Item]:
    """Items by name (case-insensitive). Returns a new list."""
    return sorted(items, key=lambda item: item.name.casefold())
