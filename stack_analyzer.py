"""
Stack composition analysis.
Combines coverage, synergies, interactions, aggregation and warnings into one
report for a selection.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

from aggregation import (
    AggregatedText,
    EvidenceSummary,
    aggregate_benefits,
    aggregate_evidence,
    aggregate_side_effects,
)
from catalog import Catalog
from category_coverage import CategoryCoverage, calculate_coverage
from interactions import InteractionRecord, detect_interactions
from models import Category, Item, Selection
from stack_warnings import WarningItem, WarningRule, build_context, evaluate_warnings
from synergy import SynergyMatch, SynergyRule, detect_synergies, get_default_rules

logger = logging.getLogger(__name__)

SelectionLike = Union[Selection, Iterable[str]]


@dataclass
class AnalysisReport:
    """Complete analysis of one stack"""
    category_coverage: Dict[str, CategoryCoverage] = field(default_factory=dict)
    synergies: List[SynergyMatch] = field(default_factory=list)
    interactions: List[InteractionRecord] = field(default_factory=list)
    benefits: List[AggregatedText] = field(default_factory=list)
    side_effects: List[AggregatedText] = field(default_factory=list)
    evidence: Optional[EvidenceSummary] = None
    warnings: List[WarningItem] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "AnalysisReport":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.evidence is None


def _selection_ids(selection: SelectionLike) -> List[str]:
    if isinstance(selection, Selection):
        return selection.ids
    # Selection membership is a set; keep first-seen order
    return list(dict.fromkeys(selection))


class StackAnalyzer:
    """Analyzes selections against a catalog"""

    def __init__(
        self,
        catalog: Catalog,
        synergy_rules: Optional[List[SynergyRule]] = None,
        warning_rules: Optional[List[WarningRule]] = None
    ):
        self.catalog = catalog
        self.synergy_rules = synergy_rules if synergy_rules is not None else get_default_rules()
        self.warning_rules = warning_rules

    def analyze(self, selection: SelectionLike) -> AnalysisReport:
        """
        Build a fresh report for a selection.

        Args:
            selection: Selection or iterable of item ids; unknown ids are dropped

        Returns:
            AnalysisReport (AnalysisReport.empty() when nothing resolves)
        """
        ids = _selection_ids(selection)
        items = self.catalog.resolve(ids)
        if len(items) != len(ids):
            logger.debug("Dropped %d unresolved id(s) from selection", len(ids) - len(items))

        if not items:
            return AnalysisReport.empty()

        interactions = detect_interactions(items)
        warnings = evaluate_warnings(build_context(items, interactions), self.warning_rules)
        synergies = detect_synergies(items, self.synergy_rules)

        logger.debug(
            "Analyzed %d item(s): %d synergies, %d interactions, %d warnings",
            len(items), len(synergies), len(interactions), len(warnings.items)
        )

        return AnalysisReport(
            category_coverage=calculate_coverage(items, self.catalog.categories),
            synergies=synergies,
            interactions=interactions,
            benefits=aggregate_benefits(items),
            side_effects=aggregate_side_effects(items),
            evidence=aggregate_evidence(items),
            warnings=warnings.items,
        )


def analyze(
    selection: SelectionLike,
    items: Iterable[Item],
    categories: Iterable[Category],
    synergy_rules: Optional[List[SynergyRule]] = None
) -> AnalysisReport:
    """Analyze a selection against plain item and category tables."""
    return StackAnalyzer(Catalog(items, categories), synergy_rules).analyze(selection)
