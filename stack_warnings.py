"""
Safety warning system for stack analysis.
Warnings are a declarative table of rules evaluated by one generic function.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from interactions import InteractionRecord, detect_interactions
from models import Item, Severity
from reference_lists import (
    CHOLINERGIC_IDS,
    CHOLINERGIC_MECHANISM_MARKERS,
    LARGE_STACK_THRESHOLD,
    MEDICATION_CATEGORY,
    SEROTONERGIC_IDS,
    SEROTONERGIC_MECHANISM_MARKERS,
    STIMULANT_IDS,
)
from utils import normalize_text, pluralize


@dataclass(frozen=True)
class WarningItem:
    """A single warning with structured data"""
    code: str  # Stable ID: "MULTIPLE_STIMULANTS"
    severity: Severity
    text: str  # Human readable message
    evidence: List[str] = field(default_factory=list)  # Item names behind the warning
    tags: List[str] = field(default_factory=list)  # ["medication", "interaction", ...]


@dataclass
class WarningsReport:
    """Collection of all warnings, in rule order"""
    items: List[WarningItem]

    def by_severity(self) -> Dict[Severity, List[WarningItem]]:
        """Group warnings by severity"""
        out: Dict[Severity, List[WarningItem]] = defaultdict(list)
        for w in self.items:
            out[w.severity].append(w)
        return dict(out)

    def get_severe(self) -> List[WarningItem]:
        return [w for w in self.items if w.severity == Severity.SEVERE]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


@dataclass
class WarningContext:
    """Context data for warning evaluation"""
    items: List[Item]  # Resolved selection, in selection order
    interactions: List[InteractionRecord] = field(default_factory=list)


# Collects the subjects a rule counts (items, interaction records)
Collector = Callable[[WarningContext], List[Any]]

# Builds the message from the collected subjects
MessageBuilder = Callable[[Sequence[Any]], str]


@dataclass(frozen=True)
class WarningRule:
    """
    One row of the warning table.

    The rule fires when more than `threshold` subjects are collected. With
    `per_subject` set it emits one warning per subject instead of one for all.
    """
    code: str
    severity: Severity
    collect: Collector
    threshold: int
    message: MessageBuilder
    per_subject: bool = False
    tags: List[str] = field(default_factory=list)


# ===== SUBJECT COLLECTORS =====

def _mechanism_mentions(item: Item, markers: Sequence[str]) -> bool:
    mechanism = normalize_text(item.mechanism)
    return any(marker in mechanism for marker in markers)


def collect_medications(ctx: WarningContext) -> List[Item]:
    return [item for item in ctx.items if item.in_category(MEDICATION_CATEGORY)]


def collect_severe_interactions(ctx: WarningContext) -> List[InteractionRecord]:
    return [record for record in ctx.interactions if record.severity == Severity.SEVERE.value]


def collect_cholinergics(ctx: WarningContext) -> List[Item]:
    return [
        item for item in ctx.items
        if item.id in CHOLINERGIC_IDS or _mechanism_mentions(item, CHOLINERGIC_MECHANISM_MARKERS)
    ]


def collect_stimulants(ctx: WarningContext) -> List[Item]:
    return [item for item in ctx.items if item.id in STIMULANT_IDS]


def collect_serotonergics(ctx: WarningContext) -> List[Item]:
    return [
        item for item in ctx.items
        if item.id in SEROTONERGIC_IDS or _mechanism_mentions(item, SEROTONERGIC_MECHANISM_MARKERS)
    ]


def collect_all_items(ctx: WarningContext) -> List[Item]:
    return list(ctx.items)


# ===== MESSAGES =====

def _names(items: Sequence[Item]) -> str:
    return ", ".join(item.name for item in items)


def _medication_message(items: Sequence[Item]) -> str:
    return (
        f"This stack contains {pluralize(len(items), 'prescription medication')} ({_names(items)}). "
        "Always consult a physician before combining supplements with prescription drugs."
    )


def _severe_interaction_message(records: Sequence[InteractionRecord]) -> str:
    record = records[0]
    return f"Severe interaction: {record.from_name} × {record.to_name} - {record.effect}"


def _cholinergic_message(items: Sequence[Item]) -> str:
    return (
        f"Multiple cholinergic compounds detected ({_names(items)}). "
        "Monitor for cholinergic side effects (GI discomfort, headache)."
    )


def _stimulant_message(items: Sequence[Item]) -> str:
    return (
        f"Multiple stimulant medications detected ({_names(items)}). "
        "Never combine stimulant medications without explicit medical supervision."
    )


def _serotonergic_message(items: Sequence[Item]) -> str:
    return (
        f"Multiple serotonergic compounds detected ({_names(items)}). "
        "Monitor for potential serotonergic effects when combining."
    )


def _large_stack_message(items: Sequence[Item]) -> str:
    return (
        f"This is a large stack ({pluralize(len(items), 'supplement')}). Consider starting with core "
        "components and adding others gradually to identify individual responses and tolerance."
    )


def _subject_names(subjects: Sequence[Any]) -> List[str]:
    names: List[str] = []
    for subject in subjects:
        if isinstance(subject, InteractionRecord):
            names.extend([subject.from_name, subject.to_name])
        else:
            names.append(subject.name)
    return names


# ===== DEFAULT RULE SET =====

def default_rules() -> List[WarningRule]:
    """Return the standard warning table, in evaluation order"""
    return [
        WarningRule(
            code="PRESCRIPTION_MEDICATION",
            severity=Severity.SEVERE,
            collect=collect_medications,
            threshold=0,
            message=_medication_message,
            tags=["medication"],
        ),
        WarningRule(
            code="SEVERE_INTERACTION",
            severity=Severity.SEVERE,
            collect=collect_severe_interactions,
            threshold=0,
            message=_severe_interaction_message,
            per_subject=True,
            tags=["interaction"],
        ),
        WarningRule(
            code="MULTIPLE_CHOLINERGICS",
            severity=Severity.MODERATE,
            collect=collect_cholinergics,
            threshold=1,
            message=_cholinergic_message,
            tags=["cholinergic"],
        ),
        WarningRule(
            code="MULTIPLE_STIMULANTS",
            severity=Severity.SEVERE,
            collect=collect_stimulants,
            threshold=1,
            message=_stimulant_message,
            tags=["stimulant", "medication"],
        ),
        WarningRule(
            code="MULTIPLE_SEROTONERGICS",
            severity=Severity.MODERATE,
            collect=collect_serotonergics,
            threshold=2,
            message=_serotonergic_message,
            tags=["serotonergic"],
        ),
        WarningRule(
            code="LARGE_STACK",
            severity=Severity.MILD,
            collect=collect_all_items,
            threshold=LARGE_STACK_THRESHOLD,
            message=_large_stack_message,
            tags=["stack-size"],
        ),
    ]


# ===== MAIN EVALUATION FUNCTION =====

def build_context(
    items: Sequence[Item],
    interactions: Optional[List[InteractionRecord]] = None
) -> WarningContext:
    """Context for a resolved selection; detects interactions if not given."""
    items = list(items)
    if interactions is None:
        interactions = detect_interactions(items)
    return WarningContext(items=items, interactions=list(interactions))


def evaluate_warnings(
    ctx: WarningContext,
    rules: Optional[List[WarningRule]] = None
) -> WarningsReport:
    """
    Evaluate all warning rules against context.

    Args:
        ctx: WarningContext with the selected items and interaction records
        rules: Optional custom rule table (uses defaults if None)

    Returns:
        WarningsReport with warnings in rule order. Nothing is sorted or
        deduplicated.
    """
    if rules is None:
        rules = default_rules()

    items: List[WarningItem] = []

    for rule in rules:
        subjects = rule.collect(ctx)
        if len(subjects) <= rule.threshold:
            continue

        groups = [[subject] for subject in subjects] if rule.per_subject else [subjects]
        for group in groups:
            items.append(WarningItem(
                code=rule.code,
                severity=rule.severity,
                text=rule.message(group),
                evidence=_subject_names(group),
                tags=list(rule.tags),
            ))

    return WarningsReport(items=items)


# ===== REPORTING =====

def generate_warnings_summary(report: WarningsReport) -> str:
    """Generate human-readable warnings summary"""
    if not report.items:
        return "No warnings detected."

    lines = [f"Total Warnings: {len(report.items)}"]

    by_severity = report.by_severity()

    for severity in [Severity.SEVERE, Severity.MODERATE, Severity.MILD]:
        warnings = by_severity.get(severity, [])
        if warnings:
            lines.append(f"\n{severity.value.upper()} ({len(warnings)}):")
            for w in warnings:
                lines.append(f"  - {w.text}")

    return "\n".join(lines)
