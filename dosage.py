"""
Per-item dosing configuration and the daily schedule view.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from catalog import Catalog
from models import DoseConfig, Item, Selection


# (value, label) pairs; the empty value means "not set"
TIMING_OPTIONS: List[Tuple[str, str]] = [
    ("", "Not set"),
    ("morning", "Morning"),
    ("midday", "Midday"),
    ("afternoon", "Afternoon"),
    ("evening", "Evening"),
    ("bedtime", "Bedtime"),
    ("pre-workout", "Pre-Workout"),
    ("post-workout", "Post-Workout"),
    ("split", "Split Doses"),
]

FOOD_OPTIONS: List[Tuple[str, str]] = [
    ("", "Not set"),
    ("with-food", "With food"),
    ("without-food", "On empty stomach"),
    ("with-fat", "With fat-containing meal"),
    ("either", "Either way"),
]

FREQUENCY_OPTIONS: List[Tuple[str, str]] = [
    ("", "Not set"),
    ("once-daily", "Once daily"),
    ("twice-daily", "Twice daily"),
    ("three-daily", "Three times daily"),
    ("as-needed", "As needed"),
    ("cycling", "Cycling (on/off)"),
    ("weekly", "Weekly"),
]

UNIT_OPTIONS = ['mg', 'g', 'µg', 'mcg', 'IU', 'mL', 'drops', 'capsules', 'tablets']

# Order of the blocks in the schedule view
SCHEDULE_ORDER = ['morning', 'midday', 'pre-workout', 'afternoon', 'post-workout', 'evening', 'bedtime', 'split']

DOSE_PATTERN = re.compile(r'([\d.,–\-]+)\s*(mg|g|µg|mcg|IU|mL)', re.IGNORECASE)


def option_label(options: List[Tuple[str, str]], value: str) -> str:
    """Display label for an option value; unknown values are shown as-is."""
    for option_value, label in options:
        if option_value == value:
            return label
    return value


# ===== AUTO-FILL =====

def _timing_hint(text: str) -> Optional[str]:
    if 'morning' in text or 'upon waking' in text:
        return 'morning'
    if 'bedtime' in text or 'before bed' in text:
        return 'bedtime'
    if 'evening' in text:
        return 'evening'
    if 'pre-workout' in text:
        return 'pre-workout'
    if 'split' in text or 'divided' in text or 'am/pm' in text:
        return 'split'
    return None


def _food_hint(text: str) -> Optional[str]:
    if 'empty stomach' in text:
        return 'without-food'
    if any(hint in text for hint in ('fat-containing', 'fat-soluble', 'with dietary fat')):
        return 'with-fat'
    if any(hint in text for hint in ('with a meal', 'with meal', 'with food', 'with breakfast')):
        return 'with-food'
    if 'with or without' in text:
        return 'either'
    return None


def _frequency_hint(text: str) -> str:
    if 'twice' in text or '2×' in text or 'split' in text:
        return 'twice-daily'
    if 'three' in text or '3×' in text:
        return 'three-daily'
    return 'once-daily'


def autofill_from_recommended(item: Item, config: Optional[DoseConfig] = None) -> DoseConfig:
    """
    Fill a dosing config from the item's reference dosage text.

    Dose and unit come from the standard dose ("3-5 g daily" -> "3-5", "g");
    timing, food and frequency come from hints in the timing text. Fields
    with no matching hint keep their current value, except frequency which
    defaults to once daily.

    Args:
        item: Catalog item
        config: Current config (defaults if None); not modified

    Returns:
        New DoseConfig
    """
    config = config or DoseConfig()
    changes: Dict[str, str] = {}

    match = DOSE_PATTERN.search(item.dosage.standard or "")
    if match:
        changes["dose"] = match.group(1)
        unit = match.group(2)
        changes["unit"] = 'µg' if unit.lower() == 'mcg' else unit

    hints = (item.dosage.timing or "").lower()

    timing = _timing_hint(hints)
    if timing:
        changes["timing"] = timing

    food = _food_hint(hints)
    if food:
        changes["with_food"] = food

    changes["frequency"] = _frequency_hint(hints)

    return replace(config, **changes)


# ===== SUMMARY AND SCHEDULE =====

@dataclass
class DosageLine:
    """Reference dosing and the user's config for one selected item"""
    id: str
    name: str
    standard: str
    optimal: str
    timing: str
    config: DoseConfig

    @property
    def display_dose(self) -> str:
        """Configured dose if set, otherwise the reference standard dose"""
        if self.config.dose:
            return f"{self.config.dose} {self.config.unit}"
        return self.standard


@dataclass
class Schedule:
    """Dosage lines grouped by time of day"""
    blocks: List[Tuple[str, List[DosageLine]]]  # (timing value, lines) in schedule order
    unscheduled: List[DosageLine]

    @property
    def has_schedule(self) -> bool:
        return bool(self.blocks)


def generate_dosage_summary(selection: Selection, catalog: Catalog) -> List[DosageLine]:
    """One line per selected item, in selection order. Unknown ids are skipped."""
    lines: List[DosageLine] = []
    for entry in selection.entries:
        item = catalog.get(entry.item_id)
        if item is None:
            continue
        lines.append(DosageLine(
            id=item.id,
            name=item.name,
            standard=item.dosage.standard,
            optimal=item.dosage.optimal,
            timing=item.dosage.timing,
            config=entry.config,
        ))
    return lines


def build_schedule(summary: List[DosageLine]) -> Schedule:
    """
    Group configured lines by timing.

    Blocks follow SCHEDULE_ORDER; timing values outside it come after, in
    first-seen order. Lines without a timing are returned as unscheduled.
    """
    groups: Dict[str, List[DosageLine]] = {}
    unscheduled: List[DosageLine] = []

    for line in summary:
        if line.config.is_scheduled:
            groups.setdefault(line.config.timing, []).append(line)
        else:
            unscheduled.append(line)

    order = [timing for timing in SCHEDULE_ORDER if timing in groups]
    order += [timing for timing in groups if timing not in SCHEDULE_ORDER]

    return Schedule(blocks=[(timing, groups[timing]) for timing in order], unscheduled=unscheduled)
