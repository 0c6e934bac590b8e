"""
Single source of truth for item classification lists used by the warning rules.
All ids are catalog ids; mechanism markers are matched against lower-cased
mechanism-of-action text.
"""
from __future__ import annotations

from typing import FrozenSet, Tuple


# Category id that marks prescription drugs in the catalog
MEDICATION_CATEGORY = "medication"

# =========================================================================
# STIMULANTS
# Prescription stimulants that must never be stacked without supervision.
# =========================================================================
STIMULANT_IDS: FrozenSet[str] = frozenset({
    "elvanse",
    "ritalin",
})

# =========================================================================
# CHOLINERGICS
# Acetylcholinesterase inhibitors and other acetylcholine boosters.
# =========================================================================
CHOLINERGIC_IDS: FrozenSet[str] = frozenset({
    "huperzine-a",
})

CHOLINERGIC_MECHANISM_MARKERS: Tuple[str, ...] = (
    "acetylcholinesterase",
)

# =========================================================================
# SEROTONERGICS
# =========================================================================
SEROTONERGIC_IDS: FrozenSet[str] = frozenset({
    "trazodone",
})

SEROTONERGIC_MECHANISM_MARKERS: Tuple[str, ...] = (
    "serotonin",
    "5-ht",
)

# Stacks larger than this get the "introduce gradually" notice
LARGE_STACK_THRESHOLD = 10
