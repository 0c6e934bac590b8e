"""
Shared utility functions for the stack analyzer.
Common text and number handling used across multiple modules.
"""
from __future__ import annotations

import math
from typing import Any, Iterable, List


DEDUP_PREFIX_LENGTH = 40


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves going up.

    Python's round() uses banker's rounding (round(2.5) == 2), which would
    shift scores and ratings that sit exactly on a .5 boundary.

    Examples:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(71.35)
        71
    """
    return int(math.floor(value + 0.5))


def normalize_text(text: Any) -> str:
    """
    Lower-case a free-text value for case-insensitive comparison.

    Args:
        text: Any value; None becomes an empty string

    Returns:
        Lower-cased string
    """
    if text is None:
        return ""
    return str(text).lower()


def dedup_key(text: str, length: int = DEDUP_PREFIX_LENGTH) -> str:
    """
    Rough dedup key for benefit / side-effect strings.

    Args:
        text: Free-text entry
        length: Number of leading characters to keep

    Returns:
        Lower-cased prefix of the text
    """
    return normalize_text(text)[:length]


def first_token(name: str) -> str:
    """
    First space-separated token of a display name, lower-cased.

    Examples:
        >>> first_token("Omega-3 Fish Oil")
        'omega-3'
        >>> first_token("")
        ''
    """
    return normalize_text(name).split(" ")[0]


def coerce_count(value: Any) -> int:
    """
    Turn a study count from catalog data into a non-negative int.
    Missing, negative, infinite or non-numeric values count as 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, number)


def as_str_list(values: Any) -> List[str]:
    """Accept a list of strings, a single string or None."""
    if not values:
        return []
    if isinstance(values, str):
        return [values]
    if isinstance(values, Iterable):
        return [str(v) for v in values if v is not None]
    return []


def pluralize(count: int, word: str) -> str:
    """'1 supplement', '3 supplements'"""
    return f"{count} {word}{'' if count == 1 else 's'}"
