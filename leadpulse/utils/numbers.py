"""
Numeric helpers shared by the view and analytics engines.

Dashboard figures round half away from zero (2.5 -> 3), not Python's
banker's rounding, and rates are rendered as one-decimal strings.
"""

import math
from typing import Iterable


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up."""
    return int(math.floor(value + 0.5))


def percent(numerator: float, denominator: float) -> str:
    """
    Format numerator/denominator as a one-decimal percentage string.

    Returns "0.0" when the denominator is not positive.
    """
    if denominator <= 0:
        return "0.0"
    return f"{numerator / denominator * 100:.1f}"


def mean_rounded(values: Iterable[float]) -> int:
    """Rounded arithmetic mean, 0 for an empty input."""
    values = list(values)
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))
