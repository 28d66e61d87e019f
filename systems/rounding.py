# systems/rounding.py

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with halves going up (46.5 -> 47, -2.5 -> -2).

    Python's round() uses banker's rounding, which would turn 46.5 into 46.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
