"""
Small numeric helpers shared by the estimators and the chaos score.
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up.

    Python's ``round`` uses banker's rounding (``round(2.5) == 2``); call
    values and chaos scores are rounded the way a person would.
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to ``[lo, hi]``."""
    return max(lo, min(hi, value))
