"""
Estimated job value for a classified call.

Pure and deterministic. A missing price range yields ``None`` ("value
unknown"), which callers display as-is rather than treating as an error.
"""

from __future__ import annotations

from typing import Optional

from clarity_engine.models.profile import PriceRange
from clarity_engine.models.signal import Signal
from clarity_engine.taxonomy.signal_taxonomy import Intent, Urgency
from clarity_engine.utils.numeric import round_half_up

HIGH_URGENCY_MAX_FACTOR = 0.8
GENERAL_MIN_FACTOR = 1.2


def estimate_value(signal: Signal, price_range: Optional[PriceRange]) -> Optional[int]:
    """Estimate what the call is worth to the business.

    Rules, first match wins:
      - high urgency         → 80% of the top of the range
      - pricing / scheduling → midpoint of the range
      - anything else        → 120% of the bottom of the range

    Args:
        signal: Classified call.
        price_range: The business's typical job value band.

    Returns:
        Whole-unit estimate, or ``None`` if ``price_range`` is ``None``.
    """
    if price_range is None:
        return None

    if signal.urgency == Urgency.HIGH:
        return round_half_up(price_range.max * HIGH_URGENCY_MAX_FACTOR)

    if signal.intent in (Intent.PRICING, Intent.SCHEDULING):
        return round_half_up((price_range.min + price_range.max) / 2)

    return round_half_up(price_range.min * GENERAL_MIN_FACTOR)
