"""
Selection policy: what survives from one scored pass.

Steps:
  1. Drop candidates above the user's complexity tolerance.
  2. Stable sort by score, highest first (ties keep generation order).
  3. Truncate to the cap for the user's frequency.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from clarity_engine.config import SelectionConfig
from clarity_engine.models.profile import UserPreferences
from clarity_engine.models.recommendation import RecommendationCandidate
from clarity_engine.recommendations.scorer import ScoredRecommendation
from clarity_engine.taxonomy.recommendation_taxonomy import Complexity, Frequency

logger = logging.getLogger(__name__)

DEFAULT_CAPS = SelectionConfig()

# Simple tolerance still admits moderate actions; only advanced is ever gated.
_ALLOWED_COMPLEXITIES: dict[Complexity, frozenset[Complexity]] = {
    Complexity.SIMPLE:   frozenset({Complexity.SIMPLE, Complexity.MODERATE}),
    Complexity.MODERATE: frozenset({Complexity.SIMPLE, Complexity.MODERATE}),
    Complexity.ADVANCED: frozenset(Complexity),
}


def allowed_complexities(tolerance: Complexity) -> frozenset[Complexity]:
    """Complexities kept for a given tolerance."""
    return _ALLOWED_COMPLEXITIES[tolerance]


def frequency_cap(frequency: Frequency, caps: SelectionConfig = DEFAULT_CAPS) -> Optional[int]:
    """Maximum items kept per pass; ``None`` means unbounded."""
    return {
        Frequency.HOURLY:  caps.hourly_cap,
        Frequency.DAILY:   caps.daily_cap,
        Frequency.WEEKLY:  caps.weekly_cap,
        Frequency.MONTHLY: caps.monthly_cap,
    }[frequency]


def select_scored(
    scored: Iterable[ScoredRecommendation],
    prefs: UserPreferences,
    caps: SelectionConfig = DEFAULT_CAPS,
) -> list[ScoredRecommendation]:
    """Filter, order and cap scored candidates.

    Args:
        scored: Scored candidates in generation order.
        prefs: Supplies complexity tolerance and frequency.
        caps: Per-frequency caps.

    Returns:
        Selected items, score non-increasing.
    """
    allowed = allowed_complexities(prefs.complexity_tolerance)
    kept = [s for s in scored if s.candidate.complexity in allowed]
    ranked = sorted(kept, key=lambda s: -s.score)

    cap = frequency_cap(prefs.frequency, caps)
    selected = ranked if cap is None else ranked[:cap]

    logger.debug(
        "Selection: %d after complexity filter (%s), kept %d (cap=%s)",
        len(kept), prefs.complexity_tolerance, len(selected), cap,
    )
    return selected


def select(
    scored: Iterable[ScoredRecommendation],
    prefs: UserPreferences,
    caps: SelectionConfig = DEFAULT_CAPS,
) -> list[RecommendationCandidate]:
    """Like ``select_scored`` but returns the bare candidates."""
    return [s.candidate for s in select_scored(scored, prefs, caps)]
