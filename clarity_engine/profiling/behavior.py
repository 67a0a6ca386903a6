"""
Engagement-derived user behavior.

The engagement numbers are reported alongside recommendations and stored for
later weight tuning; the scorer does not read them. The setup preference only
feeds the selector's complexity tolerance when the user has not set one.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from clarity_engine.models.engagement import EngagementEvent
from clarity_engine.models.profile import UserPreferences
from clarity_engine.taxonomy.recommendation_taxonomy import Complexity, EngagementAction

logger = logging.getLogger(__name__)

DEFAULT_IMPLEMENTATION_RATE = 0.5


@dataclass
class EngagementSummary:
    """Aggregate of a user's engagement history.

    Attributes:
        total_events:        Number of events considered.
        implemented:         Count of ``implemented`` events.
        dismissed:           Count of ``dismissed`` events.
        rated:               Count of ``rated`` events.
        average_rating:      Mean rating, or ``None`` with no ratings.
        total_time_spent:    Sum of ``time_spent_seconds``.
        implementation_rate: ``implemented / total_events`` (0.5 with no history).
    """

    total_events:        int
    implemented:         int
    dismissed:           int
    rated:               int
    average_rating:      Optional[float]
    total_time_spent:    float
    implementation_rate: float


def implementation_rate(events: Iterable[EngagementEvent]) -> float:
    """Share of events that were implementations; 0.5 with no history."""
    events = list(events)
    if not events:
        return DEFAULT_IMPLEMENTATION_RATE
    implemented = sum(1 for e in events if e.action == EngagementAction.IMPLEMENTED)
    return implemented / len(events)


def preferred_complexity(setup_preference: Optional[str]) -> Complexity:
    """Map the onboarding setup preference to a complexity tolerance.

    ``"minimal"`` → simple, ``"connect"`` → advanced, anything else → moderate.
    """
    preference = (setup_preference or "").strip().casefold()
    if preference == "minimal":
        return Complexity.SIMPLE
    if preference == "connect":
        return Complexity.ADVANCED
    return Complexity.MODERATE


def resolve_complexity_tolerance(preferences: UserPreferences) -> UserPreferences:
    """Fill in ``complexity_tolerance`` from the setup preference.

    An explicitly set tolerance always wins. Otherwise a non-empty
    ``setup_preference`` is mapped through ``preferred_complexity``; with
    neither, the preferences are returned unchanged.
    """
    if "complexity_tolerance" in preferences.model_fields_set:
        return preferences
    if not (preferences.setup_preference or "").strip():
        return preferences

    tolerance = preferred_complexity(preferences.setup_preference)
    logger.debug(
        "No complexity_tolerance set; setup preference %r gives %s.",
        preferences.setup_preference, tolerance,
    )
    return preferences.model_copy(update={"complexity_tolerance": tolerance})


def summarize_engagement(events: Iterable[EngagementEvent]) -> EngagementSummary:
    """Aggregate an engagement history."""
    events = list(events)
    counts = Counter(e.action for e in events)
    ratings = [e.rating for e in events if e.rating is not None]
    return EngagementSummary(
        total_events=len(events),
        implemented=counts[EngagementAction.IMPLEMENTED],
        dismissed=counts[EngagementAction.DISMISSED],
        rated=counts[EngagementAction.RATED],
        average_rating=(sum(ratings) / len(ratings)) if ratings else None,
        total_time_spent=sum(e.time_spent_seconds for e in events),
        implementation_rate=implementation_rate(events),
    )
