"""
Opportunity and recommendation lifecycle graphs.

Opportunity::

    pending ──► contacted ──► converted
       │            │
       └────────────┴──────► dismissed

ActiveRecommendation::

    active ──► implemented | dismissed | expired

Terminal states have no outgoing edges. A same-state request is not an edge
either, so it is rejected like any other move outside the graph.

``transition_*`` functions return an updated copy and never touch the input;
a rejected request raises ``InvalidTransition`` and nothing changes.
Persistence applies the same check with a compare-and-swap update (see the
repositories), so a stale in-memory copy cannot overwrite a newer status.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from clarity_engine.models.opportunity import Opportunity
from clarity_engine.models.recommendation import ActiveRecommendation
from clarity_engine.taxonomy.recommendation_taxonomy import (
    EngagementAction,
    OpportunityStatus,
    RecommendationStatus,
)
from clarity_engine.utils.time_utils import ensure_utc, utcnow

OPPORTUNITY_TRANSITIONS: dict[OpportunityStatus, frozenset[OpportunityStatus]] = {
    OpportunityStatus.PENDING: frozenset(
        {OpportunityStatus.CONTACTED, OpportunityStatus.DISMISSED}
    ),
    OpportunityStatus.CONTACTED: frozenset(
        {OpportunityStatus.CONVERTED, OpportunityStatus.DISMISSED}
    ),
    OpportunityStatus.CONVERTED: frozenset(),
    OpportunityStatus.DISMISSED: frozenset(),
}

RECOMMENDATION_TRANSITIONS: dict[RecommendationStatus, frozenset[RecommendationStatus]] = {
    RecommendationStatus.ACTIVE: frozenset({
        RecommendationStatus.IMPLEMENTED,
        RecommendationStatus.DISMISSED,
        RecommendationStatus.EXPIRED,
    }),
    RecommendationStatus.IMPLEMENTED: frozenset(),
    RecommendationStatus.DISMISSED: frozenset(),
    RecommendationStatus.EXPIRED: frozenset(),
}

# Rated events carry no status change.
ENGAGEMENT_STATUS: dict[EngagementAction, Optional[RecommendationStatus]] = {
    EngagementAction.IMPLEMENTED: RecommendationStatus.IMPLEMENTED,
    EngagementAction.DISMISSED: RecommendationStatus.DISMISSED,
    EngagementAction.RATED: None,
}


class InvalidTransition(Exception):
    """A status change outside the lifecycle graph was requested.

    Attributes:
        entity: ``"opportunity"`` or ``"recommendation"``.
        current: Status the record is in.
        target: Status that was requested.
    """

    def __init__(self, entity: str, current: str, target: str) -> None:
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {entity} from '{current}' to '{target}'.")


def can_transition_opportunity(current: OpportunityStatus, target: OpportunityStatus) -> bool:
    return target in OPPORTUNITY_TRANSITIONS[current]


def can_transition_recommendation(
    current: RecommendationStatus, target: RecommendationStatus
) -> bool:
    return target in RECOMMENDATION_TRANSITIONS[current]


def ensure_opportunity_transition(current: OpportunityStatus, target: OpportunityStatus) -> None:
    """Raise ``InvalidTransition`` unless ``current → target`` is an edge."""
    if not can_transition_opportunity(current, target):
        raise InvalidTransition("opportunity", current, target)


def ensure_recommendation_transition(
    current: RecommendationStatus, target: RecommendationStatus
) -> None:
    """Raise ``InvalidTransition`` unless ``current → target`` is an edge."""
    if not can_transition_recommendation(current, target):
        raise InvalidTransition("recommendation", current, target)


def is_terminal_opportunity(status: OpportunityStatus) -> bool:
    return not OPPORTUNITY_TRANSITIONS[status]


def is_terminal_recommendation(status: RecommendationStatus) -> bool:
    return not RECOMMENDATION_TRANSITIONS[status]


def transition_opportunity(
    opportunity: Opportunity,
    target: OpportunityStatus,
    at: Optional[datetime] = None,
) -> Opportunity:
    """Return ``opportunity`` moved to ``target``, stamping ``last_action_at``.

    Raises:
        InvalidTransition: If the move is not an edge of the opportunity graph.
    """
    ensure_opportunity_transition(opportunity.status, target)
    at = ensure_utc(at) if at is not None else utcnow()
    return opportunity.model_copy(update={"status": target, "last_action_at": at})


def transition_recommendation(
    recommendation: ActiveRecommendation,
    target: RecommendationStatus,
    at: Optional[datetime] = None,
) -> ActiveRecommendation:
    """Return ``recommendation`` moved to ``target``, stamping ``updated_at``.

    Raises:
        InvalidTransition: If the move is not an edge of the recommendation graph.
    """
    ensure_recommendation_transition(recommendation.status, target)
    at = ensure_utc(at) if at is not None else utcnow()
    return recommendation.model_copy(update={"status": target, "updated_at": at})


def status_for_engagement(action: EngagementAction) -> Optional[RecommendationStatus]:
    """Recommendation status an engagement action leads to, or ``None``."""
    return ENGAGEMENT_STATUS[action]
