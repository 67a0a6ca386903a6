"""
Pure composition of one recommendation pass, plus conversion of the
selection into ``ActiveRecommendation`` records ready for persistence.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from clarity_engine.config import ScoringConfig, SelectionConfig
from clarity_engine.models.profile import BusinessProfile, UserPreferences
from clarity_engine.models.recommendation import ActiveRecommendation
from clarity_engine.recommendations.generators import generate_candidates
from clarity_engine.recommendations.scorer import (
    DEFAULT_WEIGHTS,
    ScoredRecommendation,
    score_candidates,
)
from clarity_engine.recommendations.selector import DEFAULT_CAPS, select_scored
from clarity_engine.taxonomy.recommendation_taxonomy import RecommendationStatus
from clarity_engine.utils.time_utils import days_after, ensure_utc

logger = logging.getLogger(__name__)


def build_selection(
    profile: BusinessProfile,
    preferences: UserPreferences,
    weights: ScoringConfig = DEFAULT_WEIGHTS,
    caps: SelectionConfig = DEFAULT_CAPS,
) -> list[ScoredRecommendation]:
    """Generate, score and select for one user.

    Deterministic: identical inputs always return an identical list.
    """
    candidates = generate_candidates(profile, preferences)
    scored = score_candidates(candidates, profile, weights)
    selected = select_scored(scored, preferences, caps)
    logger.info(
        "Recommendation pass: %d candidates → %d selected", len(candidates), len(selected)
    )
    return selected


def build_active_recommendations(
    selected: list[ScoredRecommendation],
    user_id: str,
    now: datetime,
    ttl_days: int = 30,
    run_slug: Optional[str] = None,
) -> list[ActiveRecommendation]:
    """Wrap selected candidates as ``active`` records expiring after ``ttl_days``.

    Args:
        selected: Output of ``build_selection``.
        user_id: Owner of the records.
        now: Pass time (UTC); becomes ``created_at``.
        ttl_days: Days until ``expires_at``.
        run_slug: Pass identifier stored on each record.

    Returns:
        One record per selected item, same order.
    """
    now = ensure_utc(now)
    expires_at = days_after(now, ttl_days)
    return [
        ActiveRecommendation(
            **item.candidate.model_dump(),
            user_id=user_id,
            score=item.score,
            score_components=item.components.as_dict(),
            status=RecommendationStatus.ACTIVE,
            created_at=now,
            expires_at=expires_at,
            updated_at=now,
            run_slug=run_slug,
        )
        for item in selected
    ]
