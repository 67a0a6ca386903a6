"""
ScoringPassStage - one recommendation pass for one user.

Flow
----
  1. ``resolve_complexity_tolerance``: fall back to the setup preference
     when no tolerance was given.
  2. ``build_selection``: generate (focus areas) → score → select (cap).
  3. ``build_active_recommendations``: wrap as active records with a TTL.
  4. ``supersede_and_insert``: expire any still-active row with the same
     ``(user_id, rec_type, title)`` and insert the replacement, all in one
     transaction.

Rerunning with the same inputs selects the same candidates and leaves exactly
one active row per identity. Active rows from earlier passes that are not
reselected stay active until they expire or the user acts on them.

Returns the number of recommendations inserted.
"""

from __future__ import annotations

import logging

from clarity_engine.config import AppConfig
from clarity_engine.db.repositories.recommendation_repo import RecommendationRepository
from clarity_engine.models.meta import RunMetadata
from clarity_engine.models.profile import BusinessProfile, UserPreferences
from clarity_engine.models.recommendation import ActiveRecommendation
from clarity_engine.pipeline.base import PipelineStage
from clarity_engine.profiling.behavior import resolve_complexity_tolerance
from clarity_engine.recommendations.engine import (
    build_active_recommendations,
    build_selection,
)

logger = logging.getLogger(__name__)


class ScoringPassStage(PipelineStage):
    """Generate, score, select and persist recommendations for one user."""

    stage_name = "score"

    def __init__(self, config: AppConfig, db_path: str | None = None) -> None:
        super().__init__(config, db_path)
        self.last_records: list[ActiveRecommendation] = []
        self.last_expired_count = 0

    def _execute(
        self,
        run: RunMetadata,
        user_id: str | None = None,
        profile: BusinessProfile | None = None,
        preferences: UserPreferences | None = None,
        **kwargs,
    ) -> int:
        """Run the pass.

        Args:
            run:         In-progress RunMetadata (mutable).
            user_id:     Owner of the recommendations (required).
            profile:     Business context; an empty profile when omitted.
            preferences: Focus areas, tolerance and frequency (required).

        Raises:
            ValueError: If ``user_id`` or ``preferences`` is missing.
            sqlite3.IntegrityError: If a concurrent pass won the race for an
                identity; nothing from this pass is kept.
        """
        if not user_id:
            raise ValueError("ScoringPassStage requires a user_id.")
        if preferences is None:
            raise ValueError("ScoringPassStage requires preferences.")

        profile = profile or BusinessProfile()
        preferences = resolve_complexity_tolerance(preferences)
        selected = build_selection(
            profile, preferences, self.config.scoring, self.config.selection
        )
        records = build_active_recommendations(
            selected,
            user_id=user_id,
            now=run.started_at,
            ttl_days=self.config.lifecycle.recommendation_ttl_days,
            run_slug=run.run_slug,
        )

        with self.connection() as conn:
            result = RecommendationRepository(conn).supersede_and_insert(
                records, at=run.started_at
            )

        self.last_records = [
            rec.model_copy(update={"rec_id": rec_id})
            for rec, rec_id in zip(records, result.inserted_ids)
        ]
        self.last_expired_count = result.expired_count
        logger.info(
            "Scoring pass for user=%s: inserted=%d superseded=%d",
            user_id, len(result.inserted_ids), result.expired_count,
        )
        return len(result.inserted_ids)
