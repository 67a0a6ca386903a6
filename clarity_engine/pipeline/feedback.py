"""
FeedbackStage - record an engagement event and apply it to the recommendation.

Flow
----
  1. Load the recommendation; it must exist and belong to the event's user.
  2. Insert the event into ``engagement_events``.
  3. ``implemented`` / ``dismissed`` move the recommendation to the matching
     terminal status (compare-and-swap); ``rated`` changes nothing.

Steps 2 and 3 share one transaction: an invalid transition (e.g. dismissing
an already implemented recommendation) raises ``InvalidTransition`` and the
event is not stored either.

Returns the number of rows written (1 for a rating, 2 otherwise).
"""

from __future__ import annotations

import logging

from clarity_engine.db.repositories.engagement_repo import EngagementRepository
from clarity_engine.db.repositories.recommendation_repo import RecommendationRepository
from clarity_engine.lifecycle.state_machine import status_for_engagement
from clarity_engine.models.engagement import EngagementEvent
from clarity_engine.models.meta import RunMetadata
from clarity_engine.pipeline.base import PipelineStage

logger = logging.getLogger(__name__)


class FeedbackStage(PipelineStage):
    """Consume one ``EngagementEvent``."""

    stage_name = "feedback"

    def _execute(
        self,
        run: RunMetadata,
        user_id: str | None = None,
        event: EngagementEvent | None = None,
        **kwargs,
    ) -> int:
        """Apply the event.

        Raises:
            ValueError: If the event is missing, the recommendation does not
                exist, or it belongs to another user.
            InvalidTransition: If the status change is not allowed.
        """
        if event is None:
            raise ValueError("FeedbackStage requires an event.")
        if user_id and user_id != event.user_id:
            raise ValueError(
                f"Event user '{event.user_id}' does not match run user '{user_id}'."
            )

        with self.connection() as conn:
            recs = RecommendationRepository(conn)
            rec = recs.get(event.recommendation_id)
            if rec is None:
                raise ValueError(f"Recommendation {event.recommendation_id} not found.")
            if rec.user_id != event.user_id:
                raise ValueError(
                    f"Recommendation {rec.rec_id} does not belong to user '{event.user_id}'."
                )

            EngagementRepository(conn).insert(event)
            rows = 1

            target = status_for_engagement(event.action)
            if target is not None:
                recs.transition(rec.rec_id, target, at=event.occurred_at)
                rows += 1

        logger.info(
            "Recorded %s on recommendation %d for user=%s",
            event.action, event.recommendation_id, event.user_id,
        )
        return rows
