"""
ExpireStage - retire active recommendations whose TTL has passed.

Returns the number of rows moved to ``expired``.
"""

from __future__ import annotations

import logging
from datetime import datetime

from clarity_engine.db.repositories.recommendation_repo import RecommendationRepository
from clarity_engine.models.meta import RunMetadata
from clarity_engine.pipeline.base import PipelineStage

logger = logging.getLogger(__name__)


class ExpireStage(PipelineStage):
    """Expire overdue active recommendations, for one user or everyone."""

    stage_name = "expire"

    def _execute(
        self,
        run: RunMetadata,
        user_id: str | None = None,
        now: datetime | None = None,
        **kwargs,
    ) -> int:
        cutoff = now or run.started_at
        with self.connection() as conn:
            expired = RecommendationRepository(conn).expire_stale(cutoff, user_id=user_id)
        logger.info("Expired %d stale recommendation(s) | user_id=%s", expired, user_id)
        return expired
