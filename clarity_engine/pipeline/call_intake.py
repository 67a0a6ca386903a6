"""
CallIntakeStage - classify one inbound call and open an opportunity if warranted.

Flow
----
  1. ``analyze_call``: classify → value estimate → priority, summary, next steps.
  2. ``build_opportunity``: ``None`` for calls that do not warrant follow-up.
  3. Insert the opportunity (if any) into ``opportunities``.

Returns 1 if an opportunity was written, else 0. The analysis and the stored
opportunity are kept on ``last_analysis`` / ``last_opportunity`` for callers
that want to display them.
"""

from __future__ import annotations

import logging
from typing import Optional

from clarity_engine.config import AppConfig
from clarity_engine.db.repositories.opportunity_repo import OpportunityRepository
from clarity_engine.models.meta import RunMetadata
from clarity_engine.models.opportunity import Opportunity
from clarity_engine.models.profile import BusinessProfile
from clarity_engine.pipeline.base import PipelineStage
from clarity_engine.signals.intake import CallAnalysis, analyze_call, build_opportunity

logger = logging.getLogger(__name__)


class CallIntakeStage(PipelineStage):
    """Turn a call transcript into a tracked opportunity."""

    stage_name = "call_intake"

    def __init__(self, config: AppConfig, db_path: str | None = None) -> None:
        super().__init__(config, db_path)
        self.last_analysis: Optional[CallAnalysis] = None
        self.last_opportunity: Optional[Opportunity] = None

    def _execute(
        self,
        run: RunMetadata,
        user_id: str | None = None,
        transcript: str | None = None,
        profile: BusinessProfile | None = None,
        **kwargs,
    ) -> int:
        """Process one call.

        Args:
            run:        In-progress RunMetadata (mutable).
            user_id:    Business user who received the call (required).
            transcript: Raw transcript; ``None`` or blank for a missed call.
            profile:    Business context; an empty profile when omitted.

        Raises:
            ValueError: If ``user_id`` is missing.
        """
        if not user_id:
            raise ValueError("CallIntakeStage requires a user_id.")

        profile = profile or BusinessProfile()
        analysis = analyze_call(transcript, profile)
        self.last_analysis = analysis
        self.last_opportunity = None

        opportunity = build_opportunity(
            user_id,
            analysis,
            now=run.started_at,
            follow_up_days=self.config.lifecycle.opportunity_follow_up_days,
        )
        if opportunity is None:
            logger.info(
                "Call for user=%s classified as %s/%s; no opportunity opened.",
                user_id, analysis.signal.intent, analysis.signal.urgency,
            )
            return 0

        with self.connection() as conn:
            opportunity_id = OpportunityRepository(conn).insert(opportunity)

        self.last_opportunity = opportunity.model_copy(update={"opportunity_id": opportunity_id})
        logger.info(
            "Opened opportunity %d for user=%s | priority=%s value=%s",
            opportunity_id, user_id, opportunity.priority, opportunity.estimated_value,
        )
        return 1
