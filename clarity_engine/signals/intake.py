"""
Single-call intake: classify, value, plan, and (maybe) open an opportunity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from clarity_engine.models.opportunity import Opportunity
from clarity_engine.models.profile import BusinessProfile
from clarity_engine.models.signal import Signal
from clarity_engine.signals.classifier import classify
from clarity_engine.signals.followup import (
    follow_up_actions,
    opportunity_priority,
    opportunity_title,
    should_open_opportunity,
    summarize_call,
)
from clarity_engine.signals.value import estimate_value
from clarity_engine.taxonomy.recommendation_taxonomy import OpportunityStatus, Priority
from clarity_engine.utils.time_utils import days_after, ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallAnalysis:
    """Everything derived from one transcript before anything is persisted."""

    signal: Signal
    priority: Priority
    estimated_value: Optional[int]
    summary: str
    title: str
    follow_up_actions: list[str] = field(default_factory=list)
    opens_opportunity: bool = False


def analyze_call(transcript: Optional[str], profile: BusinessProfile) -> CallAnalysis:
    """Run the full signal pipeline for one call.

    Args:
        transcript: Raw transcript, or ``None`` for a missed call.
        profile: Business context (services for topic detection, price range
            for value estimation).

    Returns:
        A ``CallAnalysis``; never raises for any transcript.
    """
    signal = classify(transcript, profile.services)
    return CallAnalysis(
        signal=signal,
        priority=opportunity_priority(signal),
        estimated_value=estimate_value(signal, profile.price_range),
        summary=summarize_call(signal),
        title=opportunity_title(signal),
        follow_up_actions=follow_up_actions(signal),
        opens_opportunity=should_open_opportunity(signal),
    )


def build_opportunity(
    user_id: str,
    analysis: CallAnalysis,
    now: datetime,
    follow_up_days: int = 7,
) -> Optional[Opportunity]:
    """Turn an analysis into a pending ``Opportunity``.

    Args:
        user_id: Business user who received the call.
        analysis: Output of ``analyze_call``.
        now: Processing time (UTC); becomes ``created_at``.
        follow_up_days: Days until ``follow_up_date``.

    Returns:
        The new opportunity, or ``None`` if the call does not warrant one.
    """
    if not analysis.opens_opportunity:
        logger.debug("Call for user=%s does not open an opportunity.", user_id)
        return None

    now = ensure_utc(now)
    return Opportunity(
        user_id=user_id,
        title=analysis.title,
        source_signal=analysis.signal,
        estimated_value=analysis.estimated_value,
        priority=analysis.priority,
        status=OpportunityStatus.PENDING,
        summary=analysis.summary,
        follow_up_actions=analysis.follow_up_actions,
        created_at=now,
        last_action_at=now,
        follow_up_date=days_after(now, follow_up_days),
    )
