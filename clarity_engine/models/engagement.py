"""
User engagement with a recommendation.

Events are append-only. ``implemented`` and ``dismissed`` events also drive
the recommendation's status; ``rated`` events only store the rating.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clarity_engine.taxonomy.recommendation_taxonomy import EngagementAction


class EngagementEvent(BaseModel):
    """One user reaction.

    Attributes:
        event_id: Auto-assigned DB PK; ``None`` before insertion.
        recommendation_id: FK to ``active_recommendations.rec_id``.
        user_id: User who reacted.
        action: What they did.
        rating: 1–5; required for ``rated`` and forbidden otherwise.
        time_spent_seconds: Time spent on the item before reacting.
        occurred_at: UTC datetime of the reaction.
    """

    model_config = ConfigDict(frozen=True)

    event_id: Optional[int] = None
    recommendation_id: int
    user_id: str
    action: EngagementAction
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    time_spent_seconds: float = Field(default=0.0, ge=0)
    occurred_at: datetime

    @model_validator(mode="after")
    def validate_rating(self) -> "EngagementEvent":
        if self.action == EngagementAction.RATED and self.rating is None:
            raise ValueError("A 'rated' event requires a rating between 1 and 5.")
        if self.action != EngagementAction.RATED and self.rating is not None:
            raise ValueError(f"Only 'rated' events carry a rating, got action '{self.action}'.")
        return self
