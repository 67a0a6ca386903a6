"""
Revenue opportunity raised from an inbound call.

Status only moves along the opportunity graph in
``clarity_engine.lifecycle.state_machine``; use ``transition_opportunity``
rather than ``model_copy`` to change it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from clarity_engine.models.signal import Signal
from clarity_engine.taxonomy.recommendation_taxonomy import OpportunityStatus, Priority


class Opportunity(BaseModel):
    """A potential revenue event awaiting follow-up.

    Attributes:
        opportunity_id: Auto-assigned DB PK; ``None`` before insertion.
        user_id: Business user whose call produced it.
        title: Display title, e.g. ``"Emergency plumbing call"``.
        source_signal: Snapshot of the classified call.
        estimated_value: Estimated job value; ``None`` means "value unknown".
        priority: Triage tier derived from the signal.
        status: Lifecycle state.
        summary: One-line call summary.
        follow_up_actions: Ordered suggested next steps.
        created_at: UTC datetime the call was processed.
        last_action_at: UTC datetime of the last status change.
        follow_up_date: When the business should have acted by.
    """

    model_config = ConfigDict(frozen=True)

    opportunity_id: Optional[int] = None
    user_id: str
    title: str
    source_signal: Signal
    estimated_value: Optional[int] = Field(default=None, ge=0)
    priority: Priority
    status: OpportunityStatus = OpportunityStatus.PENDING
    summary: str = ""
    follow_up_actions: list[str] = []
    created_at: datetime
    last_action_at: Optional[datetime] = None
    follow_up_date: Optional[datetime] = None
