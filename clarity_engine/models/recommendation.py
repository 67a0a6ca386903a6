"""
Recommendation models.

``RecommendationCandidate`` is what a generator emits: a catalog entry
tailored to one profile, produced fresh on every pass and never mutated.

``ActiveRecommendation`` is the persisted form: the candidate plus ownership,
score, lifecycle status and expiry. At most one ``active`` row may exist per
``(user_id, rec_type, title)``; regeneration supersedes rather than
duplicates (enforced in ``RecommendationRepository.supersede_and_insert``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from clarity_engine.taxonomy.recommendation_taxonomy import (
    Complexity,
    FocusArea,
    Priority,
    RecommendationStatus,
)


class RecommendationCandidate(BaseModel):
    """An unscored recommendation proposal.

    Attributes:
        rec_type: Domain tag, e.g. ``"revenue_growth"`` or ``"efficiency"``.
        title: Short imperative headline; with ``rec_type`` it forms the
            logical identity of the recommendation.
        description: One-paragraph explanation of the action.
        base_priority: Catalog priority tier.
        complexity: Effort needed to act on it.
        applicable_industries: Industries it targets (empty = none declared).
        applicable_business_sizes: Size bands it targets (empty = none declared).
        focus_area: Generator that produced it.
        hook: One-line attention grabber for the feed.
        expected_impact: Plain-language payoff estimate.
        time_to_implement: Rough effort estimate, e.g. ``"1-2 weeks"``.
        reasoning: Why it was proposed to this business.
    """

    model_config = ConfigDict(frozen=True)

    rec_type: str
    title: str
    description: str
    base_priority: Priority
    complexity: Complexity
    applicable_industries: frozenset[str] = frozenset()
    applicable_business_sizes: frozenset[str] = frozenset()
    focus_area: Optional[FocusArea] = None
    hook: Optional[str] = None
    expected_impact: Optional[str] = None
    time_to_implement: Optional[str] = None
    reasoning: Optional[str] = None

    @field_validator("rec_type", "title")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("rec_type and title must not be blank.")
        return v

    @property
    def identity(self) -> tuple[str, str]:
        """``(rec_type, title)`` - the key supersede and dedupe operate on."""
        return (self.rec_type, self.title)


class ActiveRecommendation(RecommendationCandidate):
    """A candidate persisted for one user.

    Attributes:
        rec_id: Auto-assigned DB PK; ``None`` before insertion.
        user_id: Owner of the recommendation.
        score: Additive score from the pass that created it.
        score_components: Term-by-term score breakdown.
        status: Lifecycle state; only ``active`` is non-terminal.
        created_at: UTC datetime the pass created it.
        expires_at: UTC datetime after which ``expire_stale`` retires it.
        updated_at: UTC datetime of the last status change.
        run_slug: Pass that produced it, if known.
    """

    rec_id: Optional[int] = None
    user_id: str
    score: float = 0.0
    score_components: dict[str, float] = {}
    status: RecommendationStatus = RecommendationStatus.ACTIVE
    created_at: datetime
    expires_at: datetime
    updated_at: Optional[datetime] = None
    run_slug: Optional[str] = None

    @model_validator(mode="after")
    def validate_expiry(self) -> "ActiveRecommendation":
        if self.expires_at <= self.created_at:
            raise ValueError(
                f"expires_at ({self.expires_at}) must be after created_at ({self.created_at})."
            )
        return self

    def to_candidate(self) -> RecommendationCandidate:
        """Strip lifecycle fields, returning the underlying candidate."""
        fields = RecommendationCandidate.model_fields.keys()
        return RecommendationCandidate(**{name: getattr(self, name) for name in fields})
