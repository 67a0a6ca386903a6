"""
Recommendation scoring: an additive score per candidate, with breakdown.

Score formula (raw sum, no normalization)
-----------------------------------------
    total = (
        priority_weight          # high 10, medium 5, low 2
        + complexity_alignment   # 0 or +5
        + industry_match         # 0 or +3
        + size_match             # 0 or +2
    )

Scores are only comparable within one pass for one user; there is no upper
bound and no cross-user scaling.

Component explanations
----------------------
priority_weight:
    Catalog priority tier mapped through the configured weights.

complexity_alignment:
    Rewards actions that fit how overwhelmed the owner is, read from the
    profile's 0–10 chaos indicator:
      - chaos > high threshold (7) and complexity simple   → +bonus
      - chaos < low threshold (4)  and complexity advanced → +bonus
    The config guarantees low <= high, so at most one branch can apply.
    No chaos indicator → 0.

industry_match / size_match:
    Case-insensitive membership of the profile value in the candidate's
    applicable set. A missing profile value never matches.

Every term is independent, so the total is monotonic in each input and can
be tested one term at a time.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Optional

from clarity_engine.config import ScoringConfig
from clarity_engine.models.profile import BusinessProfile
from clarity_engine.models.recommendation import RecommendationCandidate
from clarity_engine.taxonomy.recommendation_taxonomy import Complexity, Priority

DEFAULT_WEIGHTS = ScoringConfig()


@dataclass
class ScoreComponents:
    """All terms of a recommendation score.

    Attributes:
        priority_weight:      Weight of the candidate's base priority tier.
        complexity_alignment: Chaos/complexity fit bonus, or 0.
        industry_match:       Industry bonus, or 0.
        size_match:           Business-size bonus, or 0.
    """

    priority_weight:      float
    complexity_alignment: float
    industry_match:       float
    size_match:           float

    @property
    def total(self) -> float:
        """Sum of all terms."""
        return (
            self.priority_weight
            + self.complexity_alignment
            + self.industry_match
            + self.size_match
        )

    def as_dict(self) -> dict[str, float]:
        """Breakdown plus ``total``, for persistence as JSON."""
        return {**asdict(self), "total": self.total}


@dataclass(frozen=True)
class ScoredRecommendation:
    """A candidate paired with its score; the ordering key for selection."""

    candidate:  RecommendationCandidate
    score:      float
    components: ScoreComponents


def priority_weight(priority: Priority, weights: ScoringConfig = DEFAULT_WEIGHTS) -> float:
    return {
        Priority.HIGH:   weights.high_priority_weight,
        Priority.MEDIUM: weights.medium_priority_weight,
        Priority.LOW:    weights.low_priority_weight,
    }[priority]


def complexity_alignment(
    complexity: Complexity,
    chaos_indicator: Optional[float],
    weights: ScoringConfig = DEFAULT_WEIGHTS,
) -> float:
    if chaos_indicator is None:
        return 0.0
    if chaos_indicator > weights.high_chaos_threshold and complexity == Complexity.SIMPLE:
        return weights.complexity_bonus
    if chaos_indicator < weights.low_chaos_threshold and complexity == Complexity.ADVANCED:
        return weights.complexity_bonus
    return 0.0


def _member(value: Optional[str], allowed: Iterable[str]) -> bool:
    if not value:
        return False
    needle = value.casefold()
    return any(needle == a.casefold() for a in allowed)


def compute_score(
    candidate: RecommendationCandidate,
    profile: BusinessProfile,
    weights: ScoringConfig = DEFAULT_WEIGHTS,
) -> ScoreComponents:
    """Compute every score term for one candidate.

    Args:
        candidate: The candidate to score.
        profile: Business context (chaos indicator, industry, size).
        weights: Scoring weights and thresholds.

    Returns:
        ``ScoreComponents``; ``.total`` is the score.
    """
    return ScoreComponents(
        priority_weight=priority_weight(candidate.base_priority, weights),
        complexity_alignment=complexity_alignment(
            candidate.complexity, profile.chaos_indicator, weights
        ),
        industry_match=(
            weights.industry_match_bonus
            if _member(profile.industry, candidate.applicable_industries)
            else 0.0
        ),
        size_match=(
            weights.size_match_bonus
            if _member(profile.business_size, candidate.applicable_business_sizes)
            else 0.0
        ),
    )


def score(
    candidate: RecommendationCandidate,
    profile: BusinessProfile,
    weights: ScoringConfig = DEFAULT_WEIGHTS,
) -> float:
    """Total score for one candidate."""
    return compute_score(candidate, profile, weights).total


def score_candidates(
    candidates: Iterable[RecommendationCandidate],
    profile: BusinessProfile,
    weights: ScoringConfig = DEFAULT_WEIGHTS,
) -> list[ScoredRecommendation]:
    """Score every candidate, preserving input order."""
    scored: list[ScoredRecommendation] = []
    for candidate in candidates:
        components = compute_score(candidate, profile, weights)
        scored.append(ScoredRecommendation(candidate, components.total, components))
    return scored


def build_score_notes(components: ScoreComponents) -> str:
    """Human-readable explanation of a score.

    Example: ``"Score 20 = priority 10 + fits current workload 5 + industry match 3 + size match 2"``
    """
    parts = [f"priority {_fmt(components.priority_weight)}"]
    if components.complexity_alignment:
        parts.append(f"fits current workload {_fmt(components.complexity_alignment)}")
    if components.industry_match:
        parts.append(f"industry match {_fmt(components.industry_match)}")
    if components.size_match:
        parts.append(f"size match {_fmt(components.size_match)}")
    return f"Score {_fmt(components.total)} = " + " + ".join(parts)


def _fmt(value: float) -> str:
    return f"{value:g}"
