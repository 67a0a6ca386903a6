"""
Tests for the Pydantic domain models in clarity_engine/models/.

What we test
------------
  - Signal: None text coerced to "", missed-call property, frozen.
  - PriceRange: non-negative, min <= max.
  - BusinessProfile: blank strings become None, chaos indicator 0–10.
  - RecommendationCandidate: blank rec_type/title rejected, identity key.
  - ActiveRecommendation: expires_at must be after created_at.
  - EngagementEvent: rating required iff action is "rated".
  - RunMetadata: stage and status validated; mutable.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from clarity_engine.models.engagement import EngagementEvent
from clarity_engine.models.meta import RunMetadata
from clarity_engine.models.profile import BusinessProfile, PriceRange
from clarity_engine.models.recommendation import ActiveRecommendation, RecommendationCandidate
from clarity_engine.models.signal import Signal
from clarity_engine.taxonomy.recommendation_taxonomy import (
    Complexity,
    EngagementAction,
    Priority,
)


def _candidate_fields(**overrides) -> dict:
    fields = dict(
        rec_type="efficiency",
        title="Create Standard Job Checklists",
        description="",
        base_priority=Priority.LOW,
        complexity=Complexity.SIMPLE,
    )
    fields.update(overrides)
    return fields


class TestSignal:
    def test_none_text(self):
        signal = Signal(raw_text=None)
        assert signal.raw_text == ""
        assert signal.is_missed_call

    def test_whitespace_is_missed(self):
        assert Signal(raw_text=" \t\n").is_missed_call

    def test_text_is_not_missed(self):
        assert not Signal(raw_text="hello").is_missed_call

    def test_frozen(self):
        with pytest.raises(ValidationError):
            Signal(raw_text="x").raw_text = "y"

    def test_json_round_trip(self):
        signal = Signal(raw_text="leak", detected_topic="plumbing")
        assert Signal.model_validate_json(signal.model_dump_json()) == signal


class TestProfile:
    def test_price_range_order(self):
        with pytest.raises(ValidationError):
            PriceRange(min=10, max=5)

    def test_price_range_non_negative(self):
        with pytest.raises(ValidationError):
            PriceRange(min=-1, max=5)

    def test_equal_bounds_allowed(self):
        assert PriceRange(min=5, max=5).max == 5

    def test_blank_fields_become_none(self):
        profile = BusinessProfile(industry="  ", business_size="")
        assert profile.industry is None
        assert profile.business_size is None

    @pytest.mark.parametrize("chaos", [-0.1, 10.1])
    def test_chaos_indicator_bounds(self, chaos):
        with pytest.raises(ValidationError):
            BusinessProfile(chaos_indicator=chaos)


class TestRecommendationModels:
    @pytest.mark.parametrize("field", ["rec_type", "title"])
    def test_blank_identity_rejected(self, field):
        with pytest.raises(ValidationError):
            RecommendationCandidate(**_candidate_fields(**{field: "   "}))

    def test_identity(self):
        candidate = RecommendationCandidate(**_candidate_fields())
        assert candidate.identity == ("efficiency", "Create Standard Job Checklists")

    def test_expiry_must_follow_creation(self, fixed_now):
        with pytest.raises(ValidationError):
            ActiveRecommendation(
                **_candidate_fields(),
                user_id="user-1",
                created_at=fixed_now,
                expires_at=fixed_now,
            )

    def test_active_defaults(self, fixed_now):
        rec = ActiveRecommendation(
            **_candidate_fields(),
            user_id="user-1",
            created_at=fixed_now,
            expires_at=fixed_now + timedelta(days=1),
        )
        assert rec.status == "active"
        assert rec.score == 0.0
        assert rec.to_candidate() == RecommendationCandidate(**_candidate_fields())


class TestEngagementEvent:
    def test_rated_requires_rating(self, fixed_now):
        with pytest.raises(ValidationError):
            EngagementEvent(
                recommendation_id=1, user_id="u", action=EngagementAction.RATED,
                occurred_at=fixed_now,
            )

    def test_rating_forbidden_for_other_actions(self, fixed_now):
        with pytest.raises(ValidationError):
            EngagementEvent(
                recommendation_id=1, user_id="u", action=EngagementAction.IMPLEMENTED,
                rating=5, occurred_at=fixed_now,
            )

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, rating, fixed_now):
        with pytest.raises(ValidationError):
            EngagementEvent(
                recommendation_id=1, user_id="u", action=EngagementAction.RATED,
                rating=rating, occurred_at=fixed_now,
            )

    def test_valid_rated(self, fixed_now):
        event = EngagementEvent(
            recommendation_id=1, user_id="u", action=EngagementAction.RATED,
            rating=4, occurred_at=fixed_now,
        )
        assert event.rating == 4


class TestRunMetadata:
    def test_unknown_stage(self, fixed_now):
        with pytest.raises(ValidationError):
            RunMetadata(
                run_slug="x", pipeline_stage="train", config_snapshot={},
                started_at=fixed_now,
            )

    def test_unknown_status(self, fixed_now):
        with pytest.raises(ValidationError):
            RunMetadata(
                run_slug="x", pipeline_stage="score", status="running",
                config_snapshot={}, started_at=fixed_now,
            )

    def test_mutable(self, fixed_now):
        run = RunMetadata(
            run_slug="x", pipeline_stage="score", config_snapshot={}, started_at=fixed_now
        )
        run.status = "success"
        run.rows_processed = 3
        assert run.status == "success"
        assert run.rows_processed == 3
