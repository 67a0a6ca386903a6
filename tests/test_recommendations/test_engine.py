"""
Tests for clarity_engine/recommendations/engine.py.

What we test
------------
build_selection():
  - The overwhelmed small plumber example end to end: five candidates,
    scores 20/20/20/15/10 in generation order within ties.
  - Industry-gated entries for other trades never appear.
  - Deterministic across calls.

build_active_recommendations():
  - One active record per selected item, same order, score and breakdown
    carried over, expires_at = now + ttl, run_slug stamped.
"""

from __future__ import annotations

from datetime import timedelta

from clarity_engine.models.profile import UserPreferences
from clarity_engine.recommendations.engine import build_active_recommendations, build_selection
from clarity_engine.taxonomy.recommendation_taxonomy import Complexity, RecommendationStatus


class TestBuildSelection:
    def test_overwhelmed_plumber(self, plumbing_profile, daily_preferences):
        selected = build_selection(plumbing_profile, daily_preferences)
        assert [(s.candidate.title, s.score) for s in selected] == [
            ("Implement Upselling Strategies", 20),
            ("Offer Emergency Service Premium Pricing", 20),
            ("Set Up Cash Flow Forecasting", 20),
            ("Optimize Your Pricing Strategy", 15),
            ("Develop Maintenance Contracts", 10),
        ]

    def test_other_trades_excluded(self, plumbing_profile, daily_preferences):
        titles = {s.candidate.title for s in build_selection(plumbing_profile, daily_preferences)}
        assert "Add Smart Home Installation Services" not in titles
        assert "Create Seasonal Maintenance Packages" not in titles
        assert "Develop Year-Round Revenue Streams" not in titles
        assert "Implement Dynamic Pricing" not in titles

    def test_deterministic(self, plumbing_profile, daily_preferences):
        assert build_selection(plumbing_profile, daily_preferences) == build_selection(
            plumbing_profile, daily_preferences
        )

    def test_advanced_tolerance_unlocks_dynamic_pricing(self, plumbing_profile):
        profile = plumbing_profile.model_copy(update={"business_size": "medium"})
        prefs = UserPreferences(
            focus_areas=frozenset({"Revenue Growth"}),
            complexity_tolerance=Complexity.ADVANCED,
        )
        titles = [s.candidate.title for s in build_selection(profile, prefs)]
        assert "Implement Dynamic Pricing" in titles


class TestBuildActiveRecommendations:
    def test_records(self, plumbing_profile, daily_preferences, fixed_now):
        selected = build_selection(plumbing_profile, daily_preferences)
        records = build_active_recommendations(
            selected, "user-1", fixed_now, ttl_days=30, run_slug="run-1"
        )
        assert len(records) == len(selected)
        first = records[0]
        assert first.title == "Implement Upselling Strategies"
        assert first.user_id == "user-1"
        assert first.status == RecommendationStatus.ACTIVE
        assert first.score == 20
        assert first.score_components["total"] == 20
        assert first.created_at == fixed_now
        assert first.updated_at == fixed_now
        assert first.expires_at == fixed_now + timedelta(days=30)
        assert first.run_slug == "run-1"
        assert first.rec_id is None

    def test_to_candidate_round_trip(self, plumbing_profile, daily_preferences, fixed_now):
        selected = build_selection(plumbing_profile, daily_preferences)
        records = build_active_recommendations(selected, "user-1", fixed_now)
        assert records[0].to_candidate() == selected[0].candidate

    def test_empty_selection(self, fixed_now):
        assert build_active_recommendations([], "user-1", fixed_now) == []
