"""
Tests for clarity_engine/profiling/behavior.py.

What we test
------------
  - implementation_rate(): 0.5 with no history, otherwise share of
    implemented events.
  - preferred_complexity(): minimal/connect mapping, default moderate.
  - resolve_complexity_tolerance(): setup preference only fills a missing tolerance.
  - summarize_engagement(): counts, average rating, total time.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from clarity_engine.models.engagement import EngagementEvent
from clarity_engine.models.profile import UserPreferences
from clarity_engine.profiling.behavior import (
    implementation_rate,
    preferred_complexity,
    resolve_complexity_tolerance,
    summarize_engagement,
)
from clarity_engine.taxonomy.recommendation_taxonomy import Complexity, EngagementAction

OCCURRED_AT = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


def _event(action: EngagementAction, rating=None, seconds: float = 0.0) -> EngagementEvent:
    return EngagementEvent(
        recommendation_id=1,
        user_id="user-1",
        action=action,
        rating=rating,
        time_spent_seconds=seconds,
        occurred_at=OCCURRED_AT,
    )


class TestImplementationRate:
    def test_no_history(self):
        assert implementation_rate([]) == 0.5

    def test_share(self):
        events = [
            _event(EngagementAction.IMPLEMENTED),
            _event(EngagementAction.DISMISSED),
            _event(EngagementAction.RATED, rating=4),
            _event(EngagementAction.IMPLEMENTED),
        ]
        assert implementation_rate(events) == 0.5

    def test_accepts_generator(self):
        events = (_event(EngagementAction.IMPLEMENTED) for _ in range(3))
        assert implementation_rate(events) == 1.0


class TestPreferredComplexity:
    @pytest.mark.parametrize(
        "preference,expected",
        [
            ("minimal", Complexity.SIMPLE),
            ("Minimal ", Complexity.SIMPLE),
            ("connect", Complexity.ADVANCED),
            ("guided", Complexity.MODERATE),
            (None, Complexity.MODERATE),
            ("", Complexity.MODERATE),
        ],
    )
    def test_mapping(self, preference, expected):
        assert preferred_complexity(preference) == expected


class TestResolveComplexityTolerance:
    def test_setup_preference_used_when_tolerance_missing(self):
        prefs = resolve_complexity_tolerance(UserPreferences(setup_preference="minimal"))
        assert prefs.complexity_tolerance == Complexity.SIMPLE

    def test_explicit_tolerance_kept(self):
        prefs = UserPreferences(
            complexity_tolerance=Complexity.ADVANCED, setup_preference="minimal"
        )
        assert resolve_complexity_tolerance(prefs) is prefs

    def test_explicit_default_value_kept(self):
        prefs = UserPreferences.model_validate_json(
            '{"complexity_tolerance": "moderate", "setup_preference": "connect"}'
        )
        assert resolve_complexity_tolerance(prefs).complexity_tolerance == Complexity.MODERATE

    def test_no_setup_preference(self):
        prefs = UserPreferences(setup_preference="  ")
        assert resolve_complexity_tolerance(prefs) is prefs
        assert prefs.complexity_tolerance == Complexity.MODERATE

    def test_loaded_from_json(self):
        prefs = UserPreferences.model_validate_json('{"setup_preference": "connect"}')
        assert resolve_complexity_tolerance(prefs).complexity_tolerance == Complexity.ADVANCED


class TestSummarize:
    def test_counts(self):
        summary = summarize_engagement([
            _event(EngagementAction.IMPLEMENTED, seconds=30),
            _event(EngagementAction.RATED, rating=5, seconds=10),
            _event(EngagementAction.RATED, rating=2),
            _event(EngagementAction.DISMISSED, seconds=5),
        ])
        assert summary.total_events == 4
        assert summary.implemented == 1
        assert summary.dismissed == 1
        assert summary.rated == 2
        assert summary.average_rating == 3.5
        assert summary.total_time_spent == 45
        assert summary.implementation_rate == 0.25

    def test_empty(self):
        summary = summarize_engagement([])
        assert summary.total_events == 0
        assert summary.average_rating is None
        assert summary.implementation_rate == 0.5
