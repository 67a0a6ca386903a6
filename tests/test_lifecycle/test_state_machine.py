"""
Tests for clarity_engine/lifecycle/state_machine.py.

What we test
------------
Opportunity graph:
  - pending → contacted → converted; pending/contacted → dismissed.
  - Every other pair (including same-state and out of terminals) rejected.

Recommendation graph:
  - active → implemented | dismissed | expired; terminals have no edges.

transition_*():
  - Returns an updated copy with the timestamp stamped; input unchanged.
  - Rejected moves raise InvalidTransition with entity/current/target.

status_for_engagement():
  - implemented/dismissed map to statuses; rated maps to None.
"""

from __future__ import annotations

from datetime import timedelta
from itertools import product

import pytest

from clarity_engine.lifecycle.state_machine import (
    InvalidTransition,
    can_transition_opportunity,
    can_transition_recommendation,
    is_terminal_opportunity,
    is_terminal_recommendation,
    status_for_engagement,
    transition_opportunity,
    transition_recommendation,
)
from clarity_engine.models.opportunity import Opportunity
from clarity_engine.models.recommendation import ActiveRecommendation
from clarity_engine.models.signal import Signal
from clarity_engine.taxonomy.recommendation_taxonomy import (
    Complexity,
    EngagementAction,
    OpportunityStatus,
    Priority,
    RecommendationStatus,
)

OPPORTUNITY_EDGES = {
    (OpportunityStatus.PENDING, OpportunityStatus.CONTACTED),
    (OpportunityStatus.PENDING, OpportunityStatus.DISMISSED),
    (OpportunityStatus.CONTACTED, OpportunityStatus.CONVERTED),
    (OpportunityStatus.CONTACTED, OpportunityStatus.DISMISSED),
}

RECOMMENDATION_EDGES = {
    (RecommendationStatus.ACTIVE, RecommendationStatus.IMPLEMENTED),
    (RecommendationStatus.ACTIVE, RecommendationStatus.DISMISSED),
    (RecommendationStatus.ACTIVE, RecommendationStatus.EXPIRED),
}


@pytest.fixture
def opportunity(fixed_now) -> Opportunity:
    return Opportunity(
        user_id="user-1",
        title="Missed call",
        source_signal=Signal(raw_text=""),
        priority=Priority.MEDIUM,
        created_at=fixed_now,
        last_action_at=fixed_now,
    )


@pytest.fixture
def recommendation(fixed_now) -> ActiveRecommendation:
    return ActiveRecommendation(
        rec_type="financial_health",
        title="Set Up Cash Flow Forecasting",
        description="",
        base_priority=Priority.HIGH,
        complexity=Complexity.SIMPLE,
        user_id="user-1",
        created_at=fixed_now,
        expires_at=fixed_now + timedelta(days=30),
    )


class TestOpportunityGraph:
    @pytest.mark.parametrize("current,target", list(product(OpportunityStatus, repeat=2)))
    def test_every_pair(self, current, target):
        assert can_transition_opportunity(current, target) == ((current, target) in OPPORTUNITY_EDGES)

    def test_terminals(self):
        assert is_terminal_opportunity(OpportunityStatus.CONVERTED)
        assert is_terminal_opportunity(OpportunityStatus.DISMISSED)
        assert not is_terminal_opportunity(OpportunityStatus.PENDING)
        assert not is_terminal_opportunity(OpportunityStatus.CONTACTED)


class TestRecommendationGraph:
    @pytest.mark.parametrize("current,target", list(product(RecommendationStatus, repeat=2)))
    def test_every_pair(self, current, target):
        assert can_transition_recommendation(current, target) == (
            (current, target) in RECOMMENDATION_EDGES
        )

    def test_only_active_is_non_terminal(self):
        assert [s for s in RecommendationStatus if not is_terminal_recommendation(s)] == [
            RecommendationStatus.ACTIVE
        ]


class TestTransitionOpportunity:
    def test_happy_path(self, opportunity, fixed_now):
        later = fixed_now + timedelta(hours=2)
        contacted = transition_opportunity(opportunity, OpportunityStatus.CONTACTED, at=later)
        assert contacted.status == OpportunityStatus.CONTACTED
        assert contacted.last_action_at == later
        assert opportunity.status == OpportunityStatus.PENDING

        converted = transition_opportunity(contacted, OpportunityStatus.CONVERTED, at=later)
        assert converted.status == OpportunityStatus.CONVERTED

    def test_skip_contacted_rejected(self, opportunity):
        with pytest.raises(InvalidTransition) as excinfo:
            transition_opportunity(opportunity, OpportunityStatus.CONVERTED)
        assert excinfo.value.entity == "opportunity"
        assert excinfo.value.current == OpportunityStatus.PENDING
        assert excinfo.value.target == OpportunityStatus.CONVERTED
        assert "Cannot move opportunity from 'pending' to 'converted'." in str(excinfo.value)

    def test_same_state_rejected(self, opportunity):
        with pytest.raises(InvalidTransition):
            transition_opportunity(opportunity, OpportunityStatus.PENDING)

    def test_terminal_rejected(self, opportunity):
        dismissed = transition_opportunity(opportunity, OpportunityStatus.DISMISSED)
        with pytest.raises(InvalidTransition):
            transition_opportunity(dismissed, OpportunityStatus.CONTACTED)


class TestTransitionRecommendation:
    def test_implement(self, recommendation, fixed_now):
        done = transition_recommendation(
            recommendation, RecommendationStatus.IMPLEMENTED, at=fixed_now
        )
        assert done.status == RecommendationStatus.IMPLEMENTED
        assert done.updated_at == fixed_now
        assert recommendation.status == RecommendationStatus.ACTIVE

    def test_naive_timestamp_is_made_utc(self, recommendation, fixed_now):
        naive = fixed_now.replace(tzinfo=None)
        done = transition_recommendation(recommendation, RecommendationStatus.EXPIRED, at=naive)
        assert done.updated_at == fixed_now

    def test_cannot_reactivate(self, recommendation):
        expired = transition_recommendation(recommendation, RecommendationStatus.EXPIRED)
        with pytest.raises(InvalidTransition):
            transition_recommendation(expired, RecommendationStatus.ACTIVE)


class TestEngagementStatus:
    def test_mapping(self):
        assert status_for_engagement(EngagementAction.IMPLEMENTED) == RecommendationStatus.IMPLEMENTED
        assert status_for_engagement(EngagementAction.DISMISSED) == RecommendationStatus.DISMISSED
        assert status_for_engagement(EngagementAction.RATED) is None
