"""
Tests for clarity_engine/signals/followup.py and signals/intake.py.

What we test
------------
opportunity_priority():
  - High urgency or emergency intent → high; pricing/scheduling → medium;
    anything else (even with medium urgency) → low.

should_open_opportunity():
  - Missed calls and high/medium priority calls open one; low-priority
    answered inquiries do not.

follow_up_actions() / summarize_call() / opportunity_title():
  - Intent-specific templates; missed-call variants.
  - Summary excerpt is truncated to 100 characters with an ellipsis.

analyze_call() / build_opportunity():
  - Uses profile services for the topic and price range for the value.
  - Opportunity is pending, stamped with created_at/last_action_at and a
    follow_up_date N days out; None when the call does not warrant one.
"""

from __future__ import annotations

from datetime import timedelta

from clarity_engine.models.profile import BusinessProfile
from clarity_engine.models.signal import Signal
from clarity_engine.signals.classifier import classify
from clarity_engine.signals.followup import (
    MISSED_CALL_SUMMARY,
    follow_up_actions,
    opportunity_priority,
    opportunity_title,
    should_open_opportunity,
    summarize_call,
)
from clarity_engine.signals.intake import analyze_call, build_opportunity
from clarity_engine.taxonomy.recommendation_taxonomy import OpportunityStatus, Priority
from clarity_engine.taxonomy.signal_taxonomy import Intent, Urgency


class TestPriority:
    def test_emergency_is_high(self):
        assert opportunity_priority(classify("basement flooding")) == Priority.HIGH

    def test_high_urgency_pricing_is_high(self):
        signal = Signal(raw_text="x", intent=Intent.PRICING, urgency=Urgency.HIGH)
        assert opportunity_priority(signal) == Priority.HIGH

    def test_pricing_is_medium(self):
        assert opportunity_priority(classify("how much does it cost")) == Priority.MEDIUM

    def test_scheduling_is_medium(self):
        assert opportunity_priority(classify("book an appointment")) == Priority.MEDIUM

    def test_general_medium_urgency_is_low(self):
        assert opportunity_priority(classify("call me back today")) == Priority.LOW


class TestShouldOpen:
    def test_missed_call_opens(self):
        assert should_open_opportunity(classify(None)) is True

    def test_pricing_opens(self):
        assert should_open_opportunity(classify("quote please")) is True

    def test_general_inquiry_does_not_open(self):
        assert should_open_opportunity(classify("what are your hours")) is False


class TestFollowUpActions:
    def test_missed_call(self):
        assert follow_up_actions(classify("")) == ["Call back to follow up on missed call"]

    def test_emergency(self):
        actions = follow_up_actions(classify("pipe burst, emergency"))
        assert actions[0] == "Schedule emergency service within 2 hours"
        assert len(actions) == 2

    def test_pricing(self):
        assert follow_up_actions(classify("need an estimate"))[0].startswith("Prepare detailed quote")

    def test_scheduling(self):
        assert follow_up_actions(classify("schedule a visit"))[1] == "Send appointment confirmation"

    def test_general(self):
        assert follow_up_actions(classify("hi there")) == [
            "Follow up with additional information",
            "Send service brochure",
        ]

    def test_returns_fresh_list(self):
        first = follow_up_actions(classify("hi there"))
        first.append("mutated")
        assert "mutated" not in follow_up_actions(classify("hi there"))


class TestSummary:
    def test_missed_call(self):
        assert summarize_call(classify(None)) == MISSED_CALL_SUMMARY

    def test_pricing_with_topic(self):
        summary = summarize_call(classify("Can I get a quote for drain cleaning?"))
        assert summary == (
            "Customer called regarding pricing for cleaning. Urgency level: low. "
            "Can I get a quote for drain cleaning?"
        )

    def test_no_topic(self):
        summary = summarize_call(classify("hello"))
        assert summary.startswith("Customer called regarding a general inquiry. ")

    def test_long_transcript_truncated(self):
        summary = summarize_call(classify("a" * 250))
        assert summary.endswith("a" * 100 + "...")

    def test_titles(self):
        assert opportunity_title(classify(None)) == "Missed call"
        assert opportunity_title(classify("plumbing emergency")) == "Emergency plumbing call"
        assert opportunity_title(classify("quote please")) == "Quote request: service"


class TestIntake:
    def test_analyze_call_uses_profile(self, plumbing_profile):
        analysis = analyze_call("Can I get a quote for drain cleaning?", plumbing_profile)
        assert analysis.signal.detected_topic == "Drain Cleaning"
        assert analysis.estimated_value == 3000
        assert analysis.priority == Priority.MEDIUM
        assert analysis.opens_opportunity is True

    def test_analyze_call_without_pricing(self):
        analysis = analyze_call("emergency leak", BusinessProfile())
        assert analysis.estimated_value is None
        assert analysis.priority == Priority.HIGH

    def test_build_opportunity(self, plumbing_profile, fixed_now):
        analysis = analyze_call("Burst pipe, flooding the kitchen!", plumbing_profile)
        opp = build_opportunity("user-1", analysis, fixed_now, follow_up_days=7)
        assert opp is not None
        assert opp.status == OpportunityStatus.PENDING
        assert opp.priority == Priority.HIGH
        assert opp.estimated_value == 4000
        assert opp.created_at == fixed_now
        assert opp.last_action_at == fixed_now
        assert opp.follow_up_date == fixed_now + timedelta(days=7)
        assert opp.source_signal == analysis.signal

    def test_missed_call_opens_opportunity(self, plumbing_profile, fixed_now):
        opp = build_opportunity("user-1", analyze_call(None, plumbing_profile), fixed_now)
        assert opp is not None
        assert opp.summary == MISSED_CALL_SUMMARY
        assert opp.estimated_value == 1200

    def test_general_inquiry_returns_none(self, plumbing_profile, fixed_now):
        analysis = analyze_call("What are your hours?", plumbing_profile)
        assert build_opportunity("user-1", analysis, fixed_now) is None
