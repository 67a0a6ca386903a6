"""
Tests for clarity_engine/signals/value.py.

What we test
------------
estimate_value():
  - No price range → None, for every kind of signal.
  - High urgency → 80% of max (1000–5000 → exactly 4000).
  - Pricing / scheduling → midpoint.
  - Everything else → 120% of min.
  - High urgency takes precedence over a pricing intent.
  - Rounding is half-up, not banker's rounding.
"""

from __future__ import annotations

import pytest

from clarity_engine.models.profile import PriceRange
from clarity_engine.models.signal import Signal
from clarity_engine.signals.classifier import classify
from clarity_engine.signals.value import estimate_value
from clarity_engine.taxonomy.signal_taxonomy import Intent, Urgency
from clarity_engine.utils.numeric import round_half_up

RANGE = PriceRange(min=1000, max=5000)


def _signal(intent: Intent = Intent.GENERAL_INQUIRY, urgency: Urgency = Urgency.LOW) -> Signal:
    return Signal(raw_text="x", intent=intent, urgency=urgency)


class TestNoPriceRange:
    @pytest.mark.parametrize(
        "signal",
        [
            classify(None),
            classify("flooding emergency"),
            classify("quote please"),
            classify("schedule an appointment"),
            classify("hello"),
        ],
    )
    def test_returns_none(self, signal):
        assert estimate_value(signal, None) is None


class TestRules:
    def test_high_urgency_is_80_percent_of_max(self):
        assert estimate_value(_signal(Intent.EMERGENCY, Urgency.HIGH), RANGE) == 4000

    def test_pricing_is_midpoint(self):
        assert estimate_value(_signal(Intent.PRICING), RANGE) == 3000

    def test_scheduling_is_midpoint(self):
        assert estimate_value(_signal(Intent.SCHEDULING, Urgency.MEDIUM), RANGE) == 3000

    def test_general_is_120_percent_of_min(self):
        assert estimate_value(_signal(), RANGE) == 1200

    def test_missed_call_uses_general_rule(self):
        assert estimate_value(classify(None), RANGE) == 1200

    def test_high_urgency_beats_pricing(self):
        assert estimate_value(_signal(Intent.PRICING, Urgency.HIGH), RANGE) == 4000

    def test_deterministic(self):
        signal = classify("urgent leak, need a quote")
        assert estimate_value(signal, RANGE) == estimate_value(signal, RANGE)


class TestRounding:
    def test_midpoint_half_rounds_up(self):
        assert estimate_value(_signal(Intent.PRICING), PriceRange(min=0, max=1)) == 1

    def test_round_half_up_helper(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4999) == 2
        assert round_half_up(0.0) == 0

    def test_returns_int(self):
        assert isinstance(estimate_value(_signal(), PriceRange(min=333, max=999)), int)
