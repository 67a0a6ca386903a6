"""
Tests for clarity_engine/utils/numeric.py.

What we test
------------
  - round_half_up(): .5 rounds up, unlike the built-in round().
  - clamp(): values below, inside and above the bounds.
"""

from __future__ import annotations

import pytest

from clarity_engine.utils.numeric import clamp, round_half_up


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,expected", [(2.5, 3), (3.5, 4), (59.8, 60), (2.4, 2)])
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected


class TestClamp:
    def test_below(self):
        assert clamp(-5, 0, 100) == 0

    def test_inside(self):
        assert clamp(57, 0, 100) == 57

    def test_above(self):
        assert clamp(150, 0, 100) == 100
