"""Property-based tests for the Fibonacci retracement calculator."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from app.services.fibonacci import FIB_RATIOS, retracement_levels, retracement_value


price = st.floats(min_value=0.01, max_value=1_000_000.0, allow_nan=False, allow_infinity=False)


class TestRatioSet:
    def test_fixed_ascending_ratios(self):
        assert FIB_RATIOS == (0.0, 0.236, 0.382, 0.5, 0.618, 0.786, 1.0)

    def test_levels_follow_ratio_order(self):
        result = retracement_levels(9.0, 13.0)

        assert [level.ratio for level in result.levels] == list(FIB_RATIOS)


class TestLevelValues:
    def test_known_range(self):
        result = retracement_levels(9.0, 13.0)
        values = {level.ratio: level.value for level in result.levels}

        assert result.low == 9.0
        assert result.high == 13.0
        assert values[0.0] == 13.0
        assert values[0.236] == pytest.approx(12.056)
        assert values[0.5] == pytest.approx(11.0)
        assert values[0.618] == pytest.approx(10.528)
        assert values[1.0] == 9.0

    @given(low=price, high=price)
    @settings(max_examples=200)
    def test_endpoints_are_exact(self, low: float, high: float):
        lo, hi = min(low, high), max(low, high)
        result = retracement_levels(lo, hi)

        assert result.levels[0].value == hi
        assert result.levels[-1].value == lo

    @given(low=price, high=price)
    @settings(max_examples=200)
    def test_values_descend_from_high_to_low(self, low: float, high: float):
        result = retracement_levels(low, high)
        values = [level.value for level in result.levels]

        for a, b in zip(values, values[1:]):
            assert a >= b or a == pytest.approx(b)

    def test_degenerate_range(self):
        result = retracement_levels(5.0, 5.0)
        assert all(level.value == 5.0 for level in result.levels)

    def test_value_formula(self):
        assert retracement_value(10.0, 20.0, 0.382) == pytest.approx(20.0 - 0.382 * 10.0)


class TestSwapPolicy:
    """Inverted inputs are swapped, not rejected."""

    @given(a=price, b=price)
    @settings(max_examples=200)
    def test_symmetric(self, a: float, b: float):
        assert retracement_levels(a, b) == retracement_levels(b, a)

    def test_inverted_input_reports_ordered_bounds(self):
        result = retracement_levels(13.0, 9.0)

        assert result.low == 9.0
        assert result.high == 13.0
        assert result.levels[0].value == 13.0
