"""
Tests for windowless rolling views: Drawdown, LnReturn, WelfordRolling.
"""

import numpy as np
import pytest

from sliding_features.views import Drawdown, LnReturn, WelfordRolling


class TestLnReturn:
    """Log returns between consecutive values."""

    def test_first_value_not_ready(self, feed):
        """The first value only seeds the previous price."""
        assert feed(LnReturn(), [100.0]) == [None]

    def test_known_value(self, feed):
        """ln(110 / 100)."""
        out = feed(LnReturn(), [100.0, 110.0])
        assert out[1] == pytest.approx(0.09531017980432493, abs=1e-12)

    def test_zero_previous_value_yields_zero(self, feed):
        """A zero previous value cannot be divided by and gives 0.0."""
        out = feed(LnReturn(), [0.0, 5.0])
        assert out[1] == 0.0

    def test_matches_numpy(self, feed, price_series):
        """Matches np.diff(np.log(prices))."""
        out = feed(LnReturn(), price_series)
        expected = np.diff(np.log(price_series.to_numpy()))
        np.testing.assert_allclose(out[1:], expected, atol=1e-12)


class TestDrawdown:
    """Maximum drawdown tracking."""

    def test_ready_after_first_value(self, feed):
        """Drawdown reports 0.0 after the first observation."""
        drawdown = Drawdown()
        assert drawdown.last() is None
        assert feed(drawdown, [100.0]) == [0.0]

    def test_known_sequence(self, feed):
        """Peak 120, lowest point after it 80."""
        out = feed(Drawdown(), [100.0, 120.0, 90.0, 110.0, 80.0])
        assert out[:2] == [0.0, 0.0]
        assert out[2] == pytest.approx(0.25)
        assert out[3] == pytest.approx(0.25)
        assert out[4] == pytest.approx(40.0 / 120.0)

    def test_new_peak_keeps_previous_max(self, feed):
        """A smaller drawdown after a new peak does not lower the output."""
        drawdown = Drawdown()
        out = feed(drawdown, [100.0, 50.0, 200.0, 150.0])
        assert out[-1] == pytest.approx(0.5)
        assert drawdown.peak == 200.0

    def test_monotonic_non_decreasing(self, feed, random_walk):
        """Output never decreases."""
        out = feed(Drawdown(), random_walk)
        assert all(b >= a for a, b in zip(out, out[1:]))


class TestWelfordRolling:
    """Running mean/std over the whole history."""

    def test_matches_numpy(self, feed, random_walk):
        """Sample std and mean match numpy after every tick count checked."""
        welford = WelfordRolling()
        feed(welford, random_walk)
        assert welford.last() == pytest.approx(np.std(random_walk, ddof=1), rel=1e-9)
        assert welford.mean == pytest.approx(np.mean(random_walk), rel=1e-12)

    def test_single_value_has_zero_std(self, feed):
        """With one value the variance is 0."""
        assert feed(WelfordRolling(), [3.0]) == [0.0]


class TestCurrentDrawdown:
    """Drawdown from the running peak."""

    def test_zero_after_new_peak(self, feed):
        """A new all-time high resets the current drawdown, not the maximum."""
        drawdown = Drawdown()
        feed(drawdown, [100.0, 80.0])
        assert drawdown.current_drawdown == pytest.approx(0.2)
        feed(drawdown, [150.0])
        assert drawdown.current_drawdown == 0.0
        assert drawdown.last() == pytest.approx(0.2)
