"""
Tests for oscillators: Rsi, MyRSI, CTI, NET, CG, PFE, BinaryEntropy.
"""

import numpy as np
import pytest

from sliding_features.views import (
    BinaryEntropy,
    CenterOfGravity,
    CorrelationTrendIndicator,
    Echo,
    MyRSI,
    NoiseEliminationTechnology,
    PolarizedFractalEfficiency,
    Rsi,
    WindowLengthError,
)


RISING = [float(i) for i in range(1, 41)]
FALLING = [float(-i) for i in range(1, 41)]
FLAT = [5.0] * 40


class TestRsi:
    """Windowed RSI."""

    def test_known_value(self, feed):
        """Steps 0, +1, -1, +2: gains 3, losses 1."""
        assert feed(Rsi(4), [1.0, 2.0, 1.0, 3.0]) == [None, None, None, pytest.approx(75.0)]

    def test_directional_extremes(self, feed):
        """Only gains gives 100, only losses 0, no movement 50."""
        assert feed(Rsi(10), RISING)[-1] == 100.0
        assert feed(Rsi(10), FALLING)[-1] == pytest.approx(0.0)
        assert feed(Rsi(10), FLAT)[-1] == 50.0

    def test_bounded(self, feed, random_walk):
        """Output stays in [0, 100]."""
        out = feed(Rsi(14), random_walk)
        assert all(0.0 <= v <= 100.0 for v in out[13:])

    def test_matches_brute_force(self, feed, random_walk):
        """Running sums equal gains/losses recomputed over each window."""
        window_len = 14
        out = feed(Rsi(window_len), random_walk)
        steps = np.diff(random_walk)
        for i in range(window_len, len(random_walk)):
            window = steps[i - window_len:i]
            gains = window[window > 0].sum()
            losses = -window[window < 0].sum()
            assert out[i] == pytest.approx(100.0 * gains / (gains + losses), abs=1e-8)

    def test_flat_after_volatile_returns_fifty(self, feed, flat_after_volatile):
        """Gain and loss sums return to exactly zero once every step is flat."""
        assert feed(Rsi(14), flat_after_volatile)[-1] == 50.0

    def test_one_sided_after_volatile_returns_hundred(self, feed, flat_after_volatile):
        """No losses left in the window gives exactly 100."""
        values = np.concatenate([flat_after_volatile[:300], 123.456 + np.arange(30.0)])
        assert feed(Rsi(14), values)[-1] == 100.0


class TestMyRSI:
    """Ehlers MyRSI in [-1, 1]."""

    def test_known_value(self, feed):
        """(cu - cd) / (cu + cd) with cu=3, cd=1."""
        assert feed(MyRSI(4), [1.0, 2.0, 1.0, 3.0])[-1] == pytest.approx(0.5)

    def test_flat_keeps_zero(self, feed):
        """A flat window keeps the initial 0."""
        assert feed(MyRSI(5), FLAT)[-1] == 0.0

    def test_flat_after_volatile_holds_value(self, feed, flat_after_volatile):
        """Once every step in the window is flat the output stops changing."""
        out = feed(MyRSI(14), flat_after_volatile)
        assert len(set(out[-20:])) == 1

    def test_bounded(self, feed, random_walk):
        """Output stays in [-1, 1]."""
        out = feed(MyRSI(14), random_walk)
        assert all(-1.0 <= v <= 1.0 for v in out[13:])


class TestCorrelationTrendIndicator:
    """Pearson correlation with time."""

    def test_trend_direction(self, feed):
        """A straight line correlates perfectly."""
        assert feed(CorrelationTrendIndicator(10), RISING)[-1] == pytest.approx(1.0)
        assert feed(CorrelationTrendIndicator(10), FALLING)[-1] == pytest.approx(-1.0)

    def test_flat_returns_zero(self, feed):
        """Zero variance gives 0."""
        assert feed(CorrelationTrendIndicator(10), FLAT)[-1] == 0.0

    def test_flat_after_volatile_returns_zero(self, feed, flat_after_volatile):
        """A flat window reached through evictions reads exactly 0."""
        assert feed(CorrelationTrendIndicator(20), flat_after_volatile)[-1] == 0.0

    def test_matches_numpy_corrcoef(self, feed, random_walk):
        """Same as np.corrcoef on the last window."""
        window_len = 20
        out = feed(CorrelationTrendIndicator(window_len), random_walk)
        window = random_walk[-window_len:]
        expected = np.corrcoef(np.arange(window_len), window)[0, 1]
        assert out[-1] == pytest.approx(expected, abs=1e-9)

    def test_bounded(self, feed, random_walk):
        """Output stays in [-1, 1]."""
        out = feed(CorrelationTrendIndicator(8), random_walk)
        assert all(-1.0 <= v <= 1.0 for v in out[7:])


class TestNoiseEliminationTechnology:
    """Kendall-style rank correlation."""

    def test_trend_direction(self, feed):
        """Strictly rising is +1, strictly falling -1, flat 0."""
        assert feed(NoiseEliminationTechnology(10), RISING)[-1] == pytest.approx(1.0)
        assert feed(NoiseEliminationTechnology(10), FALLING)[-1] == pytest.approx(-1.0)
        assert feed(NoiseEliminationTechnology(10), FLAT)[-1] == 0.0

    def test_known_value(self, feed):
        """1, 3, 2: two concordant pairs, one discordant."""
        assert feed(NoiseEliminationTechnology(3), [1.0, 3.0, 2.0])[-1] == pytest.approx(1.0 / 3.0)

    def test_bounded(self, feed, random_walk):
        """Output stays in [-1, 1]."""
        out = feed(NoiseEliminationTechnology(12), random_walk)
        assert all(-1.0 <= v <= 1.0 for v in out[11:])


class TestCenterOfGravity:
    """Ehlers center of gravity."""

    def test_constant_input_is_zero(self, feed):
        """A flat window sits at the center."""
        assert feed(CenterOfGravity(10), FLAT)[-1] == pytest.approx(0.0, abs=1e-12)

    def test_zero_sum_returns_zero(self, feed):
        """A window summing to zero gives 0."""
        assert feed(CenterOfGravity(2), [1.0, -1.0])[-1] == 0.0

    def test_matches_direct_formula(self, feed, random_walk):
        """Weights run from n for the oldest value down to 1 for the newest."""
        window_len = 10
        out = feed(CenterOfGravity(window_len), random_walk)
        window = random_walk[-window_len:]
        weights = np.arange(window_len, 0, -1)
        expected = -np.dot(weights, window) / window.sum() + (window_len + 1) / 2.0
        assert out[-1] == pytest.approx(expected, abs=1e-9)


class TestPolarizedFractalEfficiency:
    """Fractal efficiency of the price path."""

    def test_default_readiness_waits_for_ema(self, feed, random_walk):
        """Raw values start at window_len; the default Ema needs window_len of them."""
        out = feed(PolarizedFractalEfficiency(5), random_walk[:12])
        assert out[:8] == [None] * 8
        assert all(v is not None for v in out[8:])

    def test_straight_line_is_efficient(self, feed):
        """A unit-slope line has efficiency 1; its mirror -1."""
        assert feed(PolarizedFractalEfficiency(5), RISING)[-1] == pytest.approx(1.0)
        assert feed(PolarizedFractalEfficiency(5), FALLING)[-1] == pytest.approx(-1.0)

    def test_raw_value_with_identity_average(self, feed):
        """Echo as moving average exposes the raw efficiency."""
        pfe = PolarizedFractalEfficiency(3, moving_average=Echo())
        out = feed(pfe, [0.0, 1.0, 0.0])
        path = 2.0 * np.sqrt(2.0)
        assert out[-1] == pytest.approx(-2.0 / path)

    def test_bounded(self, feed, random_walk):
        """Output stays in [-1, 1]."""
        out = feed(PolarizedFractalEfficiency(10), random_walk)
        assert all(-1.0 <= v <= 1.0 for v in out if v is not None)

    def test_window_of_one_rejected(self):
        """Efficiency needs at least one step."""
        with pytest.raises(WindowLengthError, match=">= 2"):
            PolarizedFractalEfficiency(1)


class TestBinaryEntropy:
    """Entropy of value signs."""

    def test_known_values(self, feed):
        """Even split is 1 bit, one sign is 0 bits."""
        assert feed(BinaryEntropy(4), [1.0, -1.0, 1.0, -1.0])[-1] == pytest.approx(1.0)
        assert feed(BinaryEntropy(4), [1.0, 1.0, 1.0, 1.0])[-1] == 0.0
        assert feed(BinaryEntropy(4), [1.0, 1.0, 1.0, -1.0])[-1] == pytest.approx(0.8112781244591328)

    def test_window_gate_and_eviction(self, feed):
        """Evicted signs leave the counts."""
        out = feed(BinaryEntropy(2), [-1.0, -1.0, 1.0, 1.0])
        assert out == [None, 0.0, pytest.approx(1.0), 0.0]
