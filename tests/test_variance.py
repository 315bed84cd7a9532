"""
Tests for windowed Welford variance and the transforms built on it.
"""

import numpy as np
import pandas as pd
import pytest

from sliding_features.views import Vsct, Vst, WelfordOnline, WindowLengthError


class TestWelfordOnline:
    """Sliding-window standard deviation."""

    def test_window_gate(self, feed):
        """Not ready until the window is full."""
        out = feed(WelfordOnline(4), [1.0, 2.0, 3.0, 4.0])
        assert out[:3] == [None, None, None]
        assert out[3] == pytest.approx(np.std([1.0, 2.0, 3.0, 4.0], ddof=1))

    def test_matches_two_pass_std(self, feed, random_walk):
        """After many evictions the result still matches a two-pass computation."""
        window_len = 20
        out = feed(WelfordOnline(window_len), random_walk)
        expected = pd.Series(random_walk).rolling(window_len).std(ddof=1)
        for got, exp in zip(out[window_len - 1:], expected[window_len - 1:]):
            assert got == pytest.approx(exp, abs=1e-6)

    def test_tracks_mean(self, feed, random_walk):
        """mean property equals the window mean."""
        welford = WelfordOnline(15)
        feed(welford, random_walk)
        assert welford.mean == pytest.approx(random_walk[-15:].mean(), abs=1e-9)
        assert welford.n == 15

    def test_flat_window_has_zero_std(self, feed):
        """A constant input gives exactly zero."""
        out = feed(WelfordOnline(5), [3.0] * 12)
        assert out[-1] == 0.0

    def test_flat_after_volatile_is_exactly_zero(self, feed, flat_after_volatile):
        """A flat window reached through evictions reports zero, not residue."""
        welford = WelfordOnline(20)
        out = feed(welford, flat_after_volatile)
        assert out[-1] == 0.0
        assert welford.mean == 123.456
        assert welford.variance == 0.0

    def test_recovers_after_flat_stretch(self, feed, flat_after_volatile, random_walk):
        """Varied input after a flat window matches a two-pass computation again."""
        values = np.concatenate([flat_after_volatile, random_walk[:30]])
        out = feed(WelfordOnline(20), values)
        assert out[-1] == pytest.approx(np.std(values[-20:], ddof=1), rel=1e-4)

    def test_zero_window_rejected(self):
        """window_len=0 is a misconfiguration."""
        with pytest.raises(WindowLengthError):
            WelfordOnline(0)


class TestVst:
    """Variance stabilizing transform."""

    def test_divides_by_std(self, feed):
        """last / std over the window."""
        values = [1.0, 2.0, 4.0]
        out = feed(Vst(3), values)
        assert out[-1] == pytest.approx(4.0 / np.std(values, ddof=1))

    def test_flat_window_returns_value(self, feed):
        """Zero std falls back to the raw value."""
        assert feed(Vst(3), [2.0, 2.0, 2.0])[-1] == 2.0

    def test_flat_after_volatile_returns_value(self, feed, flat_after_volatile):
        """The zero-std fallback still applies after evictions."""
        assert feed(Vst(20), flat_after_volatile)[-1] == 123.456

    def test_zero_window_rejected(self):
        """Construction validates the window."""
        with pytest.raises(WindowLengthError):
            Vst(0)


class TestVsct:
    """Rolling z-score."""

    def test_matches_pandas_zscore(self, feed, random_walk):
        """(x - rolling mean) / rolling std."""
        window_len = 30
        out = feed(Vsct(window_len), random_walk)
        series = pd.Series(random_walk)
        rolling = series.rolling(window_len)
        expected = (series - rolling.mean()) / rolling.std(ddof=1)
        for got, exp in zip(out[window_len - 1:], expected[window_len - 1:]):
            assert got == pytest.approx(exp, abs=1e-6)

    def test_flat_window_returns_zero(self, feed):
        """Zero std gives 0."""
        assert feed(Vsct(3), [2.0, 2.0, 2.0])[-1] == 0.0

    def test_flat_after_volatile_returns_zero(self, feed, flat_after_volatile):
        """The zero-std fallback still applies after evictions."""
        assert feed(Vsct(20), flat_after_volatile)[-1] == 0.0
