"""
Tests for the SlidingWindow composition root.
"""

import logging
import math

import pytest

from sliding_features import SlidingWindow
from sliding_features.views import (
    Echo,
    LnReturn,
    NonFiniteValueError,
    Rsi,
    Sma,
    Vsct,
)


class TestRegistration:
    """Registering views and naming them."""

    def test_register_returns_indices(self):
        """Indices follow registration order."""
        window = SlidingWindow()
        assert window.register(Echo()) == 0
        assert window.register(Sma(3)) == 1
        assert window.register(Rsi(14)) == 2
        assert len(window) == 3

    def test_default_and_explicit_names(self):
        """Default names use the class name and index."""
        window = SlidingWindow()
        window.register(Sma(3))
        window.register(Echo(), name="close")
        assert window.names == ["Sma_0", "close"]

    def test_duplicate_name_rejected(self):
        """Names must be unique."""
        window = SlidingWindow()
        window.register(Echo(), name="x")
        with pytest.raises(ValueError, match="already registered"):
            window.register(Sma(2), name="x")

    def test_non_view_rejected(self):
        """Only View instances can be registered."""
        with pytest.raises(TypeError, match="Expected a View"):
            SlidingWindow().register(lambda v: v)

    def test_register_many_with_names(self):
        """A dict registers views under its keys."""
        window = SlidingWindow()
        indices = window.register_many({"close": Echo(), "sma": Sma(2)})
        assert indices == [0, 1]
        assert window.names == ["close", "sma"]


class TestUpdates:
    """Forwarding observations."""

    def test_three_views_three_ordered_outputs(self):
        """One output per view, in registration order."""
        window = SlidingWindow()
        window.register(Echo())
        window.register(Sma(2))
        window.register(LnReturn())

        window.update(100.0)
        assert window.last() == [100.0, None, None]

        window.update(110.0)
        echo, sma, ret = window.last()
        assert echo == 110.0
        assert sma == pytest.approx(105.0)
        assert ret == pytest.approx(math.log(1.1))

    def test_views_are_independent(self, random_walk):
        """Each registered view matches the same view updated alone."""
        window = SlidingWindow()
        window.register(Vsct(10, view=LnReturn()))
        window.register(Rsi(14))
        alone = Rsi(14)
        for value in random_walk[:100] + 1000.0:
            window.update(float(value))
            alone.update(float(value))
        assert window.last()[1] == alone.last()

    def test_snapshot_and_readiness(self):
        """snapshot keys outputs by name; is_ready needs every view."""
        window = SlidingWindow()
        window.register(Echo(), name="close")
        window.register(Sma(2), name="sma")
        window.update(1.0)
        assert window.snapshot() == {"close": 1.0, "sma": None}
        assert not window.is_ready
        window.update(3.0)
        assert window.snapshot() == {"close": 3.0, "sma": 2.0}
        assert window.is_ready


class TestFiniteCheck:
    """Handling of NaN / inf observations."""

    def test_strict_mode_rejects_before_updating(self):
        """No view sees a rejected value."""
        window = SlidingWindow(check_finite=True)
        echo = Echo()
        window.register(echo)
        window.update(1.0)
        with pytest.raises(NonFiniteValueError):
            window.update(float("nan"))
        with pytest.raises(NonFiniteValueError):
            window.update(float("inf"))
        assert echo.last() == 1.0

    def test_lenient_mode_logs_warning(self, caplog):
        """By default the value passes through with a warning."""
        window = SlidingWindow()
        echo = Echo()
        window.register(echo)
        with caplog.at_level(logging.WARNING, logger="sliding_features"):
            window.update(float("nan"))
        assert "Non-finite observation" in caplog.text
        assert math.isnan(echo.last())

    def test_strict_mode_from_environment(self, monkeypatch):
        """SLIDING_FEATURES_CHECK_FINITE=true enables the check."""
        monkeypatch.setenv("SLIDING_FEATURES_CHECK_FINITE", "true")
        window = SlidingWindow()
        assert window.check_finite is True
