"""
Pytest configuration and shared fixtures.
"""

import numpy as np
import pandas as pd
import pytest

from sliding_features.config import reset_config


ENV_VARS = [
    "SLIDING_FEATURES_LOG_LEVEL",
    "SLIDING_FEATURES_LOG_DIR",
    "SLIDING_FEATURES_CHECK_FINITE",
    "SLIDING_FEATURES_ALMA_SIGMA",
    "SLIDING_FEATURES_ALMA_OFFSET",
    "SLIDING_FEATURES_EMA_ALPHA",
    "SLIDING_FEATURES_FISHER_MA_LEN",
]


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Start every test from library defaults and a fresh Config."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def random_walk() -> np.ndarray:
    """500-step Gaussian random walk starting near 100."""
    rng = np.random.default_rng(42)
    return 100.0 + np.cumsum(rng.normal(0.0, 1.0, 500))


@pytest.fixture
def flat_after_volatile() -> np.ndarray:
    """300-step volatile random walk followed by 40 copies of 123.456."""
    rng = np.random.default_rng(3)
    volatile = 100.0 + np.cumsum(rng.normal(0.0, 5.0, 300))
    return np.concatenate([volatile, np.full(40, 123.456)])


@pytest.fixture
def price_series() -> pd.Series:
    """Strictly positive price series (geometric random walk) with a time index."""
    rng = np.random.default_rng(7)
    prices = 100.0 * np.exp(np.cumsum(rng.normal(0.0, 0.01, 300)))
    index = pd.date_range("2024-01-01", periods=len(prices), freq="h")
    return pd.Series(prices, index=index, name="close")


@pytest.fixture
def sine_wave() -> np.ndarray:
    """Sine with a 20-sample period."""
    t = np.arange(400)
    return np.sin(2.0 * np.pi * t / 20.0)


@pytest.fixture
def feed():
    """Update a view with every value and return the list of outputs."""

    def _feed(view, values):
        out = []
        for value in values:
            view.update(float(value))
            out.append(view.last())
        return out

    return _feed
