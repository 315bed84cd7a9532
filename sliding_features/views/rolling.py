"""
Rolling views: unbounded history, O(1) state, no buffer.

Includes Drawdown, LnReturn and WelfordRolling.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .base import View
from .pure import Echo


@dataclass
class Drawdown(View):
    """
    Maximum drawdown observed so far.

    Formula:
        peak = max(values so far)
        dd = (peak - min_after_peak) / peak
        out = max(dd over all ticks)

    The output never decreases. A zero peak contributes no drawdown.
    """

    view: View = field(default_factory=Echo)
    _peak: float = field(default=-math.inf, init=False)
    _min_after_peak: float = field(default=math.inf, init=False)
    _max_drawdown: float = field(default=0.0, init=False)
    _count: int = field(default=0, init=False)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1

        if val > self._peak:
            self._peak = val
            self._min_after_peak = val
        if val < self._min_after_peak:
            self._min_after_peak = val

        if self._peak != 0.0:
            dd = (self._peak - self._min_after_peak) / self._peak
            if dd > self._max_drawdown:
                self._max_drawdown = dd

    @property
    def peak(self) -> float | None:
        """Highest value observed so far."""
        return self._peak if self._count else None

    @property
    def current_drawdown(self) -> float | None:
        """Drawdown from the current peak; 0 right after a new peak."""
        if self._count == 0:
            return None
        if self._peak == 0.0:
            return 0.0
        return (self._peak - self._min_after_peak) / self._peak

    def last(self) -> float | None:
        if self._count == 0:
            return None
        return self._max_drawdown


@dataclass
class LnReturn(View):
    """
    Natural log return between consecutive values.

    Formula:
        out = ln(current / previous)

    The first value only seeds state. A zero previous value yields 0.0.
    """

    view: View = field(default_factory=Echo)
    _prev: float = field(default=0.0, init=False)
    _current: float = field(default=0.0, init=False)
    _count: int = field(default=0, init=False)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1
        self._prev = self._current
        self._current = val

    def last(self) -> float | None:
        if self._count < 2:
            return None
        if self._prev == 0.0:
            return 0.0
        # negative ratios give NaN rather than raising
        with np.errstate(invalid="ignore", divide="ignore"):
            return float(np.log(self._current / self._prev))


@dataclass
class WelfordRolling(View):
    """
    Running mean and standard deviation over the whole history.

    Welford update:
        n += 1
        mean += (x - mean) / n
        m2 += (x - mean_old) * (x - mean)

    Output is the sample standard deviation sqrt(m2 / (n - 1)).
    """

    view: View = field(default_factory=Echo)
    _mean: float = field(default=0.0, init=False)
    _m2: float = field(default=0.0, init=False)
    _n: int = field(default=0, init=False)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._n += 1
        old_mean = self._mean
        self._mean += (val - old_mean) / self._n
        self._m2 += (val - old_mean) * (val - self._mean)

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def variance(self) -> float:
        if self._n > 1:
            return max(self._m2, 0.0) / (self._n - 1)
        return 0.0

    def last(self) -> float | None:
        if self._n == 0:
            return None
        return math.sqrt(self.variance)
