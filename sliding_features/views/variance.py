"""
Windowed mean and variance via Welford's online algorithm.

Includes WelfordOnline and the two transforms built on it: Vst (variance
stabilizing) and Vsct (variance stabilizing and centering).
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field

from .base import View, validate_window_len
from .pure import Echo


@dataclass
class WelfordOnline(View):
    """
    Sliding-window standard deviation with O(1) updates.

    Insertion (n -> n + 1):
        mean' = mean + (x - mean) / (n + 1)
        m2'   = m2 + (x - mean) * (x - mean')

    Eviction (n -> n - 1), the algebraic inverse:
        mean' = mean + (mean - x) / (n - 1)
        m2'   = m2 - (x - mean) * (x - mean')

    Variance uses the sample estimator m2 / (n - 1). Output is ready once the
    window is full.

    A window holding a single repeated value is detected from the run of
    trailing equal values and set to mean = value, m2 = 0 exactly.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _mean: float = field(default=0.0, init=False)
    _m2: float = field(default=0.0, init=False)
    _run: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            self._evict(self._buffer.popleft())

        if self._buffer and self._buffer[-1] == val:
            self._run += 1
        else:
            self._run = 1

        self._buffer.append(val)
        n = len(self._buffer)
        if self._run >= n:
            self._mean = val
            self._m2 = 0.0
            return
        old_mean = self._mean
        self._mean += (val - old_mean) / n
        self._m2 += (val - old_mean) * (val - self._mean)

    def _evict(self, old_val: float) -> None:
        n = len(self._buffer) + 1
        if n <= 1:
            self._mean = 0.0
            self._m2 = 0.0
            return
        # same as (n * mean - x) / (n - 1), exact when x == mean
        new_mean = self._mean + (self._mean - old_val) / (n - 1)
        self._m2 -= (old_val - self._mean) * (old_val - new_mean)
        self._mean = new_mean

    @property
    def n(self) -> int:
        """Number of values currently in the window."""
        return len(self._buffer)

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def variance(self) -> float:
        n = len(self._buffer)
        if n > 1:
            # rounding can push m2 marginally below zero on flat windows
            return max(self._m2, 0.0) / (n - 1)
        return 0.0

    def last(self) -> float | None:
        if len(self._buffer) < self.window_len:
            return None
        return math.sqrt(self.variance)


@dataclass
class Vst(View):
    """
    Variance Stabilizing Transform.

    out = last / std over the window, or last when std is zero.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _welford: WelfordOnline = field(init=False)
    _last: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self._welford = WelfordOnline(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._welford.update(val)
        self._last = val

    def last(self) -> float | None:
        std_dev = self._welford.last()
        if std_dev is None:
            return None
        if std_dev == 0.0:
            return self._last
        return self._last / std_dev


@dataclass
class Vsct(View):
    """
    Variance Stabilizing Centering Transform (rolling z-score).

    out = (last - mean) / std over the window, or 0 when std is zero.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _welford: WelfordOnline = field(init=False)
    _last: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self._welford = WelfordOnline(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._welford.update(val)
        self._last = val

    def last(self) -> float | None:
        std_dev = self._welford.last()
        if std_dev is None:
            return None
        if std_dev == 0.0:
            return 0.0
        return (self._last - self._welford.mean) / std_dev
