"""
Moving averages and simple windowed aggregates.

Includes Sma, Ema, Alma, Cumulative, Lag and Roc. Every view here keeps a
running aggregate that is corrected on eviction instead of being recomputed
from the buffer.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field

from sliding_features.config.constants import (
    DEFAULT_ALMA_OFFSET,
    DEFAULT_ALMA_SIGMA,
    DEFAULT_EMA_ALPHA,
)

from .base import View, validate_window_len
from .pure import Echo


@dataclass
class Sma(View):
    """
    Simple Moving Average with O(1) updates.

    Uses running sum technique:
        sma = (sum + new - oldest) / window_len
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _running_sum: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            self._running_sum -= self._buffer.popleft()

        self._buffer.append(val)
        self._running_sum += val

    def last(self) -> float | None:
        if len(self._buffer) < self.window_len:
            return None
        return self._running_sum / len(self._buffer)


@dataclass
class Ema(View):
    """
    Exponential Moving Average with O(1) updates.

    Formula:
        w = alpha / (1 + window_len)
        ema = w * value + (1 - w) * ema_prev

    Seeded with the first value. Output is held back until window_len
    values have been observed so the seed does not dominate.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    alpha: float = DEFAULT_EMA_ALPHA
    _weight: float = field(init=False)
    _ema: float = field(default=0.0, init=False)
    _count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        if self.alpha <= 0:
            raise ValueError(f"alpha must be > 0, got {self.alpha}")
        self._weight = self.alpha / (1.0 + self.window_len)
        if self._weight > 1.0:
            raise ValueError(
                f"alpha / (1 + window_len) must be <= 1, got {self._weight}"
            )

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1

        if self._count == 1:
            self._ema = val
        else:
            self._ema = self._weight * val + (1.0 - self._weight) * self._ema

    def last(self) -> float | None:
        if self._count < self.window_len:
            return None
        return self._ema


@dataclass
class Alma(View):
    """
    Arnaud Legoux Moving Average with O(1) updates.

    Formula:
        m = offset * (window_len + 1)
        s = window_len / sigma
        weight = exp(-(i - m)^2 / (2 * s^2)),  i = buffer length at insertion
        alma = weighted_sum / weight_sum

    Each value keeps the weight it was inserted with, so the evicted pair can
    be subtracted from both running sums. Ready from the first value.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    sigma: float = DEFAULT_ALMA_SIGMA
    offset: float = DEFAULT_ALMA_OFFSET
    _values: deque = field(default_factory=deque, init=False)
    _weights: deque = field(default_factory=deque, init=False)
    _weighted_sum: float = field(default=0.0, init=False)
    _weight_sum: float = field(default=0.0, init=False)
    _m: float = field(init=False)
    _s: float = field(init=False)
    _out: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        if self.sigma <= 0:
            raise ValueError(f"sigma must be > 0, got {self.sigma}")
        self._m = self.offset * (self.window_len + 1)
        self._s = self.window_len / self.sigma

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._values) >= self.window_len:
            old_val = self._values.popleft()
            old_wt = self._weights.popleft()
            self._weighted_sum -= old_wt * old_val
            self._weight_sum -= old_wt

        i = len(self._values)
        wt = math.exp(-((i - self._m) ** 2) / (2.0 * self._s * self._s))
        self._weighted_sum += wt * val
        self._weight_sum += wt
        self._values.append(val)
        self._weights.append(wt)

        if self._weight_sum > 0.0:
            self._out = self._weighted_sum / self._weight_sum
        else:
            # weights underflowed to zero, fall back to the raw value
            self._out = val

    def last(self) -> float | None:
        return self._out


@dataclass
class Cumulative(View):
    """Sum of the values in the sliding window."""

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _running_sum: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            self._running_sum -= self._buffer.popleft()

        self._buffer.append(val)
        self._running_sum += val

    def last(self) -> float | None:
        if len(self._buffer) < self.window_len:
            return None
        return self._running_sum


@dataclass
class Lag(View):
    """
    Re-emits values window_len - 1 ticks later.

    With window_len=3 the first value comes out on the third update.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _out: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        self._buffer.append(val)
        if len(self._buffer) >= self.window_len:
            self._out = self._buffer.popleft()

    def last(self) -> float | None:
        return self._out


@dataclass
class Roc(View):
    """
    Rate of Change in percent.

    Formula:
        roc = (newest - base) / base * 100

    where base is the value window_len ticks back, the one evicted from the
    window on this tick. Ready once such a value exists. A zero base keeps
    the previous output.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _out: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        base = None
        if len(self._buffer) >= self.window_len:
            base = self._buffer.popleft()
        self._buffer.append(val)

        if base is not None and base != 0.0:
            self._out = (val - base) / base * 100.0

    def last(self) -> float | None:
        return self._out
