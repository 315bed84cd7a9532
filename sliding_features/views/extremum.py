"""
Extremum-tracking views over a sliding window.

Includes Max, Min, HLNormalizer and EhlersFisherTransform.

The tracked extremum is updated in O(1) on insertion. When the evicted value
is the current extremum the remaining buffer is rescanned, which is O(window)
in the worst case (monotonic input evicts the extremum on every tick). Output
depends only on the buffer contents, never on how often a rescan happened.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field

from sliding_features.config.constants import DEFAULT_FISHER_MA_LEN, FISHER_CLAMP

from .base import View, validate_window_len
from .moving_average import Ema
from .pure import Echo


@dataclass
class _HighLow:
    """Window high/low with the rescan-on-eviction fallback."""

    window_len: int
    _buffer: deque = field(default_factory=deque, init=False)
    high: float = field(default=-math.inf, init=False)
    low: float = field(default=math.inf, init=False)

    def push(self, val: float) -> None:
        if len(self._buffer) >= self.window_len:
            old = self._buffer.popleft()
            if old >= self.high or old <= self.low:
                self._rescan()

        self._buffer.append(val)
        if val > self.high:
            self.high = val
        if val < self.low:
            self.low = val

    def _rescan(self) -> None:
        if self._buffer:
            self.high = max(self._buffer)
            self.low = min(self._buffer)
        else:
            self.high = -math.inf
            self.low = math.inf

    def __len__(self) -> int:
        return len(self._buffer)


@dataclass
class Max(View):
    """Maximum value over the sliding window."""

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _max: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            popped = self._buffer.popleft()
            if popped == self._max:
                self._max = max(self._buffer) if self._buffer else None

        self._buffer.append(val)
        if self._max is None or val > self._max:
            self._max = val

    def last(self) -> float | None:
        if len(self._buffer) < self.window_len:
            return None
        return self._max


@dataclass
class Min(View):
    """Minimum value over the sliding window."""

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _min: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            popped = self._buffer.popleft()
            if popped == self._min:
                self._min = min(self._buffer) if self._buffer else None

        self._buffer.append(val)
        if self._min is None or val < self._min:
            self._min = val

    def last(self) -> float | None:
        if len(self._buffer) < self.window_len:
            return None
        return self._min


@dataclass
class HLNormalizer(View):
    """
    High-Low normalizer.

    Formula:
        out = -1 + 2 * (last - low) / (high - low)

    Output is in [-1, 1], and exactly 0 when the window is flat.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _range: _HighLow = field(init=False)
    _last: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        self._range = _HighLow(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._range.push(val)
        self._last = val

    def last(self) -> float | None:
        if len(self._range) < self.window_len:
            return None
        high = self._range.high
        low = self._range.low
        if high == low:
            return 0.0
        return -1.0 + 2.0 * (self._last - low) / (high - low)


def _default_fisher_ma() -> View:
    return Ema(DEFAULT_FISHER_MA_LEN)


@dataclass
class EhlersFisherTransform(View):
    """
    John Ehlers Fisher Transform.

    Formula:
        x = 2 * ((value - low) / (high - low) - 0.5)
        s = clamp(moving_average(x), -0.99, 0.99)
        fish = 0.5 * ln((1 + s) / (1 - s)) + 0.5 * fish_prev

    high/low are tracked over the window. A flat window emits 0.0 without
    feeding the moving average. Until the moving average is ready the output
    holds its previous value (0.0 after the first tick).
    """

    window_len: int
    view: View = field(default_factory=Echo)
    moving_average: View = field(default_factory=_default_fisher_ma)
    _range: _HighLow = field(init=False)
    _count: int = field(default=0, init=False)
    _fish: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        self._range = _HighLow(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1
        self._range.push(val)

        high = self._range.high
        low = self._range.low
        if high == low:
            self._fish = 0.0
            return

        normalized = 2.0 * ((val - low) / (high - low) - 0.5)
        self.moving_average.update(normalized)
        smoothed = self.moving_average.last()
        if smoothed is None:
            return
        smoothed = min(max(smoothed, -FISHER_CLAMP), FISHER_CLAMP)

        prev = self._fish if self._fish is not None else 0.0
        self._fish = 0.5 * math.log((1.0 + smoothed) / (1.0 - smoothed)) + 0.5 * prev

    def last(self) -> float | None:
        if self._count < self.window_len:
            return None
        return self._fish
