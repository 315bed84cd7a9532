"""
Oscillators over a sliding window.

Includes Rsi, MyRSI, CorrelationTrendIndicator, NoiseEliminationTechnology,
CenterOfGravity, PolarizedFractalEfficiency and BinaryEntropy.

Rsi, MyRSI and BinaryEntropy maintain running sums that are corrected on
eviction. The correlation and center-of-gravity style indicators recompute
from the whole buffer on every tick (O(window)), which is acceptable for
window lengths in the tens to low hundreds.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field

import numpy as np

from .base import View, WindowLengthError, validate_window_len
from .moving_average import Ema
from .pure import Echo


@dataclass
class _GainLoss:
    """
    Windowed sums of positive and negative steps between consecutive values.

    Each buffered value carries the step from its predecessor (0 for the very
    first value). Evicting a value removes its step from the sums. A side
    with no steps left in the window is exactly 0.
    """

    window_len: int
    _steps: deque = field(default_factory=deque, init=False)
    _prev: float | None = field(default=None, init=False)
    gains: float = field(default=0.0, init=False)
    losses: float = field(default=0.0, init=False)
    _n_gains: int = field(default=0, init=False)
    _n_losses: int = field(default=0, init=False)

    def push(self, val: float) -> None:
        if len(self._steps) >= self.window_len:
            old = self._steps.popleft()
            if old > 0:
                self._n_gains -= 1
                self.gains = max(self.gains - old, 0.0) if self._n_gains else 0.0
            elif old < 0:
                self._n_losses -= 1
                self.losses = max(self.losses + old, 0.0) if self._n_losses else 0.0

        step = 0.0 if self._prev is None else val - self._prev
        self._prev = val
        self._steps.append(step)
        if step > 0:
            self._n_gains += 1
            self.gains += step
        elif step < 0:
            self._n_losses += 1
            self.losses -= step

    def __len__(self) -> int:
        return len(self._steps)


@dataclass
class Rsi(View):
    """
    Relative Strength Index over a sliding window.

    Formula:
        rsi = 100 * gains / (gains + losses)

    gains/losses are sums of the up/down steps in the window. Returns 100
    when there are no losses and 50 on a flat window. Output is in [0, 100].
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _sums: _GainLoss = field(init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        self._sums = _GainLoss(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._sums.push(val)

    def last(self) -> float | None:
        if len(self._sums) < self.window_len:
            return None
        gains = self._sums.gains
        losses = self._sums.losses
        total = gains + losses
        if total == 0:
            return 50.0
        if losses == 0:
            return 100.0
        return 100.0 * gains / total


@dataclass
class MyRSI(View):
    """
    John Ehlers MyRSI.

    Formula:
        myrsi = (cu - cd) / (cu + cd)

    cu/cd are the closes-up/closes-down sums over the window. Output is in
    [-1, 1]; a flat window keeps the previous value (0 initially).
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _sums: _GainLoss = field(init=False)
    _out: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        self._sums = _GainLoss(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._sums.push(val)

        cu = self._sums.gains
        cd = self._sums.losses
        if cu + cd != 0:
            self._out = (cu - cd) / (cu + cd)

    def last(self) -> float | None:
        if len(self._sums) < self.window_len:
            return None
        return self._out


@dataclass
class CorrelationTrendIndicator(View):
    """
    John Ehlers Correlation Trend Indicator.

    Pearson correlation between the buffered values and their time index
    (oldest = 0). Rising values give +1, falling values -1. Returns 0 when
    either series has no variance.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _out: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            self._buffer.popleft()
        self._buffer.append(val)

        y = np.fromiter(self._buffer, dtype=float, count=len(self._buffer))
        if len(y) < 2 or y.max() == y.min():
            self._out = 0.0
            return

        t = np.arange(len(y), dtype=float)
        dy = y - y.mean()
        dt = t - t.mean()
        var_y = float(np.dot(dy, dy))
        var_t = float(np.dot(dt, dt))
        if var_y <= 0 or var_t <= 0:
            self._out = 0.0
            return
        corr = float(np.dot(dy, dt)) / math.sqrt(var_y * var_t)
        self._out = min(max(corr, -1.0), 1.0)

    def last(self) -> float | None:
        if len(self._buffer) < self.window_len:
            return None
        return self._out


@dataclass
class NoiseEliminationTechnology(View):
    """
    John Ehlers Noise Elimination Technology.

    Kendall-style rank correlation of the window against time:
        x[c] = value c - 1 bars ago, c = 1..n
        num = -sum(sign(x[c] - x[k]) for c in 2..n for k in 1..c - 1)
        net = num / (0.5 * n * (n - 1))

    Output is in [-1, 1].
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _out: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            self._buffer.popleft()
        self._buffer.append(val)

        n = len(self._buffer)
        if n < 2:
            self._out = 0.0
            return

        # most recent first
        x = np.fromiter(reversed(self._buffer), dtype=float, count=n)
        signs = np.sign(x[:, None] - x[None, :])
        num = -float(np.tril(signs, k=-1).sum())
        self._out = num / (0.5 * n * (n - 1))

    def last(self) -> float | None:
        if len(self._buffer) < self.window_len:
            return None
        return self._out


@dataclass
class CenterOfGravity(View):
    """
    John Ehlers Center of Gravity oscillator.

    Formula (weights n for the oldest value down to 1 for the newest):
        cg = -sum(w_i * v_i) / sum(v_i) + (n + 1) / 2

    Returns 0 when the window sums to zero.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _out: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            self._buffer.popleft()
        self._buffer.append(val)

        n = len(self._buffer)
        y = np.fromiter(self._buffer, dtype=float, count=n)
        denom = float(y.sum())
        if denom == 0:
            self._out = 0.0
            return
        weights = np.arange(n, 0, -1, dtype=float)
        self._out = -float(np.dot(weights, y)) / denom + (n + 1) / 2.0

    def last(self) -> float | None:
        if len(self._buffer) < self.window_len:
            return None
        return self._out


@dataclass
class PolarizedFractalEfficiency(View):
    """
    Polarized Fractal Efficiency in [-1, 1].

    Formula:
        path = sum(sqrt((v[i] - v[i-1])^2 + 1))
        straight = sqrt((v[-1] - v[0])^2 + (n - 1)^2)
        pfe = +/- straight / path   (negative when the last step was down)

    The raw value is smoothed by moving_average. Constructed without one, an
    Ema of the same window length is used.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    moving_average: View | None = None
    _buffer: deque = field(default_factory=deque, init=False)
    _out: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        if self.window_len < 2:
            raise WindowLengthError(
                f"window_len must be >= 2 for PolarizedFractalEfficiency, got {self.window_len}"
            )
        if self.moving_average is None:
            self.moving_average = Ema(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            self._buffer.popleft()
        self._buffer.append(val)

        n = len(self._buffer)
        if n < self.window_len:
            return

        y = np.fromiter(self._buffer, dtype=float, count=n)
        path = float(np.sqrt(np.diff(y) ** 2 + 1.0).sum())
        straight = math.sqrt((y[-1] - y[0]) ** 2 + (n - 1) ** 2)
        pfe = straight / path
        if y[-1] < y[-2]:
            pfe = -pfe

        self.moving_average.update(pfe)
        smoothed = self.moving_average.last()
        if smoothed is not None:
            self._out = smoothed

    def last(self) -> float | None:
        return self._out


@dataclass
class BinaryEntropy(View):
    """
    Shannon entropy (bits) of the sign of values in the window.

    Values >= 0 count as positive. Output is in [0, 1]: 0 when all values
    share a sign, 1 when the window is evenly split.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _buffer: deque = field(default_factory=deque, init=False)
    _positives: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return

        if len(self._buffer) >= self.window_len:
            if self._buffer.popleft() >= 0:
                self._positives -= 1

        self._buffer.append(val)
        if val >= 0:
            self._positives += 1

    def last(self) -> float | None:
        n = len(self._buffer)
        if n < self.window_len:
            return None
        pt = self._positives / n
        pn = 1.0 - pt
        entropy = 0.0
        for p in (pt, pn):
            if p > 0:
                entropy -= p * math.log2(p)
        return entropy
