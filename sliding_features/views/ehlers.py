"""
John Ehlers' recursive (IIR) filters.

Includes SuperSmoother, CyberCycle, TrendFlex, ReFlex, RoofingFilter,
LaguerreFilter and LaguerreRSI.

Each filter keeps only the few previous values its recurrence needs, with
coefficients derived from the window length. Most of them hold back output
until window_len values have been seen so the start-up transient is not
reported.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from collections import deque
from dataclasses import dataclass, field

from sliding_features.config.constants import (
    DEFAULT_LAGUERRE_GAMMA,
    DEFAULT_ROOFING_SUPER_SMOOTHER_LEN,
)

from .base import View, validate_window_len
from .pure import Echo

# 1.414 * 180 degrees in radians, as used by Ehlers for the cosine term
_SQRT2_PI = 4.4422


@dataclass
class _TwoPole:
    """
    Two-pole super smoother recursion.

    a1 = exp(-1.414 * pi / period)
    b1 = 2 * a1 * cos(4.4422 / period)
    filt = c1 * (v + v_prev) / 2 + c2 * filt1 + c3 * filt2

    Evaluated as m + c2 * (filt1 - m) + c3 * (filt2 - m) with m the input
    mean, which is the same since c1 = 1 - c2 - c3 but leaves a constant
    series exactly unchanged.

    The recursion starts from zero state. With pass_through=True the first
    two outputs equal the input instead, so a flat series is flat from the
    first tick.
    """

    period: float
    pass_through: bool = False
    _c2: float = field(init=False)
    _c3: float = field(init=False)
    _filt1: float = field(default=0.0, init=False)
    _filt2: float = field(default=0.0, init=False)
    _prev: float = field(default=0.0, init=False)
    _count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        a1 = math.exp(-1.414 * math.pi / self.period)
        b1 = 2.0 * a1 * math.cos(_SQRT2_PI / self.period)
        self._c2 = b1
        self._c3 = -a1 * a1

    def step(self, val: float) -> float:
        self._count += 1
        if self.pass_through and self._count <= 2:
            filt = val
        else:
            m = (val + self._prev) / 2.0
            filt = m + self._c2 * (self._filt1 - m) + self._c3 * (self._filt2 - m)
        self._filt2 = self._filt1
        self._filt1 = filt
        self._prev = val
        return filt


@dataclass
class SuperSmoother(View):
    """
    John Ehlers SuperSmoother filter.

    Formula:
        a1 = exp(-1.414 * pi / window_len)
        b1 = 2 * a1 * cos(4.4422 / window_len)
        c2 = b1, c3 = -a1^2, c1 = 1 - c2 - c3
        filt = c1 * (v + v_prev) / 2 + c2 * filt1 + c3 * filt2

    State starts at zero. Ready after window_len values, which hides the
    start-up transient.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _filter: _TwoPole = field(init=False)
    _filt: float = field(default=0.0, init=False)
    _count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        self._filter = _TwoPole(float(self.window_len))

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1
        self._filt = self._filter.step(val)

    def last(self) -> float | None:
        if self._count < self.window_len:
            return None
        return self._filt


@dataclass
class CyberCycle(View):
    """
    John Ehlers Cyber Cycle.

    Formula:
        alpha = 2 / (window_len + 1)
        smooth = (p + 2 * p1 + 2 * p2 + p3) / 6
        cycle = (1 - alpha / 2)^2 * (smooth - 2 * smooth1 + smooth2)
                + 2 * (1 - alpha) * cycle1 - (1 - alpha)^2 * cycle2

    For the first six bars cycle = (p - 2 * p1 + p2) / 4.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _alpha: float = field(init=False)
    _prices: deque = field(default_factory=lambda: deque(maxlen=4), init=False)
    _smooth: deque = field(default_factory=lambda: deque(maxlen=3), init=False)
    _cycle1: float = field(default=0.0, init=False)
    _cycle2: float = field(default=0.0, init=False)
    _count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        self._alpha = 2.0 / (self.window_len + 1)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1
        self._prices.append(val)

        p = self._prices
        if len(p) == 4:
            smooth = (p[3] + 2.0 * p[2] + 2.0 * p[1] + p[0]) / 6.0
        else:
            smooth = val
        self._smooth.append(smooth)

        if self._count < 3:
            cycle = 0.0
        elif self._count < 7:
            cycle = (p[-1] - 2.0 * p[-2] + p[-3]) / 4.0
        else:
            s = self._smooth
            a = self._alpha
            cycle = (
                (1.0 - 0.5 * a) ** 2 * (s[2] - 2.0 * s[1] + s[0])
                + 2.0 * (1.0 - a) * self._cycle1
                - (1.0 - a) ** 2 * self._cycle2
            )

        self._cycle2 = self._cycle1
        self._cycle1 = cycle

    def last(self) -> float | None:
        if self._count < self.window_len:
            return None
        return self._cycle1


@dataclass
class _Flex(View):
    """
    Shared machinery of TrendFlex and ReFlex.

    A super smoother with half the window length feeds a history of the last
    window_len + 1 filtered values. The subclass turns that history into a
    difference sum, which is normalized by its exponentially averaged mean
    square:
        ms = 0.04 * sum^2 + 0.96 * ms_prev
        out = clip(sum / sqrt(ms), -1, 1)

    Output is 0 while the series is flat.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    _filter: _TwoPole = field(init=False)
    _filts: deque = field(init=False)
    _ms: float = field(default=0.0, init=False)
    _out: float = field(default=0.0, init=False)
    _count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        self._filter = _TwoPole(0.5 * self.window_len, pass_through=True)
        self._filts = deque(maxlen=self.window_len + 1)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1
        self._filts.append(self._filter.step(val))

        d_sum = self._difference_sum()
        self._ms = 0.04 * d_sum * d_sum + 0.96 * self._ms
        if self._ms > 0:
            out = d_sum / math.sqrt(self._ms)
            self._out = min(max(out, -1.0), 1.0)
        else:
            self._out = 0.0

    @abstractmethod
    def _difference_sum(self) -> float:
        """Difference sum over the filtered history."""

    def last(self) -> float | None:
        if self._count < self.window_len:
            return None
        return self._out


@dataclass
class TrendFlex(_Flex):
    """
    John Ehlers TrendFlex.

    sum = mean(filt - filt[c] for c in 1..m), m = number of past values kept
    """

    def _difference_sum(self) -> float:
        m = len(self._filts) - 1
        if m < 1:
            return 0.0
        filt = self._filts[-1]
        total = 0.0
        for c in range(1, m + 1):
            total += filt - self._filts[-1 - c]
        return total / m


@dataclass
class ReFlex(_Flex):
    """
    John Ehlers ReFlex.

    Measures the filtered series against the straight line joining the
    oldest kept value and the newest one:
        slope = (filt[m] - filt) / m
        sum = mean((filt + c * slope) - filt[c] for c in 1..m)
    """

    def _difference_sum(self) -> float:
        m = len(self._filts) - 1
        if m < 1:
            return 0.0
        filt = self._filts[-1]
        slope = (self._filts[0] - filt) / m
        total = 0.0
        for c in range(1, m + 1):
            total += (filt + c * slope) - self._filts[-1 - c]
        return total / m


@dataclass
class RoofingFilter(View):
    """
    John Ehlers Roofing Filter.

    A two-pole high-pass filter removes cycles longer than window_len, then a
    SuperSmoother of super_smoother_len removes the high-frequency noise:
        alpha = (cos(4.4422 / n) + sin(4.4422 / n) - 1) / cos(4.4422 / n)
        hp = (1 - alpha / 2)^2 * (v - 2 * v1 + v2)
             + 2 * (1 - alpha) * hp1 - (1 - alpha)^2 * hp2

    Ready once window_len values were seen and the smoother is ready.
    """

    window_len: int
    view: View = field(default_factory=Echo)
    super_smoother_len: int = DEFAULT_ROOFING_SUPER_SMOOTHER_LEN
    _alpha: float = field(init=False)
    _super_smoother: SuperSmoother = field(init=False)
    _val1: float = field(default=0.0, init=False)
    _val2: float = field(default=0.0, init=False)
    _hp1: float = field(default=0.0, init=False)
    _hp2: float = field(default=0.0, init=False)
    _count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        validate_window_len(self.super_smoother_len, "super_smoother_len")
        arg = _SQRT2_PI / self.window_len
        self._alpha = (math.cos(arg) + math.sin(arg) - 1.0) / math.cos(arg)
        self._super_smoother = SuperSmoother(self.super_smoother_len)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1
        if self._count == 1:
            # start from a flat history so the first second difference is 0
            self._val1 = val
            self._val2 = val

        a = self._alpha
        hp = (
            (1.0 - a / 2.0) ** 2 * (val - 2.0 * self._val1 + self._val2)
            + 2.0 * (1.0 - a) * self._hp1
            - (1.0 - a) ** 2 * self._hp2
        )
        self._hp2 = self._hp1
        self._hp1 = hp
        self._val2 = self._val1
        self._val1 = val

        self._super_smoother.update(hp)

    def last(self) -> float | None:
        if self._count < self.window_len:
            return None
        return self._super_smoother.last()


@dataclass
class _LaguerreStages:
    """
    Four-stage Laguerre recursion:
        l0 = (1 - g) * v + g * l0_prev
        l1 = -g * l0 + l0_prev + g * l1_prev
        l2 = -g * l1 + l1_prev + g * l2_prev
        l3 = -g * l2 + l2_prev + g * l3_prev

    Evaluated in difference form (l0 = v + g * (l0_prev - v), ...) so a
    constant input keeps every stage exactly at that constant. All stages
    start at the first value.
    """

    gamma: float
    l0: float = field(default=0.0, init=False)
    l1: float = field(default=0.0, init=False)
    l2: float = field(default=0.0, init=False)
    l3: float = field(default=0.0, init=False)
    _seeded: bool = field(default=False, init=False)

    def step(self, val: float) -> None:
        if not self._seeded:
            self.l0 = self.l1 = self.l2 = self.l3 = val
            self._seeded = True
            return
        g = self.gamma
        l0 = val + g * (self.l0 - val)
        l1 = self.l0 + g * (self.l1 - l0)
        l2 = self.l1 + g * (self.l2 - l1)
        l3 = self.l2 + g * (self.l3 - l2)
        self.l0, self.l1, self.l2, self.l3 = l0, l1, l2, l3


def _validate_gamma(gamma: float) -> None:
    if not 0.0 <= gamma < 1.0:
        raise ValueError(f"gamma must be in [0, 1), got {gamma}")


@dataclass
class LaguerreFilter(View):
    """
    John Ehlers Laguerre Filter.

    filt = (l0 + 2 * l1 + 2 * l2 + l3) / 6

    Ready after the first value.
    """

    gamma: float = DEFAULT_LAGUERRE_GAMMA
    view: View = field(default_factory=Echo)
    _stages: _LaguerreStages = field(init=False)
    _out: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        _validate_gamma(self.gamma)
        self._stages = _LaguerreStages(self.gamma)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        s = self._stages
        s.step(val)
        self._out = (s.l0 + 2.0 * s.l1 + 2.0 * s.l2 + s.l3) / 6.0

    def last(self) -> float | None:
        return self._out


@dataclass
class LaguerreRSI(View):
    """
    John Ehlers Laguerre RSI.

    cu/cd sum the positive/negative differences between adjacent Laguerre
    stages; rsi = cu / (cu + cd). gamma defaults to 2 / (window_len + 1).
    Output is in [0, 1]; while all stages are equal the previous value is
    kept (0.5 initially).
    """

    window_len: int
    view: View = field(default_factory=Echo)
    gamma: float | None = None
    _stages: _LaguerreStages = field(init=False)
    _out: float = field(default=0.5, init=False)
    _count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        validate_window_len(self.window_len)
        if self.gamma is None:
            self.gamma = 2.0 / (self.window_len + 1)
        _validate_gamma(self.gamma)
        self._stages = _LaguerreStages(self.gamma)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._count += 1
        s = self._stages
        s.step(val)

        cu = 0.0
        cd = 0.0
        for upper, lower in ((s.l0, s.l1), (s.l1, s.l2), (s.l2, s.l3)):
            if upper >= lower:
                cu += upper - lower
            else:
                cd += lower - upper
        if cu + cd != 0:
            self._out = cu / (cu + cd)

    def last(self) -> float | None:
        if self._count < self.window_len:
            return None
        return self._out
