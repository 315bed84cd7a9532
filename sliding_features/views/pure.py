"""
Pure transforms: element-wise views with no window.

Includes Echo, Constant, Add, Subtract, Multiply, Divide, GTE, LTE and
Tanh. Binary operators update both operands with the same tick and are
ready only when both operands are ready.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass, field

import numpy as np

from .base import View


@dataclass
class Echo(View):
    """Identity view: returns the last observed value."""

    _out: float | None = field(default=None, init=False)

    def update(self, value: float) -> None:
        self._out = value

    def last(self) -> float | None:
        return self._out


@dataclass
class Constant(View):
    """Ignores its input and always returns a fixed value."""

    value: float

    def update(self, value: float) -> None:
        pass

    def last(self) -> float | None:
        return self.value


@dataclass
class _Binary(View):
    """Combines the outputs of two independently updated views."""

    a: View
    b: View

    def update(self, value: float) -> None:
        self.a.update(value)
        self.b.update(value)

    def last(self) -> float | None:
        a = self.a.last()
        b = self.b.last()
        if a is None or b is None:
            return None
        return self._combine(a, b)

    @abstractmethod
    def _combine(self, a: float, b: float) -> float:
        """Combine the two operand outputs."""


@dataclass
class Add(_Binary):
    """a + b"""

    def _combine(self, a: float, b: float) -> float:
        return a + b


@dataclass
class Subtract(_Binary):
    """a - b"""

    def _combine(self, a: float, b: float) -> float:
        return a - b


@dataclass
class Multiply(_Binary):
    """a * b"""

    def _combine(self, a: float, b: float) -> float:
        return a * b


@dataclass
class Divide(_Binary):
    """
    a / b with IEEE semantics.

    A zero denominator yields +/-inf or NaN instead of raising. Do not feed
    the result into a windowed view without clipping it first.
    """

    def _combine(self, a: float, b: float) -> float:
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.float64(a) / np.float64(b))


@dataclass
class GTE(View):
    """
    Greater Than or Equal.

    Lets values >= clipping_point through and clips the rest to it.
    """

    clipping_point: float
    view: View = field(default_factory=Echo)
    _out: float | None = field(default=None, init=False)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._out = val if val >= self.clipping_point else self.clipping_point

    def last(self) -> float | None:
        return self._out


@dataclass
class LTE(View):
    """
    Lower Than or Equal.

    Lets values <= clipping_point through and clips the rest to it.
    """

    clipping_point: float
    view: View = field(default_factory=Echo)
    _out: float | None = field(default=None, init=False)

    def update(self, value: float) -> None:
        val = self._pull(value)
        if val is None:
            return
        self._out = val if val <= self.clipping_point else self.clipping_point

    def last(self) -> float | None:
        return self._out


@dataclass
class Tanh(View):
    """Hyperbolic tangent of the inner view, bounded to (-1, 1)."""

    view: View = field(default_factory=Echo)

    def update(self, value: float) -> None:
        self.view.update(value)

    def last(self) -> float | None:
        val = self.view.last()
        if val is None:
            return None
        return math.tanh(val)
