"""
Composition root: a set of views fed from one input series.

SlidingWindow holds an ordered list of independent views. Each update()
forwards the same observation to every registered view in registration
order; last() collects their outputs in the same order.

Example:
    window = SlidingWindow()
    window.register(Rsi(14))
    window.register(Vsct(20, view=LnReturn()), name="zret")

    for price in prices:
        window.update(price)
        rsi, zret = window.last()
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from sliding_features.config import get_config
from sliding_features.utils import get_logger
from sliding_features.views.base import NonFiniteValueError, View


class SlidingWindow:
    """
    Ordered collection of views updated with the same observations.

    Args:
        check_finite: Reject NaN/inf observations with NonFiniteValueError.
            None reads SLIDING_FEATURES_CHECK_FINITE from the config. When
            disabled a non-finite value is logged and passed through.
    """

    def __init__(self, check_finite: bool | None = None):
        if check_finite is None:
            check_finite = get_config().views.check_finite
        self.check_finite = check_finite
        self._views: list[View] = []
        self._names: list[str] = []
        self._logger = get_logger()
        self._logger.debug("SlidingWindow created (check_finite=%s)", check_finite)

    def register(self, view: View, name: str | None = None) -> int:
        """
        Append a view and return its index in last().

        Raises:
            TypeError: If view is not a View
            ValueError: If name is already taken
        """
        if not isinstance(view, View):
            raise TypeError(f"Expected a View, got {type(view).__name__}")

        index = len(self._views)
        if name is None:
            name = f"{type(view).__name__}_{index}"
        if name in self._names:
            raise ValueError(f"A view named '{name}' is already registered")

        self._views.append(view)
        self._names.append(name)
        self._logger.debug("Registered view %s as '%s' at index %d", type(view).__name__, name, index)
        return index

    def register_many(self, views: Iterable[View] | dict[str, View]) -> list[int]:
        """Register several views; a dict supplies their names."""
        if isinstance(views, dict):
            return [self.register(view, name) for name, view in views.items()]
        return [self.register(view) for view in views]

    def update(self, value: float) -> None:
        """Forward one observation to every view in registration order."""
        if not math.isfinite(value):
            if self.check_finite:
                raise NonFiniteValueError(f"Observation must be finite, got {value}")
            self._logger.warning("Non-finite observation %s passed to %d views", value, len(self._views))

        for view in self._views:
            view.update(value)

    def last(self) -> list[float | None]:
        """Latest output of each view in registration order (None = not ready)."""
        return [view.last() for view in self._views]

    def snapshot(self) -> dict[str, float | None]:
        """Latest outputs keyed by view name."""
        return dict(zip(self._names, self.last()))

    @property
    def names(self) -> list[str]:
        return list(self._names)

    @property
    def is_ready(self) -> bool:
        """True once every registered view is ready."""
        return all(view.is_ready for view in self._views)

    def __len__(self) -> int:
        return len(self._views)
