"""
Batch helpers: stream a whole series through views into pandas objects.

Views are stateful, so these helpers mutate the view/window they are given.
Positions where an output is not ready are NaN.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pandas as pd

from sliding_features.sliding_window import SlidingWindow
from sliding_features.views.base import View


def _index_of(values: Iterable[float]) -> tuple[list[float], pd.Index | None]:
    if isinstance(values, pd.Series):
        return values.astype(float).tolist(), values.index
    return [float(v) for v in values], None


def compute_view(view: View, values: Iterable[float], name: str | None = None) -> pd.Series:
    """
    Feed values through a view one at a time.

    Args:
        view: View to update (its state advances)
        values: Input series; a Series keeps its index
        name: Series name (defaults to the view's class name)

    Returns:
        Series of view outputs, NaN where the view was not ready
    """
    data, index = _index_of(values)
    out = np.full(len(data), np.nan)
    for i, value in enumerate(data):
        view.update(value)
        result = view.last()
        if result is not None:
            out[i] = result
    return pd.Series(out, index=index, name=name or type(view).__name__)


def compute_window(window: SlidingWindow, values: Iterable[float]) -> pd.DataFrame:
    """
    Feed values through a SlidingWindow.

    Returns:
        DataFrame with one column per registered view (named as in
        window.names), NaN where a view was not ready
    """
    data, index = _index_of(values)
    out = np.full((len(data), len(window)), np.nan)
    for i, value in enumerate(data):
        window.update(value)
        for j, result in enumerate(window.last()):
            if result is not None:
                out[i, j] = result
    return pd.DataFrame(out, index=index, columns=window.names)
