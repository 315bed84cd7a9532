"""
sliding-features: composable streaming filters over a scalar time series.

Usage:
    from sliding_features import SlidingWindow
    from sliding_features.views import Alma, Rsi

    window = SlidingWindow()
    window.register(Alma(20))
    window.register(Rsi(14))
    for price in prices:
        window.update(price)
    alma, rsi = window.last()
"""

from .sliding_window import SlidingWindow
from .compute import compute_view, compute_window

__version__ = "0.1.0"

__all__ = [
    "SlidingWindow",
    "compute_view",
    "compute_window",
    "__version__",
]
