"""
Streaming views over a scalar time series.

Every view consumes one value per update() and exposes last(), which is
None until the view is ready. Views chain through their `view` field: the
inner view is updated first and its output is what the outer view sees.

Usage:
    from sliding_features.views import Vsct, LnReturn

    # Rolling z-score of log returns
    view = Vsct(window_len=20, view=LnReturn())
    for price in prices:
        view.update(price)
    current_value = view.last()
"""

from __future__ import annotations

# Base class and errors
from .base import (
    View,
    WindowLengthError,
    NonFiniteValueError,
    validate_window_len,
)

# Pure transforms
from .pure import (
    Echo,
    Constant,
    Add,
    Subtract,
    Multiply,
    Divide,
    GTE,
    LTE,
    Tanh,
)

# Rolling views (no window)
from .rolling import (
    Drawdown,
    LnReturn,
    WelfordRolling,
)

# Moving averages and aggregates
from .moving_average import (
    Sma,
    Ema,
    Alma,
    Cumulative,
    Lag,
    Roc,
)

# Windowed variance
from .variance import (
    WelfordOnline,
    Vst,
    Vsct,
)

# Extremum tracking
from .extremum import (
    Max,
    Min,
    HLNormalizer,
    EhlersFisherTransform,
)

# Oscillators
from .oscillators import (
    Rsi,
    MyRSI,
    CorrelationTrendIndicator,
    NoiseEliminationTechnology,
    CenterOfGravity,
    PolarizedFractalEfficiency,
    BinaryEntropy,
)

# Ehlers recursive filters
from .ehlers import (
    SuperSmoother,
    CyberCycle,
    TrendFlex,
    ReFlex,
    RoofingFilter,
    LaguerreFilter,
    LaguerreRSI,
)

# Factory and utilities
from .factory import (
    create_view,
    build_view,
    supports_view,
    list_views,
    UnsupportedViewError,
)

__all__ = [
    # Base
    "View",
    "WindowLengthError",
    "NonFiniteValueError",
    "validate_window_len",
    # Pure
    "Echo",
    "Constant",
    "Add",
    "Subtract",
    "Multiply",
    "Divide",
    "GTE",
    "LTE",
    "Tanh",
    # Rolling
    "Drawdown",
    "LnReturn",
    "WelfordRolling",
    # Moving averages
    "Sma",
    "Ema",
    "Alma",
    "Cumulative",
    "Lag",
    "Roc",
    # Variance
    "WelfordOnline",
    "Vst",
    "Vsct",
    # Extremum
    "Max",
    "Min",
    "HLNormalizer",
    "EhlersFisherTransform",
    # Oscillators
    "Rsi",
    "MyRSI",
    "CorrelationTrendIndicator",
    "NoiseEliminationTechnology",
    "CenterOfGravity",
    "PolarizedFractalEfficiency",
    "BinaryEntropy",
    # Ehlers
    "SuperSmoother",
    "CyberCycle",
    "TrendFlex",
    "ReFlex",
    "RoofingFilter",
    "LaguerreFilter",
    "LaguerreRSI",
    # Factory and utilities
    "create_view",
    "build_view",
    "supports_view",
    "list_views",
    "UnsupportedViewError",
]
