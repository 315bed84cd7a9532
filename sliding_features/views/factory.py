"""
Factory for building views from a type string and parameter dict.

Provides create_view() to instantiate any view by name, build_view() for a
single {"type": ..., "params": {...}} spec, plus registry query functions.

The chaining parameters (view, a, b, moving_average) accept either a View
instance or a nested spec, so whole pipelines can be described as plain
data:

    build_view({
        "type": "vsct",
        "params": {"window_len": 20, "view": {"type": "ln_return"}},
    })
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sliding_features.config import ViewConfig, get_config
from sliding_features.config.constants import (
    DEFAULT_LAGUERRE_GAMMA,
    DEFAULT_ROOFING_SUPER_SMOOTHER_LEN,
    DEFAULT_WINDOW_LEN,
)
from sliding_features.utils import get_logger

from .base import View
from .ehlers import (
    CyberCycle,
    LaguerreFilter,
    LaguerreRSI,
    ReFlex,
    RoofingFilter,
    SuperSmoother,
    TrendFlex,
)
from .extremum import EhlersFisherTransform, HLNormalizer, Max, Min
from .moving_average import Alma, Cumulative, Ema, Lag, Roc, Sma
from .oscillators import (
    BinaryEntropy,
    CenterOfGravity,
    CorrelationTrendIndicator,
    MyRSI,
    NoiseEliminationTechnology,
    PolarizedFractalEfficiency,
    Rsi,
)
from .pure import GTE, LTE, Add, Constant, Divide, Echo, Multiply, Subtract, Tanh
from .rolling import Drawdown, LnReturn, WelfordRolling
from .variance import Vsct, Vst, WelfordOnline


class UnsupportedViewError(ValueError):
    """Raised when a view type string is not registered."""


_CHAINED = frozenset({"view"})
_WINDOWED = frozenset({"window_len", "view"})

_VALID_PARAMS: dict[str, frozenset[str]] = {
    # Pure transforms
    "echo": frozenset(),
    "constant": frozenset({"value"}),
    "add": frozenset({"a", "b"}),
    "subtract": frozenset({"a", "b"}),
    "multiply": frozenset({"a", "b"}),
    "divide": frozenset({"a", "b"}),
    "gte": frozenset({"clipping_point"}) | _CHAINED,
    "lte": frozenset({"clipping_point"}) | _CHAINED,
    "tanh": _CHAINED,
    # Rolling
    "drawdown": _CHAINED,
    "ln_return": _CHAINED,
    "welford_rolling": _CHAINED,
    # Moving averages and aggregates
    "sma": _WINDOWED,
    "ema": _WINDOWED | {"alpha"},
    "alma": _WINDOWED | {"sigma", "offset"},
    "cumulative": _WINDOWED,
    "lag": _WINDOWED,
    "roc": _WINDOWED,
    # Variance
    "welford_online": _WINDOWED,
    "vst": _WINDOWED,
    "vsct": _WINDOWED,
    # Extremum
    "max": _WINDOWED,
    "min": _WINDOWED,
    "hl_normalizer": _WINDOWED,
    "fisher": _WINDOWED | {"moving_average"},
    # Oscillators
    "rsi": _WINDOWED,
    "my_rsi": _WINDOWED,
    "cti": _WINDOWED,
    "net": _WINDOWED,
    "cg": _WINDOWED,
    "pfe": _WINDOWED | {"moving_average"},
    "binary_entropy": _WINDOWED,
    # Ehlers filters
    "super_smoother": _WINDOWED,
    "cyber_cycle": _WINDOWED,
    "trend_flex": _WINDOWED,
    "re_flex": _WINDOWED,
    "roofing_filter": _WINDOWED | {"super_smoother_len"},
    "laguerre_filter": frozenset({"gamma"}) | _CHAINED,
    "laguerre_rsi": _WINDOWED | {"gamma"},
}


def _validate_params(view_type: str, params: dict[str, Any]) -> None:
    """Raise ValueError if params contains unknown keys for this view."""
    valid = _VALID_PARAMS[view_type]
    unknown = set(params.keys()) - valid
    if unknown:
        raise ValueError(
            f"Unknown params for '{view_type}': {sorted(unknown)}. "
            f"Valid: {sorted(valid)}"
        )


def _sub(p: dict[str, Any], key: str) -> View | None:
    """Resolve a chaining parameter: View instance, nested spec, or absent."""
    value = p.get(key)
    if value is None or isinstance(value, View):
        return value
    if isinstance(value, dict):
        return build_view(value)
    raise ValueError(
        f"'{key}' must be a View or a view spec dict, got {type(value).__name__}"
    )


def _inner(p: dict[str, Any]) -> View:
    return _sub(p, "view") or Echo()


def _operands(p: dict[str, Any]) -> tuple[View, View]:
    a = _sub(p, "a")
    b = _sub(p, "b")
    if a is None or b is None:
        raise ValueError("Binary views require both 'a' and 'b'")
    return a, b


def _win(p: dict[str, Any]) -> int:
    return p.get("window_len", DEFAULT_WINDOW_LEN)


def _fisher(p: dict[str, Any], cfg: ViewConfig) -> View:
    ma = _sub(p, "moving_average")
    if ma is None:
        ma = Ema(cfg.fisher_ma_len, alpha=cfg.ema_alpha)
    return EhlersFisherTransform(_win(p), view=_inner(p), moving_average=ma)


# Each entry maps a view type string to a callable(params, config) -> View.
_FACTORY: dict[str, Callable[[dict[str, Any], ViewConfig], View]] = {
    # Pure transforms
    "echo": lambda _, __: Echo(),
    "constant": lambda p, _: Constant(p.get("value", 0.0)),
    "add": lambda p, _: Add(*_operands(p)),
    "subtract": lambda p, _: Subtract(*_operands(p)),
    "multiply": lambda p, _: Multiply(*_operands(p)),
    "divide": lambda p, _: Divide(*_operands(p)),
    "gte": lambda p, _: GTE(p.get("clipping_point", 0.0), view=_inner(p)),
    "lte": lambda p, _: LTE(p.get("clipping_point", 0.0), view=_inner(p)),
    "tanh": lambda p, _: Tanh(view=_inner(p)),
    # Rolling
    "drawdown": lambda p, _: Drawdown(view=_inner(p)),
    "ln_return": lambda p, _: LnReturn(view=_inner(p)),
    "welford_rolling": lambda p, _: WelfordRolling(view=_inner(p)),
    # Moving averages and aggregates
    "sma": lambda p, _: Sma(_win(p), view=_inner(p)),
    "ema": lambda p, c: Ema(_win(p), view=_inner(p), alpha=p.get("alpha", c.ema_alpha)),
    "alma": lambda p, c: Alma(_win(p), view=_inner(p), sigma=p.get("sigma", c.alma_sigma), offset=p.get("offset", c.alma_offset)),
    "cumulative": lambda p, _: Cumulative(_win(p), view=_inner(p)),
    "lag": lambda p, _: Lag(_win(p), view=_inner(p)),
    "roc": lambda p, _: Roc(_win(p), view=_inner(p)),
    # Variance
    "welford_online": lambda p, _: WelfordOnline(_win(p), view=_inner(p)),
    "vst": lambda p, _: Vst(_win(p), view=_inner(p)),
    "vsct": lambda p, _: Vsct(_win(p), view=_inner(p)),
    # Extremum
    "max": lambda p, _: Max(_win(p), view=_inner(p)),
    "min": lambda p, _: Min(_win(p), view=_inner(p)),
    "hl_normalizer": lambda p, _: HLNormalizer(_win(p), view=_inner(p)),
    "fisher": _fisher,
    # Oscillators
    "rsi": lambda p, _: Rsi(_win(p), view=_inner(p)),
    "my_rsi": lambda p, _: MyRSI(_win(p), view=_inner(p)),
    "cti": lambda p, _: CorrelationTrendIndicator(_win(p), view=_inner(p)),
    "net": lambda p, _: NoiseEliminationTechnology(_win(p), view=_inner(p)),
    "cg": lambda p, _: CenterOfGravity(_win(p), view=_inner(p)),
    "pfe": lambda p, _: PolarizedFractalEfficiency(_win(p), view=_inner(p), moving_average=_sub(p, "moving_average")),
    "binary_entropy": lambda p, _: BinaryEntropy(_win(p), view=_inner(p)),
    # Ehlers filters
    "super_smoother": lambda p, _: SuperSmoother(_win(p), view=_inner(p)),
    "cyber_cycle": lambda p, _: CyberCycle(_win(p), view=_inner(p)),
    "trend_flex": lambda p, _: TrendFlex(_win(p), view=_inner(p)),
    "re_flex": lambda p, _: ReFlex(_win(p), view=_inner(p)),
    "roofing_filter": lambda p, _: RoofingFilter(_win(p), view=_inner(p), super_smoother_len=p.get("super_smoother_len", DEFAULT_ROOFING_SUPER_SMOOTHER_LEN)),
    "laguerre_filter": lambda p, _: LaguerreFilter(gamma=p.get("gamma", DEFAULT_LAGUERRE_GAMMA), view=_inner(p)),
    "laguerre_rsi": lambda p, _: LaguerreRSI(_win(p), view=_inner(p), gamma=p.get("gamma")),
}


def create_view(view_type: str, params: dict[str, Any] | None = None) -> View:
    """
    Create a view from type and params.

    Raises UnsupportedViewError if the view type is not registered and
    ValueError if params contains unknown keys.
    """
    view_type = view_type.lower()
    factory_fn = _FACTORY.get(view_type)
    if factory_fn is None:
        raise UnsupportedViewError(
            f"Unsupported view type '{view_type}'. Supported: {list_views()}"
        )

    params = params or {}
    _validate_params(view_type, params)
    view = factory_fn(params, get_config().views)
    get_logger().debug("Built view %s from params %s", type(view).__name__, sorted(params))
    return view


def build_view(spec: dict[str, Any]) -> View:
    """Create a view from a {"type": ..., "params": {...}} dict."""
    unknown = set(spec.keys()) - {"type", "params"}
    if unknown:
        raise ValueError(f"Unknown keys in view spec: {sorted(unknown)}")
    if "type" not in spec:
        raise ValueError("View spec requires a 'type' key")
    return create_view(spec["type"], spec.get("params"))


# =============================================================================
# Registry queries
# =============================================================================


def supports_view(view_type: str) -> bool:
    """Check if a view type is registered."""
    return view_type.lower() in _FACTORY


def list_views() -> list[str]:
    """Get sorted list of all registered view types."""
    return sorted(_FACTORY)
