"""
Configuration management.
"""

from .config import (
    Config,
    get_config,
    reset_config,
    LogConfig,
    ViewConfig,
)

from .constants import (
    DEFAULT_ALMA_SIGMA,
    DEFAULT_ALMA_OFFSET,
    DEFAULT_EMA_ALPHA,
    DEFAULT_FISHER_MA_LEN,
    DEFAULT_LAGUERRE_GAMMA,
    DEFAULT_ROOFING_SUPER_SMOOTHER_LEN,
    DEFAULT_WINDOW_LEN,
    FISHER_CLAMP,
)

__all__ = [
    # Config classes
    "Config",
    "get_config",
    "reset_config",
    "LogConfig",
    "ViewConfig",
    # Defaults
    "DEFAULT_ALMA_SIGMA",
    "DEFAULT_ALMA_OFFSET",
    "DEFAULT_EMA_ALPHA",
    "DEFAULT_FISHER_MA_LEN",
    "DEFAULT_LAGUERRE_GAMMA",
    "DEFAULT_ROOFING_SUPER_SMOOTHER_LEN",
    "DEFAULT_WINDOW_LEN",
    "FISHER_CLAMP",
]
