"""
Utility modules.
"""

from .logger import get_logger, setup_logger, FeatureLogger, ColoredFormatter

__all__ = [
    # Logger
    "get_logger",
    "setup_logger",
    "FeatureLogger",
    "ColoredFormatter",
]
