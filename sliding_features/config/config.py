"""
Configuration management for sliding-features.
Loads settings from environment variables with library defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_ALMA_OFFSET,
    DEFAULT_ALMA_SIGMA,
    DEFAULT_EMA_ALPHA,
    DEFAULT_FISHER_MA_LEN,
)


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "WARNING"
    # Empty disables the log file
    log_dir: str = ""


@dataclass
class ViewConfig:
    """
    Defaults used when views are built through the factory.

    check_finite makes SlidingWindow reject NaN/inf observations instead of
    logging a warning and passing them through.
    """
    check_finite: bool = False
    alma_sigma: float = DEFAULT_ALMA_SIGMA
    alma_offset: float = DEFAULT_ALMA_OFFSET
    ema_alpha: float = DEFAULT_EMA_ALPHA
    fisher_ma_len: int = DEFAULT_FISHER_MA_LEN

    def __post_init__(self):
        if self.alma_sigma <= 0:
            raise ValueError(
                f"SLIDING_FEATURES_ALMA_SIGMA must be positive, got {self.alma_sigma}"
            )
        if self.ema_alpha <= 0:
            raise ValueError(
                f"SLIDING_FEATURES_EMA_ALPHA must be positive, got {self.ema_alpha}"
            )
        if self.fisher_ma_len < 1:
            raise ValueError(
                f"SLIDING_FEATURES_FISHER_MA_LEN must be >= 1, got {self.fisher_ma_len}"
            )


class Config:
    """
    Central configuration manager.

    Loads configuration from environment variables (and a .env file when
    present) and provides typed access to all settings.
    """

    _instance: Optional['Config'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, env_file: str = ".env"):
        if self._initialized:
            return

        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path, override=False)

        self.log = self._load_log_config()
        self.views = self._load_view_config()

        self._initialized = True

    def _load_log_config(self) -> LogConfig:
        """Load logging configuration from environment."""
        return LogConfig(
            level=os.getenv("SLIDING_FEATURES_LOG_LEVEL", "WARNING").upper(),
            log_dir=os.getenv("SLIDING_FEATURES_LOG_DIR", ""),
        )

    def _load_view_config(self) -> ViewConfig:
        """Load view defaults from environment."""
        return ViewConfig(
            check_finite=os.getenv("SLIDING_FEATURES_CHECK_FINITE", "false").lower() == "true",
            alma_sigma=float(os.getenv("SLIDING_FEATURES_ALMA_SIGMA", str(DEFAULT_ALMA_SIGMA))),
            alma_offset=float(os.getenv("SLIDING_FEATURES_ALMA_OFFSET", str(DEFAULT_ALMA_OFFSET))),
            ema_alpha=float(os.getenv("SLIDING_FEATURES_EMA_ALPHA", str(DEFAULT_EMA_ALPHA))),
            fisher_ma_len=int(os.getenv("SLIDING_FEATURES_FISHER_MA_LEN", str(DEFAULT_FISHER_MA_LEN))),
        )

    def reload(self, env_file: str = ".env"):
        """Reload configuration from environment."""
        self._initialized = False
        Config._instance = None
        return Config(env_file)

    def summary_short(self) -> str:
        """Generate a short one-line configuration summary."""
        finite = "strict" if self.views.check_finite else "lenient"
        return f"sliding-features | log={self.log.level} | finite={finite}"


def get_config(env_file: str = ".env") -> Config:
    """Get or create the global config instance."""
    return Config(env_file)


def reset_config() -> None:
    """Drop the global config instance so the next get_config() re-reads the environment."""
    Config._instance = None
