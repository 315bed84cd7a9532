"""
Logging system for sliding-features.
Provides human-readable logs with console output and an optional log file.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


# ANSI color codes for terminal output
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        # Other handlers see the same record, so color a copy
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{Colors.RESET}"
        colored.msg = f"{color}{record.getMessage()}{Colors.RESET}"
        colored.args = None
        return super().format(colored)


class FeatureLogger:
    """
    Central logging system for the library.

    Features:
    - Console output with colors
    - Optional daily log file (plain text) when a log directory is set
    """

    LOGGER_NAME = "sliding_features"

    _instance: Optional['FeatureLogger'] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: str = "", log_level: str = "WARNING"):
        if FeatureLogger._initialized:
            return

        self.log_dir = Path(log_dir) if log_dir else None
        self.logger = self._create_logger(self.LOGGER_NAME, log_level)

        FeatureLogger._initialized = True

    def _create_logger(self, name: str, level: str) -> logging.Logger:
        """Create a configured logger instance."""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
        logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        logger.addHandler(console_handler)

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            log_file = self.log_dir / f"sliding_features_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
            logger.addHandler(file_handler)

        return logger

    def debug(self, msg: str, *args, **kwargs):
        """Log debug message."""
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        """Log info message."""
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        """Log warning message."""
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        """Log error message."""
        self.logger.error(msg, *args, **kwargs)


# Global logger instance
_logger: Optional[FeatureLogger] = None


def get_logger(log_dir: Optional[str] = None, log_level: Optional[str] = None) -> FeatureLogger:
    """
    Get or create the global logger instance.

    Arguments left as None are taken from the environment-backed Config.
    """
    global _logger
    if _logger is None:
        _logger = FeatureLogger(*_resolve(log_dir, log_level))
    return _logger


def setup_logger(log_dir: Optional[str] = None, log_level: Optional[str] = None) -> FeatureLogger:
    """Initialize the logger with custom settings."""
    global _logger
    FeatureLogger._initialized = False
    FeatureLogger._instance = None
    _logger = FeatureLogger(*_resolve(log_dir, log_level))
    return _logger


def _resolve(log_dir: Optional[str], log_level: Optional[str]) -> tuple[str, str]:
    from sliding_features.config import get_config

    log_config = get_config().log
    return (
        log_config.log_dir if log_dir is None else log_dir,
        log_config.level if log_level is None else log_level,
    )
