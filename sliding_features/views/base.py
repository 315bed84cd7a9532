"""
Base class and shared helpers for streaming views.

All views inherit from View, which defines the per-tick interface:
update(), last(), is_ready. A view wraps an inner view, updates it first
and only then consumes the inner view's output.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class WindowLengthError(ValueError):
    """Raised at construction when a window length is not a positive integer."""


class NonFiniteValueError(ValueError):
    """Raised when a NaN or infinite observation is rejected."""


def validate_window_len(value: int, name: str = "window_len") -> int:
    """
    Validate a window length.

    Raises:
        WindowLengthError: If value is not an int (bool excluded) or is < 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise WindowLengthError(
            f"{name} must be an integer, got {type(value).__name__}"
        )
    if value < 1:
        raise WindowLengthError(f"{name} must be >= 1, got {value}")
    return value


class View(ABC):
    """Base class for streaming views."""

    @abstractmethod
    def update(self, value: float) -> None:
        """Update with a new observation."""
        ...

    @abstractmethod
    def last(self) -> float | None:
        """Latest output, or None until the view is ready."""
        ...

    @property
    def is_ready(self) -> bool:
        """True once last() returns a value."""
        return self.last() is not None

    def _pull(self, value: float) -> float | None:
        """Feed the inner view and return its output (None if not ready)."""
        inner = self.view
        inner.update(value)
        return inner.last()
