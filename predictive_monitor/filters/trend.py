"""
Sliding-Window Trend Estimator.

Estimates the instantaneous rate of change of a scalar series as the
ordinary-least-squares slope of the most recent `window_size` points.

Definition:
    For window values y_0..y_{n-1} indexed by position i = 0..n-1:

        slope = sum((i - i_mean) * (y_i - y_mean)) / sum((i - i_mean)^2)

    Positions are sample indices, not wall-clock time. Uniform sampling is
    assumed, so irregular cadence biases the slope.

The denominator depends only on n and is non-zero for n >= 2, so fewer
than two points yield a slope of 0. Since the centered positions sum to
zero, y_mean drops out of the numerator; values are divided by their largest
magnitude before the sum so that near-overflow readings stay finite.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Tuple

import numpy as np

from predictive_monitor.config import TREND
from predictive_monitor.utils.signal_utils import (
    NonFiniteValueError,
    ensure_finite,
    is_integer_value,
)

# Configure module logger
logger = logging.getLogger(__name__)


class TrendEstimator:
    """
    Bounded FIFO window with a least-squares slope.

    Attributes:
        window_size: Maximum number of points retained.

    Example:
        >>> trend = TrendEstimator(window_size=5)
        >>> for value in [1, 2, 3, 4, 5]:
        ...     slope = trend.add_point(value)
        >>> round(slope, 6)
        1.0
    """

    def __init__(self, window_size: int = TREND.WINDOW_SIZE) -> None:
        """
        Initialize the estimator.

        Args:
            window_size: Number of points in the sliding window (>= 2).

        Raises:
            ValueError: If window_size is not an integer >= 2.
        """
        if not is_integer_value(window_size):
            raise ValueError(f"window_size must be an integer, got {window_size!r}")
        if window_size < TREND.MIN_WINDOW_SIZE:
            raise ValueError(
                f"window_size must be >= {TREND.MIN_WINDOW_SIZE}, got {window_size}"
            )

        self.window_size = int(window_size)
        self._window: Deque[float] = deque(maxlen=self.window_size)

    @property
    def window(self) -> Tuple[float, ...]:
        """Snapshot of the current window, oldest first."""
        return tuple(self._window)

    @property
    def is_full(self) -> bool:
        return len(self._window) == self.window_size

    def __len__(self) -> int:
        return len(self._window)

    def add_point(self, value: float) -> float:
        """
        Append a value and return the slope of the updated window.

        Args:
            value: New (typically filtered) value.

        Returns:
            OLS slope in units per sample, or 0.0 with fewer than 2 points.

        Raises:
            NonFiniteValueError: If value is NaN/infinite, or if the slope of
                the updated window overflows. The window is left unchanged.
        """
        point = ensure_finite(value, "value")

        candidate = list(self._window)[1:] if self.is_full else list(self._window)
        candidate.append(point)

        slope = self._calculate_slope(candidate)
        if not np.isfinite(slope):
            raise NonFiniteValueError(
                f"slope overflowed for value {point!r} over {len(candidate)} points"
            )

        self._window.append(point)
        return slope

    @staticmethod
    def _calculate_slope(values: List[float]) -> float:
        n = len(values)
        if n < 2:
            return 0.0

        y = np.asarray(values, dtype=float)
        scale = float(np.max(np.abs(y)))
        if scale == 0.0:
            return 0.0

        centered = np.arange(n, dtype=float) - (n - 1) / 2.0
        ratio = float(np.dot(centered, y / scale) / np.dot(centered, centered))
        slope = scale * ratio

        logger.debug(f"Trend slope over {n} points: {slope:.4f}")

        return slope

    def __repr__(self) -> str:
        return f"TrendEstimator(window_size={self.window_size}, points={len(self._window)})"
