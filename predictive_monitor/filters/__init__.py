"""
Streaming Filters for Predictive Monitor.

Modules:
    - kalman: Scalar Kalman filter (per-channel denoising)
    - trend: Sliding-window OLS slope (rate of change)

Both filters are stateful, single-pass and bounded in memory. Each instance
belongs to exactly one channel of one stream.

Example:
    >>> from predictive_monitor.filters import ScalarKalmanFilter, TrendEstimator
    >>> kf = ScalarKalmanFilter()
    >>> trend = TrendEstimator(window_size=10)
    >>> slope = trend.add_point(kf.step(82.0))
"""

from .kalman import (
    ScalarKalmanFilter,
    KalmanConfig,
    FilterState,
    Uninitialized,
    Tracking,
)
from .trend import TrendEstimator

__all__ = [
    # Kalman
    "ScalarKalmanFilter",
    "KalmanConfig",
    "FilterState",
    "Uninitialized",
    "Tracking",
    # Trend
    "TrendEstimator",
]
