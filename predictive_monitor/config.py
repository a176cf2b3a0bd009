"""
Centralized configuration for Predictive Monitor.

This module contains the default constants used throughout the estimation
pipeline. Component configuration dataclasses take their defaults from here,
so changing a value in one place changes it everywhere.

Usage:
    from predictive_monitor.config import KALMAN, TREND, RISK

    window = TREND.WINDOW_SIZE
    prior = RISK.PRIOR
"""

from dataclasses import dataclass
from typing import Final


# =============================================================================
# Channel Names
# =============================================================================

@dataclass(frozen=True)
class ChannelNames:
    """Canonical channel keys used in raw samples."""

    HEART_RATE: str = 'hr'                # bpm
    MEAN_ARTERIAL_PRESSURE: str = 'map'   # mmHg
    OXYGEN_SATURATION: str = 'o2'         # %


CHANNELS: Final[ChannelNames] = ChannelNames()


# =============================================================================
# Kalman Filter Defaults
# =============================================================================

@dataclass(frozen=True)
class KalmanDefaults:
    """Scalar Kalman filter model ("value persists, directly observed")."""

    MEASUREMENT_NOISE: float = 1.0   # R
    PROCESS_NOISE: float = 1.0       # Q
    STATE_TRANSITION: float = 1.0    # A
    CONTROL_GAIN: float = 0.0        # B
    OBSERVATION_GAIN: float = 1.0    # C


KALMAN: Final[KalmanDefaults] = KalmanDefaults()


# =============================================================================
# Trend Estimation Defaults
# =============================================================================

@dataclass(frozen=True)
class TrendDefaults:
    """Sliding-window slope estimation constants."""

    WINDOW_SIZE: int = 10
    MIN_WINDOW_SIZE: int = 2   # OLS slope undefined below 2 points


TREND: Final[TrendDefaults] = TrendDefaults()


# =============================================================================
# Risk Model Defaults
# =============================================================================

@dataclass(frozen=True)
class RiskDefaults:
    """
    Two-hypothesis risk model constants.

    Heart rate above ~90 bpm pushes toward the adverse hypothesis, mean
    arterial pressure below ~75 mmHg does the same. Values are illustrative,
    not clinically calibrated.
    """

    PRIOR: float = 0.10

    HR_ADVERSE_MIDPOINT: float = 90.0
    HR_HEALTHY_MIDPOINT: float = 85.0
    HR_SCALE: float = 8.0

    MAP_ADVERSE_MIDPOINT: float = 75.0
    MAP_HEALTHY_MIDPOINT: float = 80.0
    MAP_SCALE: float = 8.0


RISK: Final[RiskDefaults] = RiskDefaults()


# =============================================================================
# Alert Thresholds
# =============================================================================

@dataclass(frozen=True)
class AlertDefaults:
    """Status thresholds (demo-calibrated, treat as policy configuration)."""

    RISK_WARNING: float = 0.4
    RISK_CRITICAL: float = 0.8
    SLOPE_WARNING: float = 0.3   # units per sample


ALERTS: Final[AlertDefaults] = AlertDefaults()


# =============================================================================
# Convenience Exports
# =============================================================================

__all__ = [
    'CHANNELS',
    'KALMAN',
    'TREND',
    'RISK',
    'ALERTS',
    'ChannelNames',
    'KalmanDefaults',
    'TrendDefaults',
    'RiskDefaults',
    'AlertDefaults',
]
