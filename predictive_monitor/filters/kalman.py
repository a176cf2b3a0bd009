"""
Scalar Kalman Filter.

Recursive Bayesian smoother for a single vital-sign channel.

Model:
    State:        x(k) = A * x(k-1) + B * u(k) + w,   w ~ N(0, Q)
    Measurement:  z(k) = C * x(k) + v,                v ~ N(0, R)

With the defaults A=1, B=0, C=1 the hidden value persists between samples
and is observed directly, so the filter acts as an adaptive low-pass smoother
whose strength is set by the ratio Q / R.

The first measurement initializes the state directly (x = z / C,
P = R / C^2). Every later measurement runs one exact predict/update cycle.

References:
    - Welch & Bishop, "An Introduction to the Kalman Filter"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from predictive_monitor.config import KALMAN
from predictive_monitor.utils.signal_utils import (
    NonFiniteValueError,
    ensure_finite,
    is_finite_value,
)

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KalmanConfig:
    """
    Scalar Kalman filter parameters.

    Attributes:
        measurement_noise: Measurement noise variance R (must be > 0).
        process_noise: Process noise variance Q (must be >= 0).
        state_transition: State transition coefficient A.
        control_gain: Control input coefficient B.
        observation_gain: Observation coefficient C (must be non-zero).
    """

    measurement_noise: float = KALMAN.MEASUREMENT_NOISE
    process_noise: float = KALMAN.PROCESS_NOISE
    state_transition: float = KALMAN.STATE_TRANSITION
    control_gain: float = KALMAN.CONTROL_GAIN
    observation_gain: float = KALMAN.OBSERVATION_GAIN

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        for name in (
            'measurement_noise',
            'process_noise',
            'state_transition',
            'control_gain',
            'observation_gain',
        ):
            value = getattr(self, name)
            if not is_finite_value(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")
        if self.measurement_noise <= 0:
            raise ValueError(f"measurement_noise must be positive, got {self.measurement_noise}")
        if self.process_noise < 0:
            raise ValueError(f"process_noise must be non-negative, got {self.process_noise}")
        if self.observation_gain == 0:
            raise ValueError("observation_gain must be non-zero")


@dataclass(frozen=True)
class Uninitialized:
    """Filter state before the first measurement."""


@dataclass(frozen=True)
class Tracking:
    """
    Filter state after at least one measurement.

    Attributes:
        estimate: Current state estimate.
        covariance: Variance of the current estimate.
    """

    estimate: float
    covariance: float


FilterState = Union[Uninitialized, Tracking]


class ScalarKalmanFilter:
    """
    One-dimensional Kalman filter.

    Each instance owns its state exclusively; create one filter per channel
    and per stream.

    Attributes:
        config: KalmanConfig with the model coefficients.
        state: Current FilterState (Uninitialized or Tracking).

    Example:
        >>> kf = ScalarKalmanFilter(KalmanConfig(measurement_noise=1.0, process_noise=1.0))
        >>> kf.step(80.0)
        80.0
        >>> kf.step(82.0)  # doctest: +ELLIPSIS
        81.33...
    """

    def __init__(self, config: Optional[KalmanConfig] = None) -> None:
        self.config = config or KalmanConfig()
        self.state: FilterState = Uninitialized()
        logger.debug(f"Initialized ScalarKalmanFilter with config: {self.config}")

    @property
    def initialized(self) -> bool:
        """True once the first measurement has been absorbed."""
        return isinstance(self.state, Tracking)

    @property
    def estimate(self) -> Optional[float]:
        """Current estimate, or None before the first measurement."""
        if isinstance(self.state, Tracking):
            return self.state.estimate
        return None

    @property
    def covariance(self) -> Optional[float]:
        """Estimate covariance (uncertainty), or None before the first measurement."""
        if isinstance(self.state, Tracking):
            return self.state.covariance
        return None

    def step(self, measurement: float, control: float = 0.0) -> float:
        """
        Absorb one measurement and return the updated estimate.

        Args:
            measurement: Observed value z.
            control: Control input u (ignored when control_gain is 0).

        Returns:
            The filtered estimate after this measurement.

        Raises:
            NonFiniteValueError: If measurement or control is NaN/infinite, or
                if the update overflows. The filter state is left unchanged.
        """
        z = ensure_finite(measurement, "measurement")
        u = ensure_finite(control, "control")

        cfg = self.config
        A = cfg.state_transition
        B = cfg.control_gain
        C = cfg.observation_gain
        Q = cfg.process_noise
        R = cfg.measurement_noise

        if isinstance(self.state, Uninitialized):
            self.state = self._checked_state(z / C, R / (C * C), z)
            return self.state.estimate

        # Predict
        predicted_estimate = A * self.state.estimate + B * u
        predicted_covariance = A * A * self.state.covariance + Q

        # Update
        gain = predicted_covariance * C / (C * C * predicted_covariance + R)
        estimate = predicted_estimate + gain * (z - C * predicted_estimate)
        covariance = predicted_covariance * (1.0 - gain * C)

        self.state = self._checked_state(estimate, covariance, z)

        logger.debug(
            f"Kalman step: z={z:.3f}, gain={gain:.4f}, "
            f"estimate={estimate:.3f}, covariance={covariance:.4f}"
        )

        return estimate

    @staticmethod
    def _checked_state(estimate: float, covariance: float, measurement: float) -> Tracking:
        if not (is_finite_value(estimate) and is_finite_value(covariance)):
            raise NonFiniteValueError(
                f"Kalman update overflowed for measurement {measurement!r}: "
                f"estimate={estimate!r}, covariance={covariance!r}"
            )
        return Tracking(estimate=estimate, covariance=covariance)

    def __repr__(self) -> str:
        return f"ScalarKalmanFilter(state={self.state!r})"
