"""
Risk Fusion Module.

Fuses two smoothed vital-sign channels into the posterior probability of an
adverse ("deteriorating") condition using a two-hypothesis naive-Bayes model.

Model:
    Hypotheses:   adverse (prior p) vs. healthy (prior 1 - p)

    Per-channel likelihoods are logistic threshold functions. For a channel
    whose adverse direction is INCREASING (e.g. heart rate):
        P(x | adverse) = sigmoid((x - adverse_midpoint) / scale)
        P(x | healthy) = 1 - sigmoid((x - healthy_midpoint) / scale)
    For a DECREASING channel (e.g. mean arterial pressure) the complements
    are swapped.

    Channels are assumed conditionally independent given the hypothesis:
        L_adverse = P(a | adverse) * P(b | adverse)
        L_healthy = P(a | healthy) * P(b | healthy)

    Posterior:
        evidence  = L_adverse * p + L_healthy * (1 - p)
        posterior = L_adverse * p / evidence   (0 when evidence == 0)

This is a deterministic, explainable estimator, not a calibrated clinical
risk model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from scipy.special import expit

from predictive_monitor.config import RISK
from predictive_monitor.utils.signal_utils import clamp_probability, ensure_finite, is_finite_value

# Configure module logger
logger = logging.getLogger(__name__)


class AdverseDirection(Enum):
    """Direction in which a channel moves when the patient deteriorates."""
    INCREASING = "increasing"
    DECREASING = "decreasing"


@dataclass(frozen=True)
class ChannelLikelihood:
    """
    Logistic likelihood parameters for one channel.

    Attributes:
        adverse_midpoint: Value at which P(x | adverse) crosses 0.5.
        healthy_midpoint: Value at which P(x | healthy) crosses 0.5.
        scale: Logistic scale; smaller means a sharper threshold (> 0).
        adverse_direction: Whether rising or falling values are adverse.
    """

    adverse_midpoint: float
    healthy_midpoint: float
    scale: float = 8.0
    adverse_direction: AdverseDirection = AdverseDirection.INCREASING

    def __post_init__(self) -> None:
        """Validate likelihood parameters."""
        for name in ('adverse_midpoint', 'healthy_midpoint', 'scale'):
            value = getattr(self, name)
            if not is_finite_value(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if not isinstance(self.adverse_direction, AdverseDirection):
            raise ValueError(
                f"adverse_direction must be an AdverseDirection, got {self.adverse_direction!r}"
            )

    def given_adverse(self, value: float) -> float:
        """P(value | adverse)."""
        t = (value - self.adverse_midpoint) / self.scale
        if self.adverse_direction is AdverseDirection.INCREASING:
            return float(expit(t))
        return float(expit(-t))

    def given_healthy(self, value: float) -> float:
        """P(value | healthy)."""
        t = (value - self.healthy_midpoint) / self.scale
        if self.adverse_direction is AdverseDirection.INCREASING:
            return float(expit(-t))
        return float(expit(t))


def _default_heart_rate() -> ChannelLikelihood:
    return ChannelLikelihood(
        adverse_midpoint=RISK.HR_ADVERSE_MIDPOINT,
        healthy_midpoint=RISK.HR_HEALTHY_MIDPOINT,
        scale=RISK.HR_SCALE,
        adverse_direction=AdverseDirection.INCREASING,
    )


def _default_mean_arterial_pressure() -> ChannelLikelihood:
    return ChannelLikelihood(
        adverse_midpoint=RISK.MAP_ADVERSE_MIDPOINT,
        healthy_midpoint=RISK.MAP_HEALTHY_MIDPOINT,
        scale=RISK.MAP_SCALE,
        adverse_direction=AdverseDirection.DECREASING,
    )


@dataclass(frozen=True)
class RiskModelConfig:
    """
    Configuration for the two-channel risk model.

    Attributes:
        prior: Baseline prevalence of the adverse condition, in (0, 1).
        channel_a: Likelihood model for the first fused channel.
        channel_b: Likelihood model for the second fused channel.
    """

    prior: float = RISK.PRIOR
    channel_a: ChannelLikelihood = field(default_factory=_default_heart_rate)
    channel_b: ChannelLikelihood = field(default_factory=_default_mean_arterial_pressure)

    def __post_init__(self) -> None:
        """Validate the prior."""
        if not is_finite_value(self.prior):
            raise ValueError(f"prior must be a finite number, got {self.prior!r}")
        if not 0.0 < self.prior < 1.0:
            raise ValueError(f"prior must be in (0, 1), got {self.prior}")


class RiskFusionEngine:
    """
    Naive-Bayes fusion of two channels into a risk probability.

    The engine is stateless apart from its immutable configuration, so one
    instance may be reused freely.

    Example:
        >>> engine = RiskFusionEngine()
        >>> engine.calculate_risk(75.0, 85.0) < 0.1
        True
        >>> engine.calculate_risk(140.0, 55.0) > 0.8
        True
    """

    def __init__(self, config: Optional[RiskModelConfig] = None) -> None:
        self.config = config or RiskModelConfig()

    @property
    def prior(self) -> float:
        return float(self.config.prior)

    def likelihoods(self, channel_a: float, channel_b: float) -> Tuple[float, float]:
        """
        Compute the joint likelihoods under each hypothesis.

        Args:
            channel_a: Smoothed value of the first channel.
            channel_b: Smoothed value of the second channel.

        Returns:
            Tuple of (L_adverse, L_healthy).

        Raises:
            NonFiniteValueError: If either input is NaN/infinite.
        """
        a = ensure_finite(channel_a, "channel_a")
        b = ensure_finite(channel_b, "channel_b")
        model_a = self.config.channel_a
        model_b = self.config.channel_b

        likelihood_adverse = model_a.given_adverse(a) * model_b.given_adverse(b)
        likelihood_healthy = model_a.given_healthy(a) * model_b.given_healthy(b)

        return likelihood_adverse, likelihood_healthy

    def calculate_risk(self, channel_a: float, channel_b: float) -> float:
        """
        Compute the posterior probability of the adverse hypothesis.

        Args:
            channel_a: Smoothed value of the first channel.
            channel_b: Smoothed value of the second channel.

        Returns:
            Posterior probability in [0, 1]. Returns 0.0 when the evidence
            underflows to zero.

        Raises:
            NonFiniteValueError: If either input is NaN/infinite.
        """
        likelihood_adverse, likelihood_healthy = self.likelihoods(channel_a, channel_b)
        p = float(self.config.prior)

        evidence = likelihood_adverse * p + likelihood_healthy * (1.0 - p)

        if evidence == 0:
            logger.debug(
                f"Degenerate evidence for inputs ({channel_a}, {channel_b}); returning 0"
            )
            return 0.0

        posterior = (likelihood_adverse * p) / evidence

        logger.debug(
            f"Risk fusion: L_adverse={likelihood_adverse:.4g}, "
            f"L_healthy={likelihood_healthy:.4g}, posterior={posterior:.4f}"
        )

        return clamp_probability(posterior)
