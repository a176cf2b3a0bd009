"""
Estimation Pipeline Module.

Composes the three estimation stages into a per-sample pipeline:

    RawSample
        -> validation (all configured channels present and finite)
        -> per-channel ScalarKalmanFilter
        -> TrendEstimator on the primary filtered channel
        -> RiskFusionEngine over two filtered channels
        -> ProcessedSample

Each pipeline owns its filters and window for its whole lifetime, so the
output of `step` is a deterministic function of the sequence of samples seen
so far. A sample is validated in full before any state is touched, and filter
states are restored if a finite sample still overflows an estimator: a
rejected sample leaves every filter and the trend window exactly as they were.

Example:
    >>> from predictive_monitor.pipeline import EstimationPipeline, RawSample
    >>> pipeline = EstimationPipeline()
    >>> result = pipeline.step(RawSample(timestamp=0.0, channel_values={'hr': 78.0, 'map': 84.0}))
    >>> result.risk < 0.1
    True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from predictive_monitor.config import CHANNELS, TREND
from predictive_monitor.filters.kalman import KalmanConfig, ScalarKalmanFilter
from predictive_monitor.filters.trend import TrendEstimator
from predictive_monitor.models.fusion import RiskFusionEngine, RiskModelConfig
from predictive_monitor.utils.signal_utils import (
    NonFiniteValueError,
    find_non_finite,
    is_integer_value,
)

# Configure module logger
logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Base exception for pipeline errors."""
    pass


class InvalidSampleError(PipelineError):
    """Raised when a sample is missing channels, carries non-finite values or overflows an estimator."""
    pass


@dataclass(frozen=True)
class RawSample:
    """
    One tick of raw vital-sign readings.

    Attributes:
        timestamp: Sample time (any monotonic unit chosen by the producer).
        channel_values: Mapping of channel name to raw reading.
    """

    timestamp: float
    channel_values: Mapping[str, float]


@dataclass(frozen=True)
class ProcessedSample:
    """
    Pipeline output for one RawSample.

    Attributes:
        timestamp: Timestamp copied from the raw sample.
        filtered_channels: Kalman estimate per configured channel.
        slope: Trend of the primary channel in units per sample.
        risk: Posterior probability of the adverse hypothesis, in [0, 1].
        uncertainties: Kalman estimate covariance per channel after this step.
    """

    timestamp: float
    filtered_channels: Dict[str, float]
    slope: float
    risk: float
    uncertainties: Dict[str, float] = field(default_factory=dict)

    def __repr__(self) -> str:
        channels = ", ".join(f"{k}={v:.1f}" for k, v in self.filtered_channels.items())
        return f"ProcessedSample(t={self.timestamp}, {channels}, slope={self.slope:+.3f}, risk={self.risk:.3f})"


@dataclass
class PipelineConfig:
    """
    Configuration for an EstimationPipeline.

    Attributes:
        channels: Channel names filtered on every step.
        primary_channel: Channel whose filtered value feeds the trend estimator.
        risk_channels: The two channels fused into the risk estimate, in the
            order (channel_a, channel_b) expected by the risk model.
        kalman: Default Kalman parameters for every channel.
        channel_kalman: Per-channel overrides of the Kalman parameters.
        window_size: Trend window length in samples (>= 2).
        risk_model: Risk fusion configuration.
    """

    channels: Tuple[str, ...] = (CHANNELS.HEART_RATE, CHANNELS.MEAN_ARTERIAL_PRESSURE)
    primary_channel: str = CHANNELS.HEART_RATE
    risk_channels: Tuple[str, str] = (CHANNELS.HEART_RATE, CHANNELS.MEAN_ARTERIAL_PRESSURE)
    kalman: KalmanConfig = field(default_factory=KalmanConfig)
    channel_kalman: Dict[str, KalmanConfig] = field(default_factory=dict)
    window_size: int = TREND.WINDOW_SIZE
    risk_model: RiskModelConfig = field(default_factory=RiskModelConfig)

    def __post_init__(self) -> None:
        """Validate channel wiring and window size."""
        self.channels = tuple(self.channels)
        self.risk_channels = tuple(self.risk_channels)

        if not self.channels:
            raise ValueError("channels must not be empty")
        if len(set(self.channels)) != len(self.channels):
            raise ValueError(f"channels must be unique, got {self.channels}")
        if self.primary_channel not in self.channels:
            raise ValueError(
                f"primary_channel '{self.primary_channel}' is not one of {self.channels}"
            )
        if len(self.risk_channels) != 2:
            raise ValueError(f"risk_channels must name exactly 2 channels, got {self.risk_channels}")
        for name in self.risk_channels:
            if name not in self.channels:
                raise ValueError(f"risk channel '{name}' is not one of {self.channels}")
        unknown = set(self.channel_kalman) - set(self.channels)
        if unknown:
            raise ValueError(f"channel_kalman has unknown channels: {sorted(unknown)}")
        if not is_integer_value(self.window_size):
            raise ValueError(f"window_size must be an integer, got {self.window_size!r}")
        self.window_size = int(self.window_size)
        if self.window_size < TREND.MIN_WINDOW_SIZE:
            raise ValueError(
                f"window_size must be >= {TREND.MIN_WINDOW_SIZE}, got {self.window_size}"
            )

    def kalman_for(self, channel: str) -> KalmanConfig:
        """Kalman parameters for a channel (override or default)."""
        return self.channel_kalman.get(channel, self.kalman)


class EstimationPipeline:
    """
    Per-stream estimation pipeline.

    Owns one ScalarKalmanFilter per channel, one TrendEstimator bound to the
    primary channel and one RiskFusionEngine bound to the two risk channels.
    Use one instance per patient/stream; instances share no mutable state.

    Attributes:
        config: PipelineConfig instance.
        filters: Mapping of channel name to its Kalman filter.
        trend: TrendEstimator for the primary channel.
        risk_engine: RiskFusionEngine for the risk channels.
        samples_processed: Number of samples accepted so far.
    """

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration. Uses defaults if None.
        """
        self.config = config or PipelineConfig()
        self.filters: Dict[str, ScalarKalmanFilter] = {
            channel: ScalarKalmanFilter(self.config.kalman_for(channel))
            for channel in self.config.channels
        }
        self.trend = TrendEstimator(self.config.window_size)
        self.risk_engine = RiskFusionEngine(self.config.risk_model)
        self.samples_processed = 0

        logger.info(
            f"Initialized EstimationPipeline: channels={list(self.config.channels)}, "
            f"primary={self.config.primary_channel}, "
            f"risk={list(self.config.risk_channels)}, window={self.config.window_size}"
        )

    def step(self, sample: RawSample) -> ProcessedSample:
        """
        Process one raw sample.

        Args:
            sample: Raw readings for this tick. Channels that are not
                configured are ignored.

        Returns:
            ProcessedSample with filtered channels, slope and risk.

        Raises:
            InvalidSampleError: If a configured channel is missing or holds a
                NaN/infinite value, or if filtering it overflows. No internal state is changed.
        """
        self._validate(sample)

        previous_states = {channel: kalman.state for channel, kalman in self.filters.items()}
        try:
            filtered: Dict[str, float] = {}
            for channel, kalman in self.filters.items():
                filtered[channel] = kalman.step(sample.channel_values[channel])

            channel_a, channel_b = self.config.risk_channels
            risk = self.risk_engine.calculate_risk(filtered[channel_a], filtered[channel_b])

            # Trend is updated last; it leaves its window untouched when it raises.
            slope = self.trend.add_point(filtered[self.config.primary_channel])
        except NonFiniteValueError as e:
            for channel, state in previous_states.items():
                self.filters[channel].state = state
            raise InvalidSampleError(
                f"Sample at t={sample.timestamp} overflowed during estimation: {e}"
            ) from e

        self.samples_processed += 1

        return ProcessedSample(
            timestamp=sample.timestamp,
            filtered_channels=filtered,
            slope=slope,
            risk=risk,
            uncertainties={channel: kalman.covariance for channel, kalman in self.filters.items()},
        )

    def _validate(self, sample: RawSample) -> None:
        values = sample.channel_values
        missing = [channel for channel in self.config.channels if channel not in values]
        if missing:
            raise InvalidSampleError(
                f"Sample at t={sample.timestamp} is missing channels: {missing}"
            )

        invalid = find_non_finite({channel: values[channel] for channel in self.config.channels})
        if invalid:
            raise InvalidSampleError(
                f"Sample at t={sample.timestamp} has non-finite values for channels: {invalid}"
            )

        extra = set(values) - set(self.config.channels)
        if extra:
            logger.debug(f"Ignoring unconfigured channels at t={sample.timestamp}: {sorted(extra)}")

    def __repr__(self) -> str:
        return (
            f"EstimationPipeline(channels={list(self.config.channels)}, "
            f"samples_processed={self.samples_processed})"
        )
