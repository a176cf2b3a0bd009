"""
Pipeline Integration Tests.

End-to-end tests for the estimation pipeline:
    1. Validation of raw samples
    2. Per-channel Kalman filtering
    3. Trend estimation on the primary channel
    4. Risk fusion over two channels
    5. Batch tabulation with status classification

Scenarios are deterministic: a stable patient (values oscillating around a
normal baseline) and a deteriorating patient (heart rate ramping up while
mean arterial pressure ramps down).
"""

import math
import sys
from pathlib import Path
from typing import List

import numpy as np
import pandas as pd
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from predictive_monitor.analysis.alerts import MonitorStatus
from predictive_monitor.config import CHANNELS
from predictive_monitor.filters.kalman import KalmanConfig
from predictive_monitor.pipeline import (
    EstimationPipeline,
    InvalidSampleError,
    PipelineConfig,
    PipelineError,
    ProcessedSample,
    RawSample,
    process_samples,
)

O2 = CHANNELS.OXYGEN_SATURATION


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def stable_samples() -> List[RawSample]:
    """60 seconds of a stable patient: HR ~75, MAP ~85."""
    return [
        RawSample(
            timestamp=float(i),
            channel_values={'hr': 75.0 + 2.0 * math.sin(i), 'map': 85.0 + 2.0 * math.cos(i)}
        )
        for i in range(60)
    ]


@pytest.fixture
def deteriorating_samples() -> List[RawSample]:
    """10 stable seconds, then HR rises 2 bpm/s and MAP falls 1.2 mmHg/s."""
    samples = []
    for i in range(40):
        ramp = max(0, i - 10)
        samples.append(RawSample(
            timestamp=float(i),
            channel_values={'hr': 80.0 + 2.0 * ramp, 'map': 80.0 - 1.2 * ramp}
        ))
    return samples


def _run(pipeline: EstimationPipeline, samples: List[RawSample]) -> List[ProcessedSample]:
    return [pipeline.step(s) for s in samples]


# ============================================================================
# Step Behaviour
# ============================================================================

class TestPipelineStep:
    """Tests for a single pipeline step."""

    def test_first_step_passes_values_through(self):
        pipeline = EstimationPipeline()
        result = pipeline.step(RawSample(0.0, {'hr': 78.0, 'map': 84.0}))

        assert result.filtered_channels == {'hr': 78.0, 'map': 84.0}
        assert result.slope == 0.0
        assert 0.0 <= result.risk < 0.1
        assert result.timestamp == 0.0
        assert result.uncertainties == {'hr': 1.0, 'map': 1.0}

    def test_risk_matches_engine_on_filtered_values(self, stable_samples):
        pipeline = EstimationPipeline()
        for sample in stable_samples[:5]:
            result = pipeline.step(sample)

        expected = pipeline.risk_engine.calculate_risk(
            result.filtered_channels['hr'], result.filtered_channels['map']
        )
        assert result.risk == expected

    def test_slope_follows_primary_channel(self):
        config = PipelineConfig(primary_channel='map')
        pipeline = EstimationPipeline(config)
        for i in range(15):
            result = pipeline.step(RawSample(float(i), {'hr': 80.0, 'map': 90.0 - i}))

        assert result.slope < -0.5, "MAP is falling, slope should be negative"

    def test_extra_channels_are_ignored(self):
        pipeline = EstimationPipeline()
        result = pipeline.step(RawSample(0.0, {'hr': 80.0, 'map': 80.0, O2: 97.0}))

        assert set(result.filtered_channels) == {'hr', 'map'}

    def test_samples_processed_counter(self, stable_samples):
        pipeline = EstimationPipeline()
        _run(pipeline, stable_samples[:7])
        assert pipeline.samples_processed == 7

    def test_per_channel_kalman_override(self):
        """A channel with tiny R tracks measurements almost exactly."""
        config = PipelineConfig(
            channel_kalman={'map': KalmanConfig(measurement_noise=1e-9, process_noise=1.0)}
        )
        pipeline = EstimationPipeline(config)
        pipeline.step(RawSample(0.0, {'hr': 80.0, 'map': 80.0}))
        result = pipeline.step(RawSample(1.0, {'hr': 90.0, 'map': 70.0}))

        assert result.filtered_channels['map'] == pytest.approx(70.0, abs=1e-6)
        assert result.filtered_channels['hr'] < 90.0


# ============================================================================
# Scenarios
# ============================================================================

class TestScenarios:
    """Stable vs. deteriorating patients."""

    def test_stable_patient_stays_low_risk(self, stable_samples):
        results = _run(EstimationPipeline(), stable_samples)

        assert max(r.risk for r in results) < 0.1
        # slope settles once the window holds several filtered points
        assert all(abs(r.slope) < 0.3 for r in results[10:])

    def test_deteriorating_patient_reaches_high_risk(self, deteriorating_samples):
        results = _run(EstimationPipeline(), deteriorating_samples)

        assert results[9].risk < 0.2, "Before the ramp the risk should be low"
        assert results[-1].risk > 0.8, "At the end of the ramp the risk should be high"
        assert results[-1].slope == pytest.approx(2.0, abs=0.2)

    def test_replay_is_deterministic(self, deteriorating_samples):
        first = _run(EstimationPipeline(), deteriorating_samples)
        second = _run(EstimationPipeline(), deteriorating_samples)

        assert first == second

    def test_independent_pipelines_do_not_share_state(self, stable_samples, deteriorating_samples):
        a = EstimationPipeline()
        b = EstimationPipeline()
        _run(a, deteriorating_samples)

        fresh = EstimationPipeline()
        assert _run(b, stable_samples) == _run(fresh, stable_samples)


# ============================================================================
# Invalid Input
# ============================================================================

class TestInvalidSamples:
    """Non-finite and missing values must not poison pipeline state."""

    @pytest.mark.parametrize("bad", [float('nan'), float('inf'), float('-inf')])
    def test_non_finite_sample_rejected(self, stable_samples, bad):
        pipeline = EstimationPipeline()
        _run(pipeline, stable_samples[:5])

        with pytest.raises(InvalidSampleError, match="map"):
            pipeline.step(RawSample(5.0, {'hr': 80.0, 'map': bad}))

    def test_rejected_sample_leaves_state_untouched(self, stable_samples):
        clean = EstimationPipeline()
        dirty = EstimationPipeline()

        _run(clean, stable_samples[:10])
        _run(dirty, stable_samples[:10])
        with pytest.raises(InvalidSampleError):
            # hr is valid but must not be absorbed either
            dirty.step(RawSample(10.0, {'hr': 200.0, 'map': float('nan')}))

        assert _run(clean, stable_samples[10:]) == _run(dirty, stable_samples[10:])
        assert dirty.samples_processed == clean.samples_processed

    def test_missing_channel_rejected(self):
        pipeline = EstimationPipeline()
        with pytest.raises(InvalidSampleError, match="missing"):
            pipeline.step(RawSample(0.0, {'hr': 80.0}))

    def test_non_numeric_value_rejected(self):
        pipeline = EstimationPipeline()
        with pytest.raises(InvalidSampleError):
            pipeline.step(RawSample(0.0, {'hr': '80', 'map': 80.0}))

    def test_invalid_sample_error_is_pipeline_error(self):
        assert issubclass(InvalidSampleError, PipelineError)

    def test_overflowing_sample_rejected_and_pipeline_recovers(self):
        """Finite readings that overflow a filter are rejected; later samples still work."""
        pipeline = EstimationPipeline()
        reference = EstimationPipeline()

        first = RawSample(0.0, {'hr': 1.7e308, 'map': 80.0})
        pipeline.step(first)
        reference.step(first)

        with pytest.raises(InvalidSampleError, match="overflowed"):
            pipeline.step(RawSample(1.0, {'hr': -1.7e308, 'map': 80.0}))

        assert pipeline.filters['hr'].estimate == 1.7e308
        assert pipeline.trend.window == reference.trend.window
        assert pipeline.samples_processed == 1

        normal = RawSample(2.0, {'hr': 80.0, 'map': 80.0})
        result = pipeline.step(normal)

        assert result == reference.step(normal)
        assert math.isfinite(result.slope)
        assert math.isfinite(result.filtered_channels['hr'])

    def test_overflow_restores_filters_already_stepped(self):
        """A channel filtered before the overflowing one is rolled back too."""
        config = PipelineConfig(channels=('map', 'hr'))
        pipeline = EstimationPipeline(config)
        pipeline.step(RawSample(0.0, {'hr': 1.7e308, 'map': 80.0}))
        map_state = pipeline.filters['map'].state

        with pytest.raises(InvalidSampleError):
            pipeline.step(RawSample(1.0, {'hr': -1.7e308, 'map': 60.0}))

        assert pipeline.filters['map'].state == map_state

    def test_near_overflow_values_give_finite_slope(self):
        pipeline = EstimationPipeline()
        results = [pipeline.step(RawSample(float(i), {'hr': 1.5e308, 'map': 80.0})) for i in range(3)]

        assert [r.slope for r in results] == [0.0, 0.0, 0.0]


# ============================================================================
# Configuration
# ============================================================================

class TestPipelineConfig:
    """Tests for configuration validation."""

    def test_defaults(self):
        config = PipelineConfig()
        assert config.channels == ('hr', 'map')
        assert config.primary_channel == 'hr'
        assert config.risk_channels == ('hr', 'map')
        assert config.window_size == 10

    def test_lists_are_normalized_to_tuples(self):
        config = PipelineConfig(channels=['hr', 'map', O2], risk_channels=['hr', 'map'])
        assert config.channels == ('hr', 'map', O2)
        assert config.risk_channels == ('hr', 'map')

    def test_primary_channel_must_be_configured(self):
        with pytest.raises(ValueError, match="primary_channel"):
            PipelineConfig(primary_channel=O2)

    def test_risk_channels_must_be_configured(self):
        with pytest.raises(ValueError, match="risk channel"):
            PipelineConfig(risk_channels=('hr', O2))

    def test_exactly_two_risk_channels(self):
        with pytest.raises(ValueError, match="exactly 2"):
            PipelineConfig(channels=('hr', 'map', O2), risk_channels=('hr', 'map', O2))

    def test_duplicate_channels_rejected(self):
        with pytest.raises(ValueError, match="unique"):
            PipelineConfig(channels=('hr', 'hr', 'map'))

    def test_empty_channels_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            PipelineConfig(channels=())

    def test_unknown_kalman_override_rejected(self):
        with pytest.raises(ValueError, match="channel_kalman"):
            PipelineConfig(channel_kalman={O2: KalmanConfig()})

    @pytest.mark.parametrize("size", [1, 0, 3.0])
    def test_invalid_window_size_rejected(self, size):
        with pytest.raises(ValueError, match="window_size"):
            PipelineConfig(window_size=size)

    def test_numpy_integer_window_size_accepted(self):
        config = PipelineConfig(window_size=np.int64(5))

        assert config.window_size == 5
        assert isinstance(config.window_size, int)
        assert EstimationPipeline(config).trend.window_size == 5

    def test_three_channel_pipeline(self):
        config = PipelineConfig(channels=('hr', 'map', O2))
        pipeline = EstimationPipeline(config)
        result = pipeline.step(RawSample(0.0, {'hr': 80.0, 'map': 80.0, O2: 97.0}))

        assert result.filtered_channels[O2] == 97.0


# ============================================================================
# Batch Processing
# ============================================================================

class TestProcessSamples:
    """Tests for the DataFrame batch helper."""

    def test_columns_and_length(self, stable_samples):
        df = process_samples(stable_samples)

        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ['timestamp', 'hr', 'map', 'slope', 'risk', 'status']
        assert len(df) == len(stable_samples)
        assert set(df["status"].iloc[10:]) == {MonitorStatus.NORMAL.value}

    def test_matches_streaming_results(self, deteriorating_samples):
        df = process_samples(deteriorating_samples)
        streamed = _run(EstimationPipeline(), deteriorating_samples)

        np.testing.assert_allclose(df['risk'].to_numpy(), [r.risk for r in streamed])
        np.testing.assert_allclose(df['slope'].to_numpy(), [r.slope for r in streamed])

    def test_deterioration_escalates_status(self, deteriorating_samples):
        df = process_samples(deteriorating_samples)

        assert df['status'].iloc[0] == MonitorStatus.NORMAL.value
        assert df['status'].iloc[-1] == MonitorStatus.CRITICAL.value
        assert MonitorStatus.DRIFT_WARNING.value in set(df['status'])

    def test_invalid_sample_raises_by_default(self, stable_samples):
        samples = stable_samples[:5] + [RawSample(5.0, {'hr': float('nan'), 'map': 80.0})]
        with pytest.raises(InvalidSampleError):
            process_samples(samples)

    def test_skip_invalid(self, stable_samples):
        samples = list(stable_samples[:5])
        samples.insert(2, RawSample(1.5, {'hr': float('nan'), 'map': 80.0}))

        df = process_samples(samples, skip_invalid=True)

        assert len(df) == 5
        assert 1.5 not in set(df['timestamp'])

    def test_skip_invalid_skips_overflowing_sample(self):
        samples = [
            RawSample(0.0, {'hr': 1.7e308, 'map': 80.0}),
            RawSample(1.0, {'hr': -1.7e308, 'map': 80.0}),
            RawSample(2.0, {'hr': 80.0, 'map': 80.0}),
        ]

        df = process_samples(samples, skip_invalid=True)

        assert list(df['timestamp']) == [0.0, 2.0]
        assert np.isfinite(df['slope']).all()

    def test_empty_input(self):
        df = process_samples([])
        assert df.empty
        assert list(df.columns) == ['timestamp', 'hr', 'map', 'slope', 'risk', 'status']
