"""
Predictive Monitor - Streaming vital-sign estimation.

A deterministic, explainable three-stage estimator that turns noisy vital-sign
samples into a fused deterioration risk, one sample at a time:
- Scalar Kalman filter per channel (denoising)
- Sliding-window OLS slope on a primary channel (trend)
- Two-hypothesis naive-Bayes fusion of two channels (risk)

Modules:
    config: Centralized default constants
    filters: ScalarKalmanFilter and TrendEstimator
    models: RiskFusionEngine and risk model configuration
    pipeline: EstimationPipeline and batch helper
    analysis: Status classification
    utils: Numeric guards

Quick Start:
    >>> from predictive_monitor.pipeline import EstimationPipeline, RawSample
    >>> from predictive_monitor.analysis import classify_status

    >>> pipeline = EstimationPipeline()
    >>> result = pipeline.step(RawSample(0.0, {'hr': 82.0, 'map': 80.0}))
    >>> status = classify_status(result)
"""

__version__ = "1.0.0"

# Expose main configuration
from predictive_monitor.config import CHANNELS, KALMAN, TREND, RISK, ALERTS

__all__ = [
    '__version__',
    'CHANNELS',
    'KALMAN',
    'TREND',
    'RISK',
    'ALERTS',
]
