"""
Estimation pipeline for Predictive Monitor.

Modules:
    estimation: Per-sample pipeline (EstimationPipeline, RawSample, ProcessedSample)
    batch: Offline helper that tabulates a sample sequence (process_samples)

Usage:
    >>> from predictive_monitor.pipeline import EstimationPipeline, RawSample
    >>> pipeline = EstimationPipeline()
    >>> result = pipeline.step(RawSample(0.0, {'hr': 80.0, 'map': 82.0}))
"""

from .estimation import (
    EstimationPipeline,
    PipelineConfig,
    RawSample,
    ProcessedSample,
    PipelineError,
    InvalidSampleError,
)
from .batch import process_samples

__all__ = [
    "EstimationPipeline",
    "PipelineConfig",
    "RawSample",
    "ProcessedSample",
    "PipelineError",
    "InvalidSampleError",
    "process_samples",
]
