"""
Batch processing helper.

Runs an already-collected sequence of samples through a fresh
EstimationPipeline and tabulates the results, e.g. for offline review of a
recorded stream.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import pandas as pd

from predictive_monitor.analysis.alerts import AlertThresholds, classify_status
from predictive_monitor.pipeline.estimation import (
    EstimationPipeline,
    InvalidSampleError,
    PipelineConfig,
    RawSample,
)

logger = logging.getLogger(__name__)


def process_samples(
    samples: Iterable[RawSample],
    config: Optional[PipelineConfig] = None,
    thresholds: Optional[AlertThresholds] = None,
    skip_invalid: bool = False
) -> pd.DataFrame:
    """
    Process a sequence of samples and return one row per accepted sample.

    This is a convenience wrapper around EstimationPipeline for offline use.
    A new pipeline is built for every call, so repeated calls on the same
    input give identical results.

    Args:
        samples: Raw samples in arrival order.
        config: Pipeline configuration. Uses defaults if None.
        thresholds: Status thresholds. Uses defaults if None.
        skip_invalid: If True, log and skip invalid samples instead of raising.

    Returns:
        DataFrame with columns `timestamp`, one column per configured channel
        (filtered values), `slope`, `risk` and `status`.

    Raises:
        InvalidSampleError: If a sample is invalid and skip_invalid is False.

    Example:
        >>> df = process_samples(samples)
        >>> df[['timestamp', 'hr', 'risk']].tail()
    """
    pipeline = EstimationPipeline(config)
    channels = list(pipeline.config.channels)
    rows: List[dict] = []
    skipped = 0

    for sample in samples:
        try:
            result = pipeline.step(sample)
        except InvalidSampleError as exc:
            if not skip_invalid:
                raise
            skipped += 1
            logger.warning(f"Skipping sample: {exc}")
            continue

        row = {'timestamp': result.timestamp}
        row.update(result.filtered_channels)
        row['slope'] = result.slope
        row['risk'] = result.risk
        row['status'] = classify_status(result, thresholds).value
        rows.append(row)

    if skipped:
        logger.info(f"Processed {len(rows)} samples, skipped {skipped} invalid")

    return pd.DataFrame(rows, columns=['timestamp', *channels, 'slope', 'risk', 'status'])
