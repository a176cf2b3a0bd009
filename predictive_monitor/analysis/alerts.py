"""
Status Classification for Predictive Monitor.

Maps a ProcessedSample to a monitor status that display and alerting code
can act on:

    CRITICAL       risk >= risk_critical
    DRIFT_WARNING  risk >= risk_warning, or |slope| >= slope_warning
    NORMAL         otherwise

DRIFT_WARNING flags a sustained trend while absolute values are still in an
acceptable range. The default thresholds are illustrative and should be tuned
per deployment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from predictive_monitor.config import ALERTS

if TYPE_CHECKING:
    from predictive_monitor.pipeline.estimation import ProcessedSample


logger = logging.getLogger(__name__)


class MonitorStatus(Enum):
    """Monitor status, ordered by severity."""

    NORMAL = "NORMAL"
    DRIFT_WARNING = "DRIFT_WARNING"
    CRITICAL = "CRITICAL"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    MonitorStatus.NORMAL: 0,
    MonitorStatus.DRIFT_WARNING: 1,
    MonitorStatus.CRITICAL: 2,
}


@dataclass(frozen=True)
class AlertThresholds:
    """
    Thresholds for status classification.

    Attributes:
        risk_warning: Risk at or above which the status is at least DRIFT_WARNING.
        risk_critical: Risk at or above which the status is CRITICAL.
        slope_warning: Absolute slope (units per sample) that raises DRIFT_WARNING.
    """

    risk_warning: float = ALERTS.RISK_WARNING
    risk_critical: float = ALERTS.RISK_CRITICAL
    slope_warning: float = ALERTS.SLOPE_WARNING

    def __post_init__(self) -> None:
        """Validate threshold ordering."""
        if not 0.0 <= self.risk_warning <= self.risk_critical <= 1.0:
            raise ValueError(
                "thresholds must satisfy 0 <= risk_warning <= risk_critical <= 1, "
                f"got risk_warning={self.risk_warning}, risk_critical={self.risk_critical}"
            )
        if self.slope_warning < 0:
            raise ValueError(f"slope_warning must be non-negative, got {self.slope_warning}")


def classify_status(
    sample: ProcessedSample,
    thresholds: Optional[AlertThresholds] = None
) -> MonitorStatus:
    """
    Classify a processed sample.

    Args:
        sample: Output of EstimationPipeline.step.
        thresholds: Classification thresholds. Uses defaults if None.

    Returns:
        The MonitorStatus for this sample.

    Example:
        >>> status = classify_status(pipeline.step(raw))
        >>> if status is MonitorStatus.DRIFT_WARNING:
        ...     print("Silent deterioration detected")
    """
    thresholds = thresholds or AlertThresholds()

    if sample.risk >= thresholds.risk_critical:
        status = MonitorStatus.CRITICAL
    elif sample.risk >= thresholds.risk_warning or abs(sample.slope) >= thresholds.slope_warning:
        status = MonitorStatus.DRIFT_WARNING
    else:
        status = MonitorStatus.NORMAL

    if status is not MonitorStatus.NORMAL:
        logger.debug(
            f"Status {status.value} at t={sample.timestamp}: "
            f"risk={sample.risk:.3f}, slope={sample.slope:+.3f}"
        )

    return status
