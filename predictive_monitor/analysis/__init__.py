"""
Analysis module for Predictive Monitor.

This module provides:
    - Status classification (NORMAL / DRIFT_WARNING / CRITICAL)

Usage:
    >>> from predictive_monitor.analysis import classify_status, MonitorStatus
    >>> status = classify_status(processed_sample)
"""

from .alerts import classify_status, AlertThresholds, MonitorStatus

__all__ = [
    'classify_status',
    'AlertThresholds',
    'MonitorStatus',
]
