"""
Utility functions for Predictive Monitor.

This package contains reusable helpers organized by domain:
- signal_utils: Finiteness checks and probability clamping

Usage:
    from predictive_monitor.utils import ensure_finite, find_non_finite
"""

from predictive_monitor.utils.signal_utils import (
    NonFiniteValueError,
    is_finite_value,
    is_integer_value,
    ensure_finite,
    find_non_finite,
    clamp_probability,
)

__all__ = [
    'NonFiniteValueError',
    'is_finite_value',
    'is_integer_value',
    'ensure_finite',
    'find_non_finite',
    'clamp_probability',
]
