"""
Numeric guard functions for streaming vital-sign values.

Kalman and OLS state is cumulative: a single NaN or infinity accepted into a
filter or window corrupts every later estimate. The helpers here let each
stage reject such values before any state is mutated.

Functions:
    is_finite_value: Check that a scalar is a finite real number
    is_integer_value: Check that a value is a (non-boolean) integer
    ensure_finite: Return a value as float or raise NonFiniteValueError
    find_non_finite: List the keys of a mapping whose values are not finite
    clamp_probability: Clamp a value into [0, 1]

Example:
    >>> from predictive_monitor.utils.signal_utils import find_non_finite
    >>> find_non_finite({'hr': 80.0, 'map': float('nan')})
    ['map']
"""

from __future__ import annotations

from typing import List, Mapping

import numpy as np


class NonFiniteValueError(ValueError):
    """Raised when a NaN or infinite value reaches a stateful estimator."""
    pass


def is_finite_value(value: object) -> bool:
    """
    Check whether a value is a finite real number.

    Booleans and non-numeric objects are rejected.

    Args:
        value: Candidate value.

    Returns:
        True if the value is a finite int or float (numpy scalars included).

    Example:
        >>> is_finite_value(72.5)
        True
        >>> is_finite_value(float('inf'))
        False
    """
    if isinstance(value, (bool, np.bool_)):
        return False
    if not isinstance(value, (int, float, np.integer, np.floating)):
        return False
    return bool(np.isfinite(value))


def is_integer_value(value: object) -> bool:
    """True for Python or numpy integers, excluding booleans."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, np.integer))


def ensure_finite(value: object, name: str = "value") -> float:
    """
    Convert a value to float, rejecting NaN, infinity and non-numbers.

    Args:
        value: Candidate value.
        name: Name used in the error message.

    Returns:
        The value as a Python float.

    Raises:
        NonFiniteValueError: If the value is not a finite number.
    """
    if not is_finite_value(value):
        raise NonFiniteValueError(f"{name} must be a finite number, got {value!r}")
    return float(value)


def find_non_finite(values: Mapping[str, object]) -> List[str]:
    """
    Find the keys whose values are not finite numbers.

    Args:
        values: Mapping of channel name to value.

    Returns:
        Keys with invalid values, in mapping order.
    """
    return [key for key, value in values.items() if not is_finite_value(value)]


def clamp_probability(value: float) -> float:
    """Clamp a value into the closed interval [0, 1]."""
    return float(min(max(value, 0.0), 1.0))


__all__ = [
    'NonFiniteValueError',
    'is_finite_value',
    'is_integer_value',
    'ensure_finite',
    'find_non_finite',
    'clamp_probability',
]
