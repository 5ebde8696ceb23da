"""
Unit conversion utilities for odometry and mapping.

The estimator integrates in centimetres (wheel geometry is specified in cm)
while room polygons and path history are stored in metres. All function
names explicitly state both the input and output units.
"""

from typing import Union

import numpy as np

# Type alias for numeric types
Numeric = Union[float, np.ndarray]

CM_PER_M = 100.0
MS_PER_S = 1000.0


def cm_to_m(value_cm: Numeric) -> Numeric:
    """
    Convert centimetres to metres.

    Example:
        >>> cm_to_m(250.0)
        2.5
    """
    return value_cm / CM_PER_M


def m_to_cm(value_m: Numeric) -> Numeric:
    """Convert metres to centimetres."""
    return value_m * CM_PER_M


def seconds_to_ms(seconds: float) -> int:
    """Convert seconds to integer milliseconds (truncating)."""
    return int(seconds * MS_PER_S)
