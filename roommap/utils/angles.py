"""
Angle normalization and heading utilities.

Provides functions for keeping headings within (-π, π] and for measuring
the turn between consecutive path segments.

Two wrapping rules are provided:
    - normalize_angle: repeated ±2π correction (while loops). This is the
      rule used by the odometry estimator. It maps -π to π, so results
      lie in (-π, π].
    - wrap_angle: atan2(sin, cos) wrapping for callers that only need an
      equivalent angle and do not care about the exact representative.
"""

from typing import Union

import numpy as np

TWO_PI = 2.0 * np.pi


def normalize_angle(angle: float) -> float:
    """
    Normalize an angle to (-π, π] by repeated subtraction/addition of 2π.

    The loops reproduce the odometry firmware behaviour exactly, including
    the number of floating point operations applied to very large inputs.

    Args:
        angle: Angle in radians (any finite value).

    Returns:
        Equivalent angle in (-π, π].

    Example:
        >>> normalize_angle(3 * np.pi / 2)
        -1.5707963267948966
        >>> normalize_angle(np.pi)
        3.141592653589793
        >>> normalize_angle(-np.pi)
        3.141592653589793
    """
    angle = float(angle)
    if not np.isfinite(angle):
        raise ValueError(f"angle must be finite, got {angle}")

    while angle > np.pi:
        angle -= TWO_PI
    while angle <= -np.pi:
        angle += TWO_PI
    return angle


def wrap_angle(angle: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Wrap angle(s) to [-π, π] using the atan2 trick.

    Args:
        angle: Angle in radians, scalar or array.

    Returns:
        Wrapped angle(s) in [-π, π].
    """
    return np.arctan2(np.sin(angle), np.cos(angle))


def segment_heading(x0: float, y0: float, x1: float, y1: float) -> float:
    """Heading of the segment (x0, y0) -> (x1, y1) in radians."""
    return float(np.arctan2(y1 - y0, x1 - x0))


def heading_change(angle1: float, angle2: float) -> float:
    """
    Unsigned turn between two headings, folded into [0, π].

    Computes |angle2 - angle1| and returns min(diff, 2π - diff). Inputs are
    expected to come from atan2, i.e. already in [-π, π].

    Example:
        >>> round(heading_change(np.pi - 0.1, -np.pi + 0.1), 6)
        0.2
    """
    diff = abs(angle2 - angle1)
    return min(diff, TWO_PI - diff)
