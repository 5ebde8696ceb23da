"""
Utility functions shared by the odometry and mapping modules.

This module provides angle normalization, heading helpers and unit
conversions.
"""

from .angles import normalize_angle, wrap_angle, segment_heading, heading_change
from .units import cm_to_m, m_to_cm, seconds_to_ms

__all__ = [
    'normalize_angle',
    'wrap_angle',
    'segment_heading',
    'heading_change',
    'cm_to_m',
    'm_to_cm',
    'seconds_to_ms',
]
