"""Differential-drive odometry and room mapping for the RC car.

This package contains the reusable components of the mapping pipeline:
- odometry: Encoder-count dead reckoning and the diagonal pose filter
- mapping: Path history, room polygon extraction, export and room bounds
- protocol: Serial line codec of the car firmware
- pipeline: MappingSession wiring the above together
- utils: Angle and unit helpers
"""

__version__ = "0.1.0"
