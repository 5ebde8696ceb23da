"""
Demos: odometry-based room mapping for a differential-drive RC car.

Examples:
    - example_room_mapping.py: Drive an L-shaped room from encoder counts,
      compare the three polygon extraction strategies, export the room.
"""

__version__ = "0.1.0"
__all__ = []
