"""
Bounded, append-only history of estimated poses.

Points are appended in temporal order; once the configured cap is exceeded
the oldest point is evicted. Backed by collections.deque so eviction is O(1).
"""

import logging
import time
from collections import deque
from typing import Iterator, List, Optional

import numpy as np

from roommap.mapping.types import DEFAULT_MAX_PATH_HISTORY, PathPoint
from roommap.odometry.types import InvalidConfigurationError

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in integer milliseconds."""
    return int(time.time() * 1000)


class PathAccumulator:
    """
    FIFO-bounded sequence of PathPoint.

    Args:
        max_path_history: Maximum retained points (>= 1).

    Example:
        >>> path = PathAccumulator(max_path_history=2)
        >>> for i in range(3):
        ...     path.add_point(float(i), 0.0, 0.0, timestamp=i)
        >>> [p.x for p in path]
        [1.0, 2.0]
    """

    def __init__(self, max_path_history: int = DEFAULT_MAX_PATH_HISTORY):
        if int(max_path_history) != max_path_history or max_path_history < 1:
            raise InvalidConfigurationError(
                f"max_path_history must be a positive integer, got {max_path_history}"
            )
        self.max_path_history = int(max_path_history)
        self._points = deque(maxlen=self.max_path_history)
        self.evicted_count = 0

    def add_point(
        self, x: float, y: float, theta: float, timestamp: Optional[int] = None
    ) -> PathPoint:
        """
        Append a pose sample, evicting the oldest one when over capacity.

        Args:
            x: Position along x (m).
            y: Position along y (m).
            theta: Heading (rad).
            timestamp: Milliseconds; defaults to the current wall clock.

        Returns:
            The stored PathPoint.
        """
        if timestamp is None:
            timestamp = now_ms()
        point = PathPoint(x=float(x), y=float(y), theta=float(theta), timestamp=int(timestamp))

        if len(self._points) == self.max_path_history:
            self.evicted_count += 1
            if self.evicted_count == 1:
                logger.debug("path history reached %d points, evicting oldest", self.max_path_history)
        self._points.append(point)
        return point

    def reset(self) -> None:
        self._points.clear()
        self.evicted_count = 0

    @property
    def points(self) -> List[PathPoint]:
        """Snapshot of the retained points, oldest first."""
        return list(self._points)

    def to_array(self) -> np.ndarray:
        """Retained points as an (N, 3) array of [x, y, theta]."""
        if not self._points:
            return np.zeros((0, 3))
        return np.array([[p.x, p.y, p.theta] for p in self._points], dtype=np.float64)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[PathPoint]:
        return iter(list(self._points))

    def __getitem__(self, index: int) -> PathPoint:
        return self._points[index]
