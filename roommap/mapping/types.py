"""Data types for path accumulation and room polygon extraction.

Key types:
    - PathPoint: one accumulated pose with a millisecond timestamp (metres)
    - Vertex: 2D room-plane point (metres)
    - RoomMapData: extracted polygon with its SVG path and the source path
    - RoomExport: room object handed to the rendering/persistence layer
    - MapStrategy: selects the polygon extraction algorithm
    - MappingConfig: accumulator cap and per-strategy parameters

The ``to_dict`` methods emit the key names expected by the front end
(``svgPath``, ``wallHeight``, ``pathHistory`` on map data; ``svg_path``,
``wall_height`` on exported rooms).
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from roommap.odometry.types import InvalidConfigurationError

DEFAULT_WALL_HEIGHT = 2.6  # metres
DEFAULT_MAX_PATH_HISTORY = 1000


@dataclass(frozen=True)
class Vertex:
    """Point in the room plane, in metres."""

    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class PathPoint:
    """
    Pose sample stored by the path accumulator.

    Attributes:
        x: Position along x (m).
        y: Position along y (m).
        theta: Heading (rad).
        timestamp: Wall-clock time in integer milliseconds.
    """

    x: float
    y: float
    theta: float
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "theta": self.theta, "timestamp": self.timestamp}


class MapStrategy(str, Enum):
    """Polygon extraction algorithm."""

    BOUNDING_BOX = "bounding_box"
    CONVEX_HULL = "convex_hull"
    WALL_DETECTION = "wall_detection"


@dataclass
class RoomMapData:
    """
    Room polygon derived from a path.

    Attributes:
        vertices: Polygon vertices (m), in extraction order.
        svg_path: SVG path data for the polygon.
        wall_height: Wall height (m).
        path_history: Snapshot of the path the polygon was derived from.
        strategy: Algorithm that produced the polygon (after fallbacks).
        wall_points: Turn points found by wall detection, None otherwise.
    """

    vertices: List[Vertex]
    svg_path: str
    wall_height: float
    path_history: List[PathPoint]
    strategy: MapStrategy = MapStrategy.BOUNDING_BOX
    wall_points: Optional[List[PathPoint]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "vertices": [v.to_dict() for v in self.vertices],
            "svgPath": self.svg_path,
            "wallHeight": self.wall_height,
            "pathHistory": [p.to_dict() for p in self.path_history],
        }
        if self.wall_points is not None:
            data["wallPoints"] = [p.to_dict() for p in self.wall_points]
        return data


@dataclass
class RoomExport:
    """Room description consumed by the rendering/persistence layer."""

    name: str
    svg_path: str
    vertices: List[Vertex]
    wall_height: float
    path_history: List[PathPoint]
    installations: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "svg_path": self.svg_path,
            "vertices": [v.to_dict() for v in self.vertices],
            "wall_height": self.wall_height,
            "installations": list(self.installations),
            "pathHistory": [p.to_dict() for p in self.path_history],
        }


@dataclass(frozen=True)
class MappingConfig:
    """
    Path accumulator cap and polygon extraction parameters.

    Attributes:
        max_path_history: Maximum number of retained path points.
        simple_margin: Bounding-box expansion (m).
        hull_margin: Maximum per-axis jitter applied before the convex hull (m).
        angle_threshold: Minimum turn (rad) for a wall point.
        wall_height: Wall height reported with every polygon (m).
    """

    max_path_history: int = DEFAULT_MAX_PATH_HISTORY
    simple_margin: float = 0.5
    hull_margin: float = 0.3
    angle_threshold: float = math.pi / 6
    wall_height: float = DEFAULT_WALL_HEIGHT

    def __post_init__(self) -> None:
        if int(self.max_path_history) != self.max_path_history or self.max_path_history < 1:
            raise InvalidConfigurationError(
                f"max_path_history must be a positive integer, got {self.max_path_history}"
            )
        for name in ("simple_margin", "hull_margin"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidConfigurationError(
                    f"{name} must be non-negative and finite, got {value}"
                )
        if not (0 <= self.angle_threshold <= math.pi):
            raise InvalidConfigurationError(
                f"angle_threshold must be in [0, π], got {self.angle_threshold}"
            )
        if not math.isfinite(self.wall_height) or self.wall_height <= 0:
            raise InvalidConfigurationError(
                f"wall_height must be positive, got {self.wall_height}"
            )


StrategyLike = Union[MapStrategy, str]
