"""
Room polygon geometry: containment, collision checks, area and centroid.

Provides functions for:
- Even-odd (ray casting) point-in-polygon tests
- Checking an estimator pose (cm) against a room polygon (m)
- Polygon area (shoelace) and vertex centroid
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from roommap.mapping.convex_hull import point_xy
from roommap.mapping.types import Vertex
from roommap.odometry.types import Pose
from roommap.utils.units import cm_to_m


def point_in_polygon(point: Any, vertices: Sequence[Any]) -> bool:
    """
    Even-odd rule containment test.

    Casts a ray towards +x and counts edge crossings. Points exactly on an
    edge may be reported either way.

    Args:
        point: Query point (.x/.y or (x, y)).
        vertices: Polygon vertices in order (either orientation).

    Returns:
        True if the point is inside.

    Example:
        >>> square = [(0, 0), (2, 0), (2, 2), (0, 2)]
        >>> point_in_polygon((1, 1), square), point_in_polygon((3, 1), square)
        (True, False)
    """
    px, py = point_xy(point)
    pts = [point_xy(v) for v in vertices]
    inside = False
    j = len(pts) - 1
    for i in range(len(pts)):
        xi, yi = pts[i]
        xj, yj = pts[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def polygon_area(vertices: Sequence[Any]) -> float:
    """Unsigned polygon area by the shoelace formula (m² for vertices in m)."""
    pts = [point_xy(v) for v in vertices]
    if len(pts) < 3:
        return 0.0
    twice_area = 0.0
    for i in range(len(pts)):
        x0, y0 = pts[i]
        x1, y1 = pts[(i + 1) % len(pts)]
        twice_area += x0 * y1 - x1 * y0
    return abs(twice_area) / 2.0


def polygon_centroid(vertices: Sequence[Any]) -> Vertex:
    """
    Mean of the polygon vertices.

    This is the vertex average used by the floor-plan editor to place labels,
    not the area centroid.
    """
    pts = [point_xy(v) for v in vertices]
    if not pts:
        return Vertex(0.0, 0.0)
    return Vertex(
        sum(p[0] for p in pts) / len(pts),
        sum(p[1] for p in pts) / len(pts),
    )


def bounding_box_area(points: Sequence[Any]) -> float:
    """Area of the axis-aligned bounding box of the points."""
    pts = [point_xy(p) for p in points]
    if len(pts) < 2:
        return 0.0
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return (max(xs) - min(xs)) * (max(ys) - min(ys))


@dataclass(frozen=True)
class RoomBounds:
    """
    Room polygon with its bounding box, used for collision checks.

    Attributes:
        min_x, max_x, min_y, max_y: Bounding box of the vertices (m).
        vertices: Room polygon (m).
    """

    min_x: float
    max_x: float
    min_y: float
    max_y: float
    vertices: List[Vertex]

    @classmethod
    def from_vertices(cls, vertices: Sequence[Any]) -> Optional["RoomBounds"]:
        """Bounds of a polygon, or None when it has fewer than 3 vertices."""
        if vertices is None or len(vertices) < 3:
            return None
        pts = [Vertex(*point_xy(v)) for v in vertices]
        xs = [v.x for v in pts]
        ys = [v.y for v in pts]
        return cls(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys), vertices=pts)

    def contains(self, x: float, y: float) -> bool:
        """True if (x, y) in metres lies inside the room polygon."""
        if x < self.min_x or x > self.max_x or y < self.min_y or y > self.max_y:
            return False
        return point_in_polygon((x, y), self.vertices)

    def check_collision(self, pose_cm: Pose) -> bool:
        """
        True if an estimator pose (cm) lies outside the room (m).

        Args:
            pose_cm: Pose from OdometryEstimator, in centimetres.
        """
        return not self.contains(cm_to_m(pose_cm.x), cm_to_m(pose_cm.y))
