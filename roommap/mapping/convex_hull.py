"""
Graham scan convex hull for 2D point sets.

Algorithm:
    1. Pivot = point with the lowest y (ties: lowest x), moved to index 0.
    2. Remaining points sorted by polar angle atan2(dy, dx) around the pivot,
       ascending. Equal angles are ordered by distance from the pivot
       (closest first); the sort is stable, so exact duplicates keep input
       order.
    3. Sweep: for each candidate, pop while the last two hull points and
       the candidate make a non-left turn (cross product <= 0), then push.

The result is the strictly convex hull in counter-clockwise order starting at
the pivot. Collinear boundary points are dropped.
"""

import math
import warnings
from typing import Any, List, Sequence, Tuple

from roommap.mapping.types import Vertex


def point_xy(point: Any) -> Tuple[float, float]:
    """Extract (x, y) from an object with .x/.y or a length-2 sequence."""
    if hasattr(point, "x") and hasattr(point, "y"):
        return float(point.x), float(point.y)
    x, y = point[0], point[1]
    return float(x), float(y)


def cross_product(o: Any, a: Any, b: Any) -> float:
    """
    2D cross product of OA and OB.

        (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)

    Positive for a counter-clockwise turn o -> a -> b, negative for
    clockwise, zero for collinear points.

    Example:
        >>> cross_product((0, 0), (1, 0), (1, 1))
        1.0
    """
    ox, oy = point_xy(o)
    ax, ay = point_xy(a)
    bx, by = point_xy(b)
    return (ax - ox) * (by - oy) - (ay - oy) * (bx - ox)


def graham_scan(points: Sequence[Any]) -> List[Vertex]:
    """
    Convex hull of a point set, counter-clockwise from the lowest point.

    Args:
        points: Sequence of points (objects with .x/.y or (x, y) pairs).
                The sequence is not modified.

    Returns:
        Hull vertices. Inputs with fewer than 3 points are returned as
        vertices unchanged, in input order.

    Warns:
        RuntimeWarning: If all points are collinear (hull has < 3 vertices).

    Example:
        >>> hull = graham_scan([(0, 0), (4, 0), (4, 4), (0, 4), (2, 2)])
        >>> [(v.x, v.y) for v in hull]
        [(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0)]
    """
    pts = [Vertex(*point_xy(p)) for p in points]
    if len(pts) < 3:
        return pts

    bottom = 0
    for i in range(1, len(pts)):
        if pts[i].y < pts[bottom].y or (
            pts[i].y == pts[bottom].y and pts[i].x < pts[bottom].x
        ):
            bottom = i
    pts[0], pts[bottom] = pts[bottom], pts[0]
    pivot = pts[0]

    def polar_key(p: Vertex) -> Tuple[float, float]:
        dx = p.x - pivot.x
        dy = p.y - pivot.y
        return math.atan2(dy, dx), dx * dx + dy * dy

    ordered = [pivot] + sorted(pts[1:], key=polar_key)

    hull = [ordered[0], ordered[1]]
    for candidate in ordered[2:]:
        while len(hull) > 1 and cross_product(hull[-2], hull[-1], candidate) <= 0:
            hull.pop()
        hull.append(candidate)

    if len(hull) < 3:
        warnings.warn(
            f"Convex hull of {len(pts)} points is degenerate ({len(hull)} vertices); "
            "input points are collinear or coincident.",
            RuntimeWarning,
        )
    return hull
