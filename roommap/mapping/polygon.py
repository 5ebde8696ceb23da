"""
Room polygon extraction from an accumulated path.

Three strategies, each a pure function of the path (plus an injectable
random source for the hull jitter):

    bounding box:   axis-aligned rectangle around the path, expanded by a
                    margin. Needs >= 2 points.
    convex hull:    every point jittered by up to ±margin per axis, then
                    Graham scan. Needs >= 3 points, otherwise bounding box.
    wall detection: interior points where the path turns by more than a
                    threshold are taken as corners and hulled. Needs >= 3
                    points (otherwise bounding box) and >= 3 corners
                    (otherwise convex hull of the whole path).

Use extract_polygon() to select a strategy by MapStrategy value.
"""

import logging
import math
from typing import Any, List, Optional, Sequence

import numpy as np

from roommap.mapping.convex_hull import graham_scan, point_xy
from roommap.mapping.export import vertices_to_svg_path
from roommap.mapping.types import (
    DEFAULT_WALL_HEIGHT,
    MapStrategy,
    PathPoint,
    RoomMapData,
    StrategyLike,
    Vertex,
)
from roommap.utils.angles import heading_change, segment_heading

logger = logging.getLogger(__name__)

DEFAULT_SIMPLE_MARGIN = 0.5  # metres
DEFAULT_HULL_MARGIN = 0.3  # metres
DEFAULT_ANGLE_THRESHOLD = math.pi / 6


def _path_points(path: Any) -> List[PathPoint]:
    """Snapshot a PathAccumulator or point sequence as a list of PathPoint."""
    if hasattr(path, "points"):
        path = path.points
    points = []
    for p in path:
        if isinstance(p, PathPoint):
            points.append(p)
        else:
            x, y = point_xy(p)
            points.append(
                PathPoint(
                    x=x,
                    y=y,
                    theta=float(getattr(p, "theta", 0.0)),
                    timestamp=int(getattr(p, "timestamp", 0)),
                )
            )
    return points


def _default_rng(rng: Any) -> Any:
    return np.random.default_rng() if rng is None else rng


def generate_simple_map(
    path: Any,
    margin: float = DEFAULT_SIMPLE_MARGIN,
    wall_height: float = DEFAULT_WALL_HEIGHT,
) -> Optional[RoomMapData]:
    """
    Axis-aligned bounding box of the path, expanded by ``margin``.

    Vertex order: (minX-m, minY-m), (maxX+m, minY-m), (maxX+m, maxY+m),
    (minX-m, maxY+m).

    Args:
        path: PathAccumulator or sequence of points (m).
        margin: Expansion on every side (m).
        wall_height: Reported wall height (m).

    Returns:
        RoomMapData, or None for fewer than 2 points.
    """
    points = _path_points(path)
    if len(points) < 2:
        return None

    xs = [p.x for p in points]
    ys = [p.y for p in points]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)

    vertices = [
        Vertex(min_x - margin, min_y - margin),
        Vertex(max_x + margin, min_y - margin),
        Vertex(max_x + margin, max_y + margin),
        Vertex(min_x - margin, max_y + margin),
    ]
    return RoomMapData(
        vertices=vertices,
        svg_path=vertices_to_svg_path(vertices),
        wall_height=wall_height,
        path_history=points,
        strategy=MapStrategy.BOUNDING_BOX,
    )


def jitter_points(points: Sequence[Any], margin: float, rng: Any = None) -> List[Vertex]:
    """
    Perturb each point by (u - 0.5) * 2 * margin per axis, u ~ U[0, 1).

    Draws x then y for each point, in path order.

    Args:
        points: Points with .x/.y or (x, y) pairs.
        margin: Maximum absolute offset per axis (m).
        rng: Object with a ``random()`` method returning floats in [0, 1),
             e.g. numpy.random.Generator or random.Random.
    """
    rng = _default_rng(rng)
    jittered = []
    for p in points:
        x, y = point_xy(p)
        jittered.append(
            Vertex(
                x + (float(rng.random()) - 0.5) * margin * 2,
                y + (float(rng.random()) - 0.5) * margin * 2,
            )
        )
    return jittered


def generate_convex_hull_map(
    path: Any,
    margin: float = DEFAULT_HULL_MARGIN,
    rng: Any = None,
    wall_height: float = DEFAULT_WALL_HEIGHT,
) -> Optional[RoomMapData]:
    """
    Convex hull of the jittered path.

    The jitter makes repeated calls on the same path return different
    polygons; pass a seeded ``rng`` for reproducible output.

    Args:
        path: PathAccumulator or sequence of points (m).
        margin: Maximum jitter per axis (m). Also used as the bounding box
                margin when falling back.
        rng: Random source (see jitter_points). Defaults to a fresh
             numpy Generator.
        wall_height: Reported wall height (m).

    Returns:
        RoomMapData, or None for fewer than 2 points.
    """
    points = _path_points(path)
    if len(points) < 3:
        logger.debug("convex hull needs 3 points, got %d; using bounding box", len(points))
        return generate_simple_map(points, margin=margin, wall_height=wall_height)

    hull = graham_scan(jitter_points(points, margin, rng))
    return RoomMapData(
        vertices=hull,
        svg_path=vertices_to_svg_path(hull),
        wall_height=wall_height,
        path_history=points,
        strategy=MapStrategy.CONVEX_HULL,
    )


def detect_wall_points(
    path: Any, angle_threshold: float = DEFAULT_ANGLE_THRESHOLD
) -> List[PathPoint]:
    """
    Interior path points where the heading changes by more than the threshold.

    For point i the turn is the difference between the headings of
    segments (i-1, i) and (i, i+1), folded into [0, π].
    """
    points = _path_points(path)
    wall_points = []
    for i in range(1, len(points) - 1):
        prev, curr, nxt = points[i - 1], points[i], points[i + 1]
        angle1 = segment_heading(prev.x, prev.y, curr.x, curr.y)
        angle2 = segment_heading(curr.x, curr.y, nxt.x, nxt.y)
        if heading_change(angle1, angle2) > angle_threshold:
            wall_points.append(curr)
    return wall_points


def generate_wall_detection_map(
    path: Any,
    angle_threshold: float = DEFAULT_ANGLE_THRESHOLD,
    rng: Any = None,
    wall_height: float = DEFAULT_WALL_HEIGHT,
) -> Optional[RoomMapData]:
    """
    Convex hull of the path's turn points.

    Args:
        path: PathAccumulator or sequence of points (m).
        angle_threshold: Minimum turn (rad) for a point to count as a corner.
        rng: Random source for the convex hull fallback.
        wall_height: Reported wall height (m).

    Returns:
        RoomMapData with ``wall_points`` set, a fallback result, or None
        for fewer than 2 points.
    """
    points = _path_points(path)
    if len(points) < 3:
        return generate_simple_map(points, wall_height=wall_height)

    wall_points = detect_wall_points(points, angle_threshold)
    if len(wall_points) < 3:
        logger.debug("only %d wall points; using convex hull of full path", len(wall_points))
        return generate_convex_hull_map(points, rng=rng, wall_height=wall_height)

    hull = graham_scan(wall_points)
    return RoomMapData(
        vertices=hull,
        svg_path=vertices_to_svg_path(hull),
        wall_height=wall_height,
        path_history=points,
        strategy=MapStrategy.WALL_DETECTION,
        wall_points=wall_points,
    )


_STRATEGIES = {
    MapStrategy.BOUNDING_BOX: generate_simple_map,
    MapStrategy.CONVEX_HULL: generate_convex_hull_map,
    MapStrategy.WALL_DETECTION: generate_wall_detection_map,
}


def extract_polygon(strategy: StrategyLike, path: Any, **params: Any) -> Optional[RoomMapData]:
    """
    Run the selected extraction strategy.

    Args:
        strategy: MapStrategy or its string value ("bounding_box",
                  "convex_hull", "wall_detection").
        path: PathAccumulator or sequence of points (m).
        **params: Keyword arguments of the strategy function
                  (margin, rng, angle_threshold, wall_height).

    Returns:
        RoomMapData or None (fewer than 2 points).

    Raises:
        ValueError: Unknown strategy name.
        TypeError: Parameter not accepted by the strategy.

    Example:
        >>> pts = [(0, 0), (1, 0), (1, 1)]
        >>> extract_polygon("bounding_box", pts, margin=0.0).svg_path
        'M 0,0 L 1,0 L 1,1 L 0,1 Z'
    """
    strategy = MapStrategy(strategy)
    return _STRATEGIES[strategy](path, **params)
