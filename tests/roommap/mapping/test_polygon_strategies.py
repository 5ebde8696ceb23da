"""
Unit tests for roommap/mapping/polygon.py.

Tests cover:
    - Bounding box vertices and margin
    - Jitter draw order and bounds
    - Convex hull strategy with injected random sources
    - Wall (turn point) detection
    - Fallback chain for short or straight paths
    - Strategy dispatch
"""

import math
import random
from unittest.mock import Mock

import numpy as np
import pytest

from roommap.mapping import (
    MapStrategy,
    PathAccumulator,
    PathPoint,
    Vertex,
    detect_wall_points,
    extract_polygon,
    generate_convex_hull_map,
    generate_simple_map,
    generate_wall_detection_map,
    jitter_points,
)

SQUARE_LOOP = [(0, 0), (1, 0), (2, 0), (2, 1), (2, 2), (1, 2), (0, 2), (0, 1), (0, 0), (1, 0)]


def make_path(coords, cap=1000):
    path = PathAccumulator(max_path_history=cap)
    for i, (x, y) in enumerate(coords):
        path.add_point(x, y, 0.0, timestamp=i)
    return path


def centered_rng():
    """Random source whose draws are always 0.5, i.e. zero jitter."""
    return Mock(random=Mock(return_value=0.5))


class TestSimpleMap:
    """Test suite for generate_simple_map()."""

    def test_vertices_and_order(self):
        room = generate_simple_map(make_path([(0, 0), (3, 0), (3, 2)]), margin=0.5)
        assert room.vertices == [
            Vertex(-0.5, -0.5),
            Vertex(3.5, -0.5),
            Vertex(3.5, 2.5),
            Vertex(-0.5, 2.5),
        ]
        assert room.svg_path == "M -0.5,-0.5 L 3.5,-0.5 L 3.5,2.5 L -0.5,2.5 Z"
        assert room.strategy is MapStrategy.BOUNDING_BOX
        assert room.wall_height == 2.6
        assert room.wall_points is None

    def test_default_margin(self):
        room = generate_simple_map([(1, 1), (2, 3)])
        assert room.vertices[0] == Vertex(0.5, 0.5)
        assert room.vertices[2] == Vertex(2.5, 3.5)

    def test_path_history_snapshot(self):
        path = make_path([(0, 0), (1, 1)])
        room = generate_simple_map(path)
        path.add_point(9.0, 9.0, 0.0, timestamp=9)
        assert len(room.path_history) == 2
        assert all(isinstance(p, PathPoint) for p in room.path_history)

    @pytest.mark.parametrize("coords", [[], [(1, 1)]])
    def test_too_few_points(self, coords):
        assert generate_simple_map(make_path(coords)) is None


class TestJitter:
    """Test suite for jitter_points()."""

    def test_draw_order_x_then_y(self):
        rng = Mock(random=Mock(side_effect=[0.0, 0.75, 1.0, 0.5]))
        out = jitter_points([(1.0, 1.0), (2.0, 2.0)], margin=0.2, rng=rng)
        assert out[0].x == pytest.approx(0.8)
        assert out[0].y == pytest.approx(1.1)
        assert out[1].x == pytest.approx(2.2)
        assert out[1].y == pytest.approx(2.0)
        assert rng.random.call_count == 4

    def test_offsets_bounded_by_margin(self):
        rng = np.random.default_rng(3)
        pts = [(float(i), float(-i)) for i in range(100)]
        out = jitter_points(pts, margin=0.3, rng=rng)
        dx = np.array([o.x - p[0] for o, p in zip(out, pts)])
        dy = np.array([o.y - p[1] for o, p in zip(out, pts)])
        assert np.all(np.abs(dx) <= 0.3)
        assert np.all(np.abs(dy) <= 0.3)

    def test_accepts_stdlib_random(self):
        out = jitter_points([(0.0, 0.0)], margin=1.0, rng=random.Random(5))
        assert -1.0 <= out[0].x <= 1.0


class TestConvexHullMap:
    """Test suite for generate_convex_hull_map()."""

    def test_zero_jitter_gives_exact_hull(self):
        room = generate_convex_hull_map(make_path(SQUARE_LOOP), rng=centered_rng())
        assert room.vertices == [Vertex(0, 0), Vertex(2, 0), Vertex(2, 2), Vertex(0, 2)]
        assert room.svg_path == "M 0,0 L 2,0 L 2,2 L 0,2 Z"
        assert room.strategy is MapStrategy.CONVEX_HULL
        assert len(room.path_history) == len(SQUARE_LOOP)

    def test_seeded_rng_is_reproducible(self):
        path = make_path(SQUARE_LOOP)
        a = generate_convex_hull_map(path, rng=np.random.default_rng(11))
        b = generate_convex_hull_map(path, rng=np.random.default_rng(11))
        assert a.vertices == b.vertices
        assert a.svg_path == b.svg_path

    def test_jittered_hull_stays_near_path(self):
        room = generate_convex_hull_map(make_path(SQUARE_LOOP), margin=0.3, rng=np.random.default_rng(0))
        for v in room.vertices:
            assert -0.3 <= v.x <= 2.3
            assert -0.3 <= v.y <= 2.3

    def test_two_points_fall_back_to_bounding_box(self):
        room = generate_convex_hull_map(make_path([(0, 0), (1, 1)]), margin=0.3)
        assert room.strategy is MapStrategy.BOUNDING_BOX
        assert room.vertices[0] == Vertex(-0.3, -0.3)

    def test_single_point_returns_none(self):
        assert generate_convex_hull_map(make_path([(0, 0)])) is None


class TestWallDetection:
    """Test suite for detect_wall_points() / generate_wall_detection_map()."""

    def test_corners_of_square_loop(self):
        walls = detect_wall_points(make_path(SQUARE_LOOP))
        assert [(p.x, p.y) for p in walls] == [(2, 0), (2, 2), (0, 2), (0, 0)]

    def test_threshold_is_strict(self):
        walls = detect_wall_points([(0, 0), (1, 0), (2, 1)], angle_threshold=math.pi / 4)
        assert walls == []
        walls = detect_wall_points([(0, 0), (1, 0), (2, 1)], angle_threshold=math.pi / 4 - 1e-6)
        assert len(walls) == 1

    def test_wall_detection_map(self):
        room = generate_wall_detection_map(make_path(SQUARE_LOOP))
        assert room.strategy is MapStrategy.WALL_DETECTION
        assert room.vertices == [Vertex(0, 0), Vertex(2, 0), Vertex(2, 2), Vertex(0, 2)]
        assert len(room.wall_points) == 4
        assert "wallPoints" in room.to_dict()

    def test_few_wall_points_fall_back_to_convex_hull(self):
        rng = centered_rng()
        room = generate_wall_detection_map(make_path([(0, 0), (1, 0), (2, 0), (2, 1), (2, 2)]), rng=rng)
        assert room.strategy is MapStrategy.CONVEX_HULL
        assert room.vertices == [Vertex(0, 0), Vertex(2, 0), Vertex(2, 2)]
        assert room.wall_points is None
        assert rng.random.call_count == 10

    def test_short_path_falls_back_to_bounding_box(self):
        room = generate_wall_detection_map(make_path([(0, 0), (1, 2)]))
        assert room.strategy is MapStrategy.BOUNDING_BOX
        assert room.vertices[0] == Vertex(-0.5, -0.5)


class TestExtractPolygon:
    """Test suite for extract_polygon() dispatch."""

    @pytest.mark.parametrize(
        "strategy, expected",
        [
            (MapStrategy.BOUNDING_BOX, MapStrategy.BOUNDING_BOX),
            ("bounding_box", MapStrategy.BOUNDING_BOX),
            ("convex_hull", MapStrategy.CONVEX_HULL),
            ("wall_detection", MapStrategy.WALL_DETECTION),
        ],
    )
    def test_dispatch(self, strategy, expected):
        room = extract_polygon(strategy, make_path(SQUARE_LOOP))
        assert room.strategy is expected

    def test_params_forwarded(self):
        room = extract_polygon("bounding_box", make_path(SQUARE_LOOP), margin=0.0, wall_height=3.0)
        assert room.vertices[0] == Vertex(0, 0)
        assert room.wall_height == 3.0

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            extract_polygon("voronoi", make_path(SQUARE_LOOP))

    def test_unsupported_parameter(self):
        with pytest.raises(TypeError):
            extract_polygon("bounding_box", make_path(SQUARE_LOOP), angle_threshold=0.1)
