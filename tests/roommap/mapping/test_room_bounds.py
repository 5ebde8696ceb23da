"""Unit tests for roommap.mapping.bounds."""

import unittest

from roommap.mapping import (
    RoomBounds,
    Vertex,
    bounding_box_area,
    point_in_polygon,
    polygon_area,
    polygon_centroid,
)
from roommap.odometry import Pose

SQUARE = [(0, 0), (4, 0), (4, 4), (0, 4)]
L_SHAPE = [(0, 0), (4, 0), (4, 2), (2, 2), (2, 4), (0, 4)]


class TestPolygonGeometry(unittest.TestCase):
    """Test suite for containment, area and centroid."""

    def test_point_in_square(self) -> None:
        self.assertTrue(point_in_polygon((2, 2), SQUARE))
        self.assertFalse(point_in_polygon((5, 2), SQUARE))
        self.assertFalse(point_in_polygon((-0.1, 2), SQUARE))

    def test_concave_polygon(self) -> None:
        self.assertTrue(point_in_polygon((1, 3), L_SHAPE))
        self.assertFalse(point_in_polygon((3, 3), L_SHAPE))

    def test_orientation_independent(self) -> None:
        self.assertTrue(point_in_polygon(Vertex(1, 1), list(reversed(SQUARE))))

    def test_area(self) -> None:
        self.assertAlmostEqual(polygon_area(SQUARE), 16.0)
        self.assertAlmostEqual(polygon_area(list(reversed(SQUARE))), 16.0)
        self.assertAlmostEqual(polygon_area(L_SHAPE), 12.0)
        self.assertEqual(polygon_area([(0, 0), (1, 1)]), 0.0)

    def test_centroid(self) -> None:
        self.assertEqual(polygon_centroid(SQUARE), Vertex(2.0, 2.0))
        self.assertEqual(polygon_centroid([]), Vertex(0.0, 0.0))

    def test_bounding_box_area(self) -> None:
        self.assertAlmostEqual(bounding_box_area(L_SHAPE), 16.0)
        self.assertEqual(bounding_box_area([(1, 1)]), 0.0)


class TestRoomBounds(unittest.TestCase):
    """Test suite for RoomBounds."""

    def test_from_vertices(self) -> None:
        bounds = RoomBounds.from_vertices(L_SHAPE)
        self.assertEqual((bounds.min_x, bounds.max_x, bounds.min_y, bounds.max_y), (0, 4, 0, 4))
        self.assertEqual(len(bounds.vertices), 6)

    def test_too_few_vertices(self) -> None:
        self.assertIsNone(RoomBounds.from_vertices([(0, 0), (1, 1)]))
        self.assertIsNone(RoomBounds.from_vertices(None))

    def test_contains(self) -> None:
        bounds = RoomBounds.from_vertices(L_SHAPE)
        self.assertTrue(bounds.contains(1.0, 1.0))
        self.assertFalse(bounds.contains(3.0, 3.0))
        self.assertFalse(bounds.contains(10.0, 1.0))

    def test_collision_converts_cm(self) -> None:
        bounds = RoomBounds.from_vertices(SQUARE)
        self.assertFalse(bounds.check_collision(Pose(x=150.0, y=250.0, theta=0.0)))
        self.assertTrue(bounds.check_collision(Pose(x=450.0, y=100.0, theta=0.0)))
