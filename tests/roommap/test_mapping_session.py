"""
Integration tests for roommap/pipeline.py (MappingSession).

Tests cover:
    - Encoder observations flowing into the path in metres
    - Optional pose filter in the loop
    - Firmware line handling (ODOM, READY, ODOMETRY_RESET)
    - Collision flag against room bounds
    - Extraction and export using MappingConfig parameters
"""

import math
import unittest
from unittest.mock import Mock

import numpy as np
import pytest

from roommap.mapping import MapStrategy, MappingConfig, Vertex
from roommap.odometry import InvalidConfigurationError, OdometryConfig, Pose, PoseKalmanFilter
from roommap.pipeline import MappingSession
from roommap.protocol import ControlMessage, OdometryReport


def drive_square(session, side_counts=200, turn_counts=None):
    """Drive a square loop with in-place 90 degree turns."""
    est = session.estimator
    if turn_counts is None:
        # arc per wheel for a quarter turn: (π/2) * wheelbase / 2
        turn_counts = int(round((math.pi / 2) * est.wheelbase / 2 / est.cm_per_pulse))
    left = right = 0
    t = 0
    for _ in range(4):
        for _ in range(10):
            left += side_counts // 10
            right += side_counts // 10
            t += 1
            session.observe(left, right, timestamp=t)
        left -= turn_counts
        right += turn_counts
        t += 1
        session.observe(left, right, timestamp=t)


class TestObserve(unittest.TestCase):
    """Test suite for MappingSession.observe()."""

    def test_path_stored_in_metres(self) -> None:
        session = MappingSession()
        pose = session.observe(100, 100, timestamp=5)

        self.assertEqual(len(session.path), 1)
        point = session.path[0]
        self.assertAlmostEqual(point.x, pose.x / 100.0)
        self.assertEqual(point.y, 0.0)
        self.assertEqual(point.timestamp, 5)
        self.assertEqual(session.pose, pose)
        self.assertEqual(session.encoder_counts.left, 100)

    def test_clock_used_without_timestamp(self) -> None:
        session = MappingSession(clock=lambda: 77)
        session.observe(1, 1)
        self.assertEqual(session.path[0].timestamp, 77)

    def test_observe_many(self) -> None:
        session = MappingSession()
        pose = session.observe_many([(10, 10), (20, 20), (30, 30)])
        self.assertEqual(len(session.path), 3)
        self.assertAlmostEqual(pose.x, 30 * session.estimator.cm_per_pulse)

    def test_path_cap_from_config(self) -> None:
        session = MappingSession(mapping_config=MappingConfig(max_path_history=5))
        session.observe_many([(k, k) for k in range(1, 21)])
        self.assertEqual(len(session.path), 5)


class TestFilteredSession:
    """The filter predicts with the odometry delta and corrects with the raw pose."""

    def test_from_config_with_filter(self):
        session = MappingSession.from_config(
            OdometryConfig(wheelbase=20.0), MappingConfig(max_path_history=50), use_filter=True
        )
        assert isinstance(session.pose_filter, PoseKalmanFilter)
        assert session.estimator.wheelbase == 20.0
        assert session.path.max_path_history == 50

    def test_consistent_measurements_track_raw_pose(self):
        session = MappingSession(pose_filter=PoseKalmanFilter())
        left = right = 0
        for k in range(60):
            left += 7
            right += 9
            pose = session.observe(left, right, timestamp=k)
            raw = session.estimator.get_position()
            assert pose.x == pytest.approx(raw.x, abs=1e-6)
            assert pose.y == pytest.approx(raw.y, abs=1e-6)
            assert math.cos(pose.theta) == pytest.approx(math.cos(raw.theta), abs=1e-6)
            assert -np.pi < pose.theta <= np.pi

    def test_covariance_shrinks(self):
        session = MappingSession(pose_filter=PoseKalmanFilter())
        session.observe_many([(5 * k, 5 * k) for k in range(1, 11)])
        assert session.pose_filter.covariance[0, 0] < 1.0

    def test_reset_recreates_filter(self):
        R = np.diag([0.5, 0.5, 0.05])
        session = MappingSession(pose_filter=PoseKalmanFilter(R=R))
        session.observe(30, 50)
        session.reset()
        np.testing.assert_allclose(session.pose_filter.state, np.zeros(3))
        np.testing.assert_allclose(session.pose_filter.R, R)


class TestHandleMessage(unittest.TestCase):
    """Test suite for MappingSession.handle_message()."""

    def test_odom_line_recorded(self) -> None:
        session = MappingSession()
        message = session.handle_message("ODOM:12.5:-3.0:0.25:40:44", timestamp=9)

        self.assertIsInstance(message, OdometryReport)
        self.assertEqual(session.pose, Pose(12.5, -3.0, 0.25))
        self.assertEqual(session.encoder_counts.right, 44)
        self.assertAlmostEqual(session.path[0].x, 0.125)
        self.assertAlmostEqual(session.path[0].y, -0.03)
        # local estimator untouched
        self.assertEqual(session.estimator.get_position(), Pose.origin())

    def test_ready_and_reset(self) -> None:
        session = MappingSession()
        self.assertFalse(session.ready)
        self.assertIs(session.handle_message("RC_CAR_READY"), ControlMessage.READY)
        self.assertTrue(session.ready)

        session.observe(40, 60, timestamp=1)
        session.handle_message("ODOMETRY_RESET")
        self.assertEqual(len(session.path), 0)
        self.assertEqual(session.pose, Pose.origin())
        self.assertEqual(session.estimator.get_position(), Pose.origin())

    def test_unknown_line_ignored(self) -> None:
        session = MappingSession()
        self.assertIsNone(session.handle_message("hello"))
        self.assertEqual(len(session.path), 0)


class TestCollision(unittest.TestCase):
    """Test suite for the room-bounds collision flag."""

    def test_collision_flag(self) -> None:
        session = MappingSession()
        session.set_room_bounds([(0, 0), (1, 0), (1, 1), (0, 1)])

        session.handle_message("ODOM:50:50:0:0:0", timestamp=0)
        self.assertFalse(session.collision_detected)
        session.handle_message("ODOM:150:50:0:0:0", timestamp=1)
        self.assertTrue(session.collision_detected)

    def test_clearing_bounds(self) -> None:
        session = MappingSession()
        session.set_room_bounds([(0, 0), (1, 0), (1, 1)])
        session.handle_message("ODOM:500:500:0:0:0", timestamp=0)
        self.assertTrue(session.collision_detected)

        self.assertIsNone(session.set_room_bounds([(0, 0)]))
        self.assertFalse(session.collision_detected)


class TestExtraction:
    """Test suite for extract() / export()."""

    def test_too_short_path(self):
        session = MappingSession()
        session.observe(10, 10, timestamp=0)
        assert session.extract() is None
        assert session.export() is None

    def test_bounding_box_uses_config_margin(self):
        session = MappingSession(mapping_config=MappingConfig(simple_margin=0.0))
        session.observe(100, 100, timestamp=0)
        session.observe(200, 200, timestamp=1)
        room = session.extract("bounding_box")
        xs = [p.x for p in session.path]
        assert room.vertices[0].x == pytest.approx(min(xs))
        assert room.vertices[1].x == pytest.approx(max(xs))

    def test_keyword_override(self):
        session = MappingSession()
        session.observe_many([(100, 100), (200, 200)])
        room = session.extract(MapStrategy.BOUNDING_BOX, margin=1.0, wall_height=3.1)
        assert room.vertices[0].y == pytest.approx(-1.0)
        assert room.wall_height == 3.1

    def test_square_drive_strategies(self):
        rng = Mock(random=Mock(return_value=0.5))
        session = MappingSession(rng=rng)
        drive_square(session)

        hull = session.extract(MapStrategy.CONVEX_HULL)
        walls = session.extract(MapStrategy.WALL_DETECTION)
        box = session.extract(MapStrategy.BOUNDING_BOX)

        assert hull.strategy is MapStrategy.CONVEX_HULL
        assert len(hull.vertices) >= 4
        assert walls.strategy is MapStrategy.WALL_DETECTION
        assert len(walls.wall_points) >= 3
        assert box.strategy is MapStrategy.BOUNDING_BOX
        assert len(box.vertices) == 4

    def test_export_uses_config(self):
        rng = Mock(random=Mock(return_value=0.5))
        session = MappingSession(mapping_config=MappingConfig(wall_height=3.0), rng=rng)
        session.observe_many([(100, 100), (100, 200), (300, 300)])

        room = session.export("Garage")
        assert room.name == "Garage"
        assert room.wall_height == 3.0
        assert room.svg_path.startswith("M ")
        assert room.svg_path.endswith(" Z")
        assert room.vertices[0] == Vertex(session.path[0].x, session.path[0].y)


def test_invalid_mapping_config():
    with pytest.raises(InvalidConfigurationError, match="hull_margin"):
        MappingConfig(hull_margin=-0.1)
