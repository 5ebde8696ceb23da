"""
Unit tests for roommap/odometry/pose_filter.py (diagonal Kalman filter).

Tests cover:
    - Additive prediction and covariance growth
    - Per-axis gain and state correction
    - Diagonal-only covariance update
    - Input validation
"""

import unittest

import numpy as np
import pytest
from numpy.testing import assert_allclose

from roommap.odometry import Pose, PoseKalmanFilter, StateEstimator


class TestPrediction(unittest.TestCase):
    """Test predict() / predict_delta()."""

    def test_is_state_estimator(self) -> None:
        self.assertIsInstance(PoseKalmanFilter(), StateEstimator)

    def test_initial_state(self) -> None:
        kf = PoseKalmanFilter()
        x, P = kf.get_state()
        assert_allclose(x, np.zeros(3))
        assert_allclose(P, np.diag([1.0, 1.0, 0.1]))

    def test_predict_adds_delta_and_q(self) -> None:
        kf = PoseKalmanFilter()
        kf.predict_delta(1.5, -0.5, 0.2)
        kf.predict(np.array([0.5, 0.5, 0.1]))

        x, P = kf.get_state()
        assert_allclose(x, [2.0, 0.0, 0.3])
        assert_allclose(P, np.diag([1.02, 1.02, 0.102]))

    def test_predict_without_input_grows_covariance(self) -> None:
        kf = PoseKalmanFilter()
        kf.predict()
        x, P = kf.get_state()
        assert_allclose(x, np.zeros(3))
        assert_allclose(np.diag(P), [1.01, 1.01, 0.101])

    def test_get_state_returns_copies(self) -> None:
        kf = PoseKalmanFilter()
        x, P = kf.get_state()
        x[0] = 99.0
        P[0, 0] = 99.0
        self.assertEqual(kf.state[0], 0.0)
        self.assertEqual(kf.covariance[0, 0], 1.0)


class TestUpdate:
    """Test update() arithmetic."""

    def test_gain_per_axis(self):
        kf = PoseKalmanFilter()
        assert_allclose(kf.gain(), [1.0 / 1.1, 1.0 / 1.1, 0.1 / 0.11])

    def test_state_and_covariance_correction(self):
        kf = PoseKalmanFilter()
        kf.predict_delta(1.0, 0.0, 0.0)
        K = kf.gain()
        p_before = np.diag(kf.covariance).copy()

        kf.update(Pose(x=2.0, y=1.0, theta=0.5))

        expected_state = np.array([1.0, 0.0, 0.0]) + K * (np.array([2.0, 1.0, 0.5]) - [1.0, 0.0, 0.0])
        assert_allclose(kf.state, expected_state)
        assert_allclose(np.diag(kf.covariance), (1.0 - K) * p_before)

    def test_off_diagonal_terms_not_updated(self):
        Q = np.full((3, 3), 0.01)
        kf = PoseKalmanFilter(Q=Q)
        kf.predict()
        off_diag = kf.covariance[0, 1]

        kf.update(np.array([1.0, 1.0, 1.0]))

        assert kf.covariance[0, 1] == off_diag
        assert kf.covariance[1, 2] == 0.01

    def test_repeated_measurements_converge(self):
        kf = PoseKalmanFilter()
        z = np.array([3.0, -2.0, 0.4])
        for _ in range(50):
            kf.predict()
            kf.update(z)
        assert_allclose(kf.state, z, atol=1e-3)
        assert kf.get_pose().theta == pytest.approx(0.4, abs=1e-3)

    def test_no_heading_wrap(self):
        """The heading innovation is used as-is, without angle wrapping."""
        kf = PoseKalmanFilter(x0=np.array([0.0, 0.0, np.pi - 0.1]))
        kf.update(np.array([0.0, 0.0, -np.pi + 0.1]))
        assert kf.state[2] < np.pi - 0.1
        assert kf.state[2] > -np.pi + 0.1


class TestValidation:
    """Test argument shape checks."""

    def test_bad_measurement_shape(self):
        with pytest.raises(ValueError, match="z must have shape"):
            PoseKalmanFilter().update(np.array([1.0, 2.0]))

    def test_bad_noise_shape(self):
        with pytest.raises(ValueError, match="R must have shape"):
            PoseKalmanFilter(R=np.eye(2))

    def test_bad_initial_state(self):
        with pytest.raises(ValueError, match="x0 must have shape"):
            PoseKalmanFilter(x0=np.zeros(4))


class TestStateEstimatorInterface:
    """Test the shared predict/update helpers."""

    def test_step_matches_predict_then_update(self):
        a = PoseKalmanFilter()
        b = PoseKalmanFilter()
        u = np.array([0.5, 0.2, 0.05])
        z = Pose(x=0.6, y=0.1, theta=0.04)

        pose = a.step(u, z)
        b.predict(u)
        b.update(z)

        assert pose == b.get_pose()
        assert_allclose(a.covariance, b.covariance)

    def test_uninitialized_state_raises(self):
        kf = PoseKalmanFilter()
        kf.state = None
        assert not kf.initialized
        with pytest.raises(RuntimeError, match="no state"):
            kf.get_state()
