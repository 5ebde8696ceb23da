"""
Wheel odometry for the differential-drive RC car.

Modules:
    types: Pose, EncoderCounts, Velocities, OdometryError, OdometryConfig
    differential_drive: Kinematic estimator fed with cumulative encoder counts
    base: StateEstimator interface
    pose_filter: Diagonal Kalman filter refining odometry poses

Example:
    >>> from roommap.odometry import OdometryEstimator, OdometryConfig
    >>> est = OdometryEstimator(OdometryConfig(wheelbase=15.0))
    >>> for k in range(1, 11):
    ...     pose = est.update(10 * k, 10 * k)
"""

from roommap.odometry.types import (
    Pose,
    EncoderCounts,
    Velocities,
    OdometryError,
    OdometryConfig,
    InvalidConfigurationError,
)
from roommap.odometry.differential_drive import OdometryEstimator, DEFAULT_ERROR_RATE
from roommap.odometry.base import StateEstimator
from roommap.odometry.pose_filter import PoseKalmanFilter

__all__ = [
    # Data types
    "Pose",
    "EncoderCounts",
    "Velocities",
    "OdometryError",
    "OdometryConfig",
    "InvalidConfigurationError",
    # Estimation
    "OdometryEstimator",
    "DEFAULT_ERROR_RATE",
    "StateEstimator",
    "PoseKalmanFilter",
]
