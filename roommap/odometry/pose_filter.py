"""
Diagonal Kalman filter for smoothing odometry poses.

The filter keeps the state [x, y, theta] with a 3x3 covariance P, but only
the diagonal of P is ever corrected. Each axis therefore behaves as an
independent 1-D Kalman filter:

    Prediction:
        x_{k|k-1} = x_{k-1} + u_k
        P_{k|k-1} = P_{k-1} + Q            (elementwise)

    Update, per axis i:
        K_i = P_ii / (P_ii + R_ii)
        x_i = x_i + K_i (z_i - x_i)
        P_ii = (1 - K_i) P_ii

Off-diagonal terms of P are carried through the prediction add but are never
read. The heading innovation is not wrapped; callers filtering near ±π
should feed measurements on the same branch as the state.
"""

from typing import Optional, Union

import numpy as np

from roommap.odometry.base import StateEstimator
from roommap.odometry.types import Pose

DEFAULT_P0 = np.diag([1.0, 1.0, 0.1])
DEFAULT_Q = np.diag([0.01, 0.01, 0.001])
DEFAULT_R = np.diag([0.1, 0.1, 0.01])


def _as_pose_vector(value: Union[Pose, np.ndarray], name: str) -> np.ndarray:
    if isinstance(value, Pose):
        return value.to_array()
    arr = np.asarray(value, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {arr.shape}")
    return arr


def _as_square3(mat: np.ndarray, name: str) -> np.ndarray:
    mat = np.asarray(mat, dtype=float).copy()
    if mat.shape != (3, 3):
        raise ValueError(f"{name} must have shape (3, 3), got {mat.shape}")
    return mat


class PoseKalmanFilter(StateEstimator):
    """
    Three independent 1-D Kalman filters over x, y and theta.

    Attributes:
        state: Current estimate [x, y, theta] (3,).
        covariance: Error covariance P (3×3); only the diagonal is updated.
        Q: Process noise added at every prediction (3×3).
        R: Measurement noise (3×3); only the diagonal is used.

    Example:
        >>> kf = PoseKalmanFilter()
        >>> kf.predict_delta(1.0, 0.0, 0.0)
        >>> kf.update(Pose(x=2.0, y=0.0, theta=0.0))
        >>> round(kf.get_pose().x, 4)
        1.9099
    """

    def __init__(
        self,
        x0: Optional[np.ndarray] = None,
        P0: Optional[np.ndarray] = None,
        Q: Optional[np.ndarray] = None,
        R: Optional[np.ndarray] = None,
    ):
        super().__init__(state_dim=3)
        self.state = np.zeros(3) if x0 is None else _as_pose_vector(x0, "x0").copy()
        self.covariance = _as_square3(DEFAULT_P0 if P0 is None else P0, "P0")
        self.Q = _as_square3(DEFAULT_Q if Q is None else Q, "Q")
        self.R = _as_square3(DEFAULT_R if R is None else R, "R")

    def predict(self, u: Optional[np.ndarray] = None) -> None:
        """
        Additive prediction with the odometry increment u = [Δx, Δy, Δθ].

        Args:
            u: Pose increment (3,). If None, only the covariance grows.
        """
        if u is not None:
            self.state = self.state + _as_pose_vector(u, "u")
        self.covariance = self.covariance + self.Q

    def predict_delta(self, delta_x: float, delta_y: float, delta_theta: float) -> None:
        """Convenience wrapper around predict() taking scalar increments."""
        self.predict(np.array([delta_x, delta_y, delta_theta], dtype=float))

    def gain(self) -> np.ndarray:
        """Per-axis Kalman gain K_i = P_ii / (P_ii + R_ii), shape (3,)."""
        p = np.diag(self.covariance)
        return p / (p + np.diag(self.R))

    def update(self, z: Union[Pose, np.ndarray]) -> None:
        """
        Correct the state with a pose measurement.

        Args:
            z: Measured pose, as a Pose or an array [x, y, theta].
        """
        z = _as_pose_vector(z, "z")
        K = self.gain()

        self.state = self.state + K * (z - self.state)

        idx = np.arange(3)
        self.covariance[idx, idx] = (1.0 - K) * self.covariance[idx, idx]

    def get_pose(self) -> Pose:
        """Filtered pose."""
        return Pose.from_array(self.state)
