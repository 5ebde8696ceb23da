"""
Interface for filters that refine odometry poses.

A pose filter keeps a [x, y, theta] estimate with its covariance. Each
odometry observation drives one predict() with the pose increment, followed
by one update() with the pose reported by the estimator.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple, Union

import numpy as np

from roommap.odometry.types import Pose


class StateEstimator(ABC):
    """Recursive estimator over a fixed-size state vector."""

    def __init__(self, state_dim: int):
        self.state_dim = state_dim
        self.state: Optional[np.ndarray] = None
        self.covariance: Optional[np.ndarray] = None

    @abstractmethod
    def predict(self, u: Optional[np.ndarray] = None) -> None:
        """Time update with an optional pose increment u."""

    @abstractmethod
    def update(self, z: Union[Pose, np.ndarray]) -> None:
        """Measurement update with a pose measurement z."""

    @abstractmethod
    def get_pose(self) -> Pose:
        """Current estimate as a Pose."""

    @property
    def initialized(self) -> bool:
        return self.state is not None and self.covariance is not None

    def step(self, u: Optional[np.ndarray], z: Union[Pose, np.ndarray]) -> Pose:
        """
        One predict/update cycle.

        Args:
            u: Pose increment since the previous step, or None.
            z: Pose measurement.

        Returns:
            The corrected pose.
        """
        self.predict(u)
        self.update(z)
        return self.get_pose()

    def get_state(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Copies of the state vector and covariance matrix.

        Raises:
            RuntimeError: If the state has not been set.
        """
        if not self.initialized:
            raise RuntimeError(f"{type(self).__name__} has no state yet.")
        return self.state.copy(), self.covariance.copy()
