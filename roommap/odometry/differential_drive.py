"""
Differential-drive wheel odometry from cumulative encoder counts.

This module implements the kinematic dead-reckoning model used by the RC
car: two independently driven wheels, each with an incremental encoder.

Per observation:
    1. Pulse deltas since the previous observation:
           Δl = left - left_prev,  Δr = right - right_prev
    2. Wheel arc lengths:
           d_l = Δl * cm_per_pulse,  d_r = Δr * cm_per_pulse
    3. Body motion:
           d = (d_l + d_r) / 2,  Δθ = (d_r - d_l) / wheelbase
    4. Heading update θ += Δθ, normalized to (-π, π] with while loops
    5. Position update with the *updated* heading:
           x += d cos θ,  y += d sin θ

Step 5 advances along the post-update heading rather than the midpoint or
exact-arc heading.

Frame Conventions:
    - x forward at theta = 0, y to the left, theta counter-clockwise.
    - Positions in centimetres, headings in radians.
"""

import logging
import math
from typing import Optional, Tuple

from roommap.odometry.types import (
    EncoderCounts,
    OdometryConfig,
    OdometryError,
    Pose,
    Velocities,
)
from roommap.utils.angles import normalize_angle

logger = logging.getLogger(__name__)

# Typical drift of hobby-grade wheel odometry is 2-5% of distance travelled.
DEFAULT_ERROR_RATE = 0.03


class OdometryEstimator:
    """
    Kinematic pose estimator for a differential-drive robot.

    The estimator owns its state exclusively; callers feeding it from a
    transport callback must serialize calls to update().

    Attributes:
        config: Robot geometry (wheel diameter, wheelbase, encoder resolution).
        x: Current x position (cm).
        y: Current y position (cm).
        theta: Current heading (rad), in (-π, π].
        last_left_count: Left encoder count at the previous update.
        last_right_count: Right encoder count at the previous update.

    Example:
        >>> est = OdometryEstimator()
        >>> pose = est.update(20, 20)   # one full wheel revolution each side
        >>> round(pose.x, 4), pose.y, pose.theta
        (20.4204, 0.0, 0.0)
    """

    def __init__(self, config: Optional[OdometryConfig] = None):
        self.config = config if config is not None else OdometryConfig()
        self.wheel_diameter = self.config.wheel_diameter
        self.wheelbase = self.config.wheelbase
        self.encoder_pulses_per_revolution = self.config.encoder_pulses_per_revolution
        self.wheel_circumference = self.config.wheel_circumference
        self.cm_per_pulse = self.config.cm_per_pulse

        self.reset()

    def reset(self) -> None:
        """Zero the pose and the remembered encoder counts."""
        self.x = 0.0
        self.y = 0.0
        self.theta = 0.0
        self.last_left_count = 0
        self.last_right_count = 0
        logger.debug("odometry reset")

    def _body_motion(self, left_count: int, right_count: int) -> Tuple[float, float]:
        """Distance (cm) and heading change (rad) since the last stored counts."""
        delta_left = left_count - self.last_left_count
        delta_right = right_count - self.last_right_count

        distance_left = delta_left * self.cm_per_pulse
        distance_right = delta_right * self.cm_per_pulse

        distance = (distance_left + distance_right) / 2.0
        delta_theta = (distance_right - distance_left) / self.wheelbase
        return distance, delta_theta

    def update(self, left_count: int, right_count: int) -> Pose:
        """
        Integrate a new pair of cumulative encoder counts.

        Zero and negative deltas are accepted (robot stopped or reversing).

        Args:
            left_count: Cumulative left encoder count.
            right_count: Cumulative right encoder count.

        Returns:
            Updated pose (cm, cm, rad).
        """
        distance, delta_theta = self._body_motion(left_count, right_count)

        self.theta = normalize_angle(self.theta + delta_theta)

        # Post-update heading, see module docstring
        self.x += distance * math.cos(self.theta)
        self.y += distance * math.sin(self.theta)

        self.last_left_count = left_count
        self.last_right_count = right_count

        return Pose(x=self.x, y=self.y, theta=self.theta)

    def calculate_velocities(
        self, left_count: int, right_count: int, delta_time: float
    ) -> Velocities:
        """
        Linear and angular velocity implied by counts since the last update.

        Does not modify the estimator state.

        Args:
            left_count: Current cumulative left count.
            right_count: Current cumulative right count.
            delta_time: Elapsed time in seconds. Values <= 0 yield zero velocities.

        Returns:
            Velocities in cm/s and rad/s.
        """
        if delta_time <= 0:
            return Velocities(linear_velocity=0.0, angular_velocity=0.0)

        distance, delta_theta = self._body_motion(left_count, right_count)
        return Velocities(
            linear_velocity=distance / delta_time,
            angular_velocity=delta_theta / delta_time,
        )

    def estimate_error(self, error_rate: float = DEFAULT_ERROR_RATE) -> OdometryError:
        """
        Heuristic drift estimate proportional to distance from the origin.

        Uses hypot(x, y) as a proxy for distance travelled, which
        under-estimates drift for paths that return towards the start.
        """
        total_distance = math.hypot(self.x, self.y)
        return OdometryError(
            estimated_error=total_distance * error_rate,
            total_distance=total_distance,
            error_rate=error_rate,
        )

    def get_position(self) -> Pose:
        """Current pose (cm, cm, rad)."""
        return Pose(x=self.x, y=self.y, theta=self.theta)

    @property
    def pose(self) -> Pose:
        return self.get_position()

    @property
    def last_counts(self) -> EncoderCounts:
        return EncoderCounts(left=self.last_left_count, right=self.last_right_count)
