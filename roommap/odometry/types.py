"""
Data structures for differential-drive odometry.

This module defines the shared data types used by the odometry estimator
and the pose filter:
    - Pose: planar pose (x, y, theta)
    - EncoderCounts: cumulative left/right wheel encoder readings
    - Velocities: linear/angular velocity pair
    - OdometryError: accumulated drift heuristic
    - OdometryConfig: robot geometry, validated at construction

Units:
    Estimator poses are in centimetres and radians. Path history (see
    roommap.mapping) is stored in metres.
"""

import math
import numbers
from dataclasses import dataclass, asdict
from typing import Any, Dict

import numpy as np


class InvalidConfigurationError(ValueError):
    """Raised when robot or mapping parameters cannot produce finite results."""


@dataclass(frozen=True)
class Pose:
    """
    Planar pose.

    Attributes:
        x: Position along x (cm for the estimator, m for path history).
        y: Position along y (same unit as x).
        theta: Heading in radians, counter-clockwise from +x, kept in (-π, π].
    """

    x: float
    y: float
    theta: float

    def to_array(self) -> np.ndarray:
        """Return [x, y, theta] as a float array of shape (3,)."""
        return np.array([self.x, self.y, self.theta], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Pose":
        """
        Create a Pose from an array [x, y, theta].

        Raises:
            ValueError: If the array does not have shape (3,).
        """
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (3,):
            raise ValueError(f"Array must have shape (3,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]), theta=float(arr[2]))

    @classmethod
    def origin(cls) -> "Pose":
        """Pose at (0, 0) facing +x."""
        return cls(x=0.0, y=0.0, theta=0.0)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "theta": self.theta}


@dataclass(frozen=True)
class EncoderCounts:
    """Cumulative pulse counts of the left and right wheel encoders."""

    left: int
    right: int

    def to_dict(self) -> Dict[str, int]:
        return {"left": self.left, "right": self.right}


@dataclass(frozen=True)
class Velocities:
    """
    Body velocities derived from an encoder delta.

    Attributes:
        linear_velocity: Forward speed in cm/s.
        angular_velocity: Yaw rate in rad/s.
    """

    linear_velocity: float
    angular_velocity: float


@dataclass(frozen=True)
class OdometryError:
    """
    Heuristic odometry drift estimate.

    Attributes:
        estimated_error: total_distance * error_rate (cm).
        total_distance: Straight-line distance from the origin (cm).
        error_rate: Fraction of travelled distance assumed as drift.
    """

    estimated_error: float
    total_distance: float
    error_rate: float


@dataclass(frozen=True)
class OdometryConfig:
    """
    Physical parameters of the differential-drive robot.

    Fixed at estimator construction; there is no reconfiguration path.

    Attributes:
        wheel_diameter: Wheel diameter in cm.
        wheelbase: Distance between the wheel contact points in cm.
        encoder_pulses_per_revolution: Encoder ticks per wheel revolution.

    Example:
        >>> cfg = OdometryConfig()
        >>> round(cfg.cm_per_pulse, 4)
        1.021
    """

    wheel_diameter: float = 6.5
    wheelbase: float = 15.0
    encoder_pulses_per_revolution: int = 20

    def __post_init__(self) -> None:
        """Validate parameters so that no update can divide by zero."""
        for name in ("wheel_diameter", "wheelbase", "encoder_pulses_per_revolution"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or isinstance(value, bool):
                raise InvalidConfigurationError(
                    f"{name} must be numeric, got {type(value).__name__}"
                )
            if not math.isfinite(value) or value <= 0:
                raise InvalidConfigurationError(
                    f"{name} must be positive and finite, got {value}"
                )

    @property
    def wheel_circumference(self) -> float:
        """Wheel circumference in cm (π * diameter)."""
        return math.pi * self.wheel_diameter

    @property
    def cm_per_pulse(self) -> float:
        """Distance travelled by one wheel per encoder pulse, in cm."""
        return self.wheel_circumference / self.encoder_pulses_per_revolution

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OdometryConfig":
        """
        Build a config from a mapping, ignoring unknown keys.

        Accepts both snake_case keys and the camelCase keys used by the
        browser front end (``wheelDiameter``, ``wheelbase``,
        ``encoderPulsesPerRevolution``).
        """
        aliases = {
            "wheelDiameter": "wheel_diameter",
            "encoderPulsesPerRevolution": "encoder_pulses_per_revolution",
        }
        kwargs = {}
        for key, value in data.items():
            key = aliases.get(key, key)
            if key in cls.__dataclass_fields__:
                kwargs[key] = value
        return cls(**kwargs)
