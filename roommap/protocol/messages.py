"""
Line codec for the RC car serial protocol.

The firmware streams newline-terminated text lines. This module only turns
single lines into records and commands into lines; opening ports, reading
streams and appending the newline terminator belong to the transport.

Firmware -> host:
    ODOM:X:Y:THETA:LEFT_COUNT:RIGHT_COUNT   pose (cm, cm, rad) + encoder counts
    RC_CAR_READY                            firmware booted
    ODOMETRY_RESET                          firmware zeroed its odometry

Host -> firmware:
    MOVE:LEFT:RIGHT                         motor PWM, each in [-255, 255]
    STOP
    RESET
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from roommap.odometry.types import EncoderCounts, Pose

logger = logging.getLogger(__name__)

ODOM_PREFIX = "ODOM:"
FIELD_SEPARATOR = ":"
MAX_MOTOR_SPEED = 255
DEFAULT_SPEED = 150


class MessageParseError(ValueError):
    """Raised for malformed firmware lines."""


class ControlMessage(str, Enum):
    """Status lines without payload."""

    READY = "RC_CAR_READY"
    ODOMETRY_RESET = "ODOMETRY_RESET"


@dataclass(frozen=True)
class OdometryReport:
    """
    Decoded ODOM line.

    Attributes:
        pose: Pose integrated by the firmware (cm, cm, rad).
        counts: Cumulative encoder counts.
    """

    pose: Pose
    counts: EncoderCounts


Message = Union[OdometryReport, ControlMessage]


def _parse_int(text: str) -> int:
    # Firmware may print counts as "123.0"
    try:
        return int(text)
    except ValueError:
        return int(float(text))


def parse_odometry(line: str) -> OdometryReport:
    """
    Decode an ``ODOM:X:Y:THETA:LEFT:RIGHT`` line.

    Extra trailing fields are ignored.

    Raises:
        MessageParseError: Wrong prefix, fewer than 5 fields, or non-numeric
                           values.

    Example:
        >>> parse_odometry("ODOM:12.5:-3.0:0.25:40:44").counts
        EncoderCounts(left=40, right=44)
    """
    line = line.strip()
    if not line.startswith(ODOM_PREFIX):
        raise MessageParseError(f"not an odometry line: {line!r}")

    parts = line[len(ODOM_PREFIX):].split(FIELD_SEPARATOR)
    if len(parts) < 5:
        raise MessageParseError(
            f"odometry line needs 5 fields, got {len(parts)}: {line!r}"
        )

    try:
        pose = Pose(x=float(parts[0]), y=float(parts[1]), theta=float(parts[2]))
        counts = EncoderCounts(left=_parse_int(parts[3]), right=_parse_int(parts[4]))
    except (ValueError, OverflowError) as exc:
        raise MessageParseError(f"non-numeric odometry field in {line!r}") from exc

    return OdometryReport(pose=pose, counts=counts)


def parse_message(line: str) -> Optional[Message]:
    """
    Decode one firmware line.

    Returns:
        OdometryReport, ControlMessage, or None for blank and unrecognised
        lines.

    Raises:
        MessageParseError: For malformed ODOM lines.
    """
    line = line.strip()
    if not line:
        return None
    if line.startswith(ODOM_PREFIX):
        return parse_odometry(line)
    try:
        return ControlMessage(line)
    except ValueError:
        logger.debug("ignoring unrecognised line %r", line)
        return None


def format_odometry(pose: Pose, counts: EncoderCounts) -> str:
    """
    Encode an ODOM line as printed by the firmware.

    Example:
        >>> format_odometry(Pose(12.5, -3.0, 0.25), EncoderCounts(40, 44))
        'ODOM:12.50:-3.00:0.2500:40:44'
    """
    return (
        f"{ODOM_PREFIX}{pose.x:.2f}{FIELD_SEPARATOR}{pose.y:.2f}{FIELD_SEPARATOR}"
        f"{pose.theta:.4f}{FIELD_SEPARATOR}{int(counts.left)}{FIELD_SEPARATOR}{int(counts.right)}"
    )


def _clamp_speed(speed: float) -> int:
    return int(max(-MAX_MOTOR_SPEED, min(MAX_MOTOR_SPEED, int(speed))))


def format_move(left: float, right: float) -> str:
    """
    MOVE command with speeds clamped to [-255, 255].

    Example:
        >>> format_move(300, -80)
        'MOVE:255:-80'
    """
    return f"MOVE:{_clamp_speed(left)}:{_clamp_speed(right)}"


def format_stop() -> str:
    return "STOP"


def format_reset() -> str:
    return "RESET"


def forward(speed: float = DEFAULT_SPEED) -> str:
    return format_move(speed, speed)


def backward(speed: float = DEFAULT_SPEED) -> str:
    return format_move(-speed, -speed)


def turn_left(speed: float = DEFAULT_SPEED) -> str:
    """Spin in place counter-clockwise (left wheel back, right wheel forward)."""
    return format_move(-speed, speed)


def turn_right(speed: float = DEFAULT_SPEED) -> str:
    return format_move(speed, -speed)
