"""
Serial line protocol of the RC car firmware (codec only, no transport).
"""

from roommap.protocol.messages import (
    ControlMessage,
    Message,
    MessageParseError,
    OdometryReport,
    MAX_MOTOR_SPEED,
    backward,
    format_move,
    format_odometry,
    format_reset,
    format_stop,
    forward,
    parse_message,
    parse_odometry,
    turn_left,
    turn_right,
)

__all__ = [
    "ControlMessage",
    "Message",
    "MessageParseError",
    "OdometryReport",
    "MAX_MOTOR_SPEED",
    "backward",
    "format_move",
    "format_odometry",
    "format_reset",
    "format_stop",
    "forward",
    "parse_message",
    "parse_odometry",
    "turn_left",
    "turn_right",
]
