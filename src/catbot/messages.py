"""
Message kinds exchanged on the bus.

Values equal names so messages survive a round trip through JSON
(web clients send and receive the bare string).
"""

from __future__ import annotations

from enum import Enum


class Message(str, Enum):
    """Bus message discriminants."""

    # Lifecycle
    BOARD_READY = "BOARD_READY"
    SHUTTING_DOWN = "SHUTTING_DOWN"
    CRASHING = "CRASHING"
    ERROR_STATE = "ERROR_STATE"

    # Navigation commands
    TURN_LEFT = "TURN_LEFT"
    TURN_RIGHT = "TURN_RIGHT"

    # Remote client requests
    LEFT_TURN_REQUEST = "LEFT_TURN_REQUEST"
    RIGHT_TURN_REQUEST = "RIGHT_TURN_REQUEST"

    # Navigation status
    TURNING_LEFT = "TURNING_LEFT"
    TURNING_RIGHT = "TURNING_RIGHT"
    TURN_IN_PROGRESS = "TURN_IN_PROGRESS"
    TURN_COMPLETED = "TURN_COMPLETED"


# Any of these stops the wheels immediately
STOP_MESSAGES = frozenset(
    {Message.SHUTTING_DOWN, Message.CRASHING, Message.ERROR_STATE}
)

# Remote request -> navigation command
TURN_REQUESTS = {
    Message.LEFT_TURN_REQUEST: Message.TURN_LEFT,
    Message.RIGHT_TURN_REQUEST: Message.TURN_RIGHT,
}


def parse_message(value) -> Message | None:
    """Return the Message for a raw bus payload, or None if it isn't one."""
    if isinstance(value, Message):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Message(value)
    except ValueError:
        return None
