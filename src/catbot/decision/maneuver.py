"""
Motion states and the steps maneuvers are made of.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable, Optional

from catbot.messages import Message


class MotionState(Enum):
    """What the wheels are currently doing."""

    STOPPED = auto()
    MOVING_FORWARD = auto()
    MOVING_BACKWARD = auto()
    TURNING_LEFT = auto()
    TURNING_RIGHT = auto()
    LOOKING_LEFT = auto()
    LOOKING_RIGHT = auto()


# States only reachable while a maneuver holds the turning latch
MANEUVER_STATES = frozenset(
    {
        MotionState.MOVING_BACKWARD,
        MotionState.TURNING_LEFT,
        MotionState.TURNING_RIGHT,
        MotionState.LOOKING_LEFT,
        MotionState.LOOKING_RIGHT,
    }
)


class Direction(Enum):
    """Turn direction."""

    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> Direction:
        return Direction.RIGHT if self is Direction.LEFT else Direction.LEFT

    @property
    def turning_state(self) -> MotionState:
        return MotionState.TURNING_LEFT if self is Direction.LEFT else MotionState.TURNING_RIGHT

    @property
    def looking_state(self) -> MotionState:
        return MotionState.LOOKING_LEFT if self is Direction.LEFT else MotionState.LOOKING_RIGHT

    @property
    def turning_message(self) -> Message:
        return Message.TURNING_LEFT if self is Direction.LEFT else Message.TURNING_RIGHT


# on_complete hooks may return steps to run next (before the rest of the plan)
StepHook = Callable[[], Optional[list["Step"]]]


@dataclass
class Step:
    """Hold a motion state for a fixed duration, then run on_complete."""

    state: MotionState
    duration: float
    on_complete: StepHook | None = None


class Maneuver:
    """
    Ordered steps run back to back.

    The state machine pops steps as their timers fire; on_finish runs
    once the last one completes.
    """

    def __init__(self, name: str, steps: Iterable[Step], on_finish: Callable[[], None]):
        self.name = name
        self.steps: deque[Step] = deque(steps)
        self.on_finish = on_finish

    def insert_next(self, steps: list[Step]):
        """Run steps before whatever is left of the plan."""
        self.steps.extendleft(reversed(steps))

    def __repr__(self):
        plan = ", ".join(f"{s.state.name}:{s.duration}" for s in self.steps)
        return f"Maneuver({self.name}: [{plan}])"
