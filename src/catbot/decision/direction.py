"""
Direction decision - look both ways and keep the clearer heading.

Used when the robot suspects it is stuck in a corner. The robot starts
centered, so after probing the first side it has to turn twice to face
the other side (once back to center, once past it), and twice again to
return to the first side if that one turned out better.

    first side       center        other side
        A  <-- turn --  |  -- turn x2 -->  B
                                  B > A: done, keep facing B
                                  else:  turn x2 back to A
"""

from __future__ import annotations

import logging
import random
from typing import Callable

from .maneuver import Direction, Step
from .sampler import ProximitySampler

logger = logging.getLogger(__name__)

Coin = Callable[[], bool]


def coin_flip() -> bool:
    return random.getrandbits(1) == 1


def pick_direction(coin: Coin) -> Direction:
    """Heads is left."""
    return Direction.LEFT if coin() else Direction.RIGHT


class DirectionDecision:
    """
    One look-around: builds the probing steps and records the outcome.

    The steps only turn and look; the state machine stops the wheels and
    starts recording when it enters a LOOKING_* state, and the on_complete
    hooks here close the window and compare.
    """

    def __init__(
        self,
        sampler: ProximitySampler,
        coin: Coin,
        turn_duration: float,
        recording_duration: float,
    ):
        self.sampler = sampler
        self.turn_duration = turn_duration
        self.recording_duration = recording_duration

        self.first = pick_direction(coin)
        self.other = self.first.opposite

        self.first_mean: float | None = None
        self.other_mean: float | None = None
        self.choice: Direction | None = None

    def steps(self) -> list[Step]:
        """Probe first side, then the other side."""
        return [
            Step(self.first.turning_state, self.turn_duration),
            Step(self.first.looking_state, self.recording_duration, self._record_first),
            *self._turns(self.other),
            Step(self.other.looking_state, self.recording_duration, self._record_other),
        ]

    def _turns(self, direction: Direction) -> list[Step]:
        # Two turns: back to center, then past it
        return [
            Step(direction.turning_state, self.turn_duration),
            Step(direction.turning_state, self.turn_duration),
        ]

    def _record_first(self) -> None:
        self.first_mean = self.sampler.end_recording()
        logger.info(f"Average proximity looking {self.first.value}: {self.first_mean:.1f}")

    def _record_other(self) -> list[Step]:
        self.other_mean = self.sampler.end_recording()
        logger.info(f"Average proximity looking {self.other.value}: {self.other_mean:.1f}")

        if self.other_mean > self.first_mean:
            self.choice = self.other
            logger.info(f"Choosing {self.choice.value}")
            return []

        self.choice = self.first
        logger.info(f"Choosing {self.choice.value}, turning back")
        return self._turns(self.first)

    def to_dict(self) -> dict:
        return {
            "first": self.first.value,
            "other": self.other.value,
            "first_mean": self.first_mean,
            "other_mean": self.other_mean,
            "choice": self.choice.value if self.choice else None,
        }
