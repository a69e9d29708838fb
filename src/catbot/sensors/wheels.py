"""
Wheel drive - two continuous rotation servos, left and right.

The servos are mounted mirrored: the same rotation drives one wheel
forward and the other backward. Wheels hides that behind
forward/backward/turn commands using a fixed per-side calibration.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum

from catbot.config import WHEEL_FORWARD_ROTATION

logger = logging.getLogger(__name__)


class DriveUnit(Enum):
    """Independently driven wheel."""

    LEFT = "left"
    RIGHT = "right"


class Rotation(Enum):
    """Servo rotation direction."""

    CW = "cw"
    CCW = "ccw"

    @property
    def opposite(self) -> Rotation:
        return Rotation.CCW if self is Rotation.CW else Rotation.CW


class Actuator(ABC):
    """Anything that can spin or stop a drive unit."""

    @abstractmethod
    def set_speed(self, unit: DriveUnit, rotation: Rotation, magnitude: float):
        """
        Spin a unit.

        Args:
            unit: Which wheel.
            rotation: Direction of rotation.
            magnitude: Fraction of full speed, 0.0 to 1.0.
        """
        ...

    @abstractmethod
    def stop(self, unit: DriveUnit):
        """Stop a unit."""
        ...


class Wheels:
    """
    Differential drive on top of an Actuator.

    Usage:
        wheels = Wheels(board)
        wheels.forward(0.04)
        wheels.turn_left(0.03)
        wheels.stop()
    """

    def __init__(self, actuator: Actuator, forward_rotation: dict[str, str] | None = None):
        self.actuator = actuator
        calibration = forward_rotation or WHEEL_FORWARD_ROTATION
        self._forward = {
            DriveUnit(side): Rotation(rotation) for side, rotation in calibration.items()
        }

    def forward_rotation(self, unit: DriveUnit) -> Rotation:
        return self._forward[unit]

    def forward(self, speed: float):
        logger.info("Moving forward...")
        self._drive(DriveUnit.LEFT, speed, True)
        self._drive(DriveUnit.RIGHT, speed, True)

    def backward(self, speed: float):
        logger.debug("Moving backward...")
        self._drive(DriveUnit.LEFT, speed, False)
        self._drive(DriveUnit.RIGHT, speed, False)

    def turn_left(self, speed: float):
        logger.info("Turning left...")
        self._drive(DriveUnit.LEFT, speed, False)
        self._drive(DriveUnit.RIGHT, speed, True)

    def turn_right(self, speed: float):
        logger.info("Turning right...")
        self._drive(DriveUnit.LEFT, speed, True)
        self._drive(DriveUnit.RIGHT, speed, False)

    def stop(self):
        logger.debug("Stopping...")
        self.actuator.stop(DriveUnit.LEFT)
        self.actuator.stop(DriveUnit.RIGHT)

    def _drive(self, unit: DriveUnit, speed: float, forward: bool):
        rotation = self._forward[unit] if forward else self._forward[unit].opposite
        self.actuator.set_speed(unit, rotation, speed)
