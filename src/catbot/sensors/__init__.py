"""
Sensor Layer - Hardware interfaces.

Provides access to the robot hardware:
- Board: serial link to the microcontroller
- Wheels: left/right continuous rotation servos
- ProximitySensor: Sharp IR distance sensor
"""

from .wheels import Actuator, DriveUnit, Rotation, Wheels
from .board import Board
from .proximity import ProximitySensor, raw_to_cm

__all__ = [
    "Actuator",
    "DriveUnit",
    "Rotation",
    "Wheels",
    "Board",
    "ProximitySensor",
    "raw_to_cm",
]
