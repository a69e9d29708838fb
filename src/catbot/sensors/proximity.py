"""
IR proximity sensor - Sharp GP2Y0A41SK0F (short range, 4-30cm).

The board streams raw 10-bit samples of the sensor's analog pin; this
converts them to centimeters and pushes each reading to listeners.
"""

from __future__ import annotations

import logging
from typing import Callable

from catbot.config import PROXIMITY_FREQUENCY_HZ, PROXIMITY_PIN

from .board import Board

logger = logging.getLogger(__name__)

ProximityListener = Callable[[float], None]

# Transfer curve constants: cm = SCALE / (raw - OFFSET)
GP2Y0A41SK0F_SCALE = 2076.0
GP2Y0A41SK0F_OFFSET = 11


def raw_to_cm(raw: int) -> float:
    """
    Convert a raw ADC sample to a distance in cm.

    Samples at or below the offset (nothing reflecting back) come out
    zero or negative. Callers treat those as "no echo".
    """
    denominator = raw - GP2Y0A41SK0F_OFFSET
    if denominator == 0:
        return 0.0
    return round(GP2Y0A41SK0F_SCALE / denominator, 2)


class ProximitySensor:
    """
    Push-only proximity sensor.

    Usage:
        sensor = ProximitySensor(board)
        sensor.on_data(lambda cm: print(cm))
        sensor.start()
    """

    def __init__(self, board: Board, pin: int = PROXIMITY_PIN, frequency: int = PROXIMITY_FREQUENCY_HZ):
        self.board = board
        self.pin = pin
        self.frequency = frequency

        self._listeners: list[ProximityListener] = []
        self._cm: float | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def cm(self) -> float | None:
        """Latest reading, None before the first sample."""
        return self._cm

    def on_data(self, callback: ProximityListener):
        """Call callback with every new reading (in cm)."""
        self._listeners.append(callback)

    def start(self) -> bool:
        """Ask the board to stream samples."""
        if self._running:
            logger.warning("Proximity sensor already running")
            return True
        if not self.board.is_connected:
            logger.error("Cannot start proximity sensor, board not connected")
            return False

        self.board.add_analog_listener(self.pin, self._handle_raw, self.frequency)
        self._running = True
        logger.info(f"Proximity sensor started on A{self.pin} at {self.frequency} Hz")
        return True

    def stop(self):
        self.board.remove_analog_listener(self.pin, self._handle_raw)
        self._running = False
        logger.info("Proximity sensor stopped")

    def _handle_raw(self, raw: int):
        cm = raw_to_cm(raw)
        self._cm = cm
        for callback in list(self._listeners):
            callback(cm)
