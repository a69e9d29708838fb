"""
Microcontroller board - serial link.

Handles:
- Sending continuous servo speed/stop commands (the wheels)
- Streaming analog pin samples back (the IR sensor)
- Emergency stop
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable

import serial

from catbot.config import BOARD_BAUDRATE, BOARD_PORT, LEFT_WHEEL_PIN, RIGHT_WHEEL_PIN
from catbot.errors import BoardError

from .wheels import Actuator, DriveUnit, Rotation

logger = logging.getLogger(__name__)

AnalogListener = Callable[[int], None]


class Board(Actuator):
    """
    Serial link to the microcontroller driving the servos and sampling the IR sensor.

    Protocol:
        Commands (Pi -> board):
            W:<pin>,<speed>\\n  - servo speed -1.000..1.000 (positive = CW)
            X:<pin>\\n          - stop servo
            F:<pin>,<hz>\\n     - stream analog pin at hz
            E\\n                - emergency stop, all servos

        Status (board -> Pi):
            R\\n                - board ready
            A:<pin>,<raw>\\n    - analog sample, 0..1023
            E:<error_code>\\n

    Analog samples are read on a background thread and handed to listeners
    on the event loop, so listeners never run concurrently with anything
    else on the loop.
    """

    def __init__(
        self,
        port: str = BOARD_PORT,
        baudrate: int = BOARD_BAUDRATE,
        wheel_pins: dict[DriveUnit, int] | None = None,
    ):
        self.port = port
        self.baudrate = baudrate
        self.wheel_pins = wheel_pins or {
            DriveUnit.LEFT: LEFT_WHEEL_PIN,
            DriveUnit.RIGHT: RIGHT_WHEEL_PIN,
        }

        self._serial: serial.Serial | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._connected = False
        self._running = False
        self._thread: threading.Thread | None = None
        self._listeners: dict[int, list[AnalogListener]] = {}
        self._speeds: dict[DriveUnit, float] = {unit: 0.0 for unit in DriveUnit}

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def speeds(self) -> dict[DriveUnit, float]:
        """Last signed speed sent to each unit (positive = CW)."""
        return dict(self._speeds)

    def connect(self, loop: asyncio.AbstractEventLoop | None = None) -> bool:
        """Open serial connection and start the reader thread."""
        try:
            self._loop = loop or asyncio.get_running_loop()
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                timeout=0.1,
            )
        except (serial.SerialException, RuntimeError) as e:
            logger.error(f"Failed to connect to board: {e}")
            self._connected = False
            return False

        self._connected = True
        self._running = True
        self._thread = threading.Thread(target=self._read_loop, daemon=True)
        self._thread.start()
        logger.info(f"Connected to board on {self.port}")
        return True

    def disconnect(self):
        """Stop everything and close the serial connection."""
        self._running = False
        if self._thread:
            # readline() times out, so the reader notices _running within 0.1s
            self._thread.join(timeout=1.0)
            self._thread = None

        if self._serial:
            try:
                self.emergency_stop()
            except BoardError as e:
                logger.error(f"Emergency stop on disconnect failed: {e}")
            self._serial.close()
            self._serial = None

        self._connected = False
        logger.info("Disconnected from board")

    def set_speed(self, unit: DriveUnit, rotation: Rotation, magnitude: float):
        magnitude = max(0.0, min(1.0, magnitude))
        speed = magnitude if rotation is Rotation.CW else -magnitude
        self._speeds[unit] = speed
        self._write(f"W:{self.wheel_pins[unit]},{speed:.3f}")

    def stop(self, unit: DriveUnit):
        self._speeds[unit] = 0.0
        self._write(f"X:{self.wheel_pins[unit]}")

    def emergency_stop(self):
        """Stop all servos at once."""
        for unit in DriveUnit:
            self._speeds[unit] = 0.0
        self._write("E")
        logger.warning("EMERGENCY STOP")

    def add_analog_listener(self, pin: int, callback: AnalogListener, frequency: int):
        """Stream samples of an analog pin to callback."""
        self._listeners.setdefault(pin, []).append(callback)
        self._write(f"F:{pin},{frequency}")

    def remove_analog_listener(self, pin: int, callback: AnalogListener):
        listeners = self._listeners.get(pin, [])
        if callback in listeners:
            listeners.remove(callback)

    def _write(self, command: str):
        if not self._serial:
            logger.warning("Not connected to board")
            return
        try:
            self._serial.write(f"{command}\n".encode())
        except serial.SerialException as e:
            raise BoardError(f"Failed to send {command!r}: {e}") from e
        logger.debug(f"Sent: {command}")

    def _read_loop(self):
        """Background thread: read status lines from the board."""
        while self._running:
            try:
                raw = self._serial.readline() if self._serial else b""
            except serial.SerialException as e:
                logger.error(f"Board read failed: {e}")
                self._running = False
                break
            if raw:
                self._handle_line(raw.decode(errors="ignore").strip())

    def _handle_line(self, line: str):
        if line.startswith("A:"):
            try:
                pin, value = (int(part) for part in line[2:].split(","))
            except ValueError:
                logger.warning(f"Malformed analog sample: {line!r}")
                return
            if self._loop is not None and not self._loop.is_closed():
                self._loop.call_soon_threadsafe(self._dispatch_analog, pin, value)

        elif line == "R":
            logger.info("Board ready")

        elif line.startswith("E:"):
            logger.error(f"Board error: {line[2:]}")

        elif line:
            logger.debug(f"Ignoring board line: {line!r}")

    def _dispatch_analog(self, pin: int, value: int):
        for callback in list(self._listeners.get(pin, [])):
            callback(value)

