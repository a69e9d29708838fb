"""
Main controller - process lifecycle.

This is what main.py runs. It:
1. Connects the board and starts the IR sensor
2. Starts the navigation service and begins driving
3. Optionally serves the remote control web interface
4. On SIGINT/SIGTERM publishes SHUTTING_DOWN, waits a moment, cleans up
"""

from __future__ import annotations

import asyncio
import logging
import signal

from catbot.comm import BusLogHandler, MessageBus
from catbot.config import BOARD_PORT, ERROR_EXIT_DELAY, SHUTDOWN_GRACE_PERIOD, WEB_PORT
from catbot.decision import AsyncioScheduler
from catbot.errors import BusError, CatbotError
from catbot.messages import Message
from catbot.params import Parameters
from catbot.sensors import Board, ProximitySensor, Wheels

from .navigation import NavigationService

logger = logging.getLogger(__name__)


class Controller:
    """
    Main robot controller.

    Usage:
        controller = Controller()
        asyncio.run(controller.run())
    """

    def __init__(
        self,
        params: Parameters | None = None,
        board_port: str = BOARD_PORT,
        web: bool = False,
        web_port: int = WEB_PORT,
    ):
        # Runtime parameters (shared, tunable via web)
        self.params = params or Parameters.load()

        # Hardware
        self.board = Board(port=board_port)
        self.wheels = Wheels(self.board)
        self.sensor = ProximitySensor(self.board)

        # Created in run(), they need the event loop
        self.bus: MessageBus | None = None
        self.navigation: NavigationService | None = None

        self.web = web
        self.web_port = web_port
        self._web_runner = None
        self._log_handler: BusLogHandler | None = None
        self._shutdown: asyncio.Event | None = None
        self._exit_code = 0

    @property
    def state_machine(self):
        """Navigation state machine (None before startup)."""
        return self.navigation.state_machine if self.navigation else None

    async def run(self) -> int:
        """Run until shut down. Returns the process exit code."""
        logger.info("Starting up...")

        loop = asyncio.get_running_loop()
        self.bus = MessageBus(loop)
        self._shutdown = asyncio.Event()

        # Remote observers get our log
        self._log_handler = BusLogHandler(self.bus)
        logging.getLogger().addHandler(self._log_handler)

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._request_shutdown)
        loop.set_exception_handler(self._handle_loop_exception)

        try:
            if not self._init_hardware(loop):
                logger.error("Failed to initialize hardware")
                self.bus.pub(Message.ERROR_STATE)
                self._exit_code = 1
                return self._exit_code

            self.navigation = NavigationService(
                self.bus,
                self.wheels,
                self.sensor,
                AsyncioScheduler(loop),
                params=self.params,
            )
            await self.navigation.startup()

            if self.web:
                from catbot.web import run_server

                self._web_runner = await run_server(controller=self, port=self.web_port)

            logger.info("Robot started!")
            self.navigation.start()

            await self._shutdown.wait()

            # Let SHUTTING_DOWN / CRASHING reach every subscriber
            await asyncio.sleep(SHUTDOWN_GRACE_PERIOD)

        except BusError:
            # Navigation already reported ERROR_STATE
            raise
        except Exception as e:
            logger.error(f"Controller error: {e}")
            self.bus.pub(Message.ERROR_STATE)
            raise
        finally:
            await self._cleanup()

        return self._exit_code

    def _init_hardware(self, loop) -> bool:
        """Connect the board and start the sensor."""
        logger.info("Initializing hardware...")

        if not self.board.connect(loop):
            logger.error("Failed to connect to board")
            return False

        self.wheels.stop()
        self.bus.pub(Message.BOARD_READY)

        if not self.sensor.start():
            logger.error("Failed to start proximity sensor")
            return False

        logger.info("Hardware initialized")
        return True

    def _request_shutdown(self):
        """Handle termination signal."""
        logger.info("Received termination signal, stopping...")
        self.bus.pub(Message.SHUTTING_DOWN)
        self._shutdown.set()

    def _handle_loop_exception(self, loop, context):
        """Uncaught exception in a callback: tell everyone, then exit."""
        exception = context.get("exception")
        logger.error(
            f"Uncaught exception: {context.get('message')}",
            exc_info=exception,
        )
        self._exit_code = 1
        self.bus.pub(Message.CRASHING)
        loop.call_later(ERROR_EXIT_DELAY, self._shutdown.set)

    async def _cleanup(self):
        """Cleanup on shutdown."""
        logger.info("Cleaning up...")

        if self._web_runner is not None:
            await self._web_runner.cleanup()
            self._web_runner = None

        try:
            # Stop wheels first
            if self.navigation is not None:
                try:
                    self.navigation.stop()
                except CatbotError as e:
                    logger.error(f"Failed to stop wheels: {e}")

            if self.sensor.is_running:
                self.sensor.stop()
            if self.board.is_connected:
                self.board.disconnect()
        finally:
            if self._log_handler is not None:
                logging.getLogger().removeHandler(self._log_handler)
                self._log_handler = None
            self.bus.close()

        logger.info("Cleanup complete")
