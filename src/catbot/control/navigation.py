"""
Navigation service - connects the state machine to the bus and the sensor.
"""

from __future__ import annotations

import logging

from catbot.comm import MessageBus
from catbot.decision import NavigationStateMachine, Scheduler, coin_flip
from catbot.errors import BusError
from catbot.messages import Message
from catbot.params import Parameters
from catbot.sensors import ProximitySensor, Wheels

logger = logging.getLogger(__name__)


class NavigationService:
    """
    Owns the navigation state machine.

    - Proximity readings go to the state machine
    - Bus messages (turn requests, stop notices) go to the state machine
    - State machine notices go out on the bus
    """

    def __init__(
        self,
        bus: MessageBus,
        wheels: Wheels,
        sensor: ProximitySensor,
        scheduler: Scheduler,
        params: Parameters | None = None,
        coin=coin_flip,
    ):
        self.bus = bus
        self.wheels = wheels
        self.sensor = sensor
        self.state_machine = NavigationStateMachine(
            wheels,
            scheduler,
            notify=self._publish,
            params=params,
            coin=coin,
        )

    async def startup(self):
        """
        Stop the wheels, listen to the sensor and the bus.

        Raises:
            BusError: if subscribing failed (ERROR_STATE is published first).
        """
        self.wheels.stop()
        self.sensor.on_data(self.state_machine.handle_proximity)

        try:
            await self.bus.sub(self.state_machine.handle_message)
        except BusError as e:
            logger.warning(f"Failed to subscribe to shutdown/error messages: {e}")
            self._publish(Message.ERROR_STATE)
            raise

        logger.info("Navigation service ready")

    def start(self):
        """Begin moving forward."""
        self.state_machine.start()

    def stop(self):
        """Stop the wheels, abandoning any maneuver."""
        self.state_machine.stop()

    def _publish(self, message: Message):
        try:
            self.bus.pub(message)
        except BusError as e:
            logger.error(f"Failed to publish {message.value}: {e}")
