"""
Message bus - pub/sub on named channels.

Every component talks to the rest of the robot through the bus:
- MESSAGE: commands and status notices (see messages.Message)
- LOG: log records republished for remote observers

Delivery is scheduled on the event loop (call_soon_threadsafe), never
made inline. A notice published from inside a timer callback is handled
after that callback returns, in publish order, and publishing from the
board reader thread is safe.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable

from catbot.errors import BusError

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]


class Channel(Enum):
    """Bus channels."""

    MESSAGE = "MESSAGE"
    LOG = "LOG"


class MessageBus:
    """
    In-process message bus.

    Usage:
        bus = MessageBus()
        await bus.sub(handle_message)
        bus.pub(Message.TURN_LEFT)
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop
        self._subscribers: dict[Channel, list[Subscriber]] = {c: [] for c in Channel}
        self._initialized: set[Channel] = set()
        self._closed = False

    @property
    def is_attached(self) -> bool:
        """True once the bus knows which event loop to deliver on."""
        return self._loop is not None and not self._closed

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def subscribe(self, callback: Subscriber, channel: Channel = Channel.MESSAGE):
        """Register callback for every message published on channel."""
        self._check_channel(channel)
        if self._closed:
            raise BusError("Bus is closed")

        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        if channel not in self._initialized:
            self._initialized.add(channel)
            logger.info(f"Initialized channel {channel.value}")

        self._subscribers[channel].append(callback)

    def unsubscribe(self, callback: Subscriber, channel: Channel = Channel.MESSAGE):
        """Remove callback from channel (no-op if not subscribed)."""
        self._check_channel(channel)
        try:
            self._subscribers[channel].remove(callback)
        except ValueError:
            pass

    def publish(self, message: Any, channel: Channel = Channel.MESSAGE):
        """Queue message for delivery to all subscribers of channel."""
        self._check_channel(channel)
        if self._closed:
            logger.debug(f"Bus closed, dropping {message!r}")
            return

        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise BusError("Bus has no event loop to deliver on") from e

        self._loop.call_soon_threadsafe(self._deliver, channel, message)

    def pub(self, message: Any):
        """Publish to the MESSAGE channel."""
        self.publish(message, Channel.MESSAGE)

    async def sub(self, callback: Subscriber):
        """Subscribe to the MESSAGE channel."""
        await self.subscribe(callback, Channel.MESSAGE)

    def close(self):
        """Drop all subscribers; later publishes are ignored."""
        self._closed = True
        for subscribers in self._subscribers.values():
            subscribers.clear()
        logger.info("Message bus closed")

    def _deliver(self, channel: Channel, message: Any):
        # Copy: a subscriber may unsubscribe while being notified
        for callback in list(self._subscribers[channel]):
            try:
                callback(message)
            except Exception:
                logger.exception(f"Subscriber failed handling {message!r} on {channel.value}")

    @staticmethod
    def _check_channel(channel):
        if not isinstance(channel, Channel):
            logger.warning(f"Attempting to use an invalid channel: {channel!r}")
            raise BusError(f"Invalid channel: {channel!r}")
