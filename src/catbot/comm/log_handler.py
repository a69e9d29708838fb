"""
Logging handler that republishes records on the bus LOG channel.
"""

from __future__ import annotations

import logging

from .bus import Channel, MessageBus


class BusLogHandler(logging.Handler):
    """
    Forward log records to remote observers.

    Records from the bus itself are skipped, otherwise a failing LOG
    subscriber would log its way into an endless loop.
    """

    def __init__(self, bus: MessageBus, level=logging.INFO):
        super().__init__(level)
        self.bus = bus

    def emit(self, record: logging.LogRecord):
        if record.name.startswith("catbot.comm"):
            return
        if not self.bus.is_attached:
            return
        try:
            self.bus.publish(
                {
                    "level": record.levelname,
                    "logger": record.name,
                    "message": self.format(record),
                },
                Channel.LOG,
            )
        except Exception:
            self.handleError(record)
