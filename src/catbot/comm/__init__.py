"""
Communication layer - message bus shared by all components.
"""

from .bus import Channel, MessageBus
from .log_handler import BusLogHandler

__all__ = ["Channel", "MessageBus", "BusLogHandler"]
