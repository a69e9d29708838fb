"""
Exceptions raised by catbot components.
"""


class CatbotError(Exception):
    """Base class for all catbot errors."""


class BusError(CatbotError):
    """Subscribing or publishing on the message bus failed."""


class BoardError(CatbotError):
    """The serial link to the microcontroller board failed."""
