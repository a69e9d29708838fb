"""
Control Layer - Execution.

Process lifecycle and the service wiring navigation to the bus.
"""

from .navigation import NavigationService
from .controller import Controller

__all__ = ["Controller", "NavigationService"]
