"""
catbot - obstacle avoiding rover controller.

Layers:
- sensors: board link, wheels, IR proximity sensor
- decision: navigation state machine and direction finding
- comm: message bus
- control: process lifecycle
- web: remote control interface
"""

__version__ = "0.1.0"
