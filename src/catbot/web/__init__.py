"""
Web Layer - Remote control interface.

Provides:
- Navigation status
- Manual turn requests
- Parameter tuning
- Live bus/log stream (WebSocket)
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
