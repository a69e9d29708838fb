"""
Decision Layer - What to do.

Contains:
- NavigationStateMachine: obstacle avoidance and manual turns
- DirectionDecision: look both ways when stuck
- ProximitySampler / RecentTurnLog: the inputs those decisions use
"""

from .maneuver import Direction, Maneuver, MotionState, Step
from .scheduler import AsyncioScheduler, Scheduler
from .sampler import ProximitySampler
from .turn_log import RecentTurnLog, needs_look_around
from .direction import DirectionDecision, coin_flip
from .state_machine import NavigationContext, NavigationStateMachine

__all__ = [
    "Direction",
    "Maneuver",
    "MotionState",
    "Step",
    "AsyncioScheduler",
    "Scheduler",
    "ProximitySampler",
    "RecentTurnLog",
    "needs_look_around",
    "DirectionDecision",
    "coin_flip",
    "NavigationContext",
    "NavigationStateMachine",
]
