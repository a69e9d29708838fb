"""
Navigation state machine.

Single authority over the wheels. Drives forward until an obstacle gets
too close, then backs up and turns away; turns on request from remote
clients; stops dead on shutdown/crash/error notices.

Maneuvers are lists of Steps run on a Scheduler. A forced stop doesn't
cancel timers that are already scheduled; it bumps the maneuver
generation, and step timers from an older generation return without
touching the wheels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from catbot.messages import Message, STOP_MESSAGES, parse_message
from catbot.params import Parameters
from catbot.sensors.wheels import Wheels

from .direction import Coin, DirectionDecision, coin_flip, pick_direction
from .maneuver import Direction, Maneuver, MotionState, Step
from .sampler import ProximitySampler
from .scheduler import Scheduler
from .turn_log import RecentTurnLog, needs_look_around

logger = logging.getLogger(__name__)

Notify = Callable[[Message], None]


@dataclass
class NavigationContext:
    """All mutable navigation state, owned by one NavigationStateMachine."""

    state: MotionState = MotionState.STOPPED
    turning: bool = False
    pending_turn_display: bool = False
    recent_turns: RecentTurnLog = field(default_factory=RecentTurnLog)
    sampler: ProximitySampler = field(default_factory=ProximitySampler)
    generation: int = 0
    last_proximity: float | None = None


class NavigationStateMachine:
    """
    Obstacle avoidance and manual turns.

    States:
    - STOPPED: Wheels stopped (before start, or after a stop notice)
    - MOVING_FORWARD: Cruising, watching the proximity sensor
    - MOVING_BACKWARD: Backing away from an obstacle
    - TURNING_LEFT / TURNING_RIGHT: Timed turn in place
    - LOOKING_LEFT / LOOKING_RIGHT: Stopped, recording proximities

    Usage:
        sm = NavigationStateMachine(wheels, scheduler, notify=bus.pub)
        sm.start()

        # Sensor callback:
        sm.handle_proximity(cm)

        # Bus callback:
        sm.handle_message(message)
    """

    def __init__(
        self,
        wheels: Wheels,
        scheduler: Scheduler,
        notify: Notify,
        params: Parameters | None = None,
        coin: Coin = coin_flip,
    ):
        self.wheels = wheels
        self.scheduler = scheduler
        self.notify = notify
        self.params = params or Parameters()
        self.coin = coin

        self.ctx = NavigationContext(
            recent_turns=RecentTurnLog(max(1, self.params.max_recent_turns)),
            sampler=ProximitySampler(self.params.max_proximity),
        )
        self._maneuver: Maneuver | None = None
        self.last_decision: DirectionDecision | None = None

    @property
    def state(self) -> MotionState:
        return self.ctx.state

    @property
    def turning(self) -> bool:
        return self.ctx.turning

    @property
    def pending_turn_display(self) -> bool:
        return self.ctx.pending_turn_display

    @property
    def recent_turns(self) -> RecentTurnLog:
        return self.ctx.recent_turns

    @property
    def sampler(self) -> ProximitySampler:
        return self.ctx.sampler

    @property
    def maneuver(self) -> Maneuver | None:
        return self._maneuver

    def start(self):
        """Start moving forward."""
        logger.info("Navigation started")
        self._enter(MotionState.MOVING_FORWARD)

    def stop(self):
        """
        Stop the wheels now.

        Any maneuver in flight is abandoned; its pending timers become no-ops.
        """
        self.ctx.generation += 1
        if self._maneuver is not None:
            logger.info(f"Abandoning {self._maneuver.name} maneuver")
        self._maneuver = None
        self.ctx.turning = False
        self.ctx.pending_turn_display = False
        if self.ctx.sampler.is_recording:
            self.ctx.sampler.end_recording()
        self._enter(MotionState.STOPPED)

    # --- Inputs ---

    def handle_proximity(self, proximity: float) -> bool:
        """
        Sensor callback. Returns True if the reading started an avoidance maneuver.
        """
        self.ctx.last_proximity = proximity

        # Looking around: readings go to the sampler, nothing else
        if self.ctx.sampler.add(proximity):
            return False

        if not self._is_obstacle(proximity):
            return False

        self._avoid_obstacle(proximity)
        return True

    def handle_message(self, raw):
        """Bus callback."""
        message = parse_message(raw)
        if message is None:
            return

        if message in STOP_MESSAGES:
            logger.info(f"Received {message.value}, stopping")
            self.stop()
        elif message is Message.TURN_LEFT:
            self.request_turn(Direction.LEFT)
        elif message is Message.TURN_RIGHT:
            self.request_turn(Direction.RIGHT)

    def request_turn(self, direction: Direction) -> bool:
        """
        Manual turn. Returns False if another maneuver is already running.

        A rejected request is owed a TURN_COMPLETED once the running
        maneuver ends.
        """
        if self.ctx.turning:
            logger.info(f"Rejecting {direction.value} turn request, already turning")
            self.ctx.pending_turn_display = True
            self.notify(Message.TURN_IN_PROGRESS)
            return False

        self.ctx.turning = True
        self.notify(direction.turning_message)
        self.wheels.stop()
        self._run(
            Maneuver(
                f"{direction.value} turn",
                [Step(direction.turning_state, self.params.turn_duration)],
                on_finish=lambda: self._resume(manual=True),
            )
        )
        return True

    # --- Obstacle avoidance ---

    def _is_obstacle(self, proximity: float) -> bool:
        """
        Close reading while cruising with no maneuver running.

        Besides the shared turning flag this also requires MOVING_FORWARD,
        so a robot stopped by a shutdown/crash/error notice stays put no
        matter what the sensor reports.
        """
        # Negative/zero readings mean no echo, never an obstacle
        return (
            not self.ctx.turning
            and self.ctx.state is MotionState.MOVING_FORWARD
            and 0 < proximity < self.params.min_proximity
        )

    def _avoid_obstacle(self, proximity: float):
        self.ctx.turning = True
        logger.info(f"Obstacle detected (proximity: {proximity} cm)")

        # Keep track of the times of the last few turns
        self.ctx.recent_turns.capacity = max(1, self.params.max_recent_turns)
        self.ctx.recent_turns.record(self.scheduler.now())

        self._run(
            Maneuver(
                "avoidance",
                [Step(MotionState.MOVING_BACKWARD, self.params.backup_duration, self._choose_turn)],
                on_finish=lambda: self._resume(manual=False),
            )
        )

    def _choose_turn(self) -> list[Step]:
        """After backing up: random turn, or look around if turning a lot lately."""
        self.wheels.stop()

        if needs_look_around(self.ctx.recent_turns, self.scheduler.now(), self.params.recent_turns_timeframe):
            logger.info("Possibly in a corner, looking around...")
            self.last_decision = DirectionDecision(
                self.ctx.sampler,
                self.coin,
                turn_duration=self.params.turn_duration,
                recording_duration=self.params.recording_duration,
            )
            return self.last_decision.steps()

        direction = pick_direction(self.coin)
        return [Step(direction.turning_state, self.params.turn_duration)]

    def _resume(self, manual: bool):
        """Maneuver finished: drive on, settle any owed turn notices."""
        self._enter(MotionState.MOVING_FORWARD)
        self.ctx.turning = False

        if manual or self.ctx.pending_turn_display:
            self.notify(Message.TURN_COMPLETED)
            self.ctx.pending_turn_display = False

    # --- Step runner ---

    def _run(self, maneuver: Maneuver):
        logger.debug(f"Starting {maneuver!r}")
        self._maneuver = maneuver
        self._advance(self.ctx.generation)

    def _complete_step(self, generation: int):
        if generation != self.ctx.generation or self._maneuver is None:
            logger.debug("Ignoring timer from an abandoned maneuver")
            return
        self._advance(generation, self._maneuver.steps.popleft())

    def _advance(self, generation: int, finished: Step | None = None):
        maneuver = self._maneuver
        try:
            if finished is not None and finished.on_complete is not None:
                follow_up = finished.on_complete()
                if follow_up:
                    maneuver.insert_next(follow_up)

            if not maneuver.steps:
                self._maneuver = None
                maneuver.on_finish()
                return

            step = maneuver.steps[0]
            self._enter(step.state)
            self.scheduler.call_later(step.duration, self._complete_step, generation)

        except Exception:
            # Leave the wheels as they are; the ERROR_STATE notice stops them
            logger.exception(f"Error during {maneuver.name} maneuver")
            self._maneuver = None
            self.notify(Message.ERROR_STATE)

    def _enter(self, state: MotionState):
        """Issue the wheel commands for state, then record it."""
        if state is MotionState.STOPPED:
            self.wheels.stop()

        elif state is MotionState.MOVING_FORWARD:
            self.wheels.forward(self.params.normal_speed)

        elif state is MotionState.MOVING_BACKWARD:
            self.wheels.stop()
            self.wheels.backward(self.params.reverse_speed)

        elif state is MotionState.TURNING_LEFT:
            self.wheels.turn_left(self.params.turning_speed)

        elif state is MotionState.TURNING_RIGHT:
            self.wheels.turn_right(self.params.turning_speed)

        elif state in (MotionState.LOOKING_LEFT, MotionState.LOOKING_RIGHT):
            self.wheels.stop()
            self.ctx.sampler.max_proximity = self.params.max_proximity
            self.ctx.sampler.begin_recording()

        if state is not self.ctx.state:
            logger.debug(f"Transition: {self.ctx.state.name} -> {state.name}")
        self.ctx.state = state

    def status(self) -> dict:
        """Snapshot for the web API."""
        return {
            "state": self.ctx.state.name,
            "turning": self.ctx.turning,
            "pending_turn_display": self.ctx.pending_turn_display,
            "recent_turns": len(self.ctx.recent_turns),
            "recording": self.ctx.sampler.is_recording,
            "last_proximity": self.ctx.last_proximity,
            "maneuver": self._maneuver.name if self._maneuver else None,
            "last_decision": self.last_decision.to_dict() if self.last_decision else None,
        }
