"""
Shared test doubles: virtual-time scheduler, recording wheels, recorded notices.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools

import pytest

from catbot.decision import NavigationStateMachine, Scheduler
from catbot.params import Parameters
from catbot.sensors import Actuator, Wheels


class FakeTimer:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler(Scheduler):
    """Timers only fire when the test advances time."""

    def __init__(self, start: float = 1000.0):
        self._now = start
        self._timers: list = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay, callback, *args):
        timer = FakeTimer(self._now + delay, callback, args)
        heapq.heappush(self._timers, (timer.when, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._timers if not t.cancelled)

    def advance(self, seconds: float):
        """Move time forward, firing due timers in order (including ones they schedule)."""
        target = self._now + seconds
        while self._timers and self._timers[0][0] <= target + 1e-9:
            when, _, timer = heapq.heappop(self._timers)
            self._now = max(self._now, when)
            if not timer.cancelled:
                timer.callback(*timer.args)
        self._now = target


class RecordingActuator(Actuator):
    def __init__(self):
        self.commands = []

    def set_speed(self, unit, rotation, magnitude):
        self.commands.append(("speed", unit, rotation, magnitude))

    def stop(self, unit):
        self.commands.append(("stop", unit))


class RecordingWheels(Wheels):
    """Wheels that remember which high level moves were made."""

    def __init__(self):
        super().__init__(RecordingActuator())
        self.moves = []
        self.fail_on = None

    def _record(self, move):
        if move == self.fail_on:
            raise RuntimeError(f"{move} failed")
        self.moves.append(move)

    def forward(self, speed):
        self._record("forward")
        super().forward(speed)

    def backward(self, speed):
        self._record("backward")
        super().backward(speed)

    def turn_left(self, speed):
        self._record("turn_left")
        super().turn_left(speed)

    def turn_right(self, speed):
        self._record("turn_right")
        super().turn_right(speed)

    def stop(self):
        self._record("stop")
        super().stop()

    def reset(self):
        self.moves.clear()


async def _drain(loop_turns: int = 5):
    for _ in range(loop_turns):
        await asyncio.sleep(0)


@pytest.fixture
def drain():
    """Coroutine function letting call_soon callbacks (bus deliveries) run."""
    return _drain


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def wheels():
    return RecordingWheels()


@pytest.fixture
def params():
    return Parameters()


@pytest.fixture
def notices():
    return []


@pytest.fixture
def state_machine(wheels, scheduler, notices, params):
    # Heads: turn/look left first
    return NavigationStateMachine(
        wheels,
        scheduler,
        notify=notices.append,
        params=params,
        coin=lambda: True,
    )
