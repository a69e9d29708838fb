"""
NavigationService wired to a real MessageBus, with virtual time for maneuvers.
"""

import asyncio

import pytest

from catbot.comm import MessageBus
from catbot.control import NavigationService
from catbot.decision import MotionState
from catbot.errors import BusError
from catbot.messages import Message


class FakeSensor:
    def __init__(self):
        self.listeners = []
        self.cm = None

    def on_data(self, callback):
        self.listeners.append(callback)

    def emit(self, cm):
        self.cm = cm
        for callback in self.listeners:
            callback(cm)


class BrokenBus:
    """Subscribing fails; publishes are recorded."""

    def __init__(self):
        self.published = []

    async def sub(self, callback):
        raise BusError("no connection")

    def pub(self, message):
        self.published.append(message)


@pytest.fixture
def sensor():
    return FakeSensor()


def make_service(bus, wheels, sensor, scheduler, params):
    return NavigationService(bus, wheels, sensor, scheduler, params=params, coin=lambda: True)


def test_startup_stops_wheels_and_listens(wheels, sensor, scheduler, params):
    async def scenario():
        bus = MessageBus()
        service = make_service(bus, wheels, sensor, scheduler, params)
        await service.startup()
        return service

    service = asyncio.run(scenario())

    assert wheels.moves == ["stop"]
    assert sensor.listeners == [service.state_machine.handle_proximity]


def test_subscribe_failure_reports_error(wheels, sensor, scheduler, params):
    bus = BrokenBus()
    service = make_service(bus, wheels, sensor, scheduler, params)

    with pytest.raises(BusError):
        asyncio.run(service.startup())

    assert bus.published == [Message.ERROR_STATE]


def test_turn_command_over_bus(wheels, sensor, scheduler, params, drain):
    seen = []

    async def scenario():
        bus = MessageBus()
        await bus.sub(seen.append)
        service = make_service(bus, wheels, sensor, scheduler, params)
        await service.startup()
        service.start()

        bus.pub(Message.TURN_LEFT)
        await drain()
        assert service.state_machine.state is MotionState.TURNING_LEFT

        scheduler.advance(params.turn_duration)
        await drain()
        return service

    service = asyncio.run(scenario())

    assert seen == [Message.TURN_LEFT, Message.TURNING_LEFT, Message.TURN_COMPLETED]
    assert service.state_machine.state is MotionState.MOVING_FORWARD


def test_shutdown_notice_stops_robot(wheels, sensor, scheduler, params, drain):
    async def scenario():
        bus = MessageBus()
        service = make_service(bus, wheels, sensor, scheduler, params)
        await service.startup()
        service.start()
        sensor.emit(3)
        wheels.reset()

        bus.pub(Message.SHUTTING_DOWN)
        await drain()
        return service

    service = asyncio.run(scenario())

    assert wheels.moves == ["stop"]
    assert service.state_machine.state is MotionState.STOPPED

    scheduler.advance(10)
    assert wheels.moves == ["stop"]


def test_sensor_readings_drive_avoidance(wheels, sensor, scheduler, params):
    async def scenario():
        bus = MessageBus()
        service = make_service(bus, wheels, sensor, scheduler, params)
        await service.startup()
        service.start()
        wheels.reset()

        for cm in (20, 12, 6):
            sensor.emit(cm)
        return service

    service = asyncio.run(scenario())

    assert service.state_machine.state is MotionState.MOVING_BACKWARD
    assert wheels.moves == ["stop", "backward"]


def test_maneuver_error_stops_robot_via_bus(wheels, sensor, scheduler, params, drain):
    seen = []

    async def scenario():
        bus = MessageBus()
        await bus.sub(seen.append)
        service = make_service(bus, wheels, sensor, scheduler, params)
        await service.startup()
        service.start()

        wheels.fail_on = "turn_left"
        sensor.emit(3)
        scheduler.advance(params.backup_duration)
        wheels.fail_on = None
        await drain()
        return service

    service = asyncio.run(scenario())

    # ERROR_STATE comes back around and stops the wheels
    assert seen == [Message.ERROR_STATE]
    assert service.state_machine.state is MotionState.STOPPED


def test_stop(wheels, sensor, scheduler, params):
    service = make_service(MessageBus(), wheels, sensor, scheduler, params)
    service.start()
    service.stop()

    assert service.state_machine.state is MotionState.STOPPED
