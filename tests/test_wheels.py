from catbot.sensors import DriveUnit, Rotation, Wheels

from conftest import RecordingActuator

LEFT, RIGHT = DriveUnit.LEFT, DriveUnit.RIGHT
CW, CCW = Rotation.CW, Rotation.CCW


def make_wheels():
    actuator = RecordingActuator()
    return Wheels(actuator), actuator


def test_forward_spins_mirrored_servos_opposite_ways():
    wheels, actuator = make_wheels()
    wheels.forward(0.04)

    assert actuator.commands == [
        ("speed", LEFT, CW, 0.04),
        ("speed", RIGHT, CCW, 0.04),
    ]


def test_backward():
    wheels, actuator = make_wheels()
    wheels.backward(0.025)

    assert actuator.commands == [
        ("speed", LEFT, CCW, 0.025),
        ("speed", RIGHT, CW, 0.025),
    ]


def test_turn_left_reverses_left_wheel():
    wheels, actuator = make_wheels()
    wheels.turn_left(0.03)

    assert actuator.commands == [
        ("speed", LEFT, CCW, 0.03),
        ("speed", RIGHT, CCW, 0.03),
    ]


def test_turn_right_reverses_right_wheel():
    wheels, actuator = make_wheels()
    wheels.turn_right(0.03)

    assert actuator.commands == [
        ("speed", LEFT, CW, 0.03),
        ("speed", RIGHT, CW, 0.03),
    ]


def test_stop_stops_both():
    wheels, actuator = make_wheels()
    wheels.stop()

    assert actuator.commands == [("stop", LEFT), ("stop", RIGHT)]


def test_custom_calibration():
    actuator = RecordingActuator()
    wheels = Wheels(actuator, forward_rotation={"left": "ccw", "right": "cw"})

    wheels.forward(0.04)

    assert wheels.forward_rotation(LEFT) is CCW
    assert actuator.commands[0] == ("speed", LEFT, CCW, 0.04)
