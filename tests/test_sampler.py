import math

import pytest

from catbot.decision.sampler import ProximitySampler, normalize_proximity


def test_mean_of_window():
    sampler = ProximitySampler()
    sampler.begin_recording()
    for cm in (20, 25, 23):
        assert sampler.add(cm)

    assert sampler.end_recording() == pytest.approx(68 / 3)


def test_empty_window_is_zero():
    sampler = ProximitySampler()
    sampler.begin_recording()

    assert sampler.end_recording() == 0


def test_end_without_begin_is_zero():
    assert ProximitySampler().end_recording() == 0


def test_out_of_range_readings_count_as_far_away():
    sampler = ProximitySampler(max_proximity=25)
    sampler.begin_recording()
    sampler.add(-3.2)
    sampler.add(0)
    sampler.add(15)

    assert sampler.samples == (25, 25, 15)
    assert sampler.end_recording() == pytest.approx(65 / 3)


def test_repeated_readings_all_count():
    sampler = ProximitySampler()
    sampler.begin_recording()
    for cm in (10, 10, 40):
        sampler.add(cm)

    assert sampler.end_recording() == pytest.approx(20)


def test_readings_outside_window_are_dropped():
    sampler = ProximitySampler()
    assert not sampler.add(12)
    assert sampler.samples == ()

    sampler.begin_recording()
    sampler.add(12)
    sampler.end_recording()

    # Late arrival after the window closed
    assert not sampler.add(30)
    assert sampler.samples == ()
    assert not sampler.is_recording


def test_begin_clears_previous_samples():
    sampler = ProximitySampler()
    sampler.begin_recording()
    sampler.add(5)
    sampler.begin_recording()
    sampler.add(9)

    assert sampler.end_recording() == 9


@pytest.mark.parametrize("value", [-1, 0, math.nan, math.inf])
def test_normalize_non_physical(value):
    assert normalize_proximity(value, 25) == 25


def test_normalize_keeps_valid_reading():
    assert normalize_proximity(7.5, 25) == 7.5
