import pytest

from sim_clock import DAYS_PER_MONTH, SimulationClock, is_month_end


def test_whole_days_are_counted_and_remainder_carried() -> None:
    clock = SimulationClock()

    assert clock.accumulate(3.5, seconds_per_day=1.0) == 3
    assert clock.real_seconds_accumulated == pytest.approx(0.5)
    assert clock.accumulate(0.6, seconds_per_day=1.0) == 1
    assert clock.day_counter == 4


def test_many_small_updates_add_up() -> None:
    clock = SimulationClock()

    days = sum(clock.accumulate(0.25, seconds_per_day=0.5) for _ in range(10))

    assert days == 5


def test_zero_speed_pauses() -> None:
    clock = SimulationClock()

    assert clock.accumulate(100.0, seconds_per_day=0) == 0
    assert clock.real_seconds_accumulated == 0.0


def test_negative_elapsed_time_is_rejected() -> None:
    with pytest.raises(ValueError):
        SimulationClock().accumulate(-1.0, seconds_per_day=1.0)


def test_month_boundaries() -> None:
    assert DAYS_PER_MONTH == 30
    assert is_month_end(29)
    assert not is_month_end(30)
    assert is_month_end(59)
    assert not is_month_end(0)

    clock = SimulationClock(day_counter=65)
    assert clock.month_index == 2
    assert clock.is_month_end(89)
    assert not clock.is_month_end()


def test_decimal_fractions_of_a_second_do_not_lose_a_day() -> None:
    clock = SimulationClock()

    days = sum(clock.accumulate(0.1, seconds_per_day=1.0) for _ in range(10))

    assert days == 1
    assert clock.real_seconds_accumulated == 0


def test_thirds_of_a_day_add_up() -> None:
    clock = SimulationClock()

    days = sum(clock.accumulate(0.2, seconds_per_day=0.6) for _ in range(30))

    assert days == 10
    assert clock.day_counter == 10
