import pytest

from simulation.driver import SimulationDriver


@pytest.fixture
def driver(small_config) -> SimulationDriver:
    return SimulationDriver(small_config)


def test_elapsed_time_becomes_whole_days(driver) -> None:
    assert driver.update(2.5) == 2
    assert driver.update(0.5) == 1
    assert driver.view().day == 3


def test_speed_zero_pauses(driver) -> None:
    driver.set_speed(0)

    assert driver.paused
    assert driver.update(10.0) == 0
    assert driver.view().day == 0


def test_faster_speed_runs_more_days(driver) -> None:
    driver.set_speed(4)

    assert driver.update(1.0) == 4


def test_negative_speed_is_rejected(driver) -> None:
    with pytest.raises(ValueError):
        driver.set_speed(-1)


def test_advance_day_pauses_first_then_steps(driver) -> None:
    assert driver.advance_day() is False
    assert driver.paused
    assert driver.view().day == 0

    assert driver.advance_day() is True
    assert driver.advance_day() is True
    assert driver.view().day == 2
    assert driver.clock.day_counter == 2


def test_views_from_earlier_days_stay_valid(driver) -> None:
    first = driver.view()

    driver.update(3.0)

    assert first.day == 0
    assert driver.view().day == 3
