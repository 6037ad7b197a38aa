# SPDX-License-Identifier: MIT

import pendulum
import pytest

from teamline.time import datetime_at_day_offset, days_between

FALL_BACK = pendulum.datetime(2024, 11, 3, tz="America/New_York")
SPRING_FORWARD = pendulum.datetime(2024, 3, 10, tz="America/New_York")


def test_days_between_in_utc() -> None:
    start = pendulum.datetime(2024, 1, 1, tz="UTC")

    assert days_between(start, start.add(days=2, hours=6)) == pytest.approx(2.25)
    assert days_between(start, start.subtract(hours=12)) == pytest.approx(-0.5)


@pytest.mark.parametrize("day", [FALL_BACK, SPRING_FORWARD])
def test_clock_change_day_counts_as_one_day(day: pendulum.DateTime) -> None:
    assert days_between(day, day.add(days=1)) == pytest.approx(1)
    assert days_between(day, day.add(days=7)) == pytest.approx(7)


def test_days_between_counts_in_start_timezone() -> None:
    start = pendulum.datetime(2024, 11, 3, tz="America/New_York")
    # Noon local on the following day, expressed in UTC
    instant = pendulum.datetime(2024, 11, 4, 17, tz="UTC")

    assert days_between(start, instant) == pytest.approx(1.5)


def test_datetime_at_day_offset() -> None:
    assert datetime_at_day_offset(FALL_BACK, 6.5) == pendulum.datetime(
        2024, 11, 9, 12, tz="America/New_York"
    )
    assert datetime_at_day_offset(FALL_BACK, 0) == FALL_BACK
