# SPDX-License-Identifier: MIT

from typing import Optional

import pendulum

from teamline.model.timeline import Direction, RangeSize

DEFAULT_RANGE_DAYS = 14

RANGE_SIZE_DAYS: dict[str, int] = {
    "1w": 7,
    "2w": 14,
    "1m": 30,
    "3m": 90,
}


def days_for_range_size(size: Optional[str]) -> int:
    if size is None:
        return DEFAULT_RANGE_DAYS
    return RANGE_SIZE_DAYS.get(size, DEFAULT_RANGE_DAYS)


def generate_window(
    anchor: pendulum.DateTime, size: RangeSize
) -> list[pendulum.DateTime]:
    """
    Generate the calendar days of a window.

    The anchor is expected to already be normalized to midnight.

    Args:
        anchor: First day of the window
        size: Window size

    Returns:
        One DateTime per day, starting at the anchor
    """
    return [anchor.add(days=offset) for offset in range(days_for_range_size(size))]


def window_end(anchor: pendulum.DateTime, size: RangeSize) -> pendulum.DateTime:
    return anchor.add(days=days_for_range_size(size))


def shift_window(
    anchor: pendulum.DateTime, size: RangeSize, direction: Direction
) -> pendulum.DateTime:
    """Move the anchor by one full window, backwards for "earlier"."""
    days = days_for_range_size(size)
    if direction == "earlier":
        return anchor.subtract(days=days)
    return anchor.add(days=days)


def start_of_week(date: pendulum.DateTime) -> pendulum.DateTime:
    """Midnight of the Sunday that starts the week containing ``date``."""
    local_date = date.in_tz("local").start_of("day")
    # isoweekday: Monday=1 ... Sunday=7, so Sunday maps to a zero offset
    return local_date.subtract(days=local_date.isoweekday() % 7)


def is_same_day(first: pendulum.DateTime, second: pendulum.DateTime) -> bool:
    return first.in_tz("local").date() == second.in_tz("local").date()


def is_today(date: pendulum.DateTime, now: Optional[pendulum.DateTime] = None) -> bool:
    return is_same_day(date, now if now is not None else pendulum.now("local"))
