# SPDX-License-Identifier: MIT

import math
from typing import Optional, cast

import pendulum


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def today_local() -> pendulum.DateTime:
    return pendulum.today("local")


def datetime_to_iso_str(datetime: pendulum.DateTime) -> str:
    return datetime.isoformat()


def datetime_from_str(datetime: str) -> pendulum.DateTime:
    return cast(pendulum.DateTime, pendulum.parse(datetime))


def datetime_from_str_optional(datetime: Optional[str]) -> Optional[pendulum.DateTime]:
    if datetime is None:
        return None
    return datetime_from_str(datetime)


def datetime_from_local_date_str(date_str: str) -> pendulum.DateTime:
    """Parse a 'YYYY-MM-DD' string to a pendulum.DateTime at local midnight."""
    return cast(pendulum.DateTime, pendulum.parse(date_str, tz="local")).start_of(
        "day"
    )


def datetime_to_display_date_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("MMM D")


def datetime_to_display_date_full_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("MMM D, YYYY")


def _day_fraction(datetime: pendulum.DateTime) -> float:
    day_start = datetime.start_of("day")
    day_seconds = (day_start.add(days=1) - day_start).total_seconds()
    return (datetime - day_start).total_seconds() / day_seconds


def days_between(start: pendulum.DateTime, end: pendulum.DateTime) -> float:
    """
    Fractional calendar days from start to end (negative if end is earlier).

    Days are counted in the timezone of ``start``, so a day that a clock change
    makes 23 or 25 hours long still counts as one day.
    """
    tz = start.timezone or "UTC"
    local_start = start.in_tz(tz)
    local_end = end.in_tz(tz)
    whole_days = local_end.date().toordinal() - local_start.date().toordinal()
    return whole_days + _day_fraction(local_end) - _day_fraction(local_start)


def datetime_at_day_offset(
    start: pendulum.DateTime, offset_days: float
) -> pendulum.DateTime:
    """The instant ``offset_days`` calendar days after ``start`` (a midnight)."""
    whole_days = math.floor(offset_days)
    day = start.add(days=whole_days)
    day_seconds = (day.start_of("day").add(days=1) - day.start_of("day")).total_seconds()
    return day.add(seconds=int((offset_days - whole_days) * day_seconds))
