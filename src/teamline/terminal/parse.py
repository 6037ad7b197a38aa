# SPDX-License-Identifier: MIT

import re
from typing import Optional

import pendulum
import typer

from teamline import time
from teamline.model.timeline import Direction, RangeSize
from teamline.service.date_range import RANGE_SIZE_DAYS
from teamline.time import datetime_from_local_date_str


def parse_date(date_param: Optional[str | int]) -> Optional[pendulum.DateTime]:
    """
    Parse a window anchor to local midnight.

    Accepts YYYY-MM-DD, today/t, yesterday/y, tomorrow/o, or a day offset
    like 1 or -7.
    """
    if date_param is None:
        return None

    date = str(date_param)

    if re.match(r"^\d{4}-\d{2}-\d{2}$", date):
        try:
            return datetime_from_local_date_str(date)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid date: {e}")

    if re.match(r"^-?\d+$", date):
        return time.today_local().add(days=int(date))

    if date == "today" or date == "t":
        return time.today_local()
    if date == "yesterday" or date == "y":
        return pendulum.yesterday("local")
    if date == "tomorrow" or date == "o":
        return pendulum.tomorrow("local")
    raise typer.BadParameter("Incorrect date format")


def parse_range_size(range_param: Optional[str]) -> Optional[RangeSize]:
    if range_param is None:
        return None
    if range_param not in RANGE_SIZE_DAYS:
        raise typer.BadParameter(
            f"Range must be one of {', '.join(RANGE_SIZE_DAYS)}, got {range_param}"
        )
    return range_param  # type: ignore[return-value]


def parse_direction(direction_param: Optional[str]) -> Optional[Direction]:
    if direction_param is None:
        return None
    if direction_param in ("earlier", "e", "-"):
        return "earlier"
    if direction_param in ("later", "l", "+"):
        return "later"
    raise typer.BadParameter("Direction must be 'earlier' or 'later'")
