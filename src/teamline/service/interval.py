# SPDX-License-Identifier: MIT

import math
from typing import Optional

import pendulum

from teamline.model.timeline import BarPosition
from teamline.time import days_between

# Minimum rendered width (percent) so that very short items stay visible
MIN_WIDTH_PERCENT = 2.0

# Items shorter than this many days are drawn as if they lasted this long
MIN_DURATION_DAYS = 1.0


def window_total_days(
    window_start: pendulum.DateTime, window_end: pendulum.DateTime
) -> int:
    return math.ceil(days_between(window_start, window_end))


def map_interval(
    interval_start: Optional[pendulum.DateTime],
    interval_end: Optional[pendulum.DateTime],
    window_start: pendulum.DateTime,
    window_end: pendulum.DateTime,
) -> Optional[BarPosition]:
    """
    Position a time interval inside a visible window.

    A missing bound falls back to the other one, so an item with only a start
    (or only an end) is treated as a point in time.

    Args:
        interval_start: Start of the interval, or None
        interval_end: End of the interval, or None
        window_start: First instant of the visible window
        window_end: Last instant of the visible window

    Returns:
        ``{"left", "width"}`` as percentages of the window's day span, or None
        when both bounds are missing or the interval does not touch the window
    """
    if interval_start is None and interval_end is None:
        return None

    total_days = window_total_days(window_start, window_end)
    if total_days <= 0:
        return None

    effective_start = interval_start if interval_start is not None else interval_end
    effective_end = interval_end if interval_end is not None else interval_start
    assert effective_start is not None
    assert effective_end is not None

    if effective_end < window_start or effective_start > window_end:
        return None

    visible_start = max(effective_start, window_start)
    visible_end = min(effective_end, window_end)

    # Offsets are taken from window_start so every day counts in its timezone
    start_days = days_between(window_start, visible_start)
    end_days = days_between(window_start, visible_end)
    # Unlike a plain max(duration, 1 day), the one-day minimum is capped at the
    # days left so it never runs past the right edge of the window
    remaining_days = total_days - start_days
    duration_days = max(
        end_days - start_days,
        min(MIN_DURATION_DAYS, remaining_days),
    )

    left = start_days / total_days * 100
    width = duration_days / total_days * 100

    return {"left": left, "width": max(width, MIN_WIDTH_PERCENT)}


def now_position(
    window_start: pendulum.DateTime,
    window_end: pendulum.DateTime,
    now: pendulum.DateTime,
) -> Optional[float]:
    """Percentage offset of ``now`` inside the window, or None when outside it."""
    total_days = days_between(window_start, window_end)
    if total_days <= 0:
        return None
    percentage = days_between(window_start, now) / total_days * 100
    if percentage < 0 or percentage > 100:
        return None
    return percentage
