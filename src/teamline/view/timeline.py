# SPDX-License-Identifier: MIT

import math
from typing import Optional, Sequence

import pendulum
from rich.console import Console
from rich.text import Text

from teamline.color import color_for_state, initials, string_to_color, workflow_state_color
from teamline.model.timeline import ItemBar, MemberLane, StatusSegment
from teamline.model.workflow_state import WorkflowState
from teamline.service.date_range import is_today
from teamline.service.interval import now_position
from teamline.time import (
    datetime_at_day_offset,
    datetime_to_display_date_full_str,
    datetime_to_display_date_str,
    days_between,
)
from teamline.view.header import header

EMPTY_CELL_STYLE = "on grey23"
BAR_CHAR = "█"


def timeline_view(
    team_name: str,
    lanes: Sequence[MemberLane],
    workflow_states: Sequence[WorkflowState],
    enabled_state_ids: set[str],
    days: Sequence[pendulum.DateTime],
    window_start: pendulum.DateTime,
    window_end: pendulum.DateTime,
    now: pendulum.DateTime,
    left_column_width: int = 32,
    console: Optional[Console] = None,
) -> None:
    """
    Display the team's work items as a gantt chart, one row per member.

    Only geometry already computed for each bar is used: a bar's cells come
    from its ``{left, width}`` and each cell is colored by the segment active
    at the instant the cell stands for.

    Args:
        team_name: Name of the displayed team
        lanes: One lane per member, with the visible bars
        workflow_states: The team's workflow states sorted by position
        enabled_state_ids: States currently shown
        days: The calendar days of the window
        window_start: First instant of the window
        window_end: End of the window
        now: Current instant, used for the "now" marker and today's column
        left_column_width: Width of the member/item column (defaults to 32)
        console: Console to print to (defaults to a new one)
    """
    header(team_name, "timeline")

    if console is None:
        console = Console()

    available_width = max(console.width - left_column_width, len(days))
    column_widths = _calculate_column_widths(len(days), available_width)
    total_cells = sum(column_widths)

    console.print(
        f"\n[bold]{datetime_to_display_date_full_str(window_start)} to "
        f"{datetime_to_display_date_full_str(window_end.subtract(days=1))}[/bold]\n"
    )
    console.print(_build_legend(workflow_states, enabled_state_ids))
    console.print()

    console.print(_build_date_header(days, column_widths, now, left_column_width))
    marker_row = _build_now_marker_row(
        window_start, window_end, now, total_cells, left_column_width
    )
    if marker_row is not None:
        console.print(marker_row)
    console.print(Text("─" * (left_column_width + total_cells), style="dim"))

    if not lanes:
        console.print("\n[dim]No team members found[/dim]\n")
        return

    for lane in lanes:
        console.print(_build_member_row(lane, column_widths, left_column_width))
        for bar in lane["bars"]:
            console.print(
                _build_bar_row(
                    bar,
                    column_widths,
                    window_start,
                    window_end,
                    workflow_states,
                    left_column_width,
                )
            )


def _calculate_column_widths(day_count: int, available_width: int) -> list[int]:
    """Split the available width evenly over the days, spreading the remainder."""
    if day_count == 0:
        return []
    base_width, remainder = divmod(available_width, day_count)
    return [
        max(base_width + (1 if index < remainder else 0), 1)
        for index in range(day_count)
    ]


def _column_of_cell(column_widths: Sequence[int], cell: int) -> int:
    boundary = 0
    for index, width in enumerate(column_widths):
        boundary += width
        if cell < boundary:
            return index
    return len(column_widths) - 1


def _fit(text: str, width: int) -> str:
    if len(text) > width:
        return text[: max(width - 1, 0)] + "…"
    return text.ljust(width)


def _build_legend(
    workflow_states: Sequence[WorkflowState], enabled_state_ids: set[str]
) -> Text:
    legend = Text(" ")
    for state in workflow_states:
        enabled = state["id"] in enabled_state_ids
        color = workflow_state_color(state)
        legend.append("● ", style=color if enabled else "grey42")
        legend.append(state["name"], style=color if enabled else "grey42 strike")
        if enabled:
            legend.append(" ✓", style=color)
        legend.append("   ")
    return legend


def _build_date_header(
    days: Sequence[pendulum.DateTime],
    column_widths: Sequence[int],
    now: pendulum.DateTime,
    left_column_width: int,
) -> Text:
    row = Text(" " * left_column_width)
    for index, (day, width) in enumerate(zip(days, column_widths)):
        label = datetime_to_display_date_str(day)
        if len(label) > width:
            label = day.in_tz("local").format("D")
        style = "bold blue" if is_today(day, now) else "grey62"
        if index % 2 == 1:
            style += " " + EMPTY_CELL_STYLE
        row.append(label[:width].center(width), style=style)
    return row


def _build_now_marker_row(
    window_start: pendulum.DateTime,
    window_end: pendulum.DateTime,
    now: pendulum.DateTime,
    total_cells: int,
    left_column_width: int,
) -> Optional[Text]:
    percentage = now_position(window_start, window_end, now)
    if percentage is None or total_cells == 0:
        return None
    cell = min(int(percentage / 100 * total_cells), total_cells - 1)
    row = Text(" " * (left_column_width + cell))
    row.append("▼", style="bold red")
    return row


def _build_member_row(
    lane: MemberLane, column_widths: Sequence[int], left_column_width: int
) -> Text:
    row = Text()
    name = lane["display_name"]
    count = lane["item_count"]
    noun = "issue" if count == 1 else "issues"

    row.append(f"{initials(name):>3} ", style=f"bold {string_to_color(name)}")
    row.append(
        _fit(f"{name} ({count} {noun})", left_column_width - 4), style="bold"
    )
    for index, width in enumerate(column_widths):
        row.append(" " * width, style=EMPTY_CELL_STYLE if index % 2 == 1 else "")
    return row


def _segment_at(
    segments: Sequence[StatusSegment], instant: pendulum.DateTime
) -> StatusSegment:
    for segment in segments:
        if segment["start_time"] <= instant < segment["end_time"]:
            return segment
    if instant < segments[0]["start_time"]:
        return segments[0]
    return segments[-1]


def _build_bar_row(
    bar: ItemBar,
    column_widths: Sequence[int],
    window_start: pendulum.DateTime,
    window_end: pendulum.DateTime,
    workflow_states: Sequence[WorkflowState],
    left_column_width: int,
) -> Text:
    item = bar["item"]
    estimate = f" ({item['estimate']:g})" if item["estimate"] is not None else ""
    row = Text()
    row.append(
        _fit(f"    {item['identifier']}{estimate} {item['title']}", left_column_width),
        style="grey70",
    )

    total_cells = sum(column_widths)
    position = bar["position"]
    first_cell = min(int(position["left"] / 100 * total_cells), total_cells - 1)
    last_cell = min(
        math.ceil((position["left"] + position["width"]) / 100 * total_cells),
        total_cells,
    )
    last_cell = max(last_cell, first_cell + 1)
    window_days = days_between(window_start, window_end)

    for cell in range(total_cells):
        column = _column_of_cell(column_widths, cell)
        empty_style = EMPTY_CELL_STYLE if column % 2 == 1 else ""
        if cell < first_cell or cell >= last_cell:
            row.append(" ", style=empty_style)
            continue

        instant = datetime_at_day_offset(
            window_start, (cell + 0.5) / total_cells * window_days
        )
        segment = _segment_at(bar["segments"], instant)
        color = color_for_state(
            segment["state_id"], segment["status_type"], workflow_states
        )
        row.append(BAR_CHAR, style=color)
    return row
