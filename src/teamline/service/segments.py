# SPDX-License-Identifier: MIT

from typing import Optional, Sequence

import pendulum

from teamline.model.status_type import DEFAULT_INITIAL_STATUS
from teamline.model.timeline import StatusSegment
from teamline.model.work_item import HistoryEntry


def _full_segment(
    state_id: str,
    status_type: str,
    lifetime_start: pendulum.DateTime,
    lifetime_end: pendulum.DateTime,
) -> list[StatusSegment]:
    return [
        {
            "state_id": state_id,
            "status_type": status_type,
            "start_time": lifetime_start,
            "end_time": lifetime_end,
            "left": 0.0,
            "width": 100.0,
        }
    ]


def _segment(
    state_id: str,
    status_type: str,
    segment_start: pendulum.DateTime,
    segment_end: pendulum.DateTime,
    lifetime_start: pendulum.DateTime,
    total_seconds: float,
) -> Optional[StatusSegment]:
    width = (segment_end - segment_start).total_seconds() / total_seconds * 100
    if width <= 0:
        return None
    left = (segment_start - lifetime_start).total_seconds() / total_seconds * 100
    return {
        "state_id": state_id,
        "status_type": status_type,
        "start_time": segment_start,
        "end_time": segment_end,
        "left": left,
        "width": width,
    }


def reconstruct_segments(
    history: Sequence[HistoryEntry],
    current_state_id: str,
    current_status_type: str,
    item_created_at: pendulum.DateTime,
    lifetime_start: pendulum.DateTime,
    lifetime_end: pendulum.DateTime,
) -> list[StatusSegment]:
    """
    Split a work item's bar into contiguous segments, one per workflow state.

    The transition log is replayed in timestamp order. The state active at
    ``lifetime_start`` comes from the last transition at or before it (or the
    backlog category when there is none), each transition strictly inside the
    lifetime closes the running segment, and a trailing segment runs to
    ``lifetime_end``. Percentages are relative to the elapsed lifetime.

    The log is assumed to be complete and well ordered. Missing or reordered
    entries from the remote source yield fewer, merged segments rather than
    an error.

    Args:
        history: Transitions in fetch order
        current_state_id: The item's current workflow state id
        current_status_type: The item's current status category
        item_created_at: When the item was created
        lifetime_start: Start of the bar
        lifetime_end: End of the bar (already capped at "now" for open items)

    Returns:
        A non-empty list of segments covering the whole bar without gaps
    """
    total_seconds = (lifetime_end - lifetime_start).total_seconds()
    if total_seconds <= 0:
        return _full_segment(
            current_state_id, current_status_type, lifetime_start, lifetime_end
        )

    # sorted() is stable, so transitions sharing a timestamp keep fetch order
    transitions = sorted(
        (entry for entry in history if entry["to_state"] is not None),
        key=lambda entry: entry["created_at"],
    )

    if not transitions:
        return _full_segment(
            current_state_id, current_status_type, lifetime_start, lifetime_end
        )

    active_state_id = ""
    active_status_type: str = DEFAULT_INITIAL_STATUS
    for entry in transitions:
        to_state = entry["to_state"]
        assert to_state is not None
        if entry["created_at"] <= lifetime_start:
            active_state_id = to_state["id"]
            active_status_type = to_state["type"]

    segments: list[StatusSegment] = []
    boundary = lifetime_start

    for entry in transitions:
        to_state = entry["to_state"]
        assert to_state is not None
        changed_at = entry["created_at"]
        if changed_at <= lifetime_start:
            continue
        if changed_at >= lifetime_end:
            break

        segment = _segment(
            active_state_id,
            active_status_type,
            boundary,
            changed_at,
            lifetime_start,
            total_seconds,
        )
        if segment is not None:
            segments.append(segment)

        boundary = changed_at
        active_state_id = to_state["id"]
        active_status_type = to_state["type"]

    trailing = _segment(
        active_state_id or current_state_id,
        active_status_type,
        boundary,
        lifetime_end,
        lifetime_start,
        total_seconds,
    )
    if trailing is not None:
        segments.append(trailing)

    if not segments:
        return _full_segment(
            active_state_id or current_state_id,
            active_status_type,
            lifetime_start,
            lifetime_end,
        )

    return segments
