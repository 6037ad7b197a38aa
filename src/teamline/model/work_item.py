# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import pendulum

from teamline.model.workflow_state import StateRef


class HistoryEntry(TypedDict):
    id: str
    created_at: pendulum.DateTime
    from_state: Optional[StateRef]
    to_state: Optional[StateRef]


class WorkItem(TypedDict):
    id: str
    identifier: str
    title: str
    created_at: pendulum.DateTime
    start_date: Optional[pendulum.DateTime]
    # Only set for items in the "completed" category, open items end at "now"
    target_date: Optional[pendulum.DateTime]
    state: StateRef
    estimate: Optional[float]
    history: list[HistoryEntry]


class ItemPage(TypedDict):
    items: list[WorkItem]
    next_cursor: Optional[str]
