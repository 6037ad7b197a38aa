# SPDX-License-Identifier: MIT

from typing import Literal, Optional, TypedDict

import pendulum

from teamline.model.team import Team
from teamline.model.work_item import WorkItem

RangeSize = Literal["1w", "2w", "1m", "3m"]
Direction = Literal["earlier", "later"]
LoadStatus = Literal["ok", "error"]


class BarPosition(TypedDict):
    left: float
    width: float


class StatusSegment(TypedDict):
    state_id: str
    status_type: str
    start_time: pendulum.DateTime
    end_time: pendulum.DateTime
    left: float
    width: float


class ItemBar(TypedDict):
    item: WorkItem
    lifetime_start: pendulum.DateTime
    lifetime_end: pendulum.DateTime
    position: BarPosition
    segments: list[StatusSegment]


class MemberLane(TypedDict):
    member_id: str
    display_name: str
    item_count: int
    bars: list[ItemBar]


class LoadResult(TypedDict):
    status: LoadStatus
    team: Optional[Team]
    error: Optional[str]
