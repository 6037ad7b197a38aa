# SPDX-License-Identifier: MIT

from typing import Optional, Protocol

import pendulum

from teamline.model.team import TeamRoster, TeamSummary
from teamline.model.work_item import HistoryEntry, ItemPage


class TrackerApi(Protocol):
    """Remote operations the timeline pipeline depends on. Each may raise."""

    async def list_teams(self) -> list[TeamSummary]: ...

    async def get_team_roster(self, team_id: str) -> TeamRoster: ...

    async def list_assigned_items(
        self,
        user_id: str,
        team_id: str,
        started_after: pendulum.DateTime,
        cursor: Optional[str] = None,
    ) -> ItemPage: ...

    async def get_item_history(self, item_id: str) -> list[HistoryEntry]: ...
