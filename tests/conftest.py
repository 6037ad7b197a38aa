"""Shared fixtures: a scripted tracker API and builders for model objects."""

# SPDX-License-Identifier: MIT

import asyncio
from pathlib import Path
from typing import Iterator, Optional, Union

import pendulum
import pytest

from teamline import configuration
from teamline.initialize import initialize
from teamline.model.team import RosterMember, TeamRoster, TeamSummary
from teamline.model.work_item import HistoryEntry, ItemPage, WorkItem
from teamline.model.workflow_state import StateRef, WorkflowState
from teamline.repository.configuration import CONFIGURATION_REPO

MONDAY = pendulum.datetime(2024, 1, 1, tz="UTC")

WORKFLOW_STATES: list[WorkflowState] = [
    {"id": "s-backlog", "name": "Backlog", "type": "backlog", "color": "#bec2c8", "position": 0},
    {"id": "s-todo", "name": "Todo", "type": "unstarted", "color": "#e2e2e2", "position": 1},
    {"id": "s-progress", "name": "In Progress", "type": "started", "color": "#f2c94c", "position": 2},
    {"id": "s-done", "name": "Done", "type": "completed", "color": "#5e6ad2", "position": 3},
    {"id": "s-canceled", "name": "Canceled", "type": "canceled", "color": "#95a2b3", "position": 4},
]


def state_ref(state_id: str) -> StateRef:
    for state in WORKFLOW_STATES:
        if state["id"] == state_id:
            return {"id": state["id"], "name": state["name"], "type": state["type"]}
    raise KeyError(state_id)


def make_item(
    item_id: str,
    state_id: str = "s-progress",
    created_at: pendulum.DateTime = MONDAY.subtract(days=3),
    start_date: Optional[pendulum.DateTime] = None,
    target_date: Optional[pendulum.DateTime] = None,
    estimate: Optional[float] = None,
    history: Optional[list[HistoryEntry]] = None,
) -> WorkItem:
    return {
        "id": item_id,
        "identifier": f"ENG-{item_id}",
        "title": f"Item {item_id}",
        "created_at": created_at,
        "start_date": start_date,
        "target_date": target_date,
        "state": state_ref(state_id),
        "estimate": estimate,
        "history": history if history is not None else [],
    }


def make_transition(
    created_at: pendulum.DateTime,
    to_state_id: Optional[str],
    from_state_id: Optional[str] = None,
    entry_id: Optional[str] = None,
) -> HistoryEntry:
    return {
        "id": entry_id or f"h-{created_at.isoformat()}-{to_state_id}",
        "created_at": created_at,
        "from_state": state_ref(from_state_id) if from_state_id else None,
        "to_state": state_ref(to_state_id) if to_state_id else None,
    }


PageScript = list[Union[ItemPage, Exception]]


class FakeTrackerApi:
    """Scripted TrackerApi that records calls and the peak number in flight."""

    def __init__(
        self,
        teams: Optional[list[TeamSummary]] = None,
        roster: Optional[TeamRoster] = None,
        pages: Optional[dict[str, PageScript]] = None,
        histories: Optional[dict[str, Union[list[HistoryEntry], Exception]]] = None,
        roster_error: Optional[Exception] = None,
        teams_error: Optional[Exception] = None,
    ) -> None:
        self.teams = teams if teams is not None else []
        self.roster = roster
        self.pages = pages if pages is not None else {}
        self.histories = histories if histories is not None else {}
        self.roster_error = roster_error
        self.teams_error = teams_error
        self.item_calls: list[tuple[str, Optional[str]]] = []
        self.history_calls: list[str] = []
        self.started_after: list[pendulum.DateTime] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _enter(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)

    def _exit(self) -> None:
        self.in_flight -= 1

    async def list_teams(self) -> list[TeamSummary]:
        if self.teams_error is not None:
            raise self.teams_error
        return self.teams

    async def get_team_roster(self, team_id: str) -> TeamRoster:
        if self.roster_error is not None:
            raise self.roster_error
        assert self.roster is not None
        return self.roster

    async def list_assigned_items(
        self,
        user_id: str,
        team_id: str,
        started_after: pendulum.DateTime,
        cursor: Optional[str] = None,
    ) -> ItemPage:
        self.item_calls.append((user_id, cursor))
        self.started_after.append(started_after)
        await self._enter()
        try:
            script = self.pages.get(user_id, [])
            page_index = 0 if cursor is None else int(cursor.rsplit("-", 1)[1])
            if page_index >= len(script):
                return {"items": [], "next_cursor": None}
            page = script[page_index]
            if isinstance(page, Exception):
                raise page
            return page
        finally:
            self._exit()

    async def get_item_history(self, item_id: str) -> list[HistoryEntry]:
        self.history_calls.append(item_id)
        await self._enter()
        try:
            history = self.histories.get(item_id, [])
            if isinstance(history, Exception):
                raise history
            return history
        finally:
            self._exit()


def page(user_id: str, index: int, items: list[WorkItem], last: bool = False) -> ItemPage:
    """A page whose cursor points at page ``index + 1`` of ``user_id``."""
    return {"items": items, "next_cursor": None if last else f"{user_id}-{index + 1}"}


def roster(members: list[RosterMember], team_id: str = "team-1") -> TeamRoster:
    return {
        "id": team_id,
        "name": "Engineering",
        "workflow_states": list(WORKFLOW_STATES),
        "members": members,
    }


def member(member_id: str, display_name: Optional[str] = None) -> RosterMember:
    return {"id": member_id, "name": f"user {member_id}", "display_name": display_name}


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the configuration at a fresh file under tmp_path."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr(configuration, "CONFIG_PATH", config_dir)
    monkeypatch.setattr(configuration, "APP_CONFIG_PATH", config_dir / "config.yaml")
    monkeypatch.setattr(CONFIGURATION_REPO, "_config", None)
    monkeypatch.setattr(CONFIGURATION_REPO, "is_dirty", False)
    initialize()
    yield config_dir / "config.yaml"
