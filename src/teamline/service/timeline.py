# SPDX-License-Identifier: MIT

import logging
from typing import Awaitable, Callable, Iterable, Optional, Sequence

import pendulum

from teamline import time
from teamline.errors import TeamlineError
from teamline.model.status_type import DEFAULT_ENABLED_STATUS_TYPES
from teamline.model.team import Member, RosterMember, Team, TeamSummary
from teamline.model.timeline import ItemBar, LoadResult, MemberLane
from teamline.model.work_item import HistoryEntry, ItemPage, WorkItem
from teamline.model.workflow_state import WorkflowState
from teamline.repository.tracker_api import TrackerApi
from teamline.service.batch import run_in_batches
from teamline.service.interval import map_interval
from teamline.service.pagination import fetch_all_pages, item_page_fetcher
from teamline.service.segments import reconstruct_segments

logger = logging.getLogger(__name__)

DEFAULT_MEMBER_BATCH_SIZE = 3
DEFAULT_HISTORY_BATCH_SIZE = 10


def sorted_workflow_states(workflow_states: Iterable[WorkflowState]) -> list[WorkflowState]:
    return sorted(workflow_states, key=lambda state: state["position"])


def default_enabled_state_ids(workflow_states: Iterable[WorkflowState]) -> set[str]:
    return {
        state["id"]
        for state in workflow_states
        if state["type"] in DEFAULT_ENABLED_STATUS_TYPES
    }


def toggle_state(enabled_state_ids: set[str], state_id: str) -> set[str]:
    toggled = set(enabled_state_ids)
    if state_id in toggled:
        toggled.remove(state_id)
    else:
        toggled.add(state_id)
    return toggled


def select_default_team(
    teams: Sequence[TeamSummary], preferred: Optional[str] = None
) -> Optional[TeamSummary]:
    """
    Pick the team to show first.

    A preferred id or name wins, then the first team whose name mentions
    engineering, then the first team.
    """
    if not teams:
        return None
    if preferred:
        for team in teams:
            if team["id"] == preferred or team["name"].lower() == preferred.lower():
                return team
    for team in teams:
        if "engineering" in team["name"].lower():
            return team
    return teams[0]


def started_after_for(
    window_start: pendulum.DateTime, lookback_days: int
) -> pendulum.DateTime:
    return window_start.subtract(days=lookback_days)


async def fetch_member_items(
    api: TrackerApi,
    member_id: str,
    team_id: str,
    started_after: pendulum.DateTime,
) -> list[WorkItem]:
    async def fetch(cursor: Optional[str]) -> ItemPage:
        return await api.list_assigned_items(member_id, team_id, started_after, cursor)

    return await fetch_all_pages(item_page_fetcher(fetch), f"member {member_id}")


async def load_team_timeline(
    api: TrackerApi,
    team_id: str,
    started_after: pendulum.DateTime,
    member_batch_size: int = DEFAULT_MEMBER_BATCH_SIZE,
) -> LoadResult:
    """
    First pipeline stage: the team roster and every member's work items.

    Items carry no history yet. Members are fetched ``member_batch_size`` at
    a time. Transport and query errors abort the stage and are reported in
    the result instead of being raised.
    """
    try:
        roster = await api.get_team_roster(team_id)

        def member_task(roster_member: RosterMember) -> Callable[[], Awaitable[Member]]:
            async def task() -> Member:
                work_items = await fetch_member_items(
                    api, roster_member["id"], team_id, started_after
                )
                return {
                    "id": roster_member["id"],
                    "name": roster_member["name"],
                    "display_name": roster_member["display_name"],
                    "work_items": work_items,
                }

            return task

        def empty_member(index: int, error: BaseException) -> Member:
            roster_member = roster["members"][index]
            return {
                "id": roster_member["id"],
                "name": roster_member["name"],
                "display_name": roster_member["display_name"],
                "work_items": [],
            }

        members = await run_in_batches(
            [member_task(member) for member in roster["members"]],
            member_batch_size,
            empty_member,
        )
    except TeamlineError as e:
        logger.error("Failed to load team timeline for %s: %s", team_id, e)
        return {"status": "error", "team": None, "error": str(e)}

    team: Team = {
        "id": roster["id"],
        "name": roster["name"],
        "workflow_states": roster["workflow_states"],
        "members": members,
    }
    logger.info(
        "Loaded %d member(s) and %d item(s) for team %s",
        len(members),
        sum(len(member["work_items"]) for member in members),
        team["name"],
    )
    return {"status": "ok", "team": team, "error": None}


async def fetch_history_map(
    api: TrackerApi,
    item_ids: Sequence[str],
    history_batch_size: int = DEFAULT_HISTORY_BATCH_SIZE,
) -> dict[str, list[HistoryEntry]]:
    """Fetch the history of each distinct item; failures become empty histories."""
    unique_ids = list(dict.fromkeys(item_ids))

    def history_task(item_id: str) -> Callable[[], Awaitable[list[HistoryEntry]]]:
        async def task() -> list[HistoryEntry]:
            return await api.get_item_history(item_id)

        return task

    histories = await run_in_batches(
        [history_task(item_id) for item_id in unique_ids],
        history_batch_size,
        lambda index, error: [],
    )

    history_map: dict[str, list[HistoryEntry]] = {}
    for item_id, history in zip(unique_ids, histories):
        history_map[item_id] = history
    return history_map


async def enrich_team_with_history(
    api: TrackerApi,
    team: Team,
    history_batch_size: int = DEFAULT_HISTORY_BATCH_SIZE,
) -> Team:
    """
    Second pipeline stage: a new team snapshot whose items carry their history.

    The input snapshot is left untouched.
    """
    item_ids = [
        item["id"] for member in team["members"] for item in member["work_items"]
    ]
    history_map = await fetch_history_map(api, item_ids, history_batch_size)

    return {
        "id": team["id"],
        "name": team["name"],
        "workflow_states": list(team["workflow_states"]),
        "members": [
            {
                "id": member["id"],
                "name": member["name"],
                "display_name": member["display_name"],
                "work_items": [
                    _with_history(item, history_map.get(item["id"], []))
                    for item in member["work_items"]
                ],
            }
            for member in team["members"]
        ],
    }


def _with_history(item: WorkItem, history: list[HistoryEntry]) -> WorkItem:
    enriched = item.copy()
    enriched["history"] = history
    return enriched


def item_lifetime(
    item: WorkItem, now: pendulum.DateTime
) -> tuple[pendulum.DateTime, pendulum.DateTime]:
    """Bar start is the start date (or creation), open items end at ``now``."""
    start = item["start_date"] or item["created_at"]
    end = item["target_date"] or now
    return start, end


def item_sort_key(item: WorkItem) -> pendulum.DateTime:
    return item["target_date"] or item["start_date"] or item["created_at"]


def build_item_bar(
    item: WorkItem,
    window_start: pendulum.DateTime,
    window_end: pendulum.DateTime,
    now: pendulum.DateTime,
) -> Optional[ItemBar]:
    lifetime_start, lifetime_end = item_lifetime(item, now)
    position = map_interval(lifetime_start, lifetime_end, window_start, window_end)
    if position is None:
        return None

    segments = reconstruct_segments(
        item["history"],
        item["state"]["id"],
        item["state"]["type"],
        item["created_at"],
        lifetime_start,
        lifetime_end,
    )
    return {
        "item": item,
        "lifetime_start": lifetime_start,
        "lifetime_end": lifetime_end,
        "position": position,
        "segments": segments,
    }


def build_member_lane(
    member: Member,
    window_start: pendulum.DateTime,
    window_end: pendulum.DateTime,
    enabled_state_ids: set[str],
    workflow_states: Sequence[WorkflowState],
    now: pendulum.DateTime,
) -> MemberLane:
    """
    Compute the bars of one member's row.

    Items are filtered by status category rather than state id, since a
    member's items may belong to another team's workflow. ``item_count``
    counts every filtered item, ``bars`` only those visible in the window.
    """
    enabled_types = {
        state["type"] for state in workflow_states if state["id"] in enabled_state_ids
    }
    filtered_items = sorted(
        (item for item in member["work_items"] if item["state"]["type"] in enabled_types),
        key=item_sort_key,
    )

    bars: list[ItemBar] = []
    for item in filtered_items:
        bar = build_item_bar(item, window_start, window_end, now)
        if bar is not None:
            bars.append(bar)

    return {
        "member_id": member["id"],
        "display_name": member["display_name"] or member["name"],
        "item_count": len(filtered_items),
        "bars": bars,
    }


def build_lanes(
    team: Team,
    window_start: pendulum.DateTime,
    window_end: pendulum.DateTime,
    enabled_state_ids: set[str],
    now: pendulum.DateTime,
) -> list[MemberLane]:
    return [
        build_member_lane(
            member,
            window_start,
            window_end,
            enabled_state_ids,
            team["workflow_states"],
            now,
        )
        for member in team["members"]
    ]


class TimelineSession:
    """
    Holds the last successfully loaded team and the user's state filter.

    A failed refresh records its error but keeps the previously loaded team,
    and a successful one clears the error.
    """

    def __init__(
        self,
        api: TrackerApi,
        member_batch_size: int = DEFAULT_MEMBER_BATCH_SIZE,
        history_batch_size: int = DEFAULT_HISTORY_BATCH_SIZE,
        started_after_lookback_days: int = 7,
    ) -> None:
        self.api = api
        self.member_batch_size = member_batch_size
        self.history_batch_size = history_batch_size
        self.started_after_lookback_days = started_after_lookback_days
        self.team: Optional[Team] = None
        self.error: Optional[str] = None
        self.workflow_states: list[WorkflowState] = []
        self.enabled_state_ids: set[str] = set()

    async def list_teams(self) -> list[TeamSummary]:
        try:
            teams = await self.api.list_teams()
        except TeamlineError as e:
            logger.error("Failed to fetch teams: %s", e)
            self.error = str(e)
            return []
        self.error = None
        return teams

    async def refresh(
        self,
        team_id: str,
        window_start: pendulum.DateTime,
        with_history: bool = True,
        on_snapshot: Optional[Callable[[Team], None]] = None,
    ) -> LoadResult:
        """
        Run both pipeline stages for a team.

        ``on_snapshot`` is called with the stage-one snapshot and again with
        the enriched one, so a caller can draw the bars before histories
        arrive.
        """
        started_after = started_after_for(window_start, self.started_after_lookback_days)
        result = await load_team_timeline(
            self.api, team_id, started_after, self.member_batch_size
        )
        if result["status"] == "error" or result["team"] is None:
            self.error = result["error"]
            return result

        team = result["team"]
        self.error = None
        self.__set_team(team)
        if on_snapshot is not None:
            on_snapshot(team)

        if not with_history:
            return result

        enriched = await enrich_team_with_history(
            self.api, team, self.history_batch_size
        )
        self.team = enriched
        if on_snapshot is not None:
            on_snapshot(enriched)
        return {"status": "ok", "team": enriched, "error": None}

    def toggle_state(self, state_id: str) -> None:
        self.enabled_state_ids = toggle_state(self.enabled_state_ids, state_id)

    def lanes(
        self,
        window_start: pendulum.DateTime,
        window_end: pendulum.DateTime,
        now: Optional[pendulum.DateTime] = None,
    ) -> list[MemberLane]:
        if self.team is None:
            return []
        return build_lanes(
            self.team,
            window_start,
            window_end,
            self.enabled_state_ids,
            now if now is not None else time.now_utc(),
        )

    def __set_team(self, team: Team) -> None:
        self.team = team
        self.workflow_states = sorted_workflow_states(team["workflow_states"])
        self.enabled_state_ids = default_enabled_state_ids(team["workflow_states"])
