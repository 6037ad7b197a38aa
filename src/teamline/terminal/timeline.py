# SPDX-License-Identifier: MIT

import asyncio
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.padding import Padding

from teamline import time
from teamline.configuration import Configuration
from teamline.errors import MissingApiKeyError
from teamline.model.team import TeamSummary
from teamline.model.workflow_state import WorkflowState
from teamline.repository.configuration import CONFIGURATION_REPO
from teamline.repository.linear import LinearRepository
from teamline.repository.tracker_api import TrackerApi
from teamline.service.date_range import (
    generate_window,
    shift_window,
    start_of_week,
    window_end,
)
from teamline.service.timeline import TimelineSession, select_default_team
from teamline.terminal.parse import parse_date, parse_direction, parse_range_size
from teamline.view.teams import teams_view
from teamline.view.timeline import timeline_view

console = Console()


def create_api(config: Configuration) -> TrackerApi:
    """Build the Linear client, exiting with a message when no key is configured."""
    try:
        return LinearRepository.from_config(config)
    except MissingApiKeyError as e:
        _error_banner(str(e))
        raise typer.Exit(code=1)


def create_session(config: Configuration) -> TimelineSession:
    return TimelineSession(
        create_api(config),
        member_batch_size=config["member_batch_size"],
        history_batch_size=config["history_batch_size"],
        started_after_lookback_days=config["started_after_lookback_days"],
    )


def _error_banner(message: str) -> None:
    console.print(Padding(f"[bold white on red] {message} [/bold white on red]", (1, 1)))


def resolve_enabled_states(
    workflow_states: list[WorkflowState], requested: list[str]
) -> set[str]:
    """Map state names or ids to ids; unknown names are rejected."""
    enabled: set[str] = set()
    for value in requested:
        matches = [
            state["id"]
            for state in workflow_states
            if state["id"] == value or state["name"].lower() == value.lower()
        ]
        if not matches:
            names = ", ".join(state["name"] for state in workflow_states)
            raise typer.BadParameter(f"Unknown state '{value}'. Available: {names}")
        enabled.update(matches)
    return enabled


def teams() -> None:
    """List the teams available to the configured API key."""
    config = CONFIGURATION_REPO.get_config()
    session = create_session(config)

    team_list = asyncio.run(session.list_teams())
    if session.error is not None:
        _error_banner(session.error)
        raise typer.Exit(code=1)

    selected = select_default_team(team_list, config.get("default_team"))
    teams_view(team_list, selected["id"] if selected is not None else None)


def timeline(
    team: Annotated[
        Optional[str],
        typer.Option("--team", "-t", help="Team id or name (defaults to the configured team)"),
    ] = None,
    start: Annotated[
        Optional[pendulum.DateTime],
        typer.Option(
            "--start",
            "-s",
            parser=parse_date,
            help="First day of the window (YYYY-MM-DD, today, yesterday, tomorrow, or day offset like -7). Defaults to the start of this week",
        ),
    ] = None,
    range_size: Annotated[
        Optional[str],
        typer.Option("--range", "-r", help="Window size: 1w, 2w, 1m or 3m"),
    ] = None,
    shift: Annotated[
        Optional[str],
        typer.Option("--shift", help="Page the window: earlier or later"),
    ] = None,
    pages: Annotated[
        int,
        typer.Option("--pages", "-p", min=1, help="How many windows to page with --shift"),
    ] = 1,
    states: Annotated[
        Optional[list[str]],
        typer.Option(
            "--state",
            help="Show items in these workflow states (name or id). Accepts multiple inputs",
        ),
    ] = None,
    toggles: Annotated[
        Optional[list[str]],
        typer.Option(
            "--toggle",
            "-x",
            help="Toggle workflow states (name or id) on or off, starting from the shown ones. Accepts multiple inputs",
        ),
    ] = None,
    no_history: Annotated[
        bool,
        typer.Option("--no-history", help="Skip status history, color bars by current state"),
    ] = False,
) -> None:
    """Show each team member's work items on a timeline."""
    config = CONFIGURATION_REPO.get_config()

    size = parse_range_size(range_size) or config["default_range_size"]
    direction = parse_direction(shift)

    anchor = start if start is not None else start_of_week(pendulum.now("local"))
    if direction is not None:
        for _ in range(pages):
            anchor = shift_window(anchor, size, direction)

    session = create_session(config)

    async def load() -> Optional[TeamSummary]:
        team_list = await session.list_teams()
        if session.error is not None:
            return None
        selected = select_default_team(team_list, team or config.get("default_team"))
        if selected is None:
            return None
        if team is not None and selected["id"] != team and selected["name"].lower() != team.lower():
            session.error = f"Team not found: {team}"
            return None
        await session.refresh(selected["id"], anchor, with_history=not no_history)
        return selected

    selected = asyncio.run(load())

    if session.error is not None:
        _error_banner(session.error)
        raise typer.Exit(code=1)
    if selected is None or session.team is None:
        console.print("\n[dim]No teams found[/dim]")
        console.print("[dim]Make sure your API key has access to at least one team[/dim]\n")
        raise typer.Exit(code=1)

    if states:
        session.enabled_state_ids = resolve_enabled_states(session.workflow_states, states)
    for state_id in sorted(resolve_enabled_states(session.workflow_states, toggles or [])):
        session.toggle_state(state_id)

    now = time.now_utc()
    end = window_end(anchor, size)
    timeline_view(
        session.team["name"],
        session.lanes(anchor, end, now),
        session.workflow_states,
        session.enabled_state_ids,
        generate_window(anchor, size),
        anchor,
        end,
        now,
    )
