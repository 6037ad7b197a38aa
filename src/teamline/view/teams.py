# SPDX-License-Identifier: MIT

from typing import Optional

from rich.console import Console
from rich.table import Table

from teamline.model.team import TeamSummary
from teamline.view.header import header


def teams_view(teams: list[TeamSummary], selected_id: Optional[str] = None) -> None:
    header(None, "teams")

    console = Console()
    if not teams:
        console.print("\n[dim]No teams found[/dim]")
        console.print("[dim]Make sure your API key has access to at least one team[/dim]\n")
        return

    table = Table(box=None, padding=(0, 1, 0, 1))
    table.add_column("", style="bold green")
    table.add_column("Name", style="cyan")
    table.add_column("ID", style="dim")
    for team in teams:
        marker = "●" if team["id"] == selected_id else ""
        table.add_row(marker, team["name"], team["id"])
    console.print(table)
