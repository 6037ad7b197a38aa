# SPDX-License-Identifier: MIT

from typing import Optional

from rich import print
from rich.padding import Padding

from teamline.view.state import get_show_header


def header(team_name: Optional[str], sub_header: Optional[str] = None) -> None:
    """Print the application header.

    Args:
        team_name: The name of the selected team, if any
        sub_header: Optional sub-header text to display
    """
    if not get_show_header():
        return

    print(Padding("[dark_orange]teamline[/dark_orange]", (1, 0, 0, 1)))
    if sub_header is not None:
        print(Padding(f"[sandy_brown]{sub_header}[/sandy_brown]", (0, 1)))
    if team_name is not None:
        print(Padding(f"[plum1]{team_name}[/plum1]", (0, 1)))
