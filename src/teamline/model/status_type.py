# SPDX-License-Identifier: MIT

from typing import Literal

StatusType = Literal["backlog", "unstarted", "started", "completed", "canceled", "triage"]

# Initial category assumed when no transition precedes a bar's start
DEFAULT_INITIAL_STATUS: StatusType = "backlog"

# Categories shown when a team is first loaded
DEFAULT_ENABLED_STATUS_TYPES: frozenset[str] = frozenset({"started", "completed"})
