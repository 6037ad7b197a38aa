# SPDX-License-Identifier: MIT

from typing import Optional


class TeamlineError(Exception):
    pass


class MissingApiKeyError(TeamlineError):
    def __init__(self, env_var: str) -> None:
        super().__init__(
            f"No Linear API key configured. Set {env_var} or run 'teamline config set --api-key'."
        )
        self.env_var = env_var


class TransportError(TeamlineError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteQueryError(TeamlineError):
    pass


class TeamNotFoundError(RemoteQueryError):
    def __init__(self, team_id: str) -> None:
        super().__init__(f"Team not found: {team_id}")
        self.team_id = team_id
