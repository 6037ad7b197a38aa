# SPDX-License-Identifier: MIT

import asyncio
import contextlib
import functools
import logging
import os
from typing import Any, Iterator, Optional, cast

import pendulum
import requests

from teamline import time
from teamline.configuration import Configuration
from teamline.errors import (
    MissingApiKeyError,
    RemoteQueryError,
    TeamNotFoundError,
    TransportError,
)
from teamline.model.status_type import StatusType
from teamline.model.team import RosterMember, TeamRoster, TeamSummary
from teamline.model.work_item import HistoryEntry, ItemPage, WorkItem
from teamline.model.workflow_state import StateRef, WorkflowState

logger = logging.getLogger(__name__)

TEAMS_QUERY = """
  query {
    teams {
      nodes {
        id
        name
      }
    }
  }
"""

TEAM_ROSTER_QUERY = """
  query GetTeamMembers($teamId: String!) {
    team(id: $teamId) {
      id
      name
      states {
        nodes {
          id
          name
          type
          color
          position
        }
      }
      members {
        nodes {
          id
          name
          displayName
        }
      }
    }
  }
"""

USER_ITEMS_QUERY = """
  query GetUserIssues(
    $userId: String!
    $teamIdFilter: ID!
    $startedAfter: DateTimeOrDuration!
    $first: Int!
    $after: String
  ) {
    user(id: $userId) {
      assignedIssues(
        first: $first
        after: $after
        filter: {
          team: { id: { eq: $teamIdFilter } }
          state: { type: { in: ["started", "completed"] } }
          startedAt: { gte: $startedAfter }
        }
      ) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          id
          identifier
          title
          dueDate
          createdAt
          startedAt
          completedAt
          estimate
          state {
            id
            name
            type
          }
        }
      }
    }
  }
"""

ITEM_HISTORY_QUERY = """
  query GetIssueHistory($issueId: String!, $first: Int!) {
    issue(id: $issueId) {
      id
      history(first: $first) {
        nodes {
          id
          createdAt
          fromState {
            id
            name
            type
          }
          toState {
            id
            name
            type
          }
        }
      }
    }
  }
"""


@contextlib.contextmanager
def unexpected_response(query_name: str) -> Iterator[None]:
    """Report a response that does not have the queried shape as a query error."""
    try:
        yield
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise RemoteQueryError(f"Unexpected {query_name} response: {e!r}") from e


def resolve_api_key(config: Configuration) -> str:
    """The key from the configured environment variable, else the stored key."""
    api_key = os.getenv(config["api_key_env_var"]) or config["api_key"]
    if not api_key:
        raise MissingApiKeyError(config["api_key_env_var"])
    return api_key


class LinearRepository:
    def __init__(
        self,
        api_key: str,
        api_url: str,
        request_timeout: float = 30,
        issues_page_size: int = 50,
        history_page_size: int = 20,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise MissingApiKeyError("api_key")
        self.api_key = api_key
        self.api_url = api_url
        self.request_timeout = request_timeout
        self.issues_page_size = issues_page_size
        self.history_page_size = history_page_size
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_config(
        cls, config: Configuration, session: Optional[requests.Session] = None
    ) -> "LinearRepository":
        return cls(
            api_key=resolve_api_key(config),
            api_url=config["api_url"],
            request_timeout=config["request_timeout"],
            issues_page_size=config["issues_page_size"],
            history_page_size=config["history_page_size"],
            session=session,
        )

    async def list_teams(self) -> list[TeamSummary]:
        data = await self.__execute(TEAMS_QUERY)
        with unexpected_response("teams"):
            nodes = (data.get("teams") or {}).get("nodes") or []
            return [{"id": node["id"], "name": node["name"]} for node in nodes]

    async def get_team_roster(self, team_id: str) -> TeamRoster:
        data = await self.__execute(TEAM_ROSTER_QUERY, {"teamId": team_id})
        team = data.get("team")
        if not team:
            raise TeamNotFoundError(team_id)

        with unexpected_response("team roster"):
            workflow_states = [
                self.__convert_workflow_state(node)
                for node in (team.get("states") or {}).get("nodes") or []
            ]
            members: list[RosterMember] = [
                {
                    "id": node["id"],
                    "name": node["name"],
                    "display_name": node.get("displayName"),
                }
                for node in (team.get("members") or {}).get("nodes") or []
            ]
            return {
                "id": team["id"],
                "name": team["name"],
                "workflow_states": workflow_states,
                "members": members,
            }

    async def list_assigned_items(
        self,
        user_id: str,
        team_id: str,
        started_after: pendulum.DateTime,
        cursor: Optional[str] = None,
    ) -> ItemPage:
        data = await self.__execute(
            USER_ITEMS_QUERY,
            {
                "userId": user_id,
                "teamIdFilter": team_id,
                "startedAfter": time.datetime_to_iso_str(started_after.in_tz("UTC")),
                "first": self.issues_page_size,
                "after": cursor,
            },
        )
        with unexpected_response("assigned issues"):
            connection = (data.get("user") or {}).get("assignedIssues") or {}
            page_info = connection.get("pageInfo") or {}

            items = [
                self.__convert_work_item(node) for node in connection.get("nodes") or []
            ]
            next_cursor = (
                page_info.get("endCursor") if page_info.get("hasNextPage") else None
            )
            return {"items": items, "next_cursor": next_cursor}

    async def get_item_history(self, item_id: str) -> list[HistoryEntry]:
        data = await self.__execute(
            ITEM_HISTORY_QUERY, {"issueId": item_id, "first": self.history_page_size}
        )
        with unexpected_response("issue history"):
            nodes = ((data.get("issue") or {}).get("history") or {}).get("nodes") or []
            return [self.__convert_history_entry(node) for node in nodes]

    async def __execute(
        self, query: str, variables: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(self.__post, query, variables)
        )

    def __post(
        self, query: str, variables: Optional[dict[str, Any]]
    ) -> dict[str, Any]:
        try:
            response = self.session.post(
                self.api_url,
                json={"query": query, "variables": variables},
                headers={
                    "Content-Type": "application/json",
                    "Authorization": self.api_key,
                },
                timeout=self.request_timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Request to {self.api_url} failed: {e}") from e

        if not response.ok:
            raise TransportError(
                f"HTTP error! status: {response.status_code}", response.status_code
            )

        try:
            result = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON response: {e}") from e

        errors = result.get("errors")
        if errors:
            message = (errors[0] or {}).get("message") or "GraphQL error"
            raise RemoteQueryError(message)

        return cast(dict[str, Any], result.get("data") or {})

    def __convert_state_ref(self, node: Optional[dict[str, Any]]) -> Optional[StateRef]:
        if node is None:
            return None
        return {"id": node["id"], "name": node["name"], "type": node["type"]}

    def __convert_workflow_state(self, node: dict[str, Any]) -> WorkflowState:
        return {
            "id": node["id"],
            "name": node["name"],
            "type": cast(StatusType, node["type"]),
            "color": node.get("color") or "",
            "position": float(node.get("position") or 0),
        }

    def __convert_work_item(self, node: dict[str, Any]) -> WorkItem:
        state = self.__convert_state_ref(node["state"])
        assert state is not None

        # Completed items end at completion (or due date), open ones are
        # capped at "now" when positioned
        target_date = None
        if state["type"] == "completed":
            target_date = time.datetime_from_str_optional(
                node.get("completedAt") or node.get("dueDate")
            )

        estimate = node.get("estimate")
        return {
            "id": node["id"],
            "identifier": node["identifier"],
            "title": node["title"],
            "created_at": time.datetime_from_str(node["createdAt"]),
            "start_date": time.datetime_from_str_optional(node.get("startedAt")),
            "target_date": target_date,
            "state": state,
            "estimate": float(estimate) if estimate is not None else None,
            "history": [],
        }

    def __convert_history_entry(self, node: dict[str, Any]) -> HistoryEntry:
        return {
            "id": node["id"],
            "created_at": time.datetime_from_str(node["createdAt"]),
            "from_state": self.__convert_state_ref(node.get("fromState")),
            "to_state": self.__convert_state_ref(node.get("toState")),
        }
