# SPDX-License-Identifier: MIT

import asyncio
from typing import Any, Optional

import pendulum
import pytest
import requests

from teamline.configuration import get_default_configuration
from teamline.errors import (
    MissingApiKeyError,
    RemoteQueryError,
    TeamNotFoundError,
    TransportError,
)
from teamline.repository.linear import LinearRepository, resolve_api_key
from teamline.service.timeline import load_team_timeline


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, invalid_json: bool = False) -> None:
        self.payload = payload
        self.status_code = status_code
        self.ok = status_code < 400
        self.invalid_json = invalid_json

    def json(self) -> Any:
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []

    def post(self, url: str, json: Any = None, headers: Any = None, timeout: Any = None) -> FakeResponse:
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_repository(*responses: Any) -> tuple[LinearRepository, FakeSession]:
    session = FakeSession(*responses)
    repository = LinearRepository(
        "lin_api_test",
        "https://linear.test/graphql",
        request_timeout=5,
        issues_page_size=2,
        history_page_size=20,
        session=session,  # type: ignore[arg-type]
    )
    return repository, session


def data(payload: dict[str, Any]) -> FakeResponse:
    return FakeResponse({"data": payload})


def issue_node(
    issue_id: str,
    state_type: str,
    completed_at: Optional[str] = None,
    due_date: Optional[str] = None,
    estimate: Optional[int] = None,
) -> dict[str, Any]:
    return {
        "id": issue_id,
        "identifier": f"ENG-{issue_id}",
        "title": f"Issue {issue_id}",
        "dueDate": due_date,
        "createdAt": "2024-01-01T09:00:00.000Z",
        "startedAt": "2024-01-02T10:00:00.000Z",
        "completedAt": completed_at,
        "estimate": estimate,
        "state": {"id": f"s-{state_type}", "name": state_type.title(), "type": state_type},
    }


def test_list_teams_sends_authorized_request() -> None:
    repository, session = make_repository(
        data({"teams": {"nodes": [{"id": "t1", "name": "Engineering"}]}})
    )

    teams = asyncio.run(repository.list_teams())

    assert teams == [{"id": "t1", "name": "Engineering"}]
    request = session.requests[0]
    assert request["url"] == "https://linear.test/graphql"
    assert request["headers"]["Authorization"] == "lin_api_test"
    assert request["headers"]["Content-Type"] == "application/json"
    assert request["timeout"] == 5
    assert "teams" in request["json"]["query"]


def test_get_team_roster() -> None:
    repository, session = make_repository(
        data(
            {
                "team": {
                    "id": "t1",
                    "name": "Engineering",
                    "states": {
                        "nodes": [
                            {"id": "s1", "name": "Todo", "type": "unstarted", "color": "#e2e2e2", "position": 1},
                            {"id": "s2", "name": "Done", "type": "completed", "color": None, "position": 2.5},
                        ]
                    },
                    "members": {
                        "nodes": [
                            {"id": "u1", "name": "Ada Lovelace", "displayName": "ada"},
                            {"id": "u2", "name": "Grace Hopper"},
                        ]
                    },
                }
            }
        )
    )

    team = asyncio.run(repository.get_team_roster("t1"))

    assert session.requests[0]["json"]["variables"] == {"teamId": "t1"}
    assert team["workflow_states"][1] == {
        "id": "s2",
        "name": "Done",
        "type": "completed",
        "color": "",
        "position": 2.5,
    }
    assert team["members"] == [
        {"id": "u1", "name": "Ada Lovelace", "display_name": "ada"},
        {"id": "u2", "name": "Grace Hopper", "display_name": None},
    ]


def test_missing_team_raises() -> None:
    repository, _ = make_repository(data({"team": None}))

    with pytest.raises(TeamNotFoundError):
        asyncio.run(repository.get_team_roster("nope"))


def test_malformed_roster_is_a_query_error() -> None:
    repository, _ = make_repository(
        data({"team": {"id": "t1", "members": {"nodes": [{"id": "u1"}]}}})
    )

    with pytest.raises(RemoteQueryError, match="team roster"):
        asyncio.run(repository.get_team_roster("t1"))


def test_malformed_issue_node_is_a_query_error() -> None:
    node = issue_node("1", "started")
    del node["createdAt"]
    repository, _ = make_repository(
        data({"user": {"assignedIssues": {"pageInfo": {}, "nodes": [node]}}})
    )

    with pytest.raises(RemoteQueryError, match="assigned issues"):
        asyncio.run(
            repository.list_assigned_items(
                "u1", "t1", pendulum.datetime(2024, 1, 1, tz="UTC")
            )
        )


def test_malformed_roster_fails_the_load() -> None:
    repository, _ = make_repository(data({"team": {"id": "t1"}}))

    result = asyncio.run(
        load_team_timeline(repository, "t1", pendulum.datetime(2024, 1, 1, tz="UTC"))
    )

    assert result["status"] == "error"
    assert result["team"] is None
    assert "team roster" in (result["error"] or "")


def test_list_assigned_items_maps_nodes_and_cursor() -> None:
    repository, session = make_repository(
        data(
            {
                "user": {
                    "assignedIssues": {
                        "pageInfo": {"hasNextPage": True, "endCursor": "cursor-2"},
                        "nodes": [
                            issue_node("1", "completed", completed_at="2024-01-04T12:00:00.000Z", estimate=3),
                            issue_node("2", "started", due_date="2024-01-10"),
                        ],
                    }
                }
            }
        )
    )
    started_after = pendulum.datetime(2023, 12, 25, tz="UTC")

    page = asyncio.run(repository.list_assigned_items("u1", "t1", started_after, "cursor-1"))

    variables = session.requests[0]["json"]["variables"]
    assert variables["userId"] == "u1"
    assert variables["teamIdFilter"] == "t1"
    assert variables["first"] == 2
    assert variables["after"] == "cursor-1"
    assert variables["startedAfter"].startswith("2023-12-25T00:00:00")

    assert page["next_cursor"] == "cursor-2"
    completed, started = page["items"]
    assert completed["target_date"] == pendulum.datetime(2024, 1, 4, 12, tz="UTC")
    assert completed["estimate"] == 3.0
    assert completed["start_date"] == pendulum.datetime(2024, 1, 2, 10, tz="UTC")
    assert completed["history"] == []
    # Open items have no end, even with a due date
    assert started["target_date"] is None
    assert started["estimate"] is None


def test_last_page_has_no_cursor() -> None:
    repository, _ = make_repository(
        data(
            {
                "user": {
                    "assignedIssues": {
                        "pageInfo": {"hasNextPage": False, "endCursor": "cursor-9"},
                        "nodes": [],
                    }
                }
            }
        )
    )

    page = asyncio.run(
        repository.list_assigned_items("u1", "t1", pendulum.datetime(2024, 1, 1, tz="UTC"))
    )

    assert page == {"items": [], "next_cursor": None}


def test_get_item_history() -> None:
    repository, session = make_repository(
        data(
            {
                "issue": {
                    "id": "1",
                    "history": {
                        "nodes": [
                            {
                                "id": "h1",
                                "createdAt": "2024-01-02T10:00:00.000Z",
                                "fromState": {"id": "s1", "name": "Todo", "type": "unstarted"},
                                "toState": {"id": "s2", "name": "In Progress", "type": "started"},
                            },
                            {
                                "id": "h2",
                                "createdAt": "2024-01-03T10:00:00.000Z",
                                "fromState": None,
                                "toState": None,
                            },
                        ]
                    },
                }
            }
        )
    )

    history = asyncio.run(repository.get_item_history("1"))

    assert session.requests[0]["json"]["variables"] == {"issueId": "1", "first": 20}
    assert history[0]["to_state"] == {"id": "s2", "name": "In Progress", "type": "started"}
    assert history[0]["created_at"] == pendulum.datetime(2024, 1, 2, 10, tz="UTC")
    assert history[1]["to_state"] is None


def test_http_error_status() -> None:
    repository, _ = make_repository(FakeResponse(status_code=401))

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(repository.list_teams())

    assert str(exc_info.value) == "HTTP error! status: 401"
    assert exc_info.value.status_code == 401


def test_network_failure() -> None:
    repository, _ = make_repository(requests.ConnectionError("connection refused"))

    with pytest.raises(TransportError):
        asyncio.run(repository.list_teams())


def test_invalid_json() -> None:
    repository, _ = make_repository(FakeResponse(invalid_json=True))

    with pytest.raises(TransportError):
        asyncio.run(repository.list_teams())


def test_graphql_errors() -> None:
    repository, _ = make_repository(
        FakeResponse({"errors": [{"message": "Authentication required"}], "data": None})
    )

    with pytest.raises(RemoteQueryError, match="Authentication required"):
        asyncio.run(repository.list_teams())


def test_graphql_error_without_message() -> None:
    repository, _ = make_repository(FakeResponse({"errors": [{}]}))

    with pytest.raises(RemoteQueryError, match="GraphQL error"):
        asyncio.run(repository.list_teams())


def test_environment_key_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    config = get_default_configuration()
    config["api_key"] = "stored"
    monkeypatch.setenv("LINEAR_API_KEY", "from-env")

    assert resolve_api_key(config) == "from-env"

    monkeypatch.delenv("LINEAR_API_KEY")
    assert resolve_api_key(config) == "stored"


def test_missing_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LINEAR_API_KEY", raising=False)

    with pytest.raises(MissingApiKeyError, match="LINEAR_API_KEY"):
        LinearRepository.from_config(get_default_configuration())
