# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

from teamline.model.work_item import WorkItem
from teamline.model.workflow_state import WorkflowState


class TeamSummary(TypedDict):
    id: str
    name: str


class RosterMember(TypedDict):
    id: str
    name: str
    display_name: Optional[str]


class TeamRoster(TypedDict):
    id: str
    name: str
    workflow_states: list[WorkflowState]
    members: list[RosterMember]


class Member(TypedDict):
    id: str
    name: str
    display_name: Optional[str]
    work_items: list[WorkItem]


class Team(TypedDict):
    id: str
    name: str
    workflow_states: list[WorkflowState]
    members: list[Member]
