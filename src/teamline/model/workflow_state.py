# SPDX-License-Identifier: MIT

from typing import TypedDict

from teamline.model.status_type import StatusType


class StateRef(TypedDict):
    id: str
    name: str
    type: str


class WorkflowState(TypedDict):
    id: str
    name: str
    type: StatusType
    color: str
    position: float
