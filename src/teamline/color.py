# SPDX-License-Identifier: MIT

from typing import Sequence

from teamline.model.workflow_state import WorkflowState

FALLBACK_COLOR = "#6b7280"

# Used when a team's workflow states do not provide a color
DEFAULT_STATUS_COLORS: dict[str, str] = {
    "backlog": "#6b7280",
    "unstarted": "#8b5cf6",
    "started": "#3b82f6",
    "completed": "#22c55e",
    "canceled": "#ef4444",
    "triage": "#FC7840",
}

AVATAR_COLORS = [
    "#3b82f6",
    "#8b5cf6",
    "#ec4899",
    "#f59e0b",
    "#10b981",
    "#06b6d4",
    "#6366f1",
    "#f43f5e",
]


def color_for_state(
    state_id: str, status_type: str, workflow_states: Sequence[WorkflowState]
) -> str:
    """Resolve a segment color by state id, then by status category."""
    for state in workflow_states:
        if state["id"] == state_id and state["color"]:
            return state["color"]
    return DEFAULT_STATUS_COLORS.get(status_type, FALLBACK_COLOR)


def workflow_state_color(state: WorkflowState) -> str:
    return state["color"] or DEFAULT_STATUS_COLORS.get(state["type"], FALLBACK_COLOR)


def string_to_color(text: str) -> str:
    """Pick a stable avatar color for a name."""
    hash_value = 0
    for character in text:
        hash_value = ord(character) + ((hash_value << 5) - hash_value)
        # Wrap to a signed 32-bit integer
        hash_value = (hash_value + 2**31) % 2**32 - 2**31
    return AVATAR_COLORS[abs(hash_value) % len(AVATAR_COLORS)]


def initials(name: str) -> str:
    return "".join(part[0] for part in name.split(" ") if part).upper()[:2]
