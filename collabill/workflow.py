"""Kanban workflow rules for task status changes.

Pure decision functions: callers load the task, ask whether a move is
legal for the requester, and persist the outcome themselves.
"""
from collections.abc import Mapping
from types import MappingProxyType

from collabill.models.enums import TaskStatus

# leaving review is owner-only, so IN_REVIEW never appears in the shared table
REVIEW_EXITS: frozenset[TaskStatus] = frozenset(
    {TaskStatus.TRASH, TaskStatus.IN_PROGRESS, TaskStatus.VALIDATED}
)

COMMON_TRANSITIONS: Mapping[TaskStatus, frozenset[TaskStatus]] = MappingProxyType(
    {
        TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED, TaskStatus.TRASH}),
        TaskStatus.IN_PROGRESS: frozenset(
            {TaskStatus.BLOCKED, TaskStatus.TRASH, TaskStatus.TODO, TaskStatus.IN_REVIEW}
        ),
        TaskStatus.VALIDATED: frozenset(),
        TaskStatus.BLOCKED: frozenset({TaskStatus.TODO, TaskStatus.TRASH}),
        TaskStatus.TRASH: frozenset(),
    }
)

DELETABLE_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED, TaskStatus.TRASH}
)

def can_transition(from_status: TaskStatus, to_status: TaskStatus, is_project_owner: bool) -> bool:
    # dropping a card back on its own column
    if from_status == to_status:
        return True

    if from_status == TaskStatus.IN_REVIEW:
        return is_project_owner and to_status in REVIEW_EXITS

    return to_status in COMMON_TRANSITIONS[from_status]

def allowed_transitions(from_status: TaskStatus, is_project_owner: bool) -> frozenset[TaskStatus]:
    """Targets reachable from ``from_status``, not counting the no-op move."""
    if from_status == TaskStatus.IN_REVIEW:
        return REVIEW_EXITS if is_project_owner else frozenset()

    return COMMON_TRANSITIONS[from_status]

def can_delete(status: TaskStatus) -> bool:
    # tasks under review or already validated must be moved out first
    return status in DELETABLE_STATUSES
