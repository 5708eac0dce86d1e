# autonote_video/lifecycle.py
"""
Task lifecycle: TODO -> IN_PROGRESS -> REVIEW -> DONE.

Every transition is listed in TRANSITIONS with the source states it is
meant to be taken from. The default (permissive) mode applies out-of-order
transitions anyway and logs a warning; strict mode raises TransitionError.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, FrozenSet, Optional, Tuple

from .domain import TaskStatus, VideoTask, now

logger = logging.getLogger(__name__)


ALL_STATES: FrozenSet[TaskStatus] = frozenset(TaskStatus)

# action -> (allowed source states, target state)
# target None means "status unchanged"
TRANSITIONS: Dict[str, Tuple[FrozenSet[TaskStatus], Optional[TaskStatus]]] = {
    "assign": (ALL_STATES, TaskStatus.IN_PROGRESS),
    "unassign": (frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS}), TaskStatus.TODO),
    "submit_for_review": (frozenset({TaskStatus.IN_PROGRESS}), TaskStatus.REVIEW),
    "approve": (frozenset({TaskStatus.REVIEW}), TaskStatus.DONE),
    "reopen": (frozenset({TaskStatus.REVIEW}), None),
}

# Strict mode narrows "assign": a finished or in-review task cannot be re-assigned.
STRICT_SOURCES: Dict[str, FrozenSet[TaskStatus]] = {
    "assign": frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS}),
}


class TransitionError(ValueError):
    def __init__(self, action: str, task: VideoTask):
        super().__init__(f"Cannot {action} task {task.id!r} from status {task.status.value}")
        self.action = action
        self.task_id = task.id
        self.status = task.status


def allowed_sources(action: str, strict: bool = False) -> FrozenSet[TaskStatus]:
    if action not in TRANSITIONS:
        raise KeyError(f"Unknown lifecycle action: {action}")
    if strict and action in STRICT_SOURCES:
        return STRICT_SOURCES[action]
    return TRANSITIONS[action][0]


def is_allowed(action: str, status: TaskStatus, strict: bool = False) -> bool:
    """Used by the view layer to decide which action buttons to show."""
    return status in allowed_sources(action, strict)


def _check(action: str, task: VideoTask, strict: bool) -> None:
    if is_allowed(action, task.status, strict):
        return
    if strict:
        raise TransitionError(action, task)
    logger.warning(
        "Out-of-order transition %s on task %s (status %s); applying anyway",
        action, task.id, task.status.value,
    )


def _target(action: str, task: VideoTask) -> TaskStatus:
    target = TRANSITIONS[action][1]
    return task.status if target is None else target


# -----------------------------
# Transitions
# -----------------------------

def assign(task: VideoTask, user_id: str, strict: bool = False) -> VideoTask:
    _check("assign", task, strict)
    logger.info("Assigning task %s to %s", task.id, user_id)
    return replace(task, assignee_id=user_id, status=_target("assign", task), last_updated=now())


def unassign(task: VideoTask, strict: bool = False) -> VideoTask:
    _check("unassign", task, strict)
    logger.info("Unassigning task %s", task.id)
    return replace(task, assignee_id=None, status=_target("unassign", task), last_updated=now())


def submit_for_review(task: VideoTask, strict: bool = False) -> VideoTask:
    _check("submit_for_review", task, strict)
    logger.info("Task %s submitted for review", task.id)
    return replace(task, status=_target("submit_for_review", task), last_updated=now())


def approve(task: VideoTask, strict: bool = False) -> VideoTask:
    _check("approve", task, strict)
    logger.info("Task %s approved", task.id)
    return replace(task, status=_target("approve", task), last_updated=now())


def reopen(task: VideoTask, strict: bool = False) -> VideoTask:
    """Manager "Review": reopen the workspace on a task. Status is left as-is."""
    _check("reopen", task, strict)
    return task
