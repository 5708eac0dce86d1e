# autonote_video/dashboard.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from PyQt5.QtCore import QObject, pyqtSignal

from . import lifecycle
from .ai_service import AiResult
from .domain import AppState, TaskStatus, User, UserRole, VideoTask
from .export import SheetRow, build_sheet_rows, sheet_to_csv
from .persistence import save_sheet_csv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    total: int
    pending_review: int
    completed: int


def visible_tasks_for(user: Optional[User], tasks: List[VideoTask]) -> List[VideoTask]:
    """
    Managers see everything. Collaborators see their own tasks plus every
    unassigned task (those are open for anyone to claim).
    """
    if user is None:
        return []
    if user.role == UserRole.MANAGER:
        return list(tasks)
    return [t for t in tasks if t.assignee_id is None or t.assignee_id == user.id]


class DashboardController(QObject):
    """
    Owns the AppState and is the only place tasks in the collection are replaced.

    The workspace writes back through update_task(); managers and
    collaborators act through the methods below. Lookup misses are no-ops.

    Signals:
      - changed()                      any task/user/report change
      - task_opened(VideoTask)
      - task_closed()
      - report_changed(object)         Optional[str]
    """
    changed = pyqtSignal()
    task_opened = pyqtSignal(object)
    task_closed = pyqtSignal()
    report_changed = pyqtSignal(object)

    def __init__(self, state: AppState, strict_transitions: bool = False, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.state = state
        self.strict = bool(strict_transitions)
        self._reports_in_flight = 0

    # ---------------- Users / roles ----------------

    @property
    def current_user(self) -> Optional[User]:
        return self.state.get_user(self.state.current_user_id)

    def is_manager(self) -> bool:
        user = self.current_user
        return bool(user and user.role == UserRole.MANAGER)

    def set_current_user(self, user_id: str) -> None:
        if self.state.get_user(user_id) is None:
            logger.debug("Unknown user %s; role switch ignored", user_id)
            return
        self.close_task()
        self.state.current_user_id = user_id
        self.clear_report()
        logger.info("Switched to user %s", user_id)
        self.changed.emit()

    # ---------------- Task list ----------------

    def visible_tasks(self) -> List[VideoTask]:
        return visible_tasks_for(self.current_user, self.state.tasks)

    def active_task(self) -> Optional[VideoTask]:
        return self.state.get_task(self.state.active_task_id)

    def update_task(self, task: VideoTask) -> None:
        """Update callback: swap the stored value for this task id."""
        if not self.state.replace_task(task):
            logger.debug("update_task: unknown task %s", task.id)
            return
        self.changed.emit()

    def stats(self) -> DashboardStats:
        tasks = self.state.tasks
        return DashboardStats(
            total=len(tasks),
            pending_review=sum(1 for t in tasks if t.status == TaskStatus.REVIEW),
            completed=sum(1 for t in tasks if t.status == TaskStatus.DONE),
        )

    def action_labels(self, task: VideoTask) -> List[str]:
        """Row buttons for the current user, gated on status."""
        if self.is_manager():
            if lifecycle.is_allowed("approve", task.status, self.strict):
                return ["Approve", "Review"]
            return ["View Details"]
        return ["Continue" if task.status == TaskStatus.IN_PROGRESS else "Start"]

    # ---------------- Lifecycle actions ----------------

    def assign(self, task_id: str, user_id: Optional[str]) -> Optional[VideoTask]:
        task = self.state.get_task(task_id)
        if task is None:
            logger.debug("assign: unknown task %s", task_id)
            return None
        if not user_id:
            updated = lifecycle.unassign(task, strict=self.strict)
        else:
            updated = lifecycle.assign(task, user_id, strict=self.strict)
        self.update_task(updated)
        return updated

    def unassign(self, task_id: str) -> Optional[VideoTask]:
        return self.assign(task_id, None)

    def approve(self, task_id: str) -> Optional[VideoTask]:
        task = self.state.get_task(task_id)
        if task is None:
            logger.debug("approve: unknown task %s", task_id)
            return None
        updated = lifecycle.approve(task, strict=self.strict)
        self.update_task(updated)
        return updated

    def review(self, task_id: str) -> Optional[VideoTask]:
        """Manager "Review": reopen the workspace without touching status."""
        task = self.state.get_task(task_id)
        if task is None:
            return None
        lifecycle.reopen(task, strict=self.strict)
        return self.open_task(task_id)

    def start_or_continue(self, task_id: str) -> Optional[VideoTask]:
        """Collaborator action: claim the task if nobody has it yet, then open it."""
        task = self.state.get_task(task_id)
        user = self.current_user
        if task is None or user is None:
            return None
        if task.assignee_id is None:
            self.assign(task_id, user.id)
        return self.open_task(task_id)

    # ---------------- Active task ----------------

    def open_task(self, task_id: str) -> Optional[VideoTask]:
        task = self.state.get_task(task_id)
        if task is None:
            logger.debug("open_task: unknown task %s", task_id)
            return None
        self.state.active_task_id = task.id
        logger.info("Opened task %s", task.id)
        self.task_opened.emit(task)
        return task

    def close_task(self) -> None:
        if self.state.active_task_id is None:
            return
        logger.info("Closed task %s", self.state.active_task_id)
        self.state.active_task_id = None
        self.task_closed.emit()
        self.changed.emit()

    # ---------------- Export ----------------

    def export_sheet(self) -> List[SheetRow]:
        # Always the full task list, independent of the role filter
        return build_sheet_rows(self.state.tasks, self.state.users)

    def export_csv(self, path: Optional[str] = None) -> str:
        text = sheet_to_csv(self.export_sheet())
        if path:
            save_sheet_csv(path, text)
        return text

    # ---------------- Report ----------------

    def report_snapshot(self) -> Tuple[List[VideoTask], List[User]]:
        return list(self.state.tasks), list(self.state.users)

    def snapshot_dict(self) -> Dict:
        """Plain-dict view of the session, logged with each report request."""
        return {
            "users": [u.to_dict() for u in self.state.users],
            "projects": [p.to_dict() for p in self.state.projects],
            "tasks": [t.to_dict() for t in self.state.tasks],
        }

    def begin_report(self) -> Tuple[List[VideoTask], List[User]]:
        self._reports_in_flight += 1
        self.state.report_pending = True
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Report requested: %s", json.dumps(self.snapshot_dict()))
        self.changed.emit()
        return self.report_snapshot()

    def apply_report(self, result: AiResult) -> None:
        # Overlapping requests are not serialized; whichever result lands last is kept.
        self._reports_in_flight = max(0, self._reports_in_flight - 1)
        self.state.report = result.text
        self.state.report_pending = self._reports_in_flight > 0
        self.report_changed.emit(self.state.report)
        self.changed.emit()

    def request_report(self, service) -> AiResult:
        tasks, users = self.begin_report()
        result = service.generate_report(tasks, users)
        self.apply_report(result)
        return result

    def clear_report(self) -> None:
        if self.state.report is None:
            return
        self.state.report = None
        self.report_changed.emit(None)
