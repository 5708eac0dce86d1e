# autonote_video/widgets/task_table.py
from __future__ import annotations

from typing import Callable, List, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QColor, QBrush
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QHBoxLayout,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QWidget,
)

from ..domain import AppState, TaskStatus, User, VideoTask
from ..timeutils import format_minutes_seconds


TABLE_COLUMNS = ["Video Title", "Project", "Assignee", "Status", "Time Spent", "Action"]

STATUS_COLORS = {
    TaskStatus.TODO: "#F1F5F9",
    TaskStatus.IN_PROGRESS: "#DBEAFE",
    TaskStatus.REVIEW: "#FEF9C3",
    TaskStatus.DONE: "#DCFCE7",
}


class TaskTable(QTableWidget):
    """
    Dashboard task list.

    Rows are read-only; managers get an assignee dropdown in the Assignee
    column, and every row gets its action buttons in the last column.

    Signals:
      - assign_requested(task_id, user_id)   user_id "" means unassign
      - action_requested(task_id, label)     "Approve" | "Review" | "View Details" | "Start" | "Continue"
    """
    assign_requested = pyqtSignal(str, str)
    action_requested = pyqtSignal(str, str)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(0, len(TABLE_COLUMNS), parent)

        self.setHorizontalHeaderLabels(TABLE_COLUMNS)
        self.horizontalHeader().setStretchLastSection(True)
        self.horizontalHeader().setDefaultSectionSize(170)
        self.verticalHeader().setVisible(False)

        self.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)

        self._tasks: List[VideoTask] = []

    # ---------------- Public API ----------------

    def task_ids(self) -> List[str]:
        return [t.id for t in self._tasks]

    def set_tasks(self, tasks: List[VideoTask], state: AppState, manager_view: bool,
                  actions_for: Callable[[VideoTask], List[str]]) -> None:
        self._tasks = list(tasks or [])
        self.setRowCount(0)
        for task in self._tasks:
            row = self.rowCount()
            self.insertRow(row)

            project = state.get_project(task.project_id)
            values = [
                task.title,
                project.name if project else "",
                state.assignee_name(task),
                task.status.display,
                format_minutes_seconds(task.time_spent_seconds),
            ]
            for col, val in enumerate(values):
                item = QTableWidgetItem(val)
                item.setToolTip(val)
                item.setFlags(item.flags() & ~Qt.ItemIsEditable)
                if col == 3:
                    item.setBackground(QBrush(QColor(STATUS_COLORS.get(task.status, "#FFFFFF"))))
                self.setItem(row, col, item)

            if manager_view:
                self.setCellWidget(row, 2, self._assignee_combo(task, state.collaborators()))
            self.setCellWidget(row, 5, self._action_buttons(task, actions_for(task)))

    # ---------------- Cell widgets ----------------

    def _assignee_combo(self, task: VideoTask, collaborators: List[User]) -> QComboBox:
        combo = QComboBox()
        combo.addItem("Unassigned", "")
        for u in collaborators:
            combo.addItem(u.name, u.id)
        idx = combo.findData(task.assignee_id or "")
        combo.setCurrentIndex(idx if idx >= 0 else 0)
        combo.currentIndexChanged.connect(
            lambda _i, _tid=task.id, _c=combo: self.assign_requested.emit(_tid, str(_c.currentData() or ""))
        )
        return combo

    def _action_buttons(self, task: VideoTask, labels: List[str]) -> QWidget:
        w = QWidget()
        lay = QHBoxLayout(w)
        lay.setContentsMargins(2, 2, 2, 2)
        lay.setSpacing(4)
        lay.addStretch()
        for label in labels:
            btn = QPushButton(label)
            btn.setCursor(Qt.PointingHandCursor)
            btn.clicked.connect(lambda _c=False, _tid=task.id, _l=label: self.action_requested.emit(_tid, _l))
            lay.addWidget(btn)
        return w
