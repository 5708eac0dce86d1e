# autonote_video/main_window.py
from __future__ import annotations

import logging
import os
from typing import Optional

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtWidgets import (
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSplitter,
    QStackedWidget,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from . import ai_worker
from .ai_service import REPORT_ERROR_TEXT, AiResult, GeminiService
from .annotations import polish
from .config import AppConfig
from .dashboard import DashboardController
from .domain import AppState, TaskStatus, VideoTask
from .lifecycle import TransitionError
from .widgets.annotation_list import AnnotationList
from .widgets.task_table import TaskTable
from .widgets.time_tracker import TimeTrackerBadge
from .widgets.video_player import VideoPlayer
from .workspace import WorkspaceController

logger = logging.getLogger(__name__)

PAGE_DASHBOARD = 0
PAGE_WORKSPACE = 1


class MainWindow(QMainWindow):
    def __init__(self, state: AppState, service: GeminiService, cfg: Optional[AppConfig] = None):
        super().__init__()
        self.setWindowTitle("AutoNote Video")
        self.resize(1500, 900)

        self.cfg = cfg or AppConfig()
        self.service = service
        self.dashboard = DashboardController(state, strict_transitions=self.cfg.strict_transitions, parent=self)
        self.workspace: Optional[WorkspaceController] = None

        self.dashboard.changed.connect(self._refresh_dashboard)
        self.dashboard.report_changed.connect(self._on_report_changed)
        self.dashboard.task_opened.connect(self._open_workspace)
        self.dashboard.task_closed.connect(self._on_task_closed)

        self._build_ui()
        self._refresh_users()
        self._refresh_dashboard()

    # ---------------- UI ----------------

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(6, 6, 6, 6)
        main_layout.setSpacing(6)

        # ===== Sidebar: role switcher =====
        side = QGroupBox("Role Switcher (Demo)")
        side_lay = QVBoxLayout(side)
        self.user_list = QListWidget()
        self.user_list.currentItemChanged.connect(self._on_user_selected)
        side_lay.addWidget(self.user_list)
        side.setFixedWidth(240)
        main_layout.addWidget(side)

        self.pages = QStackedWidget()
        self.pages.addWidget(self._build_dashboard_page())
        self.pages.addWidget(self._build_workspace_page())
        main_layout.addWidget(self.pages, stretch=1)

    def _build_dashboard_page(self) -> QWidget:
        page = QWidget()
        lay = QVBoxLayout(page)
        lay.setSpacing(10)

        header = QHBoxLayout()
        titles = QVBoxLayout()
        self.dash_title = QLabel()
        self.dash_title.setStyleSheet("font-size: 20px; font-weight: 700;")
        self.dash_welcome = QLabel()
        titles.addWidget(self.dash_title)
        titles.addWidget(self.dash_welcome)
        header.addLayout(titles)
        header.addStretch()

        self.btn_report = QPushButton("AI Daily Report")
        self.btn_report.clicked.connect(self._request_report)
        self.btn_export = QPushButton("Export Sheet")
        self.btn_export.clicked.connect(self._export_sheet)
        header.addWidget(self.btn_report)
        header.addWidget(self.btn_export)
        lay.addLayout(header)

        # Report panel (managers only)
        self.report_box = QGroupBox("Gemini AI Insight Report")
        rep_lay = QVBoxLayout(self.report_box)
        self.report_view = QTextBrowser()
        self.report_view.setOpenExternalLinks(True)
        btn_close_report = QPushButton("Close")
        btn_close_report.clicked.connect(self.dashboard.clear_report)
        rep_lay.addWidget(self.report_view)
        rep_lay.addWidget(btn_close_report, alignment=Qt.AlignRight)
        self.report_box.setVisible(False)
        lay.addWidget(self.report_box, stretch=2)

        # Stats
        stats = QHBoxLayout()
        self.stat_total = QLabel()
        self.stat_review = QLabel()
        self.stat_done = QLabel()
        for lbl in (self.stat_total, self.stat_review, self.stat_done):
            lbl.setStyleSheet("font-size: 15px; padding: 10px; border: 1px solid #E2E8F0; border-radius: 6px;")
            stats.addWidget(lbl)
        lay.addLayout(stats)

        tasks_box = QGroupBox("Video Assignments  (Auto-Tracking Enabled)")
        tb_lay = QVBoxLayout(tasks_box)
        self.task_table = TaskTable()
        self.task_table.assign_requested.connect(self._on_assign_requested)
        self.task_table.action_requested.connect(self._on_action_requested)
        self.no_tasks_label = QLabel("No tasks found.")
        self.no_tasks_label.setAlignment(Qt.AlignCenter)
        tb_lay.addWidget(self.task_table)
        tb_lay.addWidget(self.no_tasks_label)
        lay.addWidget(tasks_box, stretch=5)
        return page

    def _build_workspace_page(self) -> QWidget:
        page = QWidget()
        lay = QVBoxLayout(page)
        lay.setSpacing(8)

        header = QHBoxLayout()
        self.btn_back = QPushButton("Back")
        self.btn_back.clicked.connect(self._close_workspace)
        self.ws_title = QLabel()
        self.ws_title.setStyleSheet("font-size: 18px; font-weight: 700;")
        self.btn_toggle_tracking = QPushButton("Pause Tracking")
        self.btn_toggle_tracking.setFlat(True)
        self.btn_toggle_tracking.clicked.connect(self._toggle_tracking)
        self.tracker = TimeTrackerBadge()
        self.btn_submit = QPushButton("Submit for Review")
        self.btn_submit.clicked.connect(self._submit_for_review)
        header.addWidget(self.btn_back)
        header.addWidget(self.ws_title)
        header.addStretch()
        header.addWidget(self.btn_toggle_tracking)
        header.addWidget(self.tracker)
        header.addWidget(self.btn_submit)
        lay.addLayout(header)

        split = QSplitter(Qt.Horizontal)
        lay.addWidget(split, stretch=1)

        left = QWidget()
        left_lay = QVBoxLayout(left)
        left_lay.setContentsMargins(0, 0, 0, 0)
        self.video_player = VideoPlayer()
        self.video_player.position_changed.connect(self._on_player_position)
        self.video_player.duration_changed.connect(self._on_player_duration)
        left_lay.addWidget(self.video_player, stretch=1)

        controls = QGroupBox("Video Controls")
        c_lay = QVBoxLayout(controls)
        row = QHBoxLayout()
        self.btn_segments = QPushButton("Auto-Generate Segments")
        self.btn_segments.clicked.connect(self._generate_segments)
        self.position_label = QLabel()
        row.addWidget(self.btn_segments)
        row.addStretch()
        row.addWidget(self.position_label)
        c_lay.addLayout(row)
        self.segments_hint = QLabel()
        c_lay.addWidget(self.segments_hint)
        left_lay.addWidget(controls)
        split.addWidget(left)

        right = QGroupBox("Annotations")
        r_lay = QVBoxLayout(right)
        self.annotation_count = QLabel("0")
        r_lay.addWidget(self.annotation_count)
        self.annotation_list = AnnotationList()
        self.annotation_list.seek_requested.connect(self._seek)
        self.annotation_list.description_edited.connect(self._on_description_edited)
        self.annotation_list.polish_requested.connect(self._polish)
        self.annotation_list.focus_changed.connect(self._on_annotation_focus)
        r_lay.addWidget(self.annotation_list)
        right.setMinimumWidth(380)
        split.addWidget(right)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 1)
        return page

    # ---------------- Users ----------------

    def _refresh_users(self):
        self.user_list.blockSignals(True)
        try:
            self.user_list.clear()
            for u in self.dashboard.state.users:
                item = QListWidgetItem(f"{u.name}  ({u.role.value.title()})")
                item.setData(Qt.UserRole, u.id)
                item.setToolTip(u.avatar)
                self.user_list.addItem(item)
                if u.id == self.dashboard.state.current_user_id:
                    self.user_list.setCurrentItem(item)
        finally:
            self.user_list.blockSignals(False)

    def _on_user_selected(self, current: QListWidgetItem, previous: QListWidgetItem):
        if current is None:
            return
        self.dashboard.set_current_user(str(current.data(Qt.UserRole)))

    # ---------------- Dashboard ----------------

    def _refresh_dashboard(self):
        # Ticks land here every second while a task is open; the page is hidden then.
        if self.pages.currentIndex() == PAGE_WORKSPACE and self.workspace is not None:
            return
        user = self.dashboard.current_user
        manager = self.dashboard.is_manager()

        self.dash_title.setText("Manager Overview" if manager else "My Assignments")
        self.dash_welcome.setText(f"Welcome back, {user.name}" if user else "")
        self.btn_report.setVisible(manager)
        self.btn_export.setVisible(manager)
        self.btn_report.setEnabled(not self.dashboard.state.report_pending)
        self.btn_report.setText("Analyzing..." if self.dashboard.state.report_pending else "AI Daily Report")

        stats = self.dashboard.stats()
        self.stat_total.setText(f"Total Videos\n{stats.total}")
        self.stat_review.setText(f"Pending Review\n{stats.pending_review}")
        self.stat_done.setText(f"Completed\n{stats.completed}")

        tasks = self.dashboard.visible_tasks()
        self.task_table.set_tasks(tasks, self.dashboard.state, manager, self.dashboard.action_labels)
        self.no_tasks_label.setVisible(not tasks)

        self._on_report_changed(self.dashboard.state.report)

    def _on_report_changed(self, text: Optional[str]):
        show = bool(text) and self.dashboard.is_manager()
        self.report_box.setVisible(show)
        if show:
            self.report_view.setMarkdown(text)

    # Row widgets are rebuilt on every change; defer so the sender isn't deleted inside its own slot.

    def _on_assign_requested(self, task_id: str, user_id: str):
        QTimer.singleShot(0, lambda: self._run_transition(lambda: self.dashboard.assign(task_id, user_id or None)))

    def _on_action_requested(self, task_id: str, label: str):
        QTimer.singleShot(0, lambda: self._dispatch_action(task_id, label))

    def _dispatch_action(self, task_id: str, label: str):
        if label == "Approve":
            self._run_transition(lambda: self.dashboard.approve(task_id))
        elif label == "Review":
            self._run_transition(lambda: self.dashboard.review(task_id))
        elif label == "View Details":
            self.dashboard.open_task(task_id)
        else:
            self._run_transition(lambda: self.dashboard.start_or_continue(task_id))

    def _run_transition(self, fn) -> None:
        try:
            fn()
        except TransitionError as e:
            QMessageBox.warning(self, "Not allowed", str(e))

    def _request_report(self):
        tasks, users = self.dashboard.begin_report()
        ai_worker.submit(
            lambda: self.service.generate_report(tasks, users),
            self.dashboard.apply_report,
            AiResult(REPORT_ERROR_TEXT, used_fallback=True),
        )

    def _export_sheet(self):
        default = os.path.join(os.getcwd(), self.cfg.export_filename)
        path, _ = QFileDialog.getSaveFileName(self, "Export Sheet", default, "CSV files (*.csv)")
        if not path:
            return
        try:
            self.dashboard.export_csv(path)
        except OSError as e:
            QMessageBox.warning(self, "Export failed", str(e))
            return
        QMessageBox.information(self, "Exported", f"Sheet saved to:\n{path}")

    # ---------------- Workspace ----------------

    def _open_workspace(self, task: VideoTask):
        if self.workspace is not None:
            # Replaced, not closed: the dashboard already points at the new task.
            self.workspace.close(notify=False)
            self.workspace.deleteLater()

        ws = WorkspaceController(
            task,
            on_update=self.dashboard.update_task,
            on_close=self.dashboard.close_task,
            segment_length=self.cfg.segment_length,
            strict_transitions=self.cfg.strict_transitions,
            parent=self,
        )
        ws.task_changed.connect(self._refresh_workspace)
        ws.position_changed.connect(lambda _p: self._refresh_position())
        ws.duration_changed.connect(lambda _d: self._refresh_workspace(ws.task))
        ws.tracking_changed.connect(lambda _a: self._refresh_tracker())
        ws.seek_requested.connect(self.video_player.seek_and_play)
        ws.busy_changed.connect(self.annotation_list.set_ai_busy)
        self.annotation_list.set_ai_busy(ws.ai_busy)
        self.workspace = ws

        self.ws_title.setText(task.title)
        self.segments_hint.setText(
            f"Auto-generate splits the video into {self.cfg.segment_length:g}-second blocks for rapid annotation."
        )
        self.btn_segments.setText(f"Auto-Generate {self.cfg.segment_length:g}s Segments")
        self.video_player.load(task.video_url)
        self.pages.setCurrentIndex(PAGE_WORKSPACE)
        self._refresh_workspace(task)

    def _close_workspace(self):
        if self.workspace is not None:
            self.workspace.close()
        else:
            self.dashboard.close_task()

    def _on_task_closed(self):
        ws, self.workspace = self.workspace, None
        if ws is not None:
            ws.close()
            ws.deleteLater()
        self.video_player.clear()
        self.pages.setCurrentIndex(PAGE_DASHBOARD)

    def _refresh_workspace(self, task: VideoTask):
        ws = self.workspace
        if ws is None:
            return
        anns = ws.annotations()
        self.annotation_count.setText(f"{len(anns)} annotation(s)")
        self.annotation_list.set_annotations(anns)
        self.btn_segments.setEnabled(ws.can_generate_segments())
        self.btn_submit.setEnabled(task.status == TaskStatus.IN_PROGRESS)
        self._refresh_tracker()
        self._refresh_position()

    def _refresh_tracker(self):
        ws = self.workspace
        if ws is None:
            return
        self.tracker.set_state(ws.task.time_spent_seconds, ws.is_tracking_active())
        self.btn_toggle_tracking.setText("Pause Tracking" if ws.tracking else "Resume Tracking")

    def _refresh_position(self):
        ws = self.workspace
        if ws is None:
            return
        self.position_label.setText(f"Current: {ws.position:.2f}s / Total: {ws.duration:.2f}s")
        active = ws.active_annotation()
        active_id = active.id if active else None
        self.annotation_list.set_active(active_id)
        self.video_player.set_segments(ws.annotations(), active_id)

    def _on_player_position(self, seconds: float):
        if self.workspace is not None:
            self.workspace.set_position(seconds)

    def _on_player_duration(self, seconds: float):
        if self.workspace is not None:
            self.workspace.set_duration(seconds)

    def _toggle_tracking(self):
        if self.workspace is not None:
            self.workspace.toggle_tracking()
            self._refresh_tracker()

    def _generate_segments(self):
        if self.workspace is not None:
            self.workspace.generate_segments()

    def _seek(self, seconds: float):
        if self.workspace is not None:
            self.workspace.seek(seconds)

    def _on_description_edited(self, annotation_id: str, text: str):
        if self.workspace is not None:
            self.workspace.update_description(annotation_id, text)

    def _on_annotation_focus(self, annotation_id):
        if self.workspace is None:
            return
        if annotation_id is None:
            self.workspace.blur()
        else:
            self.workspace.focus(annotation_id)

    def _polish(self, annotation_id: str):
        ws = self.workspace
        if ws is None:
            return
        text = ws.begin_polish(annotation_id)
        if text is None:
            return
        ai_worker.submit(
            lambda: polish(self.service, text),
            lambda result: self._on_polished(ws, annotation_id, result),
            AiResult(text, used_fallback=True),
        )

    def _on_polished(self, ws: WorkspaceController, annotation_id: str, result: AiResult):
        # The workspace may have been closed while the call was in flight.
        if ws is not self.workspace:
            logger.debug("Dropping polish result for closed workspace")
            return
        ws.apply_polish(annotation_id, result)

    def _submit_for_review(self):
        if self.workspace is None:
            return
        self._run_transition(self.workspace.submit_for_review)

    # ---------------- Shutdown ----------------

    def closeEvent(self, event):
        if self.workspace is not None:
            self.workspace.close()
        super().closeEvent(event)
