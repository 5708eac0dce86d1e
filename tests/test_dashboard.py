"""Tests for the dashboard controller."""

import logging
from dataclasses import replace

import pytest
from unittest.mock import Mock

from autonote_video.ai_service import AiResult, REPORT_ERROR_TEXT
from autonote_video.dashboard import DashboardController, visible_tasks_for
from autonote_video.domain import TaskStatus
from autonote_video.lifecycle import TransitionError


@pytest.fixture
def dashboard(qapp, state):
    return DashboardController(state)


def _ids(tasks):
    return [t.id for t in tasks]


class TestRoleFiltering:
    """Managers see everything; collaborators see theirs plus unassigned."""

    def test_manager_sees_all(self, dashboard):
        assert _ids(dashboard.visible_tasks()) == ["t1", "t2", "t3"]

    def test_collaborator_sees_own_and_unassigned(self, dashboard):
        dashboard.set_current_user("u2")
        assert _ids(dashboard.visible_tasks()) == ["t1", "t2"]

    def test_other_collaborator(self, dashboard):
        dashboard.set_current_user("u3")
        assert _ids(dashboard.visible_tasks()) == ["t2", "t3"]

    def test_no_user_sees_nothing(self, state):
        assert visible_tasks_for(None, state.tasks) == []

    def test_unknown_user_is_ignored(self, dashboard):
        dashboard.set_current_user("nobody")
        assert dashboard.current_user.id == "u1"


class TestLifecycleActions:

    def test_start_claims_unassigned_task(self, dashboard):
        dashboard.set_current_user("u2")
        opened = Mock()
        dashboard.task_opened.connect(opened)

        task = dashboard.start_or_continue("t2")

        assert task.assignee_id == "u2"
        assert task.status == TaskStatus.IN_PROGRESS
        assert dashboard.state.active_task_id == "t2"
        opened.assert_called_once()

    def test_continue_keeps_existing_assignee(self, dashboard):
        dashboard.set_current_user("u2")
        before = dashboard.state.get_task("t1")
        task = dashboard.start_or_continue("t1")
        assert task is before
        assert dashboard.state.active_task_id == "t1"

    def test_manager_assign(self, dashboard):
        updated = dashboard.assign("t2", "u3")
        assert updated.assignee_id == "u3"
        assert dashboard.state.get_task("t2").status == TaskStatus.IN_PROGRESS

    def test_assign_empty_choice_unassigns(self, dashboard):
        updated = dashboard.assign("t1", "")
        assert updated.assignee_id is None
        assert updated.status == TaskStatus.TODO

    def test_approve(self, dashboard):
        assert dashboard.approve("t3").status == TaskStatus.DONE
        assert dashboard.stats().completed == 1

    def test_review_opens_without_status_change(self, dashboard):
        task = dashboard.review("t3")
        assert task.status == TaskStatus.REVIEW
        assert dashboard.active_task().id == "t3"

    def test_unknown_task_is_noop(self, dashboard):
        changed = Mock()
        dashboard.changed.connect(changed)
        assert dashboard.assign("t404", "u2") is None
        assert dashboard.approve("t404") is None
        changed.assert_not_called()

    def test_strict_mode_raises(self, qapp, state):
        dashboard = DashboardController(state, strict_transitions=True)
        with pytest.raises(TransitionError):
            dashboard.approve("t2")
        assert state.get_task("t2").status == TaskStatus.TODO

    def test_update_task_replaces_by_id(self, dashboard):
        changed = Mock()
        dashboard.changed.connect(changed)
        task = dashboard.state.get_task("t1")
        dashboard.update_task(replace(task, time_spent_seconds=2000))
        assert dashboard.state.get_task("t1").time_spent_seconds == 2000
        changed.assert_called_once()


class TestStatsAndActions:

    def test_seed_stats(self, dashboard):
        stats = dashboard.stats()
        assert (stats.total, stats.pending_review, stats.completed) == (3, 1, 0)

    def test_manager_action_labels(self, dashboard):
        state = dashboard.state
        assert dashboard.action_labels(state.get_task("t3")) == ["Approve", "Review"]
        assert dashboard.action_labels(state.get_task("t1")) == ["View Details"]

    def test_collaborator_action_labels(self, dashboard):
        dashboard.set_current_user("u2")
        state = dashboard.state
        assert dashboard.action_labels(state.get_task("t1")) == ["Continue"]
        assert dashboard.action_labels(state.get_task("t2")) == ["Start"]


class TestExport:

    def test_sheet_covers_all_tasks_for_collaborator(self, dashboard):
        dashboard.set_current_user("u2")
        assert [r.task_id for r in dashboard.export_sheet()] == ["t1", "t2", "t3"]

    def test_csv_text(self, dashboard):
        lines = dashboard.export_csv().split("\n")
        assert lines[0] == "Task ID,Video Title,Collaborator,Status,Time Spent (s),Annotation Count"
        assert lines[1] == "t1,Intersection CAM 04 - Morning,Bob Worker,IN_PROGRESS,1450,0"
        assert lines[2] == "t2,Intersection CAM 04 - Noon,Unassigned,TODO,0,0"
        assert lines[3] == "t3,Aisle 4 Shopper Tracking,Charlie Worker,REVIEW,3200,2"
        assert len(lines) == 4

    def test_csv_written_to_path(self, dashboard, tmp_path):
        out = tmp_path / "sheet.csv"
        text = dashboard.export_csv(str(out))
        assert out.read_text(encoding="utf-8") == text


class TestReport:

    def test_request_report(self, dashboard, fake_service):
        received = Mock()
        dashboard.report_changed.connect(received)

        result = dashboard.request_report(fake_service)

        assert result.text.startswith("## Report")
        assert dashboard.state.report == result.text
        assert dashboard.state.report_pending is False
        received.assert_called_once_with(result.text)
        tasks, users = fake_service.generate_report.call_args[0]
        assert len(tasks) == 3 and len(users) == 3

    def test_begin_report_marks_pending(self, dashboard):
        dashboard.begin_report()
        assert dashboard.state.report_pending is True

    def test_last_result_wins(self, dashboard):
        dashboard.begin_report()
        dashboard.begin_report()
        dashboard.apply_report(AiResult("first"))
        dashboard.apply_report(AiResult(REPORT_ERROR_TEXT, used_fallback=True))
        assert dashboard.state.report == REPORT_ERROR_TEXT

    def test_pending_until_every_request_lands(self, dashboard):
        dashboard.begin_report()
        dashboard.begin_report()

        dashboard.apply_report(AiResult("first"))
        assert dashboard.state.report_pending is True
        assert dashboard.state.report == "first"

        dashboard.apply_report(AiResult("second"))
        assert dashboard.state.report_pending is False

    def test_request_logs_session_snapshot(self, dashboard, caplog):
        with caplog.at_level(logging.DEBUG, logger="autonote_video.dashboard"):
            dashboard.begin_report()
        assert "Aisle 4 Shopper Tracking" in caplog.text

    def test_snapshot_dict(self, dashboard):
        snap = dashboard.snapshot_dict()
        assert [t["id"] for t in snap["tasks"]] == ["t1", "t2", "t3"]
        assert snap["tasks"][2]["annotations"][0]["id"] == "a1"
        assert snap["users"][0]["role"] == "MANAGER"
        assert snap["projects"][1]["client_name"] == "ShopSmart Inc."

    def test_role_switch_clears_report(self, dashboard):
        dashboard.apply_report(AiResult("summary"))
        dashboard.set_current_user("u2")
        assert dashboard.state.report is None


class TestActiveTask:

    def test_close_task(self, dashboard):
        closed = Mock()
        dashboard.task_closed.connect(closed)
        dashboard.open_task("t1")
        dashboard.close_task()
        assert dashboard.active_task() is None
        closed.assert_called_once()

    def test_role_switch_closes_task(self, dashboard):
        dashboard.open_task("t1")
        dashboard.set_current_user("u3")
        assert dashboard.state.active_task_id is None
