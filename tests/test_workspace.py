"""Tests for the workspace controller."""

import pytest
from unittest.mock import Mock

from autonote_video.ai_service import AiResult
from autonote_video.domain import Annotation, TaskStatus
from autonote_video.lifecycle import TransitionError
from autonote_video.workspace import WorkspaceController


@pytest.fixture
def updates():
    return []


@pytest.fixture
def workspace(qapp, make_task, updates):
    on_close = Mock()
    ws = WorkspaceController(make_task(spent=10), on_update=updates.append, on_close=on_close)
    yield ws
    ws.close(notify=False)


class TestTracking:

    def test_starts_tracking_in_progress_task(self, workspace):
        assert workspace.is_tracking_active()
        assert workspace.timer_running()

    def test_ticks_accrue_and_push_updates(self, workspace, updates):
        for _ in range(3):
            workspace.tick()
        assert workspace.task.time_spent_seconds == 13
        assert [t.time_spent_seconds for t in updates] == [11, 12, 13]

    def test_toggle_pauses_accrual(self, workspace, updates):
        assert workspace.toggle_tracking() is False
        assert not workspace.timer_running()
        workspace.tick()
        assert workspace.task.time_spent_seconds == 10
        assert updates == []

    def test_no_timer_for_todo_task(self, qapp, make_task):
        ws = WorkspaceController(make_task(status=TaskStatus.TODO), on_update=Mock())
        assert not ws.timer_running()
        ws.close()


class TestSubmitForReview:

    def test_submit_moves_to_review_and_closes(self, workspace, updates):
        submitted = workspace.submit_for_review()

        assert submitted.status == TaskStatus.REVIEW
        assert updates[-1].status == TaskStatus.REVIEW
        assert workspace.is_closed
        assert not workspace.timer_running()
        workspace._on_close.assert_called_once()

    def test_no_accrual_after_submit(self, workspace, updates):
        workspace.submit_for_review()
        count = len(updates)
        workspace.tick()
        workspace.tick()
        assert workspace.task.time_spent_seconds == 10
        assert len(updates) == count


class TestPlaybackAndSegments:

    def test_seek_emits_request(self, workspace):
        seen = Mock()
        workspace.seek_requested.connect(seen)
        workspace.seek(7.5)
        assert workspace.position == 7.5
        seen.assert_called_once_with(7.5)

    def test_generate_requires_duration(self, workspace):
        assert not workspace.can_generate_segments()
        assert workspace.generate_segments() == 0

    def test_generate_segments(self, workspace, updates):
        workspace.set_duration(12)
        assert workspace.generate_segments() == 3
        assert len(updates[-1].annotations) == 3
        assert not workspace.can_generate_segments()
        assert workspace.generate_segments() == 0

    def test_active_annotation_follows_position(self, workspace):
        workspace.set_duration(12)
        workspace.generate_segments()
        workspace.set_position(6)
        assert workspace.active_annotation().start_time == 5

    def test_update_description_pushes_update(self, workspace, updates):
        workspace.set_duration(5)
        workspace.generate_segments()
        aid = workspace.annotations()[0].id
        workspace.update_description(aid, "Truck stops")
        assert updates[-1].annotations[0].description == "Truck stops"

    def test_focus_and_blur(self, workspace):
        workspace.focus("a1")
        assert workspace.focused_annotation_id == "a1"
        workspace.blur()
        assert workspace.focused_annotation_id is None


class TestPolish:

    @pytest.fixture
    def annotated(self, qapp, make_task, updates):
        ann = Annotation(id="a1", start_time=0, end_time=5, description="car go left")
        ws = WorkspaceController(make_task(annotations=[ann]), on_update=updates.append)
        yield ws
        ws.close(notify=False)

    def test_polish_replaces_text(self, annotated, fake_service):
        result = annotated.polish("a1", fake_service)
        assert result.text == "Polished: car go left"
        assert annotated.task.annotations[0].description == "Polished: car go left"
        assert annotated.ai_busy is False

    def test_fallback_keeps_text(self, annotated):
        annotated.begin_polish("a1")
        assert annotated.ai_busy is True
        annotated.apply_polish("a1", AiResult("car go left", used_fallback=True))
        assert annotated.task.annotations[0].description == "car go left"
        assert annotated.ai_busy is False

    def test_empty_text_is_skipped(self, qapp, make_task, fake_service):
        ann = Annotation(id="a1", start_time=0, end_time=5, description="")
        ws = WorkspaceController(make_task(annotations=[ann]), on_update=Mock())
        assert ws.polish("a1", fake_service) is None
        fake_service.cleanup.assert_not_called()
        ws.close()


class TestClose:

    def test_close_is_idempotent(self, workspace):
        workspace.close()
        workspace.close()
        workspace._on_close.assert_called_once()

    def test_writes_after_close_are_ignored(self, workspace, updates):
        workspace.set_duration(12)
        workspace.close()
        workspace.generate_segments()
        workspace.tick()
        assert updates == []

    def test_close_without_notify(self, workspace):
        workspace.close(notify=False)
        workspace._on_close.assert_not_called()
        assert workspace.is_closed


class TestStrictSubmit:

    def test_rejected_submit_keeps_tracking(self, qapp, make_task, updates):
        ws = WorkspaceController(
            make_task(status=TaskStatus.TODO), on_update=updates.append, strict_transitions=True,
        )
        with pytest.raises(TransitionError):
            ws.submit_for_review()

        assert ws.tracking is True
        assert not ws.is_closed
        assert updates == []
        ws.close(notify=False)

    def test_close_releases_busy_flag(self, workspace):
        workspace.set_duration(5)
        workspace.generate_segments()
        aid = workspace.annotations()[0].id
        workspace.update_description(aid, "text")
        busy = []
        workspace.busy_changed.connect(busy.append)

        workspace.begin_polish(aid)
        workspace.close()

        assert busy == [True, False]
        assert workspace.ai_busy is False
