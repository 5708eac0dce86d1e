"""Tests for time accounting and the tracking timer."""

import pytest

from autonote_video.domain import TaskStatus
from autonote_video.tracking import TrackingTimer, is_tracking_active, tick


class TestTick:

    def test_n_ticks_add_n_seconds(self, make_task):
        task = make_task(status=TaskStatus.IN_PROGRESS, spent=100)
        for _ in range(7):
            task = tick(task, tracking=True)
        assert task.time_spent_seconds == 107

    def test_paused_tracking_leaves_counter(self, make_task):
        task = make_task(status=TaskStatus.IN_PROGRESS, spent=10)
        assert tick(task, tracking=False) is task

    @pytest.mark.parametrize("status", [TaskStatus.TODO, TaskStatus.REVIEW, TaskStatus.DONE])
    def test_only_in_progress_accrues(self, make_task, status):
        task = make_task(status=status, spent=10)
        assert tick(task, tracking=True).time_spent_seconds == 10

    def test_is_tracking_active(self, make_task):
        assert is_tracking_active(make_task(status=TaskStatus.IN_PROGRESS), True)
        assert not is_tracking_active(make_task(status=TaskStatus.IN_PROGRESS), False)
        assert not is_tracking_active(None, True)

    def test_tick_stamps_last_updated(self, make_task):
        task = make_task(status=TaskStatus.IN_PROGRESS)
        assert tick(task, tracking=True).last_updated > task.last_updated


class TestTrackingTimer:

    def test_start_stop(self, qapp):
        timer = TrackingTimer()
        assert not timer.is_active()
        timer.set_active(True)
        assert timer.is_active()
        timer.set_active(True)
        assert timer.is_active()
        timer.stop()
        assert not timer.is_active()

    def test_emits_ticks_while_active(self, qtbot):
        hits = []
        timer = TrackingTimer(on_tick=lambda: hits.append(1), interval_ms=10)
        timer.set_active(True)
        qtbot.waitUntil(lambda: len(hits) >= 3, timeout=2000)
        timer.stop()
        count = len(hits)
        qtbot.wait(50)
        assert len(hits) == count
