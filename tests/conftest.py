"""Shared fixtures for AutoNote Video tests."""

import os

# Must be set before any Qt module creates the application.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from unittest.mock import Mock

from autonote_video.ai_service import AiResult
from autonote_video.domain import TaskStatus, VideoTask
from autonote_video.seed import seed_state


@pytest.fixture
def state():
    """Fresh seeded state, starting as the manager (u1)."""
    return seed_state()


@pytest.fixture
def make_task():
    def _make(task_id="t9", status=TaskStatus.IN_PROGRESS, assignee_id="u2", annotations=None, spent=0):
        return VideoTask(
            id=task_id,
            project_id="p1",
            title=f"Task {task_id}",
            video_url="https://example.com/video.mp4",
            assignee_id=assignee_id,
            status=status,
            time_spent_seconds=spent,
            annotations=list(annotations or []),
        )
    return _make


@pytest.fixture
def fake_service():
    """Stand-in for GeminiService with canned results."""
    service = Mock()
    service.cleanup.side_effect = lambda text: AiResult(f"Polished: {text}")
    service.generate_report.return_value = AiResult("## Report\nAll good.")
    return service
