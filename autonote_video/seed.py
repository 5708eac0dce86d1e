# autonote_video/seed.py
"""Demo users, projects and tasks the app boots with (there is no backing store)."""
from __future__ import annotations

from typing import List

from .domain import (
    Annotation,
    AppState,
    Project,
    TaskStatus,
    User,
    UserRole,
    VideoTask,
    now,
)


def seed_users() -> List[User]:
    return [
        User(id="u1", name="Alice Manager", role=UserRole.MANAGER,
             avatar="https://picsum.photos/100/100?random=1"),
        User(id="u2", name="Bob Worker", role=UserRole.COLLABORATOR,
             avatar="https://picsum.photos/100/100?random=2"),
        User(id="u3", name="Charlie Worker", role=UserRole.COLLABORATOR,
             avatar="https://picsum.photos/100/100?random=3"),
    ]


def seed_projects() -> List[Project]:
    return [
        Project(id="p1", name="Traffic Analysis 2024", client_name="City Council"),
        Project(id="p2", name="Retail Behavior Study", client_name="ShopSmart Inc."),
    ]


def seed_tasks() -> List[VideoTask]:
    stamp = now()
    base = "https://storage.googleapis.com/gtv-videos-bucket/sample"
    return [
        VideoTask(
            id="t1",
            project_id="p1",
            title="Intersection CAM 04 - Morning",
            video_url=f"{base}/ForBiggerJoyrides.mp4",
            assignee_id="u2",
            status=TaskStatus.IN_PROGRESS,
            time_spent_seconds=1450,
            last_updated=stamp,
        ),
        VideoTask(
            id="t2",
            project_id="p1",
            title="Intersection CAM 04 - Noon",
            video_url=f"{base}/ElephantsDream.mp4",
            assignee_id=None,
            status=TaskStatus.TODO,
            last_updated=stamp,
        ),
        VideoTask(
            id="t3",
            project_id="p2",
            title="Aisle 4 Shopper Tracking",
            video_url=f"{base}/TearsOfSteel.mp4",
            assignee_id="u3",
            status=TaskStatus.REVIEW,
            time_spent_seconds=3200,
            annotations=[
                Annotation(id="a1", start_time=0, end_time=5,
                           description="Subject enters frame from left.", timestamp=stamp),
                Annotation(id="a2", start_time=5, end_time=10,
                           description="Subject pauses at shelf.", timestamp=stamp),
            ],
            last_updated=stamp,
        ),
    ]


def seed_state(current_user_id: str = "u1") -> AppState:
    return AppState(
        users=seed_users(),
        projects=seed_projects(),
        tasks=seed_tasks(),
        current_user_id=current_user_id,
    )
