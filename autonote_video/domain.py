# autonote_video/domain.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


# -----------------------------
# Enums
# -----------------------------

class UserRole(str, Enum):
    MANAGER = "MANAGER"
    COLLABORATOR = "COLLABORATOR"


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    DONE = "DONE"

    @property
    def display(self) -> str:
        return self.value.replace("_", " ")


def now() -> float:
    """Wall-clock timestamp (epoch seconds) used for created/updated stamps."""
    return time.time()


# -----------------------------
# Core Dataclasses
# -----------------------------

@dataclass(frozen=True)
class User:
    id: str
    name: str
    role: UserRole
    avatar: str = ""

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name, "role": self.role.value, "avatar": self.avatar}

    @staticmethod
    def from_dict(d: Dict) -> "User":
        return User(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            role=UserRole(str(d.get("role", UserRole.COLLABORATOR.value))),
            avatar=str(d.get("avatar", "")),
        )


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    client_name: str = ""

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name, "client_name": self.client_name}

    @staticmethod
    def from_dict(d: Dict) -> "Project":
        return Project(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            client_name=str(d.get("client_name", "")),
        )


@dataclass(frozen=True)
class Annotation:
    """
    A text note bound to the half-open interval [start_time, end_time) of a video.
    Times are in seconds; timestamp is the creation time (epoch seconds).
    """
    id: str
    start_time: float
    end_time: float
    description: str = ""
    timestamp: float = 0.0

    @property
    def length(self) -> float:
        return float(self.end_time) - float(self.start_time)

    def contains(self, position: float) -> bool:
        return float(self.start_time) <= float(position) < float(self.end_time)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "start_time": float(self.start_time),
            "end_time": float(self.end_time),
            "description": self.description or "",
            "timestamp": float(self.timestamp),
        }

    @staticmethod
    def from_dict(d: Dict) -> "Annotation":
        return Annotation(
            id=str(d["id"]),
            start_time=float(d.get("start_time", 0.0)),
            end_time=float(d.get("end_time", 0.0)),
            description=str(d.get("description", "")),
            timestamp=float(d.get("timestamp", 0.0)),
        )


@dataclass(frozen=True)
class VideoTask:
    """
    One video requiring annotation.

    Treated as a value: every mutation builds a new VideoTask with
    dataclasses.replace() and hands it to the owner's update callback.
    assignee_id is None while the task is unassigned.
    """
    id: str
    project_id: str
    title: str
    video_url: str
    assignee_id: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    time_spent_seconds: int = 0
    annotations: List[Annotation] = field(default_factory=list)
    last_updated: float = 0.0

    @property
    def is_assigned(self) -> bool:
        return self.assignee_id is not None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "title": self.title,
            "video_url": self.video_url,
            "assignee_id": self.assignee_id,
            "status": self.status.value,
            "time_spent_seconds": int(self.time_spent_seconds),
            "annotations": [a.to_dict() for a in self.annotations],
            "last_updated": float(self.last_updated),
        }

    @staticmethod
    def from_dict(d: Dict) -> "VideoTask":
        assignee = d.get("assignee_id")
        return VideoTask(
            id=str(d["id"]),
            project_id=str(d.get("project_id", "")),
            title=str(d.get("title", "")),
            video_url=str(d.get("video_url", "")),
            assignee_id=str(assignee) if assignee else None,
            status=TaskStatus(str(d.get("status", TaskStatus.TODO.value))),
            time_spent_seconds=max(0, int(d.get("time_spent_seconds", 0))),
            annotations=[Annotation.from_dict(a) for a in (d.get("annotations") or [])],
            last_updated=float(d.get("last_updated", 0.0)),
        )


# -----------------------------
# Application state
# -----------------------------

@dataclass
class AppState:
    """
    In-memory state for the running session. Owned by the DashboardController;
    the workspace only ever writes back through the dashboard's update callback.
    """
    users: List[User] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    tasks: List[VideoTask] = field(default_factory=list)

    current_user_id: Optional[str] = None
    active_task_id: Optional[str] = None

    # Last report text (or fallback error text) shown to managers
    report: Optional[str] = None
    report_pending: bool = False

    def get_user(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        for u in self.users:
            if u.id == user_id:
                return u
        return None

    def get_project(self, project_id: Optional[str]) -> Optional[Project]:
        if not project_id:
            return None
        for p in self.projects:
            if p.id == project_id:
                return p
        return None

    def get_task(self, task_id: Optional[str]) -> Optional[VideoTask]:
        if not task_id:
            return None
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def replace_task(self, task: VideoTask) -> bool:
        """Swap in a new value for the task with the same id. Returns False on a miss."""
        for i, t in enumerate(self.tasks):
            if t.id == task.id:
                self.tasks[i] = task
                return True
        return False

    def collaborators(self) -> List[User]:
        return [u for u in self.users if u.role == UserRole.COLLABORATOR]

    def assignee_name(self, task: VideoTask) -> str:
        user = self.get_user(task.assignee_id)
        return user.name if user else "Unassigned"
