# autonote_video/export.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from .domain import User, VideoTask


SHEET_HEADER = [
    "Task ID", "Video Title", "Collaborator", "Status", "Time Spent (s)", "Annotation Count",
]


@dataclass(frozen=True)
class SheetRow:
    task_id: str
    title: str
    collaborator: str
    status: str
    time_spent_seconds: int
    annotation_count: int

    def values(self) -> List[str]:
        return [
            self.task_id,
            self.title,
            self.collaborator,
            self.status,
            str(int(self.time_spent_seconds)),
            str(int(self.annotation_count)),
        ]


def build_sheet_rows(tasks: Iterable[VideoTask], users: Iterable[User]) -> List[SheetRow]:
    names = {u.id: u.name for u in users}
    rows: List[SheetRow] = []
    for t in tasks:
        rows.append(
            SheetRow(
                task_id=t.id,
                title=t.title,
                collaborator=names.get(t.assignee_id or "", "Unassigned"),
                status=t.status.value,
                time_spent_seconds=int(t.time_spent_seconds),
                annotation_count=len(t.annotations),
            )
        )
    return rows


def sheet_to_csv(rows: Iterable[SheetRow]) -> str:
    """
    Plain comma join, one line per row, no trailing newline.
    Fields are not quoted: a title containing a comma shifts its row's columns.
    """
    lines = [",".join(SHEET_HEADER)]
    for row in rows:
        lines.append(",".join(row.values()))
    return "\n".join(lines)
