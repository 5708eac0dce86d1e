# autonote_video/workspace.py
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from . import annotations as store
from . import lifecycle
from .ai_service import AiResult
from .annotations import DEFAULT_SEGMENT_LENGTH
from .domain import Annotation, VideoTask
from .tracking import TrackingTimer, is_tracking_active, tick

logger = logging.getLogger(__name__)


class WorkspaceController(QObject):
    """
    The annotation screen for one open task.

    Holds the working copy of the task plus playback position, duration,
    focused annotation and the tracking flag. Every mutation is pushed to
    on_update immediately (no batching). Owns the TrackingTimer: the timer
    runs only while tracking is on and the task is IN_PROGRESS, and is torn
    down on close().

    Signals:
      - task_changed(VideoTask)
      - position_changed(float)
      - duration_changed(float)
      - tracking_changed(bool)    effective state: flag AND status
      - seek_requested(float)     player should seek there and play
      - busy_changed(bool)        an AI polish call is in flight
      - closed()
    """
    task_changed = pyqtSignal(object)
    position_changed = pyqtSignal(float)
    duration_changed = pyqtSignal(float)
    tracking_changed = pyqtSignal(bool)
    seek_requested = pyqtSignal(float)
    busy_changed = pyqtSignal(bool)
    closed = pyqtSignal()

    def __init__(
        self,
        task: VideoTask,
        on_update: Callable[[VideoTask], None],
        on_close: Optional[Callable[[], None]] = None,
        segment_length: float = DEFAULT_SEGMENT_LENGTH,
        strict_transitions: bool = False,
        timer: Optional[TrackingTimer] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.task = task
        self._on_update = on_update
        self._on_close = on_close
        self.segment_length = float(segment_length)
        self.strict = bool(strict_transitions)

        self.position: float = 0.0
        self.duration: float = 0.0
        self.focused_annotation_id: Optional[str] = None
        self.tracking: bool = True  # auto-start on open
        self.ai_busy: bool = False
        self._closed = False

        self._timer = timer if timer is not None else TrackingTimer(parent=self)
        self._timer.ticked.connect(self.tick)
        self._sync_timer()

    # ---------------- State ----------------

    @property
    def is_closed(self) -> bool:
        return self._closed

    def is_tracking_active(self) -> bool:
        return not self._closed and is_tracking_active(self.task, self.tracking)

    def timer_running(self) -> bool:
        return self._timer.is_active()

    def _commit(self, task: VideoTask) -> None:
        if self._closed:
            logger.debug("Ignoring write to closed workspace for task %s", task.id)
            return
        self.task = task
        self._on_update(task)
        self.task_changed.emit(task)
        self._sync_timer()

    def _sync_timer(self) -> None:
        active = self.is_tracking_active()
        was_running = self._timer.is_active()
        self._timer.set_active(active)
        if was_running != active:
            self.tracking_changed.emit(active)

    # ---------------- Time accounting ----------------

    def tick(self) -> None:
        updated = tick(self.task, self.is_tracking_active())
        if updated is not self.task:
            self._commit(updated)

    def set_tracking(self, tracking: bool) -> None:
        self.tracking = bool(tracking)
        self._sync_timer()

    def toggle_tracking(self) -> bool:
        self.set_tracking(not self.tracking)
        return self.tracking

    # ---------------- Playback ----------------

    def set_position(self, seconds: float) -> None:
        self.position = max(0.0, float(seconds or 0.0))
        self.position_changed.emit(self.position)

    def set_duration(self, seconds: float) -> None:
        self.duration = max(0.0, float(seconds or 0.0))
        self.duration_changed.emit(self.duration)

    def seek(self, seconds: float) -> None:
        """Jump playback to seconds and resume playing."""
        self.set_position(seconds)
        self.seek_requested.emit(self.position)

    # ---------------- Annotations ----------------

    def annotations(self) -> List[Annotation]:
        return store.sorted_annotations(self.task)

    def active_annotation(self) -> Optional[Annotation]:
        return store.annotation_at(self.task, self.position)

    def can_generate_segments(self) -> bool:
        return not self.task.annotations and self.duration > 0

    def generate_segments(self) -> int:
        updated = store.apply_segments(self.task, self.duration, self.segment_length)
        if updated is self.task:
            return 0
        added = len(updated.annotations) - len(self.task.annotations)
        self._commit(updated)
        return added

    def update_description(self, annotation_id: str, text: str) -> None:
        updated = store.update_description(self.task, annotation_id, text)
        if updated is not self.task:
            self._commit(updated)

    def focus(self, annotation_id: Optional[str]) -> None:
        self.focused_annotation_id = annotation_id

    def blur(self) -> None:
        self.focused_annotation_id = None

    # ---------------- Polish ----------------

    def begin_polish(self, annotation_id: str) -> Optional[str]:
        """
        Returns the text to send for cleanup, or None when there is nothing
        to do (unknown annotation or empty text).
        """
        ann = store.get_annotation(self.task, annotation_id)
        if ann is None or not ann.description:
            return None
        self._set_busy(True)
        return ann.description

    def apply_polish(self, annotation_id: str, result: AiResult) -> None:
        self._set_busy(False)
        if result.used_fallback:
            return
        self.update_description(annotation_id, result.text)

    def polish(self, annotation_id: str, service) -> Optional[AiResult]:
        """Synchronous polish: cleanup through service and write the result back."""
        text = self.begin_polish(annotation_id)
        if text is None:
            return None
        result = store.polish(service, text)
        self.apply_polish(annotation_id, result)
        return result

    def _set_busy(self, busy: bool) -> None:
        if self.ai_busy != busy:
            self.ai_busy = busy
            self.busy_changed.emit(busy)

    # ---------------- Lifecycle ----------------

    def submit_for_review(self) -> VideoTask:
        # Strict mode may raise here; tracking stays as it was in that case.
        updated = lifecycle.submit_for_review(self.task, strict=self.strict)
        self.set_tracking(False)
        self._commit(updated)
        submitted = self.task
        self.close()
        return submitted

    def close(self, notify: bool = True) -> None:
        """Stop the timer and reject further writes. notify=False skips on_close."""
        if self._closed:
            return
        self._timer.stop()
        self._closed = True
        self.tracking_changed.emit(False)
        # A polish reply that lands after close is dropped, so release the flag now.
        self._set_busy(False)
        logger.debug("Workspace closed for task %s", self.task.id)
        self.closed.emit()
        if notify and self._on_close is not None:
            self._on_close()
