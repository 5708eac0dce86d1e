# autonote_video/tracking.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from .domain import TaskStatus, VideoTask, now

logger = logging.getLogger(__name__)


TICK_INTERVAL_MS = 1000


# -----------------------------
# Time accounting
# -----------------------------

def is_tracking_active(task: Optional[VideoTask], tracking: bool) -> bool:
    return bool(tracking) and task is not None and task.status == TaskStatus.IN_PROGRESS


def tick(task: VideoTask, tracking: bool = True) -> VideoTask:
    """
    One elapsed second. Returns the same object when tracking is inactive
    so callers can skip the write-back.
    """
    if not is_tracking_active(task, tracking):
        return task
    return replace(task, time_spent_seconds=int(task.time_spent_seconds) + 1, last_updated=now())


# -----------------------------
# Scheduler
# -----------------------------

class TrackingTimer(QObject):
    """
    Owns a single repeating one-second QTimer.

    set_active(True) starts it if it is not already running, set_active(False)
    and stop() cancel it. There is never more than one live timer per
    instance, and nothing fires after stop().

    Signals:
      - ticked()
    """
    ticked = pyqtSignal()

    def __init__(self, on_tick: Optional[Callable[[], None]] = None, parent: Optional[QObject] = None,
                 interval_ms: int = TICK_INTERVAL_MS):
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setInterval(int(interval_ms))
        self._timer.timeout.connect(self.ticked.emit)
        if on_tick is not None:
            self.ticked.connect(on_tick)

    def is_active(self) -> bool:
        return self._timer.isActive()

    def set_active(self, active: bool) -> None:
        if active and not self._timer.isActive():
            logger.debug("Tracking timer started")
            self._timer.start()
        elif not active and self._timer.isActive():
            logger.debug("Tracking timer stopped")
            self._timer.stop()

    def stop(self) -> None:
        self.set_active(False)
