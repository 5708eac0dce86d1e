# autonote_video/ai_worker.py
from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt5.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal

from .ai_service import AiResult

logger = logging.getLogger(__name__)


class _AiSignals(QObject):
    finished = pyqtSignal(object)  # AiResult


class AiJob(QRunnable):
    """
    Runs one AI call on the global thread pool.

    fn must return an AiResult; if it raises anyway, fallback is delivered
    instead. The finished signal is queued back to the receiver's (GUI)
    thread, so state changes stay on the event loop.
    """

    def __init__(self, fn: Callable[[], AiResult], fallback: AiResult):
        super().__init__()
        self.fn = fn
        self.fallback = fallback
        self.signals = _AiSignals()

    def run(self) -> None:
        try:
            result = self.fn()
        except Exception:
            logger.exception("AI job failed")
            result = self.fallback
        self.signals.finished.emit(result)


def submit(fn: Callable[[], AiResult], on_done: Callable[[AiResult], None], fallback: AiResult,
           pool: Optional[QThreadPool] = None) -> AiJob:
    job = AiJob(fn, fallback)
    job.signals.finished.connect(on_done)
    (pool or QThreadPool.globalInstance()).start(job)
    return job
