# autonote_video/annotations.py
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import replace
from typing import List, Optional

from .ai_service import AiResult
from .domain import Annotation, VideoTask, now

logger = logging.getLogger(__name__)


DEFAULT_SEGMENT_LENGTH = 5.0


def new_annotation_id() -> str:
    return str(uuid.uuid4())


# -----------------------------
# Segment auto-generation
# -----------------------------

def segment_count(duration: float, segment_length: float = DEFAULT_SEGMENT_LENGTH) -> int:
    if duration is None or float(duration) <= 0 or float(segment_length) <= 0:
        return 0
    return int(math.ceil(float(duration) / float(segment_length)))


def generate_segments(task: VideoTask, duration: float,
                      segment_length: float = DEFAULT_SEGMENT_LENGTH) -> List[Annotation]:
    """
    Split [0, duration) into consecutive segment_length blocks; the last block
    is clipped so its end_time equals duration.

    Returns [] when the task already has annotations (so a second click never
    produces a duplicate set) or when duration is not positive.
    """
    if task.annotations:
        logger.debug("Task %s already has annotations; skipping segment generation", task.id)
        return []
    if segment_length is None or float(segment_length) <= 0:
        raise ValueError("segment_length must be positive")

    dur = float(duration or 0.0)
    step = float(segment_length)
    stamp = now()

    out: List[Annotation] = []
    for i in range(segment_count(dur, step)):
        start = i * step
        end = min(start + step, dur)
        out.append(Annotation(id=new_annotation_id(), start_time=start, end_time=end,
                              description="", timestamp=stamp))
    return out


def apply_segments(task: VideoTask, duration: float,
                   segment_length: float = DEFAULT_SEGMENT_LENGTH) -> VideoTask:
    segments = generate_segments(task, duration, segment_length)
    if not segments:
        return task
    logger.info("Generated %d segments for task %s", len(segments), task.id)
    return replace(task, annotations=list(task.annotations) + segments, last_updated=now())


# -----------------------------
# Editing / lookup
# -----------------------------

def update_description(task: VideoTask, annotation_id: str, text: str) -> VideoTask:
    """Replace one annotation's description. An unknown id returns the task unchanged."""
    if not any(a.id == annotation_id for a in task.annotations):
        logger.debug("Annotation %s not found on task %s", annotation_id, task.id)
        return task
    updated = [
        replace(a, description=text) if a.id == annotation_id else a
        for a in task.annotations
    ]
    return replace(task, annotations=updated, last_updated=now())


def get_annotation(task: VideoTask, annotation_id: Optional[str]) -> Optional[Annotation]:
    if not annotation_id:
        return None
    return next((a for a in task.annotations if a.id == annotation_id), None)


def sorted_annotations(task: VideoTask) -> List[Annotation]:
    # sorted() is stable, so equal start times keep insertion order
    return sorted(task.annotations, key=lambda a: float(a.start_time))


def annotation_at(task: VideoTask, position: float) -> Optional[Annotation]:
    """The segment under the playhead, if any."""
    for a in sorted_annotations(task):
        if a.contains(position):
            return a
    return None


# -----------------------------
# Polish
# -----------------------------

def polish(service, text: str) -> AiResult:
    """
    Run annotation text through the cleanup service.

    Empty input short-circuits without touching the service. Any failure
    (including one the service did not catch itself) yields the input text.
    """
    if not text or not text.strip():
        return AiResult(text, used_fallback=True)
    try:
        return service.cleanup(text)
    except Exception:
        logger.exception("Cleanup service raised; keeping original text")
        return AiResult(text, used_fallback=True)
