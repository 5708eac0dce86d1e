"""Tests for the annotation store."""

import math

import pytest
from unittest.mock import Mock

from autonote_video import annotations as store
from autonote_video.ai_service import AiResult
from autonote_video.domain import Annotation


class TestGenerateSegments:
    """Segment auto-generation."""

    def test_twelve_seconds_gives_three_segments(self, make_task):
        """12s of video splits into [0,5), [5,10), [10,12)."""
        segs = store.generate_segments(make_task(), 12)
        assert [(a.start_time, a.end_time) for a in segs] == [(0, 5), (5, 10), (10, 12)]

    @pytest.mark.parametrize("duration", [0.4, 5, 7.5, 10, 61.3, 596.46])
    def test_segments_cover_duration_without_gaps(self, make_task, duration):
        """Segments are contiguous, at most 5s, and end exactly at the duration."""
        segs = store.generate_segments(make_task(), duration)

        assert len(segs) == math.ceil(duration / 5)
        assert segs[0].start_time == 0
        assert segs[-1].end_time == duration
        for prev, nxt in zip(segs, segs[1:]):
            assert prev.end_time == nxt.start_time
        for s in segs:
            assert 0 < s.length <= 5

    def test_new_segments_are_blank_with_unique_ids(self, make_task):
        segs = store.generate_segments(make_task(), 30)
        assert all(s.description == "" for s in segs)
        assert len({s.id for s in segs}) == len(segs)
        assert all(s.timestamp > 0 for s in segs)

    def test_noop_when_task_already_annotated(self, make_task):
        """A second generation never duplicates the segment set."""
        existing = Annotation(id="a1", start_time=0, end_time=3)
        task = make_task(annotations=[existing])
        assert store.generate_segments(task, 100) == []
        assert store.apply_segments(task, 100) is task

    @pytest.mark.parametrize("duration", [0, -1, None])
    def test_noop_for_non_positive_duration(self, make_task, duration):
        assert store.generate_segments(make_task(), duration) == []

    def test_custom_segment_length(self, make_task):
        segs = store.generate_segments(make_task(), 25, segment_length=10)
        assert [(a.start_time, a.end_time) for a in segs] == [(0, 10), (10, 20), (20, 25)]

    def test_invalid_segment_length_rejected(self, make_task):
        with pytest.raises(ValueError):
            store.generate_segments(make_task(), 25, segment_length=0)

    def test_apply_segments_appends_to_task(self, make_task):
        task = make_task()
        updated = store.apply_segments(task, 12)
        assert len(updated.annotations) == 3
        assert task.annotations == []


class TestUpdateDescription:
    """Point edits of annotation text."""

    def test_updates_matching_annotation(self, make_task):
        task = store.apply_segments(make_task(), 12)
        target = task.annotations[1]

        updated = store.update_description(task, target.id, "Car turns left")

        assert store.get_annotation(updated, target.id).description == "Car turns left"
        assert updated.annotations[0] == task.annotations[0]
        assert updated.annotations[2] == task.annotations[2]

    def test_unknown_id_leaves_annotations_equal(self, make_task):
        task = store.apply_segments(make_task(), 12)
        updated = store.update_description(task, "missing", "text")
        assert updated.annotations == task.annotations

    def test_accepts_any_text(self, make_task):
        task = store.apply_segments(make_task(), 5)
        aid = task.annotations[0].id
        assert store.update_description(task, aid, "").annotations[0].description == ""


class TestOrderingAndLookup:

    def test_sorted_by_start_time(self, make_task):
        task = make_task(annotations=[
            Annotation(id="b", start_time=5, end_time=10),
            Annotation(id="a", start_time=0, end_time=5),
            Annotation(id="c", start_time=10, end_time=12),
        ])
        assert [a.id for a in store.sorted_annotations(task)] == ["a", "b", "c"]

    def test_equal_start_times_keep_insertion_order(self, make_task):
        task = make_task(annotations=[
            Annotation(id="x", start_time=0, end_time=5),
            Annotation(id="y", start_time=0, end_time=3),
        ])
        assert [a.id for a in store.sorted_annotations(task)] == ["x", "y"]

    def test_annotation_at_uses_half_open_interval(self, make_task):
        task = store.apply_segments(make_task(), 12)
        first, second, _ = store.sorted_annotations(task)
        assert store.annotation_at(task, 0) == first
        assert store.annotation_at(task, 4.99) == first
        assert store.annotation_at(task, 5) == second
        assert store.annotation_at(task, 12) is None


class TestPolish:
    """Polish goes through the cleanup service and never raises."""

    def test_empty_text_skips_service(self):
        service = Mock()
        result = store.polish(service, "")
        assert result.text == ""
        service.cleanup.assert_not_called()

    def test_returns_service_output(self, fake_service):
        result = store.polish(fake_service, "car go left")
        assert result == AiResult("Polished: car go left")
        fake_service.cleanup.assert_called_once_with("car go left")

    def test_service_exception_falls_back_to_input(self):
        service = Mock()
        service.cleanup.side_effect = RuntimeError("boom")
        result = store.polish(service, "keep me")
        assert result.text == "keep me"
        assert result.used_fallback
