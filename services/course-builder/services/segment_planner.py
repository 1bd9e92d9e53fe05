"""
Segment Planner

Splits a video timeline into fixed-length processing segments and budgets
the number of questions each segment should receive.

Rules:
- Segment i spans [i * d, min((i + 1) * d, total)].
- A trailing segment shorter than the merge threshold is folded into the
  previous one (only when more than one segment exists).
- Each segment gets one question per started minute, capped by the
  per-segment maximum.
"""
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from config.settings import SHORT_SEGMENT_MERGE_SECONDS
from models.course_models import CourseSegment, SegmentStatus, SegmentSummary
from services.timestamps import format_timestamp


@dataclass
class PlannedSegment:
    """A segment before it is persisted"""
    index: int
    start_time: float
    end_time: float
    expected_questions: int
    title: str

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def to_segment(self, course_id: str) -> CourseSegment:
        return CourseSegment(
            course_id=course_id,
            segment_index=self.index,
            start_time=self.start_time,
            end_time=self.end_time,
            title=self.title,
            status=SegmentStatus.PENDING,
        )

    def to_summary(self) -> SegmentSummary:
        return SegmentSummary(
            index=self.index,
            start_time=self.start_time,
            end_time=self.end_time,
            title=self.title,
            expected_questions=self.expected_questions,
        )


@dataclass
class SegmentPlan:
    total_duration: float
    segment_duration: float
    raw_segment_count: int
    segments: List[PlannedSegment] = field(default_factory=list)

    @property
    def total_expected_questions(self) -> int:
        return sum(s.expected_questions for s in self.segments)

    @property
    def merged(self) -> bool:
        return len(self.segments) < self.raw_segment_count


def expected_questions_for(duration: float, max_questions: int) -> int:
    """One question per started minute, capped at max_questions."""
    return min(math.ceil(duration / 60), max_questions)


def decide_segmentation(
    video_duration: Optional[float],
    segment_duration: float,
    fallback_duration: float,
) -> Tuple[float, bool]:
    """
    Decide the working duration and whether the video needs segmenting.

    An unknown duration is treated as a long video of fallback_duration
    seconds so that processing is always split.
    """
    if video_duration:
        return video_duration, video_duration > segment_duration
    return fallback_duration, True


def plan_segments(
    total_duration: float,
    segment_duration: float,
    max_questions_per_segment: int,
    merge_threshold: float = SHORT_SEGMENT_MERGE_SECONDS,
) -> SegmentPlan:
    """Split [0, total_duration] into segments of segment_duration seconds."""
    if segment_duration <= 0:
        raise ValueError("segment_duration must be positive")
    if total_duration <= 0:
        raise ValueError("total_duration must be positive")

    raw_count = math.ceil(total_duration / segment_duration)
    bounds = [
        [i * segment_duration, min((i + 1) * segment_duration, total_duration)]
        for i in range(raw_count)
    ]

    if len(bounds) > 1:
        last_start, last_end = bounds[-1]
        if last_end - last_start < merge_threshold:
            bounds.pop()
            bounds[-1][1] = total_duration

    segments = []
    for i, (start, end) in enumerate(bounds):
        segments.append(PlannedSegment(
            index=i,
            start_time=start,
            end_time=end,
            expected_questions=expected_questions_for(end - start, max_questions_per_segment),
            title=f"Part {i + 1}: {format_timestamp(start)} - {format_timestamp(end)}",
        ))

    return SegmentPlan(
        total_duration=total_duration,
        segment_duration=segment_duration,
        raw_segment_count=raw_count,
        segments=segments,
    )


def plan_single_segment(total_duration: float, max_questions_per_segment: int) -> SegmentPlan:
    """A single segment covering the whole video."""
    segment = PlannedSegment(
        index=0,
        start_time=0,
        end_time=total_duration,
        expected_questions=expected_questions_for(total_duration, max_questions_per_segment),
        title=f"Full Video: {format_timestamp(0)} - {format_timestamp(total_duration)}",
    )
    return SegmentPlan(
        total_duration=total_duration,
        segment_duration=total_duration,
        raw_segment_count=1,
        segments=[segment],
    )
