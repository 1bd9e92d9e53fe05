"""
Segmented Processing Service

Prepares a course for question generation:
1. Determine the video duration (YouTube Data API)
2. Decide whether the video is split into segments
3. Persist the segments and the course's segmentation fields
4. Hand the course to the segment orchestrator

Long videos are split into fixed-length parts so each part can be
processed, and its questions published, independently.
"""
import logging
import math
from typing import List, Optional

from config.settings import CourseBuilderConfig
from models.course_models import (
    InitSegmentedProcessingRequest,
    InitSegmentedProcessingResponse,
    SegmentStatus,
    SegmentSummary,
)
from services.course_repository import CourseRepository
from services.errors import RepositoryError, SegmentedProcessingError
from services.orchestrator_client import OrchestratorClient
from services.progress_tracker import ProgressTracker
from services.segment_planner import (
    SegmentPlan,
    decide_segmentation,
    plan_segments,
    plan_single_segment,
)
from services.timestamps import format_timestamp
from services.youtube_client import InvalidYouTubeURLError, YouTubeClient, extract_video_id


logger = logging.getLogger(__name__)


class SegmentedProcessingService:
    """Initialises segmented processing for a course"""

    def __init__(
        self,
        repository: CourseRepository,
        youtube: YouTubeClient,
        orchestrator: OrchestratorClient,
        progress: Optional[ProgressTracker] = None,
        config: Optional[CourseBuilderConfig] = None,
    ):
        self.repository = repository
        self.youtube = youtube
        self.orchestrator = orchestrator
        self.progress = progress or ProgressTracker(repository)
        self.config = config or CourseBuilderConfig()

    async def initialize(self, request: InitSegmentedProcessingRequest) -> InitSegmentedProcessingResponse:
        request = request.model_copy(update={
            "segment_duration": request.segment_duration or self.config.segment_duration,
            "max_questions_per_segment": request.max_questions_per_segment or self.config.max_questions_per_segment,
        })
        course_id = request.course_id
        segment_duration = request.segment_duration

        logger.info(f"[SEGMENTS] Initializing segmented processing for course {course_id}")
        logger.info(f"[SEGMENTS]   YouTube URL: {request.youtube_url}")
        logger.info(f"[SEGMENTS]   Segment duration: {segment_duration}s ({segment_duration / 60:g} minutes)")
        logger.info(f"[SEGMENTS]   Max questions per segment: {request.max_questions_per_segment}")

        video_id = extract_video_id(request.youtube_url)
        if not video_id:
            raise InvalidYouTubeURLError(request.youtube_url)

        video_duration = await self.youtube.get_video_duration(video_id)
        total_duration, should_segment = decide_segmentation(
            video_duration, segment_duration, self.config.unknown_duration_fallback
        )
        if not video_duration:
            logger.warning("[SEGMENTS] Cannot determine video duration, assuming it needs segmentation")

        try:
            await self.repository.update_course(course_id, {
                "is_segmented": should_segment,
                "total_segments": math.ceil(total_duration / segment_duration) if should_segment else 1,
                "segment_duration": segment_duration,
                "total_duration": max(1, round(total_duration or 0)),
            })
        except RepositoryError as e:
            raise SegmentedProcessingError(f"Failed to update course: {e}", course_id=course_id) from e

        logger.info(f"[SEGMENTS] Updated course with duration: {round(total_duration)}s ({round(total_duration / 60)}m)")

        if not should_segment:
            return await self._initialize_single(request, total_duration)
        return await self._initialize_segmented(request, total_duration)

    async def _initialize_single(
        self,
        request: InitSegmentedProcessingRequest,
        total_duration: float,
    ) -> InitSegmentedProcessingResponse:
        logger.info("[SEGMENTS] Video is short enough to process in one segment")
        plan = plan_single_segment(total_duration, request.max_questions_per_segment)

        created = await self._insert_plan(request.course_id, plan)
        logger.info("[SEGMENTS] Created single segment for full video")

        await self._record_planning(request, plan, segmented=False, segment_duration=total_duration)

        result = await self.orchestrator.trigger(request.course_id)

        return InitSegmentedProcessingResponse(
            segmented=False,
            total_segments=1,
            segment_duration=total_duration,
            video_duration=total_duration,
            message="Video will be processed as a single segment with live question generation",
            segments=created,
            total_expected_questions=plan.total_expected_questions,
            result=result,
        )

    async def _initialize_segmented(
        self,
        request: InitSegmentedProcessingRequest,
        total_duration: float,
    ) -> InitSegmentedProcessingResponse:
        course_id = request.course_id
        plan = plan_segments(
            total_duration,
            request.segment_duration,
            request.max_questions_per_segment,
            merge_threshold=self.config.short_segment_merge_seconds,
        )
        logger.info(f"[SEGMENTS] Creating {plan.raw_segment_count} segments for video")

        if plan.merged:
            logger.info("[SEGMENTS] Last segment too short, merged with previous segment")
        for segment in plan.segments:
            logger.info(
                f"[SEGMENTS]   Segment {segment.index + 1}: {format_timestamp(segment.start_time)} - "
                f"{format_timestamp(segment.end_time)} ({math.ceil(segment.duration / 60)} min) "
                f"-> {segment.expected_questions} questions"
            )
        logger.info(
            f"[SEGMENTS] Final segment count: {len(plan.segments)} (adjusted from {plan.raw_segment_count})"
        )

        created = await self._insert_plan(course_id, plan)
        logger.info(f"[SEGMENTS] Created {len(created)} segments")
        logger.info(
            f"[SEGMENTS]   Total expected questions: {plan.total_expected_questions} "
            f"(1 per minute, max {request.max_questions_per_segment} per segment)"
        )

        try:
            await self.repository.update_course(course_id, {"total_segments": len(created)})
        except RepositoryError as e:
            logger.error(f"[SEGMENTS] Failed to update segment count: {e}")

        await self._record_planning(
            request, plan, segmented=True, segment_duration=request.segment_duration
        )

        result = await self.orchestrator.trigger(course_id)

        return InitSegmentedProcessingResponse(
            segmented=True,
            total_segments=len(created),
            segment_duration=request.segment_duration,
            video_duration=total_duration,
            message=f"Video segmented into {len(created)} parts. Processing started.",
            segments=created,
            total_expected_questions=plan.total_expected_questions,
            result=result,
        )

    async def _insert_plan(self, course_id: str, plan: SegmentPlan) -> List[SegmentSummary]:
        """Persist planned segments and return their summaries."""
        try:
            rows = await self.repository.insert_segments(
                [segment.to_segment(course_id) for segment in plan.segments]
            )
        except RepositoryError as e:
            noun = "segments" if len(plan.segments) > 1 else "segment"
            raise SegmentedProcessingError(f"Failed to create {noun}: {e}", course_id=course_id) from e

        expected = {s.index: s.expected_questions for s in plan.segments}
        if not rows:
            return [segment.to_summary() for segment in plan.segments]

        return [
            SegmentSummary(
                index=row["segment_index"],
                start_time=row["start_time"],
                end_time=row["end_time"],
                title=row["title"],
                status=row.get("status") or SegmentStatus.PENDING,
                expected_questions=expected.get(row["segment_index"]),
            )
            for row in rows
        ]

    async def _record_planning(
        self,
        request: InitSegmentedProcessingRequest,
        plan: SegmentPlan,
        segmented: bool,
        segment_duration: float,
    ) -> None:
        if not request.session_id:
            return
        try:
            await self.progress.start_planning(
                request.course_id,
                request.session_id,
                segmented=segmented,
                total_segments=len(plan.segments),
                segment_duration=segment_duration,
                video_duration=plan.total_duration,
            )
        except RepositoryError as e:
            logger.warning(f"[SEGMENTS] Failed to initialize progress tracking: {e}")
