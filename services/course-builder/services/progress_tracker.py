"""
Progress Tracker

Writes the quiz_generation_progress rows the frontend polls while a course
is being built. There is one row per (course_id, session_id); each stage
transition replaces the previous state.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from models.course_models import ProgressRecord, ProgressStage
from services.course_repository import CourseRepository
from services.errors import RepositoryError


logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProgressTracker:
    """Stage transitions for a course generation session"""

    def __init__(self, repository: CourseRepository):
        self.repository = repository

    async def _upsert(self, record: ProgressRecord) -> Optional[ProgressRecord]:
        """
        Replace the session's progress row. Stage writes never raise: a failed
        write is logged and None is returned.
        """
        try:
            await self.repository.upsert_progress(record)
        except RepositoryError as e:
            logger.error(
                f"[PROGRESS] Could not record {record.stage.value} for "
                f"{record.course_id}/{record.session_id}: {e}"
            )
            return None
        logger.info(
            f"[PROGRESS] {record.course_id}/{record.session_id}: {record.stage.value} "
            f"({record.overall_progress:.0%}) {record.current_step}"
        )
        return record

    async def start_initialization(
        self,
        course_id: str,
        session_id: str,
        youtube_url: str,
        max_questions: int,
        enable_quality_verification: bool = False,
        use_enhanced: bool = False,
    ) -> Optional[ProgressRecord]:
        return await self._upsert(ProgressRecord(
            course_id=course_id,
            session_id=session_id,
            stage=ProgressStage.INITIALIZATION,
            stage_progress=0.0,
            overall_progress=0.0,
            current_step="Analyzing video for optimal processing",
            metadata={
                "youtube_url": youtube_url,
                "max_questions": max_questions,
                "enable_quality_verification": enable_quality_verification,
                "use_enhanced": use_enhanced,
                "started_at": _now(),
            },
        ))

    async def mark_background(
        self,
        course_id: str,
        session_id: str,
        youtube_url: str = "",
        max_questions: Optional[int] = None,
    ) -> Optional[ProgressRecord]:
        """Initialisation outlived the request and continues in the background."""
        return await self._upsert(ProgressRecord(
            course_id=course_id,
            session_id=session_id,
            stage=ProgressStage.INITIALIZATION,
            stage_progress=0.5,
            overall_progress=0.1,
            current_step="Processing started in background - this may take a few minutes",
            metadata={
                "youtube_url": youtube_url,
                "max_questions": max_questions,
                "background_processing": True,
                "started_at": _now(),
            },
        ))

    async def mark_segmented(
        self,
        course_id: str,
        session_id: str,
        total_segments: int,
        segment_duration: float,
        video_duration: float,
        segments: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[ProgressRecord]:
        return await self._upsert(ProgressRecord(
            course_id=course_id,
            session_id=session_id,
            stage=ProgressStage.PLANNING,
            stage_progress=0.1,
            overall_progress=0.1,
            current_step=f"Processing segment 1 of {total_segments}",
            metadata={
                "is_segmented": True,
                "total_segments": total_segments,
                "segment_duration": segment_duration,
                "video_duration": video_duration,
                "segments": segments or [],
                "updated_at": _now(),
            },
        ))

    async def mark_failed(
        self,
        course_id: str,
        session_id: str,
        step: str,
        error_message: str,
    ) -> Optional[ProgressRecord]:
        """Record a failure; a failed write must not hide the error being reported."""
        return await self._upsert(ProgressRecord(
            course_id=course_id,
            session_id=session_id,
            stage=ProgressStage.FAILED,
            stage_progress=0.0,
            overall_progress=0.05,
            current_step=step,
            metadata={"error_message": error_message, "failed_at": _now()},
        ))

    async def start_planning(
        self,
        course_id: str,
        session_id: str,
        segmented: bool,
        total_segments: int,
        segment_duration: float,
        video_duration: float,
    ) -> ProgressRecord:
        """Planning row inserted by segmented initialisation."""
        record = ProgressRecord(
            course_id=course_id,
            session_id=session_id,
            stage=ProgressStage.PLANNING,
            stage_progress=0.0,
            overall_progress=0.0,
            current_step=(
                "Starting segmented processing" if segmented
                else "Starting single segment processing"
            ),
            metadata={
                "total_segments": total_segments,
                "segment_duration": segment_duration,
                "video_duration": video_duration,
            },
        )
        await self.repository.insert_progress(record)
        logger.info(f"[PROGRESS] {course_id}/{session_id}: {record.current_step}")
        return record
