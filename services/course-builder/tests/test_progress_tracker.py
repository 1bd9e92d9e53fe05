"""
Tests for quiz generation progress rows.
"""

import pytest

from conftest import COURSE_ID, SESSION_ID, VIDEO_URL
from models.course_models import ProgressRecord, ProgressStage
from services.errors import RepositoryError


class TestProgressTracker:

    @pytest.mark.asyncio
    async def test_start_initialization(self, progress, mock_repository):
        record = await progress.start_initialization(
            COURSE_ID, SESSION_ID, VIDEO_URL, 5,
            enable_quality_verification=True,
        )

        mock_repository.upsert_progress.assert_awaited_once_with(record)
        assert record.stage == ProgressStage.INITIALIZATION
        assert record.stage_progress == 0.0
        assert record.overall_progress == 0.0
        assert record.current_step == "Analyzing video for optimal processing"
        assert record.metadata["youtube_url"] == VIDEO_URL
        assert record.metadata["enable_quality_verification"] is True
        assert "started_at" in record.metadata

    @pytest.mark.asyncio
    async def test_mark_background(self, progress):
        record = await progress.mark_background(COURSE_ID, SESSION_ID, VIDEO_URL, 5)

        assert record.stage == ProgressStage.INITIALIZATION
        assert record.stage_progress == 0.5
        assert record.overall_progress == 0.1
        assert record.metadata["background_processing"] is True

    @pytest.mark.asyncio
    async def test_mark_segmented(self, progress):
        record = await progress.mark_segmented(
            COURSE_ID, SESSION_ID, total_segments=3, segment_duration=300, video_duration=900,
        )

        assert record.stage == ProgressStage.PLANNING
        assert record.current_step == "Processing segment 1 of 3"
        assert record.metadata["is_segmented"] is True
        assert record.metadata["segments"] == []

    @pytest.mark.asyncio
    async def test_mark_failed(self, progress):
        record = await progress.mark_failed(COURSE_ID, SESSION_ID, "System error occurred", "boom")

        assert record.stage == ProgressStage.FAILED
        assert record.overall_progress == 0.05
        assert record.metadata["error_message"] == "boom"

    @pytest.mark.asyncio
    async def test_mark_failed_swallows_write_errors(self, progress, mock_repository):
        mock_repository.upsert_progress.side_effect = RepositoryError("down", table="quiz_generation_progress")

        assert await progress.mark_failed(COURSE_ID, SESSION_ID, "System error occurred", "boom") is None

    @pytest.mark.asyncio
    async def test_stage_writes_swallow_errors(self, progress, mock_repository):
        mock_repository.upsert_progress.side_effect = RepositoryError("down", table="quiz_generation_progress")

        assert await progress.start_initialization(COURSE_ID, SESSION_ID, VIDEO_URL, 5) is None
        assert await progress.mark_background(COURSE_ID, SESSION_ID) is None
        assert await progress.mark_segmented(
            COURSE_ID, SESSION_ID, total_segments=2, segment_duration=300, video_duration=600,
        ) is None
        assert mock_repository.upsert_progress.await_count == 3

    @pytest.mark.asyncio
    async def test_start_planning_propagates_errors(self, progress, mock_repository):
        mock_repository.insert_progress.side_effect = RepositoryError("down", table="quiz_generation_progress")

        with pytest.raises(RepositoryError):
            await progress.start_planning(
                COURSE_ID, SESSION_ID, segmented=False, total_segments=1, segment_duration=120, video_duration=120,
            )

    @pytest.mark.asyncio
    async def test_start_planning_inserts(self, progress, mock_repository):
        record = await progress.start_planning(
            COURSE_ID, SESSION_ID, segmented=True, total_segments=2, segment_duration=300, video_duration=600,
        )

        mock_repository.insert_progress.assert_awaited_once_with(record)
        mock_repository.upsert_progress.assert_not_awaited()
        assert record.current_step == "Starting segmented processing"
        assert record.metadata == {"total_segments": 2, "segment_duration": 300, "video_duration": 600}

    def test_row_serialises_stage_value(self):
        row = ProgressRecord(course_id="c", session_id="s", stage=ProgressStage.FAILED).to_row()
        assert row["stage"] == "failed"
