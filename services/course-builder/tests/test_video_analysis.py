"""
Tests for smart video analysis: cache reuse, course creation, timeout
handling and failure reporting.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from conftest import COURSE_ID, SESSION_ID, VIDEO_URL
from models.course_models import (
    AnalyzeVideoRequest,
    Course,
    InitSegmentedProcessingResponse,
    ProgressStage,
    SegmentSummary,
)
from services.errors import MissingFieldsError, RepositoryError, SegmentedProcessingError
from services.segmented_processing import SegmentedProcessingService
from services.video_analysis import (
    BACKGROUND_HINT,
    FALLBACK_DESCRIPTION,
    VideoAnalysisService,
    extract_video_summary,
)
from services.youtube_client import InvalidYouTubeURLError, VideoMetadata


def make_request(**overrides):
    fields = {"youtube_url": VIDEO_URL, "session_id": SESSION_ID}
    fields.update(overrides)
    return AnalyzeVideoRequest(**fields)


def single_segment_result(result=None):
    return InitSegmentedProcessingResponse(
        segmented=False,
        total_segments=1,
        segment_duration=240,
        video_duration=240,
        message="Video will be processed as a single segment with live question generation",
        result=result,
    )


def segmented_result():
    return InitSegmentedProcessingResponse(
        segmented=True,
        total_segments=2,
        segment_duration=300,
        video_duration=600,
        message="Video segmented into 2 parts. Processing started.",
        segments=[
            SegmentSummary(index=0, start_time=0, end_time=300, title="Part 1: 0:00 - 5:00"),
            SegmentSummary(index=1, start_time=300, end_time=600, title="Part 2: 5:00 - 10:00"),
        ],
    )


@pytest.fixture
def segmented_processing():
    processing = AsyncMock(spec=SegmentedProcessingService)
    processing.initialize.return_value = single_segment_result()
    return processing


@pytest.fixture
def service(mock_repository, mock_youtube, segmented_processing, progress, config):
    return VideoAnalysisService(mock_repository, mock_youtube, segmented_processing, progress, config)


def progress_records(repository):
    return [call.args[0] for call in repository.upsert_progress.await_args_list]


class TestValidation:

    @pytest.mark.asyncio
    async def test_missing_session(self, service):
        with pytest.raises(MissingFieldsError):
            await service.analyze(make_request(session_id=None))

    @pytest.mark.asyncio
    async def test_missing_url(self, service):
        with pytest.raises(MissingFieldsError):
            await service.analyze(make_request(youtube_url=None))

    @pytest.mark.asyncio
    async def test_invalid_url(self, service, mock_repository):
        with pytest.raises(InvalidYouTubeURLError):
            await service.analyze(make_request(youtube_url="https://vimeo.com/1"))
        mock_repository.create_course.assert_not_awaited()


class TestCache:

    @pytest.mark.asyncio
    async def test_cached_course_with_questions(self, service, mock_repository, segmented_processing):
        mock_repository.find_courses_by_url.return_value = [
            Course(id="empty", title="Old"),
            Course(id="cached", title="Graphs", description="Graph course"),
        ]
        mock_repository.course_has_questions.side_effect = lambda course_id: course_id == "cached"

        response = await service.analyze(make_request(youtube_url="https://youtu.be/dQw4w9WgXcQ"))

        mock_repository.find_courses_by_url.assert_awaited_once_with(VIDEO_URL)
        assert response.cached is True
        assert response.segmented is False
        assert response.course_id == "cached"
        assert response.data.title == "Graphs"
        assert response.message == "Course loaded from cache"
        segmented_processing.initialize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_courses_without_questions_are_ignored(self, service, mock_repository):
        mock_repository.find_courses_by_url.return_value = [Course(id="empty", title="Old")]

        response = await service.analyze(make_request())

        assert response.course_id == COURSE_ID
        mock_repository.create_course.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cache_disabled(self, service, mock_repository):
        await service.analyze(make_request(useCache=False))
        mock_repository.find_courses_by_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cache_failure_creates_course(self, service, mock_repository):
        mock_repository.find_courses_by_url.side_effect = RepositoryError("boom", table="courses")

        response = await service.analyze(make_request())

        assert response.course_id == COURSE_ID
        mock_repository.create_course.assert_awaited_once()


class TestCourseCreation:

    @pytest.mark.asyncio
    async def test_title_from_oembed(self, service, mock_repository, mock_youtube):
        mock_youtube.fetch_metadata.return_value = VideoMetadata(title="Intro to Graphs", author_name="CS Channel")

        await service.analyze(make_request())

        course_data = mock_repository.create_course.await_args.args[0]
        assert course_data["title"] == "Intro to Graphs"
        assert "CS Channel" in course_data["description"]
        assert course_data["youtube_url"] == VIDEO_URL
        assert course_data["published"] is False
        assert "created_by" not in course_data

    @pytest.mark.asyncio
    async def test_fallback_title(self, service, mock_repository):
        await service.analyze(make_request())

        course_data = mock_repository.create_course.await_args.args[0]
        assert course_data["title"] == "YouTube Course (dQw4w9WgXcQ)"
        assert course_data["description"] == FALLBACK_DESCRIPTION

    @pytest.mark.asyncio
    async def test_authenticated_creator_recorded(self, service, mock_repository):
        mock_repository.get_user_id.return_value = "user-1"

        await service.analyze(make_request(), auth_token="token")

        mock_repository.get_user_id.assert_awaited_once_with("token")
        assert mock_repository.create_course.await_args.args[0]["created_by"] == "user-1"
        mock_repository.record_course_creation.assert_awaited_once_with("user-1", COURSE_ID, role="creator")

    @pytest.mark.asyncio
    async def test_creation_record_failure_is_not_fatal(self, service, mock_repository):
        mock_repository.get_user_id.return_value = "user-1"
        mock_repository.record_course_creation.side_effect = RepositoryError("boom", table="user_course_creations")

        response = await service.analyze(make_request(), auth_token="token")
        assert response.success is True

    @pytest.mark.asyncio
    async def test_existing_course_id_skips_creation(self, service, mock_repository, segmented_processing):
        await service.analyze(make_request(course_id="existing"))

        mock_repository.create_course.assert_not_awaited()
        mock_repository.find_courses_by_url.assert_not_awaited()
        assert segmented_processing.initialize.await_args.args[0].course_id == "existing"


class TestInitialization:

    @pytest.mark.asyncio
    async def test_init_request_built_from_analysis_request(self, service, segmented_processing):
        await service.analyze(make_request(max_questions=3, segment_duration=240, useEnhanced=True))

        init_request = segmented_processing.initialize.await_args.args[0]
        assert init_request.course_id == COURSE_ID
        assert init_request.session_id == SESSION_ID
        assert init_request.max_questions_per_segment == 3
        assert init_request.segment_duration == 240
        assert init_request.use_enhanced is True

    @pytest.mark.asyncio
    async def test_unset_limits_come_from_config(self, service, segmented_processing, config):
        config.segment_duration = 600
        config.max_questions_per_segment = 2

        await service.analyze(make_request())

        init_request = segmented_processing.initialize.await_args.args[0]
        assert init_request.segment_duration == 600
        assert init_request.max_questions_per_segment == 2

    @pytest.mark.asyncio
    async def test_progress_starts_at_initialization(self, service, mock_repository):
        await service.analyze(make_request(max_questions=4))

        first = progress_records(mock_repository)[0]
        assert first.stage == ProgressStage.INITIALIZATION
        assert first.current_step == "Analyzing video for optimal processing"
        assert first.metadata["max_questions"] == 4

    @pytest.mark.asyncio
    async def test_segmented_response(self, service, mock_repository, segmented_processing):
        segmented_processing.initialize.return_value = segmented_result()

        response = await service.analyze(make_request())

        assert response.segmented is True
        assert response.total_segments == 2
        assert len(response.segments) == 2
        assert response.message == "Video segmented into 2 parts. Processing started."

        last = progress_records(mock_repository)[-1]
        assert last.stage == ProgressStage.PLANNING
        assert last.current_step == "Processing segment 1 of 2"
        assert last.metadata["is_segmented"] is True
        assert len(last.metadata["segments"]) == 2

    @pytest.mark.asyncio
    async def test_single_segment_response(self, service, mock_repository):
        response = await service.analyze(make_request())

        assert response.segmented is False
        assert response.cached is False
        assert response.message == "Video processing completed"
        assert response.data.title == "Video"
        assert response.data.description == "Desc"
        mock_repository.get_course.assert_awaited_once_with(COURSE_ID)

    @pytest.mark.asyncio
    async def test_single_segment_uses_video_summary(self, service, mock_repository, segmented_processing):
        result = {"pipeline_results": {"planning": {"video_summary": "A tour of graph search."}}}
        segmented_processing.initialize.return_value = single_segment_result(result)

        response = await service.analyze(make_request())

        assert response.data.description == "A tour of graph search."
        mock_repository.update_course.assert_awaited_once_with(COURSE_ID, {"description": "A tour of graph search."})

    @pytest.mark.asyncio
    async def test_single_segment_falls_back_when_course_reload_fails(self, service, mock_repository):
        mock_repository.get_course.side_effect = RepositoryError("boom", table="courses")

        response = await service.analyze(make_request())

        assert response.data.title == "YouTube Course (dQw4w9WgXcQ)"
        assert response.data.description == FALLBACK_DESCRIPTION


class TestTimeout:

    @pytest.mark.asyncio
    async def test_slow_initialization_continues_in_background(
        self, service, mock_repository, segmented_processing, config
    ):
        config.init_timeout_seconds = 0.01
        release = asyncio.Event()

        async def slow_initialize(init_request):
            await release.wait()
            return single_segment_result()

        segmented_processing.initialize.side_effect = slow_initialize

        response = await service.analyze(make_request())

        assert response.background_processing is True
        assert response.processing_hint == BACKGROUND_HINT
        assert response.course_id == COURSE_ID

        last = progress_records(mock_repository)[-1]
        assert last.current_step == "Processing started in background - this may take a few minutes"
        assert last.metadata["background_processing"] is True

        pending = list(service._background_tasks)
        assert len(pending) == 1
        release.set()
        await asyncio.gather(*pending)
        await asyncio.sleep(0)
        assert not service._background_tasks


class TestFailures:

    @pytest.mark.asyncio
    async def test_initialization_failure(self, service, mock_repository, segmented_processing):
        segmented_processing.initialize.side_effect = SegmentedProcessingError("Failed to update course: denied")

        with pytest.raises(SegmentedProcessingError) as exc_info:
            await service.analyze(make_request())

        assert str(exc_info.value) == "Processing initialization failed"
        assert exc_info.value.details == "Failed to update course: denied"

        failed = [r for r in progress_records(mock_repository) if r.stage == ProgressStage.FAILED]
        assert len(failed) == 1
        assert failed[0].current_step == "Processing initialization failed"
        assert failed[0].metadata["error_message"] == "Failed to update course: denied"

    @pytest.mark.asyncio
    async def test_system_error_marks_progress_failed(self, service, mock_repository, segmented_processing):
        mock_repository.get_user_id.side_effect = RepositoryError("auth lookup failed", table="auth")

        with pytest.raises(RepositoryError):
            await service.analyze(make_request(course_id=COURSE_ID), auth_token="token")

        failed = progress_records(mock_repository)[-1]
        assert failed.stage == ProgressStage.FAILED
        assert failed.current_step == "System error occurred"
        assert failed.course_id == COURSE_ID
        segmented_processing.initialize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_progress_write_failures_do_not_abort(self, service, mock_repository, segmented_processing):
        segmented_processing.initialize.return_value = segmented_result()
        mock_repository.upsert_progress.side_effect = RepositoryError("progress down", table="quiz_generation_progress")

        response = await service.analyze(make_request())

        assert response.success is True
        assert response.segmented is True
        assert response.course_id == COURSE_ID
        segmented_processing.initialize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_summary_write_failure_keeps_success(self, service, mock_repository, segmented_processing):
        result = {"pipeline_results": {"planning": {"video_summary": "S"}}}
        segmented_processing.initialize.return_value = single_segment_result(result)
        mock_repository.update_course.side_effect = RepositoryError("boom", table="courses")

        response = await service.analyze(make_request())

        assert response.message == "Video processing completed"
        assert response.data.description == "S"
        stages = [r.stage for r in progress_records(mock_repository)]
        assert ProgressStage.FAILED not in stages

    @pytest.mark.asyncio
    async def test_course_creation_failure_is_not_marked(self, service, mock_repository):
        mock_repository.create_course.side_effect = RepositoryError("denied", table="courses")

        with pytest.raises(RepositoryError):
            await service.analyze(make_request())
        mock_repository.upsert_progress.assert_not_awaited()


def test_extract_video_summary():
    assert extract_video_summary(None) is None
    assert extract_video_summary({"status": "ok"}) is None
    assert extract_video_summary({"pipeline_results": {"planning": {"video_summary": "S"}}}) == "S"
