"""
Smart Video Analysis Service

Entry point of course creation. Given a YouTube URL and a client session:
1. Reuse a cached course for the same video when one already has questions
2. Otherwise create the course record (title from oEmbed)
3. Start progress tracking for the session
4. Run segmented initialisation, bounded by a timeout

When initialisation outlives the timeout it keeps running in the
background; the client follows progress through quiz_generation_progress.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Set

from config.settings import CourseBuilderConfig
from models.course_models import (
    AnalyzeVideoRequest,
    AnalyzeVideoResponse,
    CourseSummary,
    InitSegmentedProcessingRequest,
    InitSegmentedProcessingResponse,
)
from services.course_repository import CourseRepository
from services.errors import MissingFieldsError, RepositoryError, SegmentedProcessingError
from services.progress_tracker import ProgressTracker
from services.segmented_processing import SegmentedProcessingService
from services.youtube_client import (
    InvalidYouTubeURLError,
    YouTubeClient,
    generate_fallback_title,
    is_valid_youtube_url,
    sanitize_youtube_url,
)


logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = (
    "AI-powered interactive course from YouTube video with perfectly timed "
    "questions to enhance learning."
)
BACKGROUND_HINT = (
    "The initial request timed out but processing continues. "
    "Please wait for real-time updates."
)


def author_description(author_name: str) -> str:
    return (
        f'Interactive course from "{author_name}" - Learn through AI-generated '
        "questions perfectly timed with the video content."
    )


def extract_video_summary(result: Optional[Dict[str, Any]]) -> Optional[str]:
    """AI summary produced by the planning stage, when the orchestrator returned one."""
    if not isinstance(result, dict):
        return None
    planning = (result.get("pipeline_results") or {}).get("planning") or {}
    return planning.get("video_summary") or None


class VideoAnalysisService:
    """Creates (or reuses) a course and starts question generation"""

    def __init__(
        self,
        repository: CourseRepository,
        youtube: YouTubeClient,
        segmented_processing: SegmentedProcessingService,
        progress: Optional[ProgressTracker] = None,
        config: Optional[CourseBuilderConfig] = None,
    ):
        self.repository = repository
        self.youtube = youtube
        self.segmented_processing = segmented_processing
        self.progress = progress or ProgressTracker(repository)
        self.config = config or CourseBuilderConfig()
        self._background_tasks: Set[asyncio.Task] = set()

    async def analyze(self, request: AnalyzeVideoRequest, auth_token: Optional[str] = None) -> AnalyzeVideoResponse:
        if not request.youtube_url or not request.session_id:
            raise MissingFieldsError("Missing required fields: youtube_url and session_id are required")
        if not is_valid_youtube_url(request.youtube_url):
            raise InvalidYouTubeURLError(request.youtube_url)

        request = request.model_copy(update={
            "max_questions": request.max_questions or self.config.max_questions_per_segment,
            "segment_duration": request.segment_duration or self.config.segment_duration,
        })
        session_id = request.session_id
        course_id = request.course_id

        logger.info("[ANALYZE] Starting smart video analysis...")
        logger.info(f"[ANALYZE]   YouTube URL: {request.youtube_url}")
        logger.info(f"[ANALYZE]   Session ID: {session_id}")
        logger.info(f"[ANALYZE]   Use Cache: {request.use_cache}")
        logger.info(f"[ANALYZE]   Enhanced Mode: {request.use_enhanced}")

        try:
            user_id = await self.repository.get_user_id(auth_token) if auth_token else None

            if request.use_cache and not course_id:
                cached = await self._find_cached(request)
                if cached:
                    return cached

            fallback = CourseSummary()
            if not course_id:
                course_id, fallback = await self._create_course(request.youtube_url, user_id)

            logger.info("[ANALYZE] Initializing progress tracking...")
            await self.progress.start_initialization(
                course_id,
                session_id,
                youtube_url=request.youtube_url,
                max_questions=request.max_questions,
                enable_quality_verification=request.enable_quality_verification,
                use_enhanced=request.use_enhanced,
            )

            init_result = await self._initialize_with_timeout(request, course_id)
            if init_result is None:
                await self.progress.mark_background(
                    course_id, session_id, request.youtube_url, request.max_questions
                )
                return AnalyzeVideoResponse(
                    message="Video processing started in background. Progress will update automatically.",
                    session_id=session_id,
                    course_id=course_id,
                    background_processing=True,
                    processing_hint=BACKGROUND_HINT,
                )

            if init_result.segmented:
                return await self._segmented_response(request, course_id, init_result)
            return await self._single_segment_response(request, course_id, init_result, fallback)

        except (SegmentedProcessingError, InvalidYouTubeURLError):
            raise
        except Exception as e:
            logger.error(f"[ANALYZE] Smart video analysis failed: {e}")
            if course_id:
                await self.progress.mark_failed(course_id, session_id, "System error occurred", str(e))
            raise

    async def _find_cached(self, request: AnalyzeVideoRequest) -> Optional[AnalyzeVideoResponse]:
        logger.info("[ANALYZE] Checking cache for existing analysis...")
        sanitized_url = sanitize_youtube_url(request.youtube_url)

        try:
            courses = await self.repository.find_courses_by_url(sanitized_url)
            for course in courses:
                if await self.repository.course_has_questions(course.id):
                    logger.info(f"[ANALYZE] Found cached course with questions: {course.id}")
                    logger.info(f"[ANALYZE]   Title: {course.title}")
                    logger.info(f"[ANALYZE]   Published: {course.published}")
                    return AnalyzeVideoResponse(
                        message="Course loaded from cache",
                        session_id=request.session_id,
                        course_id=course.id,
                        cached=True,
                        segmented=False,
                        data=CourseSummary(title=course.title, description=course.description),
                    )
        except RepositoryError as e:
            logger.warning(f"[ANALYZE] Cache lookup failed, creating a new course: {e}")
            return None

        if courses:
            logger.info("[ANALYZE] Found courses but none have questions, will create new course")
        return None

    async def _create_course(self, youtube_url: str, user_id: Optional[str]):
        sanitized_url = sanitize_youtube_url(youtube_url)
        logger.info("[ANALYZE] Creating new course record...")

        metadata = await self.youtube.fetch_metadata(sanitized_url)
        title = metadata.title if metadata else generate_fallback_title(sanitized_url)
        description = author_description(metadata.author_name) if metadata else FALLBACK_DESCRIPTION

        logger.info(f"[ANALYZE]   Video Title: {title}")
        logger.info(f"[ANALYZE]   Author: {metadata.author_name if metadata else 'Unknown'}")
        logger.info(f"[ANALYZE]   Creating course for user: {user_id or 'Anonymous'}")

        course_data: Dict[str, Any] = {
            "title": title,
            "description": description,
            "youtube_url": sanitized_url,
            "published": False,
        }
        if user_id:
            course_data["created_by"] = user_id

        course = await self.repository.create_course(course_data)
        logger.info(f"[ANALYZE] Course created: {course.id}")

        if user_id:
            try:
                await self.repository.record_course_creation(user_id, course.id, role="creator")
                logger.info("[ANALYZE] Course creation recorded in user_course_creations")
            except RepositoryError as e:
                logger.error(f"[ANALYZE] Failed to record course creation, but continuing: {e}")

        return course.id, CourseSummary(title=title, description=description)

    async def _run_initialization(
        self,
        init_request: InitSegmentedProcessingRequest,
    ) -> InitSegmentedProcessingResponse:
        """Segmented initialisation; failures are recorded on the session's progress row."""
        try:
            return await self.segmented_processing.initialize(init_request)
        except Exception as e:
            logger.error(f"[ANALYZE] Smart processing initialization failed: {e}")
            await self.progress.mark_failed(
                init_request.course_id,
                init_request.session_id,
                "Processing initialization failed",
                str(e),
            )
            raise

    async def _initialize_with_timeout(
        self,
        request: AnalyzeVideoRequest,
        course_id: str,
    ) -> Optional[InitSegmentedProcessingResponse]:
        """
        Returns the initialisation result, or None when it is still running
        after init_timeout_seconds. In that case it continues as a background
        task.
        """
        logger.info("[ANALYZE] Calling smart processing initialization...")
        init_request = InitSegmentedProcessingRequest(
            course_id=course_id,
            youtube_url=request.youtube_url,
            session_id=request.session_id,
            max_questions_per_segment=request.max_questions,
            segment_duration=request.segment_duration,
            use_enhanced=request.use_enhanced,
        )
        task = asyncio.create_task(self._run_initialization(init_request))

        try:
            result = await asyncio.wait_for(asyncio.shield(task), timeout=self.config.init_timeout_seconds)
        except asyncio.TimeoutError:
            logger.info("[ANALYZE] Initialization timed out, processing continues in the background")
            self._background_tasks.add(task)
            task.add_done_callback(self._background_done)
            return None
        except Exception as e:
            raise SegmentedProcessingError(
                "Processing initialization failed", course_id=course_id, details=str(e)
            ) from e

        logger.info(f"[ANALYZE] Smart processing initialized (segmented={result.segmented})")
        return result

    def _background_done(self, task: asyncio.Task):
        self._background_tasks.discard(task)
        if task.cancelled():
            logger.warning("[ANALYZE] Background initialization was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"[ANALYZE] Background initialization failed: {error}")
        else:
            logger.info(f"[ANALYZE] Background initialization finished: {task.result().message}")

    async def _segmented_response(
        self,
        request: AnalyzeVideoRequest,
        course_id: str,
        init_result: InitSegmentedProcessingResponse,
    ) -> AnalyzeVideoResponse:
        logger.info(f"[ANALYZE] Video will be processed in {init_result.total_segments} segments")
        await self.progress.mark_segmented(
            course_id,
            request.session_id,
            total_segments=init_result.total_segments,
            segment_duration=init_result.segment_duration,
            video_duration=init_result.video_duration,
            segments=[s.model_dump(mode="json") for s in init_result.segments],
        )
        return AnalyzeVideoResponse(
            message=f"Video segmented into {init_result.total_segments} parts. Processing started.",
            session_id=request.session_id,
            course_id=course_id,
            segmented=True,
            segments=init_result.segments,
            total_segments=init_result.total_segments,
            video_duration=init_result.video_duration,
        )

    async def _single_segment_response(
        self,
        request: AnalyzeVideoRequest,
        course_id: str,
        init_result: InitSegmentedProcessingResponse,
        fallback: CourseSummary,
    ) -> AnalyzeVideoResponse:
        logger.info("[ANALYZE] Video processed without segmentation")

        # The orchestrator may still be writing the course row
        await asyncio.sleep(self.config.post_init_settle_seconds)

        course = None
        try:
            course = await self.repository.get_course(course_id)
        except RepositoryError as e:
            logger.error(f"[ANALYZE] Failed to fetch course data: {e}")

        title = (course.title if course else "") or fallback.title
        description = (course.description if course else "") or fallback.description

        summary = extract_video_summary(init_result.result)
        if summary:
            logger.info("[ANALYZE] Using AI-generated video summary for description")
            description = summary
            try:
                await self.repository.update_course(course_id, {"description": summary})
            except RepositoryError as e:
                logger.error(f"[ANALYZE] Failed to save video summary, continuing: {e}")

        return AnalyzeVideoResponse(
            message="Video processing completed",
            session_id=request.session_id,
            course_id=course_id,
            segmented=False,
            cached=False,
            data=CourseSummary(title=title, description=description),
            result=init_result.result,
        )
