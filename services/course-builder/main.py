"""
Course Builder Microservice

Turns YouTube videos into interactive courses with AI-generated questions.

Responsibilities:
- Smart video analysis (cache lookup, course creation, progress tracking)
- Segmented processing initialisation and orchestrator hand-off
- Course preview / curriculum shaping for the frontend
- Ratings, enrollments, question responses and follow-up suggestions
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from config.settings import CourseBuilderConfig
from config.tours import TOURS, get_tour
from models.course_models import (
    AnalyzeVideoRequest,
    AnalyzeVideoResponse,
    CourseUpdateRequest,
    InitSegmentedProcessingRequest,
    InitSegmentedProcessingResponse,
)
from models.preview_models import (
    CourseCurriculum,
    CourseExport,
    CoursePreview,
    EnrollmentRequest,
    QuestionResponseRequest,
    SeekRequest,
    SeekResponse,
    SuggestionsRequest,
    SuggestionsResponse,
)
from models.question_models import QuestionPlan, TrueFalseGenerationResponse
from models.rating_models import RatingRequest
from services.course_preview import build_curriculum, build_export, build_preview, questions_skipped_by_seek
from services.course_repository import CourseRepository
from services.errors import (
    AuthenticationError,
    InvalidQuestionIdError,
    MissingFieldsError,
    NotFoundError,
    OrchestratorError,
    QuestionGenerationError,
    RatingValidationError,
    RepositoryError,
    SegmentedProcessingError,
)
from services.learner_activity import LearnerActivityService
from services.orchestrator_client import OrchestratorClient
from services.progress_tracker import ProgressTracker
from services.rating_service import RatingService
from services.segmented_processing import SegmentedProcessingService
from services.suggestion_service import SuggestionService
from services.true_false_processor import TrueFalseProcessor, assess_true_false_quality
from services.video_analysis import VideoAnalysisService
from services.youtube_client import InvalidYouTubeURLError, YouTubeClient


config = CourseBuilderConfig.from_env()

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("course_builder")

SERVICE_NAME = "course-builder"
SERVICE_VERSION = "1.0.0"


class ServiceState:
    """Service singletons, built in the lifespan"""
    startup_time: Optional[datetime] = None
    repository: Optional[CourseRepository] = None
    youtube: Optional[YouTubeClient] = None
    orchestrator: Optional[OrchestratorClient] = None
    segmented_processing: Optional[SegmentedProcessingService] = None
    video_analysis: Optional[VideoAnalysisService] = None
    ratings: Optional[RatingService] = None
    activity: Optional[LearnerActivityService] = None
    suggestions: Optional[SuggestionService] = None
    true_false: Optional[TrueFalseProcessor] = None


state = ServiceState()


def build_services(cfg: CourseBuilderConfig):
    """Wire the service graph from configuration"""
    repository = CourseRepository(cfg.supabase_url, cfg.supabase_service_role_key)
    youtube = YouTubeClient(cfg.youtube_api_key)
    orchestrator = OrchestratorClient(
        cfg.functions_url, cfg.supabase_service_role_key, cfg.orchestrator_function
    )
    progress = ProgressTracker(repository)
    segmented = SegmentedProcessingService(repository, youtube, orchestrator, progress, cfg)

    state.repository = repository
    state.youtube = youtube
    state.orchestrator = orchestrator
    state.segmented_processing = segmented
    state.video_analysis = VideoAnalysisService(repository, youtube, segmented, progress, cfg)
    state.ratings = RatingService(repository)
    state.activity = LearnerActivityService(repository)
    state.suggestions = SuggestionService(youtube)
    state.true_false = TrueFalseProcessor()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    state.startup_time = datetime.utcnow()

    logger.info("[COURSE-BUILDER] Service starting...")
    logger.info(f"[COURSE-BUILDER] Supabase: {config.supabase_url or 'NOT CONFIGURED'}")
    logger.info(f"[COURSE-BUILDER] YouTube API key: {'set' if config.youtube_api_key else 'missing'}")
    logger.info(f"[COURSE-BUILDER] Segment duration: {config.segment_duration}s")

    build_services(config)

    yield

    logger.info("[COURSE-BUILDER] Service shutting down...")
    if state.youtube:
        await state.youtube.close()
    if state.orchestrator:
        await state.orchestrator.close()


app = FastAPI(
    title="Course Builder Service",
    description="YouTube video to interactive course pipeline",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


async def current_user_id(authorization: Optional[str]) -> Optional[str]:
    token = bearer_token(authorization)
    if not token:
        return None
    return await state.repository.get_user_id(token)


def to_http_error(error: Exception) -> HTTPException:
    """Map domain errors to HTTP status codes"""
    if isinstance(error, (MissingFieldsError, InvalidYouTubeURLError, RatingValidationError, InvalidQuestionIdError)):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, AuthenticationError):
        return HTTPException(status_code=401, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, SegmentedProcessingError):
        return HTTPException(
            status_code=500,
            detail={"success": False, "error": str(error), "details": error.details},
        )
    return HTTPException(status_code=500, detail={"success": False, "error": str(error)})


DOMAIN_ERRORS = (
    MissingFieldsError,
    InvalidYouTubeURLError,
    RatingValidationError,
    InvalidQuestionIdError,
    AuthenticationError,
    NotFoundError,
    SegmentedProcessingError,
    OrchestratorError,
    RepositoryError,
    QuestionGenerationError,
)


# ============================================================================
# Health
# ============================================================================

class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    supabase_configured: bool
    youtube_configured: bool
    uptime_seconds: float
    timestamp: str


@app.get("/health", response_model=HealthResponse)
async def health_check():
    uptime = (datetime.utcnow() - state.startup_time).total_seconds() if state.startup_time else 0
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        supabase_configured=bool(config.supabase_url and config.supabase_service_role_key),
        youtube_configured=bool(config.youtube_api_key),
        uptime_seconds=uptime,
        timestamp=datetime.utcnow().isoformat(),
    )


# ============================================================================
# Course creation pipeline
# ============================================================================

@app.post(
    "/api/course/analyze-video-smart",
    response_model=AnalyzeVideoResponse,
    response_model_exclude_none=True,
)
async def analyze_video_smart(
    request: AnalyzeVideoRequest,
    authorization: Optional[str] = Header(None),
):
    """Create (or reuse) a course for a YouTube video and start question generation"""
    try:
        return await state.video_analysis.analyze(request, bearer_token(authorization))
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception(f"[ANALYZE] Unexpected error: {e}")
        raise HTTPException(status_code=500, detail={"success": False, "error": str(e)})


@app.post("/api/functions/init-segmented-processing", response_model=InitSegmentedProcessingResponse)
async def init_segmented_processing(request: InitSegmentedProcessingRequest):
    """Split a course video into segments and hand it to the orchestrator"""
    try:
        return await state.segmented_processing.initialize(request)
    except DOMAIN_ERRORS as e:
        logger.error(f"[SEGMENTS] Segmented processing initialization error: {e}")
        if isinstance(e, InvalidYouTubeURLError):
            raise to_http_error(e)
        raise HTTPException(status_code=500, detail={"success": False, "error": str(e)})


# ============================================================================
# Preview and editing
# ============================================================================

async def _load_course(course_id: str):
    course = await state.repository.get_course(course_id)
    if not course:
        raise NotFoundError("Course not found", resource="course", resource_id=course_id)
    return course


@app.get("/api/course/{course_id}/preview", response_model=CoursePreview)
async def get_course_preview(course_id: str):
    try:
        course = await _load_course(course_id)
        questions = await state.repository.get_questions(course_id)
        return build_preview(course, questions)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)


@app.get("/api/course/{course_id}/curriculum", response_model=CourseCurriculum)
async def get_course_curriculum(course_id: str, completed_segments: int = 0):
    try:
        course = await _load_course(course_id)
        questions = await state.repository.get_questions(course_id)
        return build_curriculum(course, questions, completed_segments=completed_segments)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)


@app.get("/api/course/{course_id}/export", response_model=CourseExport)
async def get_course_export(course_id: str):
    try:
        course = await _load_course(course_id)
        questions = await state.repository.get_questions(course_id)
        return build_export(course, questions)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)

@app.patch("/api/course/{course_id}")
async def update_course(course_id: str, request: CourseUpdateRequest):
    try:
        changes = await state.activity.update_course_details(course_id, request)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return {"success": True, "updated": changes}


@app.patch("/api/course/question/{question_id}")
async def accept_question(question_id: str):
    try:
        await state.activity.accept_question(question_id)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return {"success": True, "question_id": question_id, "accepted": True}


@app.delete("/api/course/question/{question_id}")
async def reject_question(question_id: str):
    try:
        await state.activity.reject_question(question_id)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return {"success": True, "question_id": question_id, "deleted": True}


@app.post("/api/course/suggestions", response_model=SuggestionsResponse)
async def course_suggestions(request: SuggestionsRequest):
    topics = await state.suggestions.suggest(request.video_url)
    return SuggestionsResponse(topics=topics)


# ============================================================================
# Ratings
# ============================================================================

@app.post("/api/courses/{course_id}/rating", response_model_exclude_none=True)
async def submit_rating(
    course_id: str,
    request: RatingRequest,
    authorization: Optional[str] = Header(None),
):
    try:
        user_id = await current_user_id(authorization)
        response = await state.ratings.submit_rating(course_id, user_id, request)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return response.model_dump(by_alias=True, exclude_none=True)


@app.get("/api/courses/{course_id}/rating")
async def get_rating(course_id: str):
    try:
        response = await state.ratings.get_rating_stats(course_id)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return response.model_dump(exclude_none=True)


@app.delete("/api/courses/{course_id}/rating")
async def delete_rating(course_id: str, authorization: Optional[str] = Header(None)):
    try:
        if not bearer_token(authorization):
            raise AuthenticationError("Authentication required to delete rating")
        user_id = await current_user_id(authorization)
        if not user_id:
            raise AuthenticationError("Invalid authentication")
        response = await state.ratings.delete_rating(course_id, user_id)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return response.model_dump(exclude_none=True)


# ============================================================================
# Learner activity
# ============================================================================

@app.post("/api/courses/{course_id}/seek", response_model=SeekResponse)
async def seek(course_id: str, request: SeekRequest, authorization: Optional[str] = Header(None)):
    """Report a player seek; unanswered questions jumped over count as skipped"""
    try:
        questions = await state.repository.get_questions(course_id)
        skipped = questions_skipped_by_seek(
            questions,
            request.current_time,
            request.seek_time,
            set(request.answered_question_ids),
        )
        recorded = 0
        if skipped:
            user_id = await current_user_id(authorization)
            recorded = await state.activity.record_skipped_questions(user_id, course_id, skipped)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return SeekResponse(
        skipped_question_ids=[q.id for q in skipped if q.id],
        recorded=recorded > 0,
    )


@app.post("/api/user-course-enrollments")
async def enroll(request: EnrollmentRequest):
    try:
        await state.activity.enroll(request.user_id, request.course_id)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return {"success": True}


@app.post("/api/user-question-responses")
async def record_question_response(
    request: QuestionResponseRequest,
    authorization: Optional[str] = Header(None),
):
    try:
        user_id = await current_user_id(authorization)
        if not user_id:
            raise AuthenticationError("Authentication required")
        await state.activity.record_question_response(user_id, request)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return {"success": True}


# ============================================================================
# Question generation
# ============================================================================

@app.post("/api/questions/true-false", response_model=TrueFalseGenerationResponse)
async def generate_true_false(plan: QuestionPlan):
    """Generate one true/false question from a question plan"""
    try:
        question = await state.true_false.generate(plan)
    except QuestionGenerationError as e:
        raise HTTPException(
            status_code=500,
            detail={"error": str(e), "question_id": e.question_id, "stage": e.context.get("stage")},
        )
    return TrueFalseGenerationResponse(
        question=question,
        quality=assess_true_false_quality(question),
        provider=state.true_false.provider_name,
    )


# ============================================================================
# Guided tours
# ============================================================================

@app.get("/api/tours")
async def list_tours():
    return {"journeys": list(TOURS)}


@app.get("/api/tours/{journey}")
async def get_tour_steps(journey: str):
    try:
        steps = get_tour(journey)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown tour: {journey}")
    return {"journey": journey, "steps": [step.model_dump() for step in steps]}


# ============================================================================
# Main
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8010"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"[COURSE-BUILDER] Starting on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.getenv("DEBUG", "false").lower() == "true",
    )
