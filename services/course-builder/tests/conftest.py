"""
Shared fixtures for course builder tests.

Service dependencies (Supabase, YouTube, orchestrator, LLM) are replaced
with mocks; HTTP-level tests use httpx.MockTransport.
"""

import os
import sys
from unittest.mock import AsyncMock

import pytest

# Service root (config, models, services, prompts) and the shared package
_service_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _service_root)
sys.path.insert(0, os.path.dirname(_service_root))

from config.settings import CourseBuilderConfig
from models.course_models import Course, Question
from services.course_repository import CourseRepository
from services.orchestrator_client import OrchestratorClient
from services.progress_tracker import ProgressTracker
from services.youtube_client import YouTubeClient


COURSE_ID = "c0ffee00-0000-4000-8000-000000000001"
SESSION_ID = "session-123"
VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.fixture
def config():
    """Config with no waiting between init and course reload"""
    return CourseBuilderConfig(
        supabase_url="https://project.supabase.co",
        supabase_service_role_key="service-key",
        youtube_api_key="yt-key",
        init_timeout_seconds=5.0,
        post_init_settle_seconds=0.0,
    )


@pytest.fixture
def mock_repository():
    repository = AsyncMock(spec=CourseRepository)
    repository.insert_segments.side_effect = lambda segments: [s.to_row() for s in segments]
    repository.get_user_id.return_value = None
    repository.find_courses_by_url.return_value = []
    repository.course_has_questions.return_value = False
    repository.create_course.return_value = Course(id=COURSE_ID, title="Video", youtube_url=VIDEO_URL)
    repository.get_course.return_value = Course(id=COURSE_ID, title="Video", description="Desc")
    repository.course_exists.return_value = True
    repository.get_questions.return_value = []
    repository.get_rating_stats.return_value = None
    return repository


@pytest.fixture
def mock_youtube():
    youtube = AsyncMock(spec=YouTubeClient)
    youtube.get_video_duration.return_value = 600
    youtube.fetch_metadata.return_value = None
    youtube.search_video.return_value = None
    return youtube


@pytest.fixture
def mock_orchestrator():
    orchestrator = AsyncMock(spec=OrchestratorClient)
    orchestrator.trigger.return_value = {"status": "processing"}
    return orchestrator


@pytest.fixture
def progress(mock_repository):
    return ProgressTracker(mock_repository)


def make_question(question_id, timestamp, segment_index=None, **kwargs):
    """Question row as returned by the repository"""
    return Question(
        id=question_id,
        course_id=COURSE_ID,
        timestamp=timestamp,
        segment_index=segment_index,
        question=kwargs.pop("question", f"Question at {timestamp}"),
        **kwargs,
    )
