"""
Tests for the Supabase repository, using a recording stand-in for the
postgrest query builder.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from postgrest.exceptions import APIError

from conftest import COURSE_ID, SESSION_ID
from models.course_models import CourseSegment, ProgressRecord, ProgressStage
from services.course_repository import CourseRepository
from services.errors import RepositoryError


class RecordingQuery:
    """Chainable query that records calls and returns canned data"""

    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.calls = []

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    async def execute(self):
        if self.error:
            raise self.error
        return SimpleNamespace(data=self.data)


def make_repository(query):
    client = MagicMock()
    client.table.return_value = query
    return CourseRepository(client=client), client


class TestClientSetup:

    @pytest.mark.asyncio
    async def test_missing_configuration(self):
        with pytest.raises(RepositoryError, match="required"):
            await CourseRepository().get_client()


class TestCourses:

    @pytest.mark.asyncio
    async def test_find_courses_by_url(self):
        query = RecordingQuery([{"id": "c1", "title": "T"}, {"id": "c2"}])
        repository, client = make_repository(query)

        courses = await repository.find_courses_by_url("https://www.youtube.com/watch?v=abc")

        client.table.assert_called_with("courses")
        assert [c.id for c in courses] == ["c1", "c2"]
        assert ("eq", ("youtube_url", "https://www.youtube.com/watch?v=abc"), {}) in query.calls
        assert ("order", ("created_at",), {"desc": True}) in query.calls

    @pytest.mark.asyncio
    async def test_course_has_questions(self):
        repository, _ = make_repository(RecordingQuery([{"id": "q1"}]))
        assert await repository.course_has_questions(COURSE_ID) is True

        repository, _ = make_repository(RecordingQuery([]))
        assert await repository.course_has_questions(COURSE_ID) is False

    @pytest.mark.asyncio
    async def test_create_course(self):
        query = RecordingQuery([{"id": COURSE_ID, "title": "T"}])
        repository, _ = make_repository(query)

        course = await repository.create_course({"title": "T"})

        assert course.id == COURSE_ID
        assert query.calls[0] == ("insert", ({"title": "T"},), {})

    @pytest.mark.asyncio
    async def test_create_course_without_row(self):
        repository, _ = make_repository(RecordingQuery(None))

        with pytest.raises(RepositoryError):
            await repository.create_course({"title": "T"})

    @pytest.mark.asyncio
    async def test_get_missing_course(self):
        repository, _ = make_repository(RecordingQuery([]))
        assert await repository.get_course(COURSE_ID) is None

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self):
        error = APIError({"message": "permission denied", "code": "42501", "hint": None, "details": None})
        repository, _ = make_repository(RecordingQuery(error=error))

        with pytest.raises(RepositoryError) as exc_info:
            await repository.update_course(COURSE_ID, {"title": "T"})

        assert exc_info.value.table == "courses"
        assert exc_info.value.details["code"] == "42501"
        assert "permission denied" in str(exc_info.value)


class TestSegmentsAndProgress:

    @pytest.mark.asyncio
    async def test_insert_segments(self):
        query = RecordingQuery([{"segment_index": 0}])
        repository, _ = make_repository(query)
        segment = CourseSegment(course_id=COURSE_ID, segment_index=0, start_time=0, end_time=300, title="Part 1")

        rows = await repository.insert_segments([segment])

        assert rows == [{"segment_index": 0}]
        inserted = query.calls[0][1][0]
        assert inserted[0]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_upsert_progress(self):
        query = RecordingQuery([])
        repository, _ = make_repository(query)
        record = ProgressRecord(course_id=COURSE_ID, session_id=SESSION_ID, stage=ProgressStage.PLANNING)

        await repository.upsert_progress(record)

        name, args, kwargs = query.calls[0]
        assert name == "upsert"
        assert args[0]["stage"] == "planning"
        assert kwargs == {"on_conflict": "course_id,session_id"}


class TestUsersAndRatings:

    @pytest.mark.asyncio
    async def test_get_user_id(self):
        client = MagicMock()
        client.auth.get_user = AsyncMock(return_value=SimpleNamespace(user=SimpleNamespace(id="user-1")))

        assert await CourseRepository(client=client).get_user_id("token") == "user-1"
        client.auth.get_user.assert_awaited_once_with("token")

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        client = MagicMock()
        client.auth.get_user = AsyncMock(side_effect=Exception("invalid JWT"))

        assert await CourseRepository(client=client).get_user_id("token") is None

    @pytest.mark.asyncio
    async def test_no_question_responses_to_insert(self):
        repository, client = make_repository(RecordingQuery([]))

        await repository.insert_question_responses([])
        client.table.assert_not_called()

    @pytest.mark.asyncio
    async def test_rating_stats_single_row(self):
        repository, _ = make_repository(RecordingQuery({"average_rating": 4.0}))
        assert await repository.get_rating_stats(COURSE_ID) == {"average_rating": 4.0}

    @pytest.mark.asyncio
    async def test_delete_rating_filters_user_and_course(self):
        query = RecordingQuery([])
        repository, _ = make_repository(query)

        await repository.delete_rating("user-1", COURSE_ID)

        assert ("eq", ("user_id", "user-1"), {}) in query.calls
        assert ("eq", ("course_id", COURSE_ID), {}) in query.calls
