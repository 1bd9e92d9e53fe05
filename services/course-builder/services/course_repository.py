"""
Course Repository

Supabase-backed persistence for courses, segments, questions, generation
progress, learner activity and ratings.

All queries go through the service-role client, so row level security does
not apply here; callers are responsible for authorising the user first.
"""
import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from models.course_models import Course, CourseSegment, ProgressRecord, Question
from services.errors import RepositoryError


logger = logging.getLogger(__name__)

PROGRESS_CONFLICT = "course_id,session_id"
RATING_CONFLICT = "user_id,course_id"
ENROLLMENT_CONFLICT = "user_id,course_id"


class CourseRepository:
    """
    Repository for the course builder tables.

    Provides:
    - Course lookup and creation (including the URL cache lookup)
    - Segment and progress writes for the processing pipeline
    - Learner activity and rating storage
    """

    def __init__(self, supabase_url: str = "", service_role_key: str = "", client: Optional[AsyncClient] = None):
        self.supabase_url = supabase_url
        self.service_role_key = service_role_key
        self._client = client

    async def get_client(self) -> AsyncClient:
        """Get or create the Supabase client"""
        if self._client is None:
            if not self.supabase_url or not self.service_role_key:
                raise RepositoryError("Supabase URL and service role key are required")
            self._client = await acreate_client(self.supabase_url, self.service_role_key)
        return self._client

    async def _execute(self, query, table: str, action: str) -> List[Dict[str, Any]]:
        try:
            response = await query.execute()
        except APIError as e:
            logger.error(f"[REPOSITORY] {action} on {table} failed: {e.message}")
            raise RepositoryError(
                f"Failed to {action} {table}: {e.message}",
                table=table,
                details={"code": e.code, "hint": e.hint, "details": e.details},
            ) from e
        data = response.data if response is not None else None
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return data

    async def _table(self, name: str):
        client = await self.get_client()
        return client.table(name)

    # =========================================================================
    # Courses
    # =========================================================================

    async def find_courses_by_url(self, youtube_url: str) -> List[Course]:
        """Courses for a video URL, newest first"""
        table = await self._table("courses")
        rows = await self._execute(
            table.select("*").eq("youtube_url", youtube_url).order("created_at", desc=True),
            "courses", "select",
        )
        return [Course.model_validate(row) for row in rows]

    async def course_has_questions(self, course_id: str) -> bool:
        table = await self._table("questions")
        rows = await self._execute(
            table.select("id").eq("course_id", course_id).limit(1),
            "questions", "select",
        )
        return len(rows) > 0

    async def create_course(self, data: Dict[str, Any]) -> Course:
        table = await self._table("courses")
        rows = await self._execute(table.insert(data), "courses", "insert")
        if not rows:
            raise RepositoryError("Course insert returned no row", table="courses")
        return Course.model_validate(rows[0])

    async def get_course(self, course_id: str) -> Optional[Course]:
        table = await self._table("courses")
        rows = await self._execute(
            table.select("*").eq("id", course_id).limit(1),
            "courses", "select",
        )
        return Course.model_validate(rows[0]) if rows else None

    async def course_exists(self, course_id: str) -> bool:
        table = await self._table("courses")
        rows = await self._execute(
            table.select("id").eq("id", course_id).limit(1),
            "courses", "select",
        )
        return len(rows) > 0

    async def update_course(self, course_id: str, changes: Dict[str, Any]) -> None:
        table = await self._table("courses")
        await self._execute(table.update(changes).eq("id", course_id), "courses", "update")

    # =========================================================================
    # Segments and progress
    # =========================================================================

    async def insert_segments(self, segments: List[CourseSegment]) -> List[Dict[str, Any]]:
        table = await self._table("course_segments")
        return await self._execute(
            table.insert([segment.to_row() for segment in segments]),
            "course_segments", "insert",
        )

    async def insert_progress(self, record: ProgressRecord) -> None:
        table = await self._table("quiz_generation_progress")
        await self._execute(table.insert(record.to_row()), "quiz_generation_progress", "insert")

    async def upsert_progress(self, record: ProgressRecord) -> None:
        """One row per (course_id, session_id); later writes replace earlier ones."""
        table = await self._table("quiz_generation_progress")
        await self._execute(
            table.upsert(record.to_row(), on_conflict=PROGRESS_CONFLICT),
            "quiz_generation_progress", "upsert",
        )

    # =========================================================================
    # Questions
    # =========================================================================

    async def get_questions(self, course_id: str) -> List[Question]:
        table = await self._table("questions")
        rows = await self._execute(
            table.select("*").eq("course_id", course_id).order("timestamp"),
            "questions", "select",
        )
        return [Question.model_validate(row) for row in rows]

    async def accept_question(self, question_id: str) -> None:
        table = await self._table("questions")
        await self._execute(
            table.update({"accepted": True}).eq("id", question_id),
            "questions", "update",
        )

    async def delete_question(self, question_id: str) -> None:
        table = await self._table("questions")
        await self._execute(table.delete().eq("id", question_id), "questions", "delete")

    # =========================================================================
    # Users and learner activity
    # =========================================================================

    async def get_user_id(self, token: str) -> Optional[str]:
        """User id for a bearer token, or None when the token is not valid."""
        if not token:
            return None
        client = await self.get_client()
        try:
            response = await client.auth.get_user(token)
        except Exception as e:
            logger.warning(f"[REPOSITORY] Auth check failed: {e}")
            return None
        user = getattr(response, "user", None) if response else None
        return user.id if user else None

    async def record_course_creation(self, user_id: str, course_id: str, role: str = "creator") -> None:
        table = await self._table("user_course_creations")
        await self._execute(
            table.insert({"user_id": user_id, "course_id": course_id, "role": role}),
            "user_course_creations", "insert",
        )

    async def upsert_enrollment(self, user_id: str, course_id: str) -> None:
        table = await self._table("user_course_enrollments")
        await self._execute(
            table.upsert(
                {"user_id": user_id, "course_id": course_id},
                on_conflict=ENROLLMENT_CONFLICT,
                ignore_duplicates=True,
            ),
            "user_course_enrollments", "upsert",
        )

    async def insert_question_responses(self, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            return
        table = await self._table("user_question_responses")
        await self._execute(table.insert(rows), "user_question_responses", "insert")

    async def insert_question_response(self, row: Dict[str, Any]) -> None:
        await self.insert_question_responses([row])

    # =========================================================================
    # Ratings
    # =========================================================================

    async def upsert_rating(self, data: Dict[str, Any]) -> Dict[str, Any]:
        table = await self._table("user_course_ratings")
        rows = await self._execute(
            table.upsert(data, on_conflict=RATING_CONFLICT),
            "user_course_ratings", "upsert",
        )
        if not rows:
            raise RepositoryError("Rating upsert returned no row", table="user_course_ratings")
        return rows[0]

    async def get_rating_stats(self, course_id: str) -> Optional[Dict[str, Any]]:
        table = await self._table("course_rating_stats")
        rows = await self._execute(
            table.select("*").eq("course_id", course_id).limit(1),
            "course_rating_stats", "select",
        )
        return rows[0] if rows else None

    async def delete_rating(self, user_id: str, course_id: str) -> None:
        table = await self._table("user_course_ratings")
        await self._execute(
            table.delete().eq("user_id", user_id).eq("course_id", course_id),
            "user_course_ratings", "delete",
        )
