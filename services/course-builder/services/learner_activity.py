"""
Learner Activity Service

Course editing from the preview page (title, description, accepting and
rejecting generated questions) and learner tracking from the player
(enrollments, answers, skipped questions).
"""
import logging
from typing import Any, Dict, List, Optional

from models.course_models import CourseUpdateRequest, Question
from models.preview_models import QuestionResponseRequest
from services.course_repository import CourseRepository
from services.course_preview import is_persisted_question_id
from services.errors import InvalidQuestionIdError, NotFoundError


logger = logging.getLogger(__name__)

SKIPPED_ANSWER = "-1"


class LearnerActivityService:
    def __init__(self, repository: CourseRepository):
        self.repository = repository

    async def update_course_details(self, course_id: str, update: CourseUpdateRequest) -> Dict[str, Any]:
        changes = update.changes()
        if not changes:
            return {}
        if not await self.repository.course_exists(course_id):
            raise NotFoundError("Course not found", resource="course", resource_id=course_id)
        await self.repository.update_course(course_id, changes)
        logger.info(f"[ACTIVITY] Course {course_id} updated: {', '.join(changes)}")
        return changes

    async def accept_question(self, question_id: str) -> None:
        if not is_persisted_question_id(question_id):
            raise InvalidQuestionIdError(question_id)
        await self.repository.accept_question(question_id)
        logger.info(f"[ACTIVITY] Question {question_id} accepted")

    async def reject_question(self, question_id: str) -> None:
        if not is_persisted_question_id(question_id):
            raise InvalidQuestionIdError(question_id)
        await self.repository.delete_question(question_id)
        logger.info(f"[ACTIVITY] Question {question_id} rejected")

    async def enroll(self, user_id: str, course_id: str) -> None:
        await self.repository.upsert_enrollment(user_id, course_id)
        logger.info(f"[ACTIVITY] User {user_id} enrolled in course {course_id}")

    async def record_question_response(self, user_id: str, request: QuestionResponseRequest) -> None:
        await self.repository.insert_question_response({
            "user_id": user_id,
            **request.model_dump(exclude_none=True),
        })

    async def record_skipped_questions(
        self,
        user_id: Optional[str],
        course_id: str,
        questions: List[Question],
    ) -> int:
        """Store each skipped question as an incorrect answer; returns the count stored."""
        if not user_id or not questions:
            return 0

        rows = [
            {
                "user_id": user_id,
                "course_id": course_id,
                "question_id": question.id,
                "selected_answer": SKIPPED_ANSWER,
                "is_correct": False,
                "response_time_ms": 0,
                "question_type": question.type,
                "timestamp": question.timestamp,
            }
            for question in questions
            if is_persisted_question_id(question.id)
        ]
        if not rows:
            return 0
        await self.repository.insert_question_responses(rows)
        logger.info(f"[ACTIVITY] Skipping {len(rows)} questions for user {user_id}")
        return len(rows)
