"""
Rating Service

Learner ratings (1 to 5 stars) with the engagement context in which they
were given. Aggregates come from the course_rating_stats view.
"""
import logging
from typing import Any, Optional

from models.rating_models import (
    CourseStats,
    RatingRecord,
    RatingRequest,
    RatingResponse,
    RatingStats,
)
from services.course_repository import CourseRepository
from services.errors import AuthenticationError, NotFoundError, RatingValidationError


logger = logging.getLogger(__name__)


def validate_rating(value: Any) -> int:
    """Ratings are whole stars from 1 to 5."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RatingValidationError("Rating must be an integer between 1 and 5")
    if value != int(value) or not 1 <= value <= 5:
        raise RatingValidationError("Rating must be an integer between 1 and 5")
    return int(value)


class RatingService:
    def __init__(self, repository: CourseRepository):
        self.repository = repository

    async def submit_rating(
        self,
        course_id: str,
        user_id: Optional[str],
        request: RatingRequest,
    ) -> RatingResponse:
        rating = validate_rating(request.rating)
        if not user_id:
            raise AuthenticationError("Authentication required to rate courses")
        if not await self.repository.course_exists(course_id):
            raise NotFoundError("Course not found", resource="course", resource_id=course_id)

        engagement = request.engagement_data
        row = await self.repository.upsert_rating({
            "user_id": user_id,
            "course_id": course_id,
            "rating": rating,
            "rating_context": request.context.value,
            "time_spent_minutes": engagement.time_spent_minutes if engagement else 0,
            "questions_answered": engagement.questions_answered if engagement else 0,
            "completion_percentage": engagement.completion_percentage if engagement else 0,
        })

        stats = await self.repository.get_rating_stats(course_id)
        logger.info(f"[RATING] Rating submitted: {rating} stars for course {course_id} by user {user_id}")

        return RatingResponse(
            rating=RatingRecord.model_validate(row),
            course_stats=CourseStats.from_row(stats) if stats else None,
        )

    async def get_rating_stats(self, course_id: str) -> RatingResponse:
        stats = await self.repository.get_rating_stats(course_id)
        if not stats:
            return RatingResponse(stats=RatingStats())

        logger.info(
            f"[RATING] Rating stats fetched for course {course_id}: "
            f"average={stats.get('average_rating')}, total={stats.get('total_ratings')}"
        )
        return RatingResponse(stats=RatingStats.model_validate({
            key: value for key, value in stats.items()
            if key in RatingStats.model_fields and value is not None
        }))

    async def delete_rating(self, course_id: str, user_id: Optional[str]) -> RatingResponse:
        if not user_id:
            raise AuthenticationError("Authentication required to delete rating")
        await self.repository.delete_rating(user_id, course_id)
        logger.info(f"[RATING] Rating deleted for course {course_id} by user {user_id}")
        return RatingResponse()
