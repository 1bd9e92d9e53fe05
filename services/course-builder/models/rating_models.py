"""
Rating Models

Course ratings submitted by learners and the aggregated statistics
read from the course_rating_stats view.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RatingContext(str, Enum):
    """Moment at which a rating was collected"""
    COMPLETION = "completion"
    MID_COURSE = "mid_course"
    QUESTION_SUCCESS = "question_success"
    MANUAL = "manual"


class EngagementData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    time_spent_minutes: float = Field(default=0, alias="timeSpentMinutes")
    questions_answered: int = Field(default=0, alias="questionsAnswered")
    completion_percentage: float = Field(default=0, alias="completionPercentage")


class RatingRequest(BaseModel):
    """Rating submission. The rating value is validated by the service."""
    model_config = ConfigDict(populate_by_name=True)

    rating: Optional[float] = None
    context: RatingContext = RatingContext.MANUAL
    engagement_data: Optional[EngagementData] = Field(None, alias="engagementData")


class RatingDistribution(BaseModel):
    """Count of ratings per star value"""
    model_config = ConfigDict(populate_by_name=True)

    one: int = Field(default=0, alias="1")
    two: int = Field(default=0, alias="2")
    three: int = Field(default=0, alias="3")
    four: int = Field(default=0, alias="4")
    five: int = Field(default=0, alias="5")


class CourseStats(BaseModel):
    """Aggregated stats returned after a rating is submitted"""
    model_config = ConfigDict(populate_by_name=True)

    average_rating: float = Field(alias="averageRating")
    total_ratings: int = Field(alias="totalRatings")
    rating_distribution: RatingDistribution = Field(alias="ratingDistribution")

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CourseStats":
        return cls(
            average_rating=row.get("average_rating") or 0,
            total_ratings=row.get("total_ratings") or 0,
            rating_distribution=RatingDistribution(
                one=row.get("one_star_count") or 0,
                two=row.get("two_star_count") or 0,
                three=row.get("three_star_count") or 0,
                four=row.get("four_star_count") or 0,
                five=row.get("five_star_count") or 0,
            ),
        )


class RatingStats(BaseModel):
    """Stats returned by the GET rating endpoint"""
    average_rating: float = 0
    total_ratings: int = 0
    five_star_count: Optional[int] = None
    four_star_count: Optional[int] = None
    three_star_count: Optional[int] = None
    two_star_count: Optional[int] = None
    one_star_count: Optional[int] = None
    median_rating: Optional[float] = None
    last_rated_at: Optional[str] = None


class RatingRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    rating: int
    created_at: Optional[str] = None
    engagement_score: Optional[float] = None


class RatingResponse(BaseModel):
    success: bool = True
    rating: Optional[RatingRecord] = None
    course_stats: Optional[CourseStats] = Field(None, serialization_alias="courseStats")
    stats: Optional[RatingStats] = None
