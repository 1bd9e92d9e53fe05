"""
Preview, Player and Learner Activity Models

Shapes returned to the course preview page and the interactive player,
plus the learner tracking payloads.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PreviewQuestion(BaseModel):
    """Question as displayed on the preview and player pages"""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    type: str = "multiple-choice"
    question: str
    options: List[Any] = Field(default_factory=list)
    correct: Any = None
    explanation: str = ""
    has_visual_asset: bool = False
    timestamp: float = 0


class PreviewSegment(BaseModel):
    title: str
    timestamp: str
    concepts: List[str] = Field(default_factory=list)
    questions: List[PreviewQuestion] = Field(default_factory=list)


class CoursePreview(BaseModel):
    course_id: str
    title: str
    description: str
    video_id: Optional[str] = None
    total_questions: int = 0
    segments: List[PreviewSegment] = Field(default_factory=list)


class CurriculumSegment(PreviewSegment):
    timestamp_seconds: float = 0
    is_complete: bool = False


class CourseCurriculum(BaseModel):
    title: str
    description: str
    duration: str
    video_id: Optional[str] = None
    segments: List[CurriculumSegment] = Field(default_factory=list)


class ExportSegment(PreviewSegment):
    timestamp_seconds: float = 0


class CourseExport(BaseModel):
    """Course grouped for export to an LMS canvas"""
    course_id: str
    title: str
    description: str
    video_id: Optional[str] = None
    segments: List[ExportSegment] = Field(default_factory=list)


class SeekRequest(BaseModel):
    """Player seek; answered questions are referenced by id"""
    current_time: float = Field(..., ge=0)
    seek_time: float = Field(..., ge=0)
    answered_question_ids: List[str] = Field(default_factory=list)


class SeekResponse(BaseModel):
    skipped_question_ids: List[str] = Field(default_factory=list)
    recorded: bool = False


class CourseSuggestion(BaseModel):
    topic: str
    video: str


class SuggestionsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_url: str = Field(..., alias="videoUrl")


class SuggestionsResponse(BaseModel):
    topics: List[CourseSuggestion] = Field(default_factory=list)


class EnrollmentRequest(BaseModel):
    user_id: str
    course_id: str


class QuestionResponseRequest(BaseModel):
    """A learner's answer to a question"""
    question_id: str
    course_id: str
    selected_answer: str
    is_correct: bool
    response_time_ms: Optional[int] = None
    question_type: Optional[str] = None
    timestamp: Optional[float] = None


class TourStep(BaseModel):
    element: str
    title: str
    description: str
    side: str = "bottom"
    align: str = "center"
