"""
Course Builder Data Models

Pydantic models for courses, segments, questions, generation progress
and the video analysis / segmented processing endpoints.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SegmentStatus(str, Enum):
    """Processing status of a course segment"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class QuestionType(str, Enum):
    """Question types produced by the generation pipeline"""
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    HOTSPOT = "hotspot"
    MATCHING = "matching"
    SEQUENCING = "sequencing"


class ProgressStage(str, Enum):
    """Stages recorded in quiz_generation_progress"""
    INITIALIZATION = "initialization"
    PLANNING = "planning"
    GENERATION = "generation"
    VERIFICATION = "verification"
    COMPLETED = "completed"
    FAILED = "failed"


class Course(BaseModel):
    """A course row"""
    model_config = ConfigDict(extra="allow")

    id: str
    title: str = ""
    description: str = ""
    youtube_url: str = ""
    published: bool = False
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    is_segmented: bool = False
    total_segments: Optional[int] = None
    segment_duration: Optional[int] = None
    total_duration: Optional[int] = None


class CourseSegment(BaseModel):
    """A time window of the video processed independently"""
    course_id: str
    segment_index: int = Field(..., ge=0)
    start_time: float = Field(..., ge=0)
    end_time: float = Field(..., ge=0)
    title: str
    status: SegmentStatus = SegmentStatus.PENDING

    def to_row(self) -> Dict[str, Any]:
        """Row payload for the course_segments table"""
        return self.model_dump(mode="json")


class Question(BaseModel):
    """A generated question, as stored in the questions table"""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    course_id: Optional[str] = None
    segment_index: Optional[int] = None
    timestamp: float = 0
    type: str = QuestionType.MULTIPLE_CHOICE.value
    question: str = ""
    options: Any = None
    correct_answer: Any = None
    explanation: str = ""
    has_visual_asset: bool = False
    frame_timestamp: Optional[float] = None
    visual_context: Optional[str] = None
    accepted: Optional[bool] = None


class ProgressRecord(BaseModel):
    """A quiz_generation_progress row, keyed by (course_id, session_id)"""
    course_id: str
    session_id: str
    stage: ProgressStage
    stage_progress: float = Field(default=0.0, ge=0.0, le=1.0)
    overall_progress: float = Field(default=0.0, ge=0.0, le=1.0)
    current_step: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


# =============================================================================
# Segmented processing
# =============================================================================

class InitSegmentedProcessingRequest(BaseModel):
    """Request to split a course video into segments and start processing"""
    course_id: str
    youtube_url: str
    # Unset values fall back to DEFAULT_MAX_QUESTIONS / DEFAULT_SEGMENT_DURATION
    max_questions_per_segment: Optional[int] = Field(default=None, ge=1)
    segment_duration: Optional[int] = Field(default=None, gt=0, description="Segment length in seconds")
    session_id: Optional[str] = None
    use_enhanced: bool = False


class SegmentSummary(BaseModel):
    """Segment as returned to callers of the initialisation endpoint"""
    index: int
    start_time: float
    end_time: float
    title: str
    status: SegmentStatus = SegmentStatus.PENDING
    expected_questions: Optional[int] = None


class InitSegmentedProcessingResponse(BaseModel):
    success: bool = True
    segmented: bool
    total_segments: int
    segment_duration: float
    video_duration: float
    message: str
    segments: List[SegmentSummary] = Field(default_factory=list)
    total_expected_questions: Optional[int] = None
    result: Optional[Dict[str, Any]] = Field(
        None, description="Body returned by the segment orchestrator"
    )


# =============================================================================
# Smart video analysis
# =============================================================================

class AnalyzeVideoRequest(BaseModel):
    """Request body of the smart video analysis endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    course_id: Optional[str] = None
    youtube_url: Optional[str] = None
    session_id: Optional[str] = None
    max_questions: Optional[int] = Field(default=None, ge=1)
    enable_quality_verification: bool = False
    segment_duration: Optional[int] = Field(default=None, gt=0)
    use_cache: bool = Field(default=True, alias="useCache")
    use_enhanced: bool = Field(default=False, alias="useEnhanced")


class CourseSummary(BaseModel):
    title: str = ""
    description: str = ""


class AnalyzeVideoResponse(BaseModel):
    """Response of the smart video analysis endpoint"""
    success: bool = True
    message: str
    session_id: Optional[str] = None
    course_id: Optional[str] = None
    cached: Optional[bool] = None
    segmented: Optional[bool] = None
    background_processing: Optional[bool] = None
    processing_hint: Optional[str] = None
    segments: Optional[List[SegmentSummary]] = None
    total_segments: Optional[int] = None
    video_duration: Optional[float] = None
    data: Optional[CourseSummary] = None
    result: Optional[Dict[str, Any]] = None


class CourseUpdateRequest(BaseModel):
    """Editable course fields from the preview page"""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
