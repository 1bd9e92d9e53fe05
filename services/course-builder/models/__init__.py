"""Course Builder Models"""
from .course_models import (
    SegmentStatus,
    QuestionType,
    ProgressStage,
    Course,
    CourseSegment,
    Question,
    ProgressRecord,
    InitSegmentedProcessingRequest,
    InitSegmentedProcessingResponse,
    SegmentSummary,
    AnalyzeVideoRequest,
    AnalyzeVideoResponse,
    CourseSummary,
    CourseUpdateRequest,
)
from .question_models import (
    BloomLevel,
    QuestionPlan,
    ConceptAnalysis,
    TrueFalseQuestion,
    QualityAssessment,
    TrueFalseGenerationResponse,
)

__all__ = [
    "SegmentStatus",
    "QuestionType",
    "ProgressStage",
    "Course",
    "CourseSegment",
    "Question",
    "ProgressRecord",
    "InitSegmentedProcessingRequest",
    "InitSegmentedProcessingResponse",
    "SegmentSummary",
    "AnalyzeVideoRequest",
    "AnalyzeVideoResponse",
    "CourseSummary",
    "CourseUpdateRequest",
    "BloomLevel",
    "QuestionPlan",
    "ConceptAnalysis",
    "TrueFalseQuestion",
    "QualityAssessment",
    "TrueFalseGenerationResponse",
]
