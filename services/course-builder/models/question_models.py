"""
Question Generation Models

Plans produced by the question planner and the typed questions generated
from them.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class BloomLevel(str, Enum):
    """Bloom's taxonomy cognitive levels"""
    REMEMBER = "remember"
    UNDERSTAND = "understand"
    APPLY = "apply"
    ANALYZE = "analyze"
    EVALUATE = "evaluate"
    CREATE = "create"


class QuestionPlan(BaseModel):
    """Planning output for a single question at a video timestamp"""
    question_id: str
    question_type: str = "true-false"
    timestamp: float = Field(..., ge=0, description="Seconds into the video")
    learning_objective: str
    content_context: str = ""
    key_concepts: List[str] = Field(default_factory=list)
    bloom_level: BloomLevel = BloomLevel.UNDERSTAND
    educational_rationale: str = ""
    planning_notes: str = ""


class ConceptAnalysis(BaseModel):
    key_concept: Optional[str] = None
    common_misconception: Optional[str] = None
    related_concepts: List[str] = Field(default_factory=list)


class TrueFalseQuestion(BaseModel):
    """A generated true/false statement"""
    question_id: str
    timestamp: float
    type: str = "true-false"
    question: str
    correct_answer: bool
    explanation: str
    bloom_level: BloomLevel
    educational_rationale: str = ""
    concept_analysis: ConceptAnalysis = Field(default_factory=ConceptAnalysis)
    misconception_addressed: Optional[str] = None


class QualityAssessment(BaseModel):
    score: int = Field(..., ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)


class TrueFalseGenerationResponse(BaseModel):
    question: TrueFalseQuestion
    quality: QualityAssessment
    provider: str
