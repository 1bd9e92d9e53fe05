"""
Course Preview Shaping

Turns stored question rows into the structures shown on the course preview
page (right after generation), in the player's curriculum panel and in
the LMS canvas export.
"""
import json
import re
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Set

from models.course_models import Course, Question, QuestionType
from models.preview_models import (
    CourseCurriculum,
    CourseExport,
    CoursePreview,
    CurriculumSegment,
    ExportSegment,
    PreviewQuestion,
    PreviewSegment,
)
from services.timestamps import format_timestamp
from services.youtube_client import extract_video_id


TRUE_FALSE_TYPES = {QuestionType.TRUE_FALSE.value, "true_false"}
DEFAULT_TRUE_FALSE_OPTIONS = ["True", "False"]

EXPORT_SEGMENT_GAP = 300           # seconds from segment start
EXPORT_SEGMENT_SIZE = 5
EXPORT_CONCEPT_LENGTH = 50

LOCAL_QUESTION_ID = re.compile(r"^\d+-\d+$")


def parse_options(raw: Any) -> List[Any]:
    """Options may be stored as a list or as a JSON-encoded string."""
    if not raw:
        return []
    if isinstance(raw, list):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return []
        return parsed if isinstance(parsed, list) else []
    return []


def display_options(question: Question) -> List[Any]:
    options = parse_options(question.options)
    if not options and question.type in TRUE_FALSE_TYPES:
        return list(DEFAULT_TRUE_FALSE_OPTIONS)
    return options


def to_preview_question(question: Question) -> PreviewQuestion:
    return PreviewQuestion(
        id=question.id,
        type=question.type or QuestionType.MULTIPLE_CHOICE.value,
        question=question.question,
        options=display_options(question),
        correct=question.correct_answer,
        explanation=question.explanation or "",
        has_visual_asset=bool(question.has_visual_asset),
        timestamp=question.timestamp or 0,
    )


def _group_by_segment(questions: Iterable[Question]) -> Dict[int, List[Question]]:
    groups: Dict[int, List[Question]] = defaultdict(list)
    for question in questions:
        groups[question.segment_index or 0].append(question)
    return dict(sorted(groups.items()))


def build_preview_segments(questions: List[Question]) -> List[PreviewSegment]:
    """
    Group questions by segment_index when any question carries one,
    otherwise return a single "Main Content" segment.
    """
    if any(q.segment_index is not None for q in questions):
        return [
            PreviewSegment(
                title=f"Segment {index + 1}",
                timestamp=format_timestamp(min(q.timestamp for q in group)),
                questions=[to_preview_question(q) for q in group],
            )
            for index, group in _group_by_segment(questions).items()
        ]

    return [PreviewSegment(
        title="Main Content",
        timestamp=format_timestamp(0),
        questions=[to_preview_question(q) for q in questions],
    )]


def title_from_concepts(title: str, segments: List[PreviewSegment]) -> str:
    """Title from the first concept of the first segment that has concepts."""
    for segment in segments:
        if segment.concepts:
            concept = segment.concepts[0]
            return concept[:1].upper() + concept[1:]
    return title


def build_preview(course: Course, questions: List[Question]) -> CoursePreview:
    segments = build_preview_segments(questions)
    return CoursePreview(
        course_id=course.id,
        title=title_from_concepts(course.title, segments),
        description=course.description,
        video_id=extract_video_id(course.youtube_url),
        total_questions=len(questions),
        segments=segments,
    )


def remove_question(preview: CoursePreview, question_id: str) -> CoursePreview:
    """Preview without a rejected question."""
    segments = [
        segment.model_copy(update={"questions": [q for q in segment.questions if q.id != question_id]})
        for segment in preview.segments
    ]
    total = sum(len(segment.questions) for segment in segments)
    return preview.model_copy(update={"segments": segments, "total_questions": total})


def build_export_segments(questions: List[Question]) -> List[ExportSegment]:
    """
    Group questions for an LMS canvas export.

    Timestamped questions are walked in time order; a new segment starts when
    a question lies more than EXPORT_SEGMENT_GAP seconds after the start of
    the current segment, or when the segment already holds
    EXPORT_SEGMENT_SIZE questions. The first segment is the "Introduction".
    Concepts come from each question's visual_context.

    Without timestamped questions everything goes into one "Course Content"
    segment whose concepts are the first question stems.
    """
    if not questions:
        return []

    timed = sorted((q for q in questions if q.timestamp and q.timestamp > 0), key=lambda q: q.timestamp)
    if not timed:
        return [ExportSegment(
            title="Course Content",
            timestamp=format_timestamp(0),
            timestamp_seconds=0,
            concepts=[q.question[:EXPORT_CONCEPT_LENGTH] for q in questions[:EXPORT_SEGMENT_SIZE]],
            questions=[to_preview_question(q) for q in questions],
        )]

    segments: List[ExportSegment] = []
    current = ExportSegment(
        title="Introduction",
        timestamp=format_timestamp(timed[0].timestamp),
        timestamp_seconds=timed[0].timestamp,
    )
    for i, question in enumerate(timed):
        if i > 0 and (
            question.timestamp - current.timestamp_seconds > EXPORT_SEGMENT_GAP
            or len(current.questions) >= EXPORT_SEGMENT_SIZE
        ):
            segments.append(current)
            current = ExportSegment(
                title=f"Segment {len(segments) + 1}",
                timestamp=format_timestamp(question.timestamp),
                timestamp_seconds=question.timestamp,
            )

        current.questions.append(to_preview_question(question))
        if question.visual_context:
            concept = question.visual_context[:EXPORT_CONCEPT_LENGTH]
            if concept not in current.concepts:
                current.concepts.append(concept)

    segments.append(current)
    return segments


def build_export(course: Course, questions: List[Question]) -> CourseExport:
    segments = build_export_segments(questions)
    return CourseExport(
        course_id=course.id,
        title=title_from_concepts(course.title, segments),
        description=course.description,
        video_id=extract_video_id(course.youtube_url),
        segments=segments,
    )


def format_course_duration(duration: Optional[float]) -> str:
    return format_timestamp(duration) if duration and duration > 0 else "Variable"


def build_curriculum(
    course: Course,
    questions: List[Question],
    completed_segments: int = 0,
    duration: Optional[float] = None,
) -> CourseCurriculum:
    """Curriculum panel for the player."""
    duration = duration if duration is not None else course.total_duration
    curriculum = CourseCurriculum(
        title=course.title,
        description=course.description,
        duration=format_course_duration(duration),
        video_id=extract_video_id(course.youtube_url),
    )
    if not questions:
        return curriculum

    if course.is_segmented:
        curriculum.segments = [
            CurriculumSegment(
                title=f"Segment {index + 1}",
                timestamp=format_timestamp(group[0].timestamp),
                timestamp_seconds=group[0].timestamp or 0,
                questions=[to_preview_question(q) for q in group],
                is_complete=index < completed_segments,
            )
            for index, group in _group_by_segment(questions).items()
        ]
    else:
        curriculum.segments = [CurriculumSegment(
            title="Course Content",
            timestamp=format_timestamp(0),
            timestamp_seconds=0,
            questions=[to_preview_question(q) for q in questions],
            is_complete=True,
        )]
    return curriculum


def is_persisted_question_id(value: Optional[str]) -> bool:
    """True for database ids (dashed UUIDs); False for local ids such as "0-1"."""
    if not value:
        return False
    return len(value) >= 36 and "-" in value and not LOCAL_QUESTION_ID.match(value)


def questions_skipped_by_seek(
    questions: List[Question],
    current_time: float,
    seek_time: float,
    answered: Optional[Set[str]] = None,
) -> List[Question]:
    """
    Unanswered questions jumped over by a forward seek. Seeking backwards
    skips nothing.
    """
    if seek_time <= current_time:
        return []
    answered = answered or set()
    return [
        q for q in questions
        if current_time < q.timestamp <= seek_time and q.id not in answered
    ]
