"""Course Builder Config Package"""
from .settings import (
    CourseBuilderConfig,
    DEFAULT_SEGMENT_DURATION,
    DEFAULT_MAX_QUESTIONS_PER_SEGMENT,
    SHORT_SEGMENT_MERGE_SECONDS,
    UNKNOWN_DURATION_FALLBACK,
)

__all__ = [
    'CourseBuilderConfig',
    'DEFAULT_SEGMENT_DURATION',
    'DEFAULT_MAX_QUESTIONS_PER_SEGMENT',
    'SHORT_SEGMENT_MERGE_SECONDS',
    'UNKNOWN_DURATION_FALLBACK',
]
