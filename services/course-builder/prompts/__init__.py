"""
Course Builder Prompts Module

Prompts for the LLM calls made by the course builder:
- Per-type question generation from a question plan
- Follow-up course suggestions
"""

from .question_prompts import (
    TRUE_FALSE_DETAILED_PROMPT,
    build_true_false_prompt,
)

from .suggestion_prompts import (
    NEXT_COURSE_SYSTEM_PROMPT,
    build_suggestion_prompt,
)

__all__ = [
    "TRUE_FALSE_DETAILED_PROMPT",
    "build_true_false_prompt",
    "NEXT_COURSE_SYSTEM_PROMPT",
    "build_suggestion_prompt",
]
