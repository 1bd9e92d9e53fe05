"""
Course Builder Exceptions

Domain errors raised by the services and translated to HTTP status codes
by the API layer.
"""
from typing import Any, Dict, Optional


class RepositoryError(Exception):
    """Raised when a Supabase query fails."""
    def __init__(self, message: str, table: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.table = table
        self.details = details or {}


class NotFoundError(Exception):
    """Raised when a requested row does not exist."""
    def __init__(self, message: str, resource: str = "", resource_id: str = ""):
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id


class AuthenticationError(Exception):
    """Raised when an operation requires a signed-in user."""


class SegmentedProcessingError(Exception):
    """Raised when segmented initialisation cannot complete."""
    def __init__(self, message: str, course_id: str = "", details: Optional[str] = None):
        super().__init__(message)
        self.course_id = course_id
        self.details = details


class OrchestratorError(Exception):
    """Raised when the segment orchestrator rejects a trigger."""
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class QuestionGenerationError(Exception):
    """Raised when a question cannot be generated from its plan."""
    def __init__(self, message: str, question_id: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.question_id = question_id
        self.context = context or {}


class RatingValidationError(ValueError):
    """Raised for rating values outside 1..5."""


class InvalidQuestionIdError(ValueError):
    """Raised for question ids that were never persisted."""
    def __init__(self, question_id: str):
        super().__init__("Question has not been saved yet and cannot be updated")
        self.question_id = question_id


class MissingFieldsError(ValueError):
    """Raised when a request lacks its required fields."""
