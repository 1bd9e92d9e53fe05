"""
Course Builder Configuration Settings

Runtime configuration loaded from environment variables, plus the
segmentation defaults used by the processing pipeline.
"""

from dataclasses import dataclass, field
from typing import List
import os


# Segmentation defaults
DEFAULT_SEGMENT_DURATION = 300            # 5 minutes per segment
DEFAULT_MAX_QUESTIONS_PER_SEGMENT = 5
SHORT_SEGMENT_MERGE_SECONDS = 20          # Trailing segments shorter than this are merged
UNKNOWN_DURATION_FALLBACK = 1800          # Assumed duration when YouTube gives none


@dataclass
class CourseBuilderConfig:
    """Global service configuration"""

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # YouTube Data API (duration lookup, suggestion search)
    youtube_api_key: str = ""

    # Segmentation
    segment_duration: int = DEFAULT_SEGMENT_DURATION
    max_questions_per_segment: int = DEFAULT_MAX_QUESTIONS_PER_SEGMENT
    short_segment_merge_seconds: int = SHORT_SEGMENT_MERGE_SECONDS
    unknown_duration_fallback: int = UNKNOWN_DURATION_FALLBACK

    # Orchestration
    init_timeout_seconds: float = 30.0
    post_init_settle_seconds: float = 1.0
    orchestrator_function: str = "orchestrate-segment-processing"

    # HTTP
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @property
    def functions_url(self) -> str:
        """Base URL of the Supabase edge functions"""
        return f"{self.supabase_url.rstrip('/')}/functions/v1"

    @classmethod
    def from_env(cls) -> "CourseBuilderConfig":
        """Load configuration from environment variables"""
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            supabase_url=os.getenv("SUPABASE_URL", os.getenv("NEXT_PUBLIC_SUPABASE_URL", "")).strip(),
            supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", "").strip(),
            youtube_api_key=os.getenv("YOUTUBE_API_KEY", "").strip(),
            segment_duration=int(os.getenv("DEFAULT_SEGMENT_DURATION", str(DEFAULT_SEGMENT_DURATION))),
            max_questions_per_segment=int(
                os.getenv("DEFAULT_MAX_QUESTIONS", str(DEFAULT_MAX_QUESTIONS_PER_SEGMENT))
            ),
            short_segment_merge_seconds=int(
                os.getenv("SHORT_SEGMENT_MERGE_SECONDS", str(SHORT_SEGMENT_MERGE_SECONDS))
            ),
            unknown_duration_fallback=int(
                os.getenv("UNKNOWN_DURATION_FALLBACK", str(UNKNOWN_DURATION_FALLBACK))
            ),
            init_timeout_seconds=float(os.getenv("INIT_TIMEOUT_SECONDS", "30")),
            post_init_settle_seconds=float(os.getenv("POST_INIT_SETTLE_SECONDS", "1.0")),
            orchestrator_function=os.getenv("ORCHESTRATOR_FUNCTION", "orchestrate-segment-processing"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
