"""
Tests for environment-driven configuration.
"""

from config.settings import CourseBuilderConfig


ENV_VARS = [
    "SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "YOUTUBE_API_KEY",
    "DEFAULT_SEGMENT_DURATION", "DEFAULT_MAX_QUESTIONS", "SHORT_SEGMENT_MERGE_SECONDS",
    "UNKNOWN_DURATION_FALLBACK", "INIT_TIMEOUT_SECONDS", "POST_INIT_SETTLE_SECONDS",
    "ORCHESTRATOR_FUNCTION", "CORS_ORIGINS", "LOG_LEVEL",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    clear_env(monkeypatch)

    config = CourseBuilderConfig.from_env()

    assert config.segment_duration == 300
    assert config.max_questions_per_segment == 5
    assert config.short_segment_merge_seconds == 20
    assert config.unknown_duration_fallback == 1800
    assert config.init_timeout_seconds == 30.0
    assert config.orchestrator_function == "orchestrate-segment-processing"
    assert config.cors_origins == ["*"]
    assert config.log_level == "INFO"


def test_overrides(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_URL", "https://proj.supabase.co/")
    monkeypatch.setenv("DEFAULT_SEGMENT_DURATION", "600")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = CourseBuilderConfig.from_env()

    assert config.segment_duration == 600
    assert config.cors_origins == ["https://a.example", "https://b.example"]
    assert config.log_level == "DEBUG"
    assert config.functions_url == "https://proj.supabase.co/functions/v1"
