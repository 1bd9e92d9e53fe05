"""
Shared utilities for Course Builder services.

Provides the LLM provider configuration used by question generation
and course suggestions.
"""

from .llm_provider import (
    # Classes
    LLMProvider,
    ProviderConfig,
    LLMClientManager,

    # Functions
    get_llm_manager,
    get_llm_client,
    get_model_name,

    # Constants
    PROVIDER_CONFIGS,
)

__all__ = [
    "LLMProvider",
    "ProviderConfig",
    "LLMClientManager",
    "get_llm_manager",
    "get_llm_client",
    "get_model_name",
    "PROVIDER_CONFIGS",
]
