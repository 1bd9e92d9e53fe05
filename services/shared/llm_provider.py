"""
Multi-Provider LLM Configuration

Centralized configuration for switching between LLM providers used for
quiz question generation and course suggestions:
- OpenAI (GPT-4o, GPT-4o-mini)
- Gemini (2.5 Flash / Pro through the OpenAI-compatible endpoint)
- DeepSeek (V3.2)
- Groq (Llama 3.3 - Ultra-fast inference)

Usage:
    from shared.llm_provider import get_llm_client, get_model_name

    client = get_llm_client()
    response = await client.chat.completions.create(
        model=get_model_name("fast"),
        messages=[...]
    )

Environment Variables:
    LLM_PROVIDER: "openai" | "gemini" | "deepseek" | "groq"
    LLM_PROVIDER_API_KEY: API key for the selected provider (falls back to provider-specific keys)

    # Provider-specific keys (fallbacks)
    OPENAI_API_KEY: OpenAI API key
    GEMINI_API_KEY: Google AI Studio key
    DEEPSEEK_API_KEY: DeepSeek API key
    GROQ_API_KEY: Groq API key
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from openai import AsyncOpenAI


logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers"""
    OPENAI = "openai"
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    GROQ = "groq"


@dataclass
class ProviderConfig:
    """Configuration for an LLM provider"""
    name: str
    base_url: str
    api_key_env: str
    model_fast: str
    model_quality: str
    supports_json_mode: bool
    cost_per_1m_input: float
    cost_per_1m_output: float
    timeout: float = 120.0          # Request timeout in seconds
    max_retries: int = 2            # Number of retries on failure


PROVIDER_CONFIGS: Dict[LLMProvider, ProviderConfig] = {
    LLMProvider.OPENAI: ProviderConfig(
        name="OpenAI",
        base_url="https://api.openai.com/v1",
        api_key_env="OPENAI_API_KEY",
        model_fast="gpt-4o-mini",
        model_quality="gpt-4o",
        supports_json_mode=True,
        cost_per_1m_input=2.50,
        cost_per_1m_output=10.00,
    ),
    LLMProvider.GEMINI: ProviderConfig(
        name="Gemini",
        base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
        api_key_env="GEMINI_API_KEY",
        model_fast="gemini-2.5-flash",
        model_quality="gemini-2.5-pro",
        supports_json_mode=True,
        cost_per_1m_input=0.30,
        cost_per_1m_output=2.50,
    ),
    LLMProvider.DEEPSEEK: ProviderConfig(
        name="DeepSeek",
        base_url="https://api.deepseek.com",
        api_key_env="DEEPSEEK_API_KEY",
        model_fast="deepseek-chat",
        model_quality="deepseek-chat",
        supports_json_mode=True,
        cost_per_1m_input=0.28,
        cost_per_1m_output=0.42,
    ),
    LLMProvider.GROQ: ProviderConfig(
        name="Groq",
        base_url="https://api.groq.com/openai/v1",
        api_key_env="GROQ_API_KEY",
        model_fast="llama-3.3-70b-versatile",
        model_quality="llama-3.3-70b-versatile",
        supports_json_mode=True,
        cost_per_1m_input=0.59,
        cost_per_1m_output=0.79,
    ),
}


class LLMClientManager:
    """
    Manages the LLM client instance with provider switching capability.

    Singleton pattern ensures consistent client usage across the application.
    """

    _instance: Optional['LLMClientManager'] = None
    _async_client: Optional[AsyncOpenAI] = None
    _provider: Optional[LLMProvider] = None
    _config: Optional[ProviderConfig] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._provider is None:
            self._initialize()

    def _initialize(self):
        """Initialize the LLM client based on environment configuration"""
        provider_name = os.getenv("LLM_PROVIDER", "openai").lower()

        try:
            self._provider = LLMProvider(provider_name)
        except ValueError:
            logger.warning(f"[LLM] Unknown provider '{provider_name}', falling back to OpenAI")
            self._provider = LLMProvider.OPENAI

        self._config = PROVIDER_CONFIGS[self._provider]

        # Generic key first, then provider-specific
        api_key = os.getenv("LLM_PROVIDER_API_KEY") or os.getenv(self._config.api_key_env)

        if not api_key:
            logger.warning(f"[LLM] No API key found for {self._config.name}")
            logger.warning(f"[LLM] Set LLM_PROVIDER_API_KEY or {self._config.api_key_env}")

        self._async_client = AsyncOpenAI(
            api_key=api_key or "missing-key",
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            max_retries=self._config.max_retries,
        )

        logger.info(f"[LLM] Initialized with {self._config.name} provider")
        logger.info(f"[LLM] Fast model: {self._config.model_fast}, quality model: {self._config.model_quality}")

    @property
    def async_client(self) -> AsyncOpenAI:
        """Get the async OpenAI-compatible client"""
        return self._async_client

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def get_model(self, tier: str = "quality") -> str:
        """
        Get the model name for the specified tier.

        Args:
            tier: "fast" or "quality"
        """
        if tier == "fast":
            return self._config.model_fast
        return self._config.model_quality

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Estimate the cost in USD for a request"""
        input_cost = (input_tokens / 1_000_000) * self._config.cost_per_1m_input
        output_cost = (output_tokens / 1_000_000) * self._config.cost_per_1m_output
        return input_cost + output_cost

    def reset(self):
        """Reset the client (useful for testing or provider switching)"""
        self._async_client = None
        self._provider = None
        self._config = None
        LLMClientManager._instance = None


def get_llm_manager() -> LLMClientManager:
    """Get the LLM client manager singleton"""
    return LLMClientManager()


def get_llm_client() -> AsyncOpenAI:
    """Get the async LLM client"""
    return get_llm_manager().async_client


def get_model_name(tier: str = "quality") -> str:
    """Get the model name for the specified tier ("fast" or "quality")."""
    return get_llm_manager().get_model(tier)
