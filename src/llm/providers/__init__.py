"""Completion providers behind one interface (Anthropic, Google Gemini)."""

from .base import (
    CostTracker,
    LLMProvider,
    LLMResponse,
    ProviderType,
    TokenUsage,
)
from .anthropic import AnthropicProvider
from .gemini import GeminiProvider
from .factory import create_llm_provider, get_default_model

__all__ = [
    # Base
    "LLMProvider",
    "LLMResponse",
    "ProviderType",
    "TokenUsage",
    "CostTracker",
    # Providers
    "AnthropicProvider",
    "GeminiProvider",
    # Factory
    "create_llm_provider",
    "get_default_model",
]
