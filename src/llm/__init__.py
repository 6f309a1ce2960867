"""
LLM access for the content generator.

Usage:
    from src.llm import create_llm_provider, ProviderType

    provider = create_llm_provider(ProviderType.ANTHROPIC)
    async with provider:
        response = await provider.complete("Write a subject line", max_tokens=40)
        print(response.content)
"""

from .providers import (
    AnthropicProvider,
    CostTracker,
    GeminiProvider,
    LLMProvider,
    LLMResponse,
    ProviderType,
    TokenUsage,
    create_llm_provider,
    get_default_model,
)

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "ProviderType",
    "TokenUsage",
    "CostTracker",
    "AnthropicProvider",
    "GeminiProvider",
    "create_llm_provider",
    "get_default_model",
]
