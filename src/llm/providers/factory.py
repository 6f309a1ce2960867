"""Factory for creating LLM providers."""

import logging
from typing import Any, Optional

from .base import LLMProvider, ProviderType

logger = logging.getLogger(__name__)


def _coerce(provider: ProviderType | str) -> ProviderType:
    if isinstance(provider, ProviderType):
        return provider
    try:
        return ProviderType(provider.lower())
    except ValueError:
        raise ValueError(
            f"Unknown provider: {provider}. "
            f"Supported providers: {[p.value for p in ProviderType]}"
        )


def get_default_model(provider: ProviderType | str) -> str:
    """Default model name for a provider."""
    provider = _coerce(provider)
    if provider == ProviderType.ANTHROPIC:
        from .anthropic import DEFAULT_ANTHROPIC_MODEL

        return DEFAULT_ANTHROPIC_MODEL

    from .gemini import DEFAULT_GEMINI_MODEL

    return DEFAULT_GEMINI_MODEL


def create_llm_provider(
    provider: ProviderType | str,
    api_key: Optional[str] = None,
    default_model: Optional[str] = None,
    **kwargs: Any,
) -> LLMProvider:
    """
    Create an LLM provider instance.

    Args:
        provider: The provider type (ProviderType enum or string)
        api_key: Optional API key (falls back to environment variables)
        default_model: Optional default model name
        **kwargs: Provider constructor arguments (timeouts, retries, logging)

    Returns:
        An unstarted LLMProvider

    Raises:
        ValueError: If the provider type is unknown
    """
    provider = _coerce(provider)
    model = default_model or get_default_model(provider)
    logger.debug(f"Creating {provider.value} provider with model {model}")

    if provider == ProviderType.ANTHROPIC:
        from .anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, default_model=model, **kwargs)

    from .gemini import GeminiProvider

    return GeminiProvider(api_key=api_key, default_model=model, **kwargs)
