"""Content generation backend: turns a directive into copy via an LLM provider."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from src.llm import LLMProvider, ProviderType, create_llm_provider
from src.models.iteration import ContentType

from .templates import get_content_template

logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Configuration for the content generator."""

    provider: ProviderType = ProviderType.ANTHROPIC
    model: Optional[str] = None

    timeout_seconds: float = 120.0
    max_retries: int = 3
    requests_per_minute: Optional[int] = None

    # Send the content type's system prompt alongside the directive
    use_system_prompt: bool = True

    log_requests: bool = False
    log_responses: bool = False


@dataclass
class GenerationOptions:
    """Sampling options for one generation call."""

    temperature: float = 0.7
    max_length: int = 400


@dataclass
class GenerationResponse:
    """Generated text plus usage metadata."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def tokens_used(self) -> int:
        return int(self.metadata.get("total_tokens", 0))

    @property
    def cost_usd(self) -> float:
        return float(self.metadata.get("cost_usd", 0.0))


class ContentGenerator:
    """
    Generates blog/email/social copy from a directive.

    Usage:
        async with ContentGenerator(GenerationConfig()) as generator:
            response = await generator.generate(
                ContentType.EMAIL,
                "Write a follow-up email after the product demo",
                GenerationOptions(temperature=0.6, max_length=200),
            )
            print(response.text)
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        provider: Optional[LLMProvider] = None,
    ):
        self.config = config or GenerationConfig()
        self._client: Optional[LLMProvider] = provider
        self._owns_client = provider is None

    async def __aenter__(self) -> "ContentGenerator":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.stop()

    async def start(self) -> None:
        """Initialize resources."""
        if self._client is None:
            self._client = create_llm_provider(
                provider=self.config.provider,
                default_model=self.config.model,
                timeout_seconds=self.config.timeout_seconds,
                max_retries=self.config.max_retries,
                requests_per_minute=self.config.requests_per_minute,
                track_costs=True,
                log_requests=self.config.log_requests,
                log_responses=self.config.log_responses,
            )
            self._owns_client = True
            await self._client.start()
        logger.info(
            f"ContentGenerator initialized with {self._client.provider_type.value} provider"
        )

    async def stop(self) -> None:
        """Clean up resources."""
        if self._client and self._owns_client:
            await self._client.stop()
            self._client = None
        logger.info("ContentGenerator stopped")

    def _ensure_client(self) -> LLMProvider:
        """Ensure LLM client is available."""
        if self._client is None:
            raise RuntimeError(
                "Generator not started. Use 'async with ContentGenerator()' or call start()."
            )
        return self._client

    async def generate(
        self,
        content_type: ContentType,
        directive: str,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResponse:
        """
        Generate content for a directive.

        Provider errors are not caught here; they reach the caller unchanged.

        Args:
            content_type: Kind of copy being produced
            directive: Full prompt for the backend
            options: Sampling options

        Returns:
            GenerationResponse with the text and usage metadata
        """
        client = self._ensure_client()
        options = options or GenerationOptions()
        template = get_content_template(content_type)

        start_time = time.time()
        response = await client.complete(
            directive,
            system=template.system_prompt if self.config.use_system_prompt else None,
            max_tokens=options.max_length,
            temperature=options.temperature,
        )
        latency_ms = (time.time() - start_time) * 1000

        logger.debug(
            f"Generated {content_type.value} content: {len(response.content)} chars, "
            f"{response.usage.total_tokens} tokens in {latency_ms:.0f}ms"
        )

        return GenerationResponse(
            text=response.content.strip(),
            metadata={
                "model": response.model,
                "provider": response.provider.value if response.provider else None,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.total_tokens,
                "cost_usd": response.cost_usd,
                "stop_reason": response.stop_reason,
                "latency_ms": latency_ms,
                "temperature": options.temperature,
                "max_length": options.max_length,
            },
        )

    def get_cost_summary(self) -> dict[str, Any]:
        """Cumulative provider costs."""
        return self._ensure_client().get_cost_summary()
