"""Provider interface shared by the generation backends."""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ProviderType(str, Enum):
    """Supported LLM providers."""

    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


@dataclass
class TokenUsage:
    """Token counts for one request."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class LLMResponse:
    """Provider-agnostic completion result."""

    content: str
    model: str
    usage: TokenUsage
    stop_reason: Optional[str] = None
    latency_ms: float = 0.0
    provider: Optional[ProviderType] = None
    cost_usd: float = 0.0


@dataclass
class CostTracker:
    """Cumulative usage across requests."""

    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cost_usd: float = 0.0
    request_count: int = 0
    costs_by_model: dict[str, float] = field(default_factory=dict)

    def add(self, response: LLMResponse) -> None:
        self.total_input_tokens += response.usage.input_tokens
        self.total_output_tokens += response.usage.output_tokens
        self.total_cost_usd += response.cost_usd
        self.request_count += 1
        self.costs_by_model[response.model] = (
            self.costs_by_model.get(response.model, 0.0) + response.cost_usd
        )

    def get_summary(self) -> dict[str, Any]:
        return {
            "total_requests": self.request_count,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "total_cost_usd": round(self.total_cost_usd, 4),
            "costs_by_model": {k: round(v, 4) for k, v in self.costs_by_model.items()},
        }


def cost_from_pricing(usage: TokenUsage, pricing: dict[str, float]) -> float:
    """USD cost for a usage record, with pricing given per million tokens."""
    return (
        usage.input_tokens / 1_000_000 * pricing["input"]
        + usage.output_tokens / 1_000_000 * pricing["output"]
    )


class LLMProvider(ABC):
    """
    Base class for completion providers.

    Subclasses open their client in ``start`` and implement ``complete``.
    Rate limiting and cost tracking are shared here.

    Usage:
        provider = create_llm_provider(ProviderType.ANTHROPIC)
        async with provider:
            response = await provider.complete("Write a tagline", max_tokens=60)
    """

    def __init__(
        self,
        requests_per_minute: Optional[int] = None,
        track_costs: bool = True,
    ):
        self.requests_per_minute = requests_per_minute
        self.track_costs = track_costs
        self.cost_tracker = CostTracker()
        self._rate_limit_lock = asyncio.Lock()
        self._last_request_time: float = 0.0

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType:
        ...

    async def __aenter__(self) -> "LLMProvider":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.stop()

    @abstractmethod
    async def start(self) -> None:
        """Open client connections."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Release client resources."""
        ...

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """
        Send a single-turn completion request.

        Args:
            prompt: The user prompt
            system: Optional system prompt
            max_tokens: Maximum tokens in the response
            temperature: Sampling temperature
            model: Model override for this call

        Returns:
            LLMResponse with content, usage and cost
        """
        ...

    @abstractmethod
    def calculate_cost(self, usage: TokenUsage, model: str) -> float:
        ...

    async def _apply_rate_limit(self) -> None:
        """Space requests out to honor requests_per_minute."""
        if self.requests_per_minute:
            min_interval = 60.0 / self.requests_per_minute
            async with self._rate_limit_lock:
                elapsed = time.time() - self._last_request_time
                if elapsed < min_interval:
                    await asyncio.sleep(min_interval - elapsed)
                self._last_request_time = time.time()

    def _track(self, response: LLMResponse) -> None:
        if self.track_costs:
            self.cost_tracker.add(response)

    def get_cost_summary(self) -> dict[str, Any]:
        return self.cost_tracker.get_summary()

    def reset_cost_tracker(self) -> None:
        self.cost_tracker = CostTracker()
