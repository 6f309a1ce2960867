"""Google Gemini completion provider."""

import asyncio
import logging
import os
import time
from typing import Any, Optional

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from .base import LLMProvider, LLMResponse, ProviderType, TokenUsage, cost_from_pricing

logger = logging.getLogger(__name__)


DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

# USD per million tokens
GEMINI_PRICING = {
    "gemini-2.5-pro": {"input": 1.25, "output": 10.00},
    "gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "gemini-2.5-flash-lite": {"input": 0.10, "output": 0.40},
    "gemini-2.0-flash": {"input": 0.10, "output": 0.40},
}
DEFAULT_GEMINI_PRICING = {"input": 0.30, "output": 2.50}


class GeminiProvider(LLMProvider):
    """
    Gemini completions through google-generativeai.

    The SDK call is blocking, so it runs in a worker thread. System prompts
    are passed as the model's system_instruction.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = DEFAULT_GEMINI_MODEL,
        timeout_seconds: float = 120.0,
        max_retries: int = 3,
        requests_per_minute: Optional[int] = 60,
        track_costs: bool = True,
        log_requests: bool = False,
        log_responses: bool = False,
    ):
        super().__init__(requests_per_minute=requests_per_minute, track_costs=track_costs)
        self._api_key = api_key
        self.default_model = default_model
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.log_requests = log_requests
        self.log_responses = log_responses

        self._genai: Optional[Any] = None

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.GEMINI

    def _get_api_key(self) -> str:
        if self._api_key:
            return self._api_key

        for env_var in ("GOOGLE_API_KEY", "GEMINI_API_KEY"):
            api_key = os.environ.get(env_var)
            if api_key:
                return api_key

        raise ValueError(
            "Google API key not found. Set GOOGLE_API_KEY or GEMINI_API_KEY "
            "environment variable or pass api_key parameter."
        )

    async def start(self) -> None:
        import google.generativeai as genai

        genai.configure(api_key=self._get_api_key())
        self._genai = genai
        logger.info(f"Gemini provider initialized ({self.default_model})")

    async def stop(self) -> None:
        self._genai = None
        logger.info("Gemini provider closed")

    def _get_model(self, model_name: str, system: Optional[str]) -> Any:
        if self._genai is None:
            raise RuntimeError(
                "Provider not initialized. Use 'async with provider' or call start()."
            )
        # The SDK adds the prefix itself
        model_name = model_name.removeprefix("models/")
        if system:
            return self._genai.GenerativeModel(model_name, system_instruction=system)
        return self._genai.GenerativeModel(model_name)

    async def complete(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        model: Optional[str] = None,
    ) -> LLMResponse:
        model_name = model or self.default_model
        genai_model = self._get_model(model_name, system)
        generation_config = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }

        await self._apply_rate_limit()

        if self.log_requests:
            logger.debug(f"Gemini request: model={model_name}, prompt={prompt[:200]}...")

        start_time = time.time()
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=1.0, max=30.0),
            reraise=True,
        ):
            with attempt:
                response = await asyncio.to_thread(
                    genai_model.generate_content,
                    prompt,
                    generation_config=generation_config,
                    request_options={"timeout": self.timeout_seconds},
                )
        latency_ms = (time.time() - start_time) * 1000

        try:
            content = response.text
        except ValueError:
            # Blocked or empty candidates
            logger.warning(f"Gemini returned no text: {response.prompt_feedback}")
            content = ""

        usage = TokenUsage()
        metadata = getattr(response, "usage_metadata", None)
        if metadata:
            usage.input_tokens = getattr(metadata, "prompt_token_count", 0) or 0
            usage.output_tokens = getattr(metadata, "candidates_token_count", 0) or 0

        stop_reason = None
        if response.candidates:
            stop_reason = str(response.candidates[0].finish_reason)

        llm_response = LLMResponse(
            content=content,
            model=model_name,
            usage=usage,
            stop_reason=stop_reason,
            latency_ms=latency_ms,
            provider=ProviderType.GEMINI,
            cost_usd=self.calculate_cost(usage, model_name),
        )
        self._track(llm_response)

        if self.log_responses:
            logger.debug(f"Gemini response: {content[:200]}...")

        return llm_response

    def calculate_cost(self, usage: TokenUsage, model: str) -> float:
        return cost_from_pricing(usage, GEMINI_PRICING.get(model, DEFAULT_GEMINI_PRICING))
