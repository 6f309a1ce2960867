"""Refinement engine orchestrator for iterative content improvement."""

import asyncio
import logging
import time
from typing import Any, Optional

from src.generation import (
    ContentGenerator,
    GenerationConfig,
    GenerationOptions,
    build_generation_prompt,
)
from src.models.iteration import ContentIteration, ContentType, UserFeedback, now_ms

from .analyzer import FeedbackPatternAnalyzer
from .classifier import IntentClassifier, KeywordIntentClassifier
from .context import ContextBuilder
from .errors import EmptyGenerationError, IterationNotFoundError
from .metrics import MetricsTracker, calculate_confidence
from .models import (
    FeedbackPatternAnalysis,
    ProcessingMetrics,
    RefinementConfig,
    RefinementContext,
    RefinementRequest,
    RefinementResult,
    RefinementStrategy,
    ScoredStrategy,
)
from .preferences import PreferenceStore
from .prompts import DEFAULT_FEEDBACK, PromptAugmenter
from .sessions import SessionRegistry, SessionState
from .strategies import BASE_LENGTHS, StrategyCatalog, get_max_length, get_temperature

logger = logging.getLogger(__name__)


def build_improvement_hypothesis(
    strategy: RefinementStrategy, context: RefinementContext
) -> str:
    """One-line explanation of what the chosen strategy is expected to fix."""
    hypothesis = f"Using {strategy.type.value} strategy: {strategy.description}."

    if context.successful_patterns:
        hypothesis += (
            f" Incorporating {len(context.successful_patterns)} successful patterns "
            "from previous iterations."
        )

    if context.failure_patterns:
        hypothesis += (
            f" Avoiding {len(context.failure_patterns)} patterns that received "
            "negative feedback."
        )

    return hypothesis


class RefinementEngine:
    """
    Decides how to regenerate content from user feedback.

    Each refinement builds a context from the session history, ranks the
    candidate strategies, augments the directive, awaits one generation call,
    records the new iteration and then updates the session's preferences and
    metrics.

    Usage:
        async with RefinementEngine(RefinementConfig()) as engine:
            session = engine.start_session(ContentType.EMAIL, "Demo follow-up")
            draft = await engine.generate_initial(session.session_id)

            feedback = UserFeedback(
                type=FeedbackType.REFINE,
                refinement_request="make it more formal",
            )
            engine.add_feedback(session.session_id, draft.iteration_id, feedback)

            result = await engine.process_refinement(
                RefinementRequest(
                    session_id=session.session_id,
                    iteration_id=draft.iteration_id,
                    user_feedback=feedback,
                    content_type=ContentType.EMAIL,
                )
            )
            print(result.iteration.generated_content)
    """

    def __init__(
        self,
        config: Optional[RefinementConfig] = None,
        generator: Optional[ContentGenerator] = None,
        classifier: Optional[IntentClassifier] = None,
        catalog: Optional[StrategyCatalog] = None,
    ):
        self.config = config or RefinementConfig()
        self.classifier = classifier or KeywordIntentClassifier()

        self.sessions = SessionRegistry()
        self.preferences = PreferenceStore(self.sessions, self.classifier)
        self.metrics = MetricsTracker(self.sessions)
        self.context_builder = ContextBuilder(self.preferences)
        self.catalog = catalog or StrategyCatalog(self.classifier)
        self.augmenter = PromptAugmenter()
        self.analyzer = FeedbackPatternAnalyzer(self.classifier)

        self._generator = generator
        self._owns_generator = generator is None

    async def __aenter__(self) -> "RefinementEngine":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.stop()

    async def start(self) -> None:
        """Initialize resources."""
        if self._generator is None:
            self._generator = ContentGenerator(
                GenerationConfig(
                    provider=self.config.provider,
                    model=self.config.model,
                    timeout_seconds=self.config.timeout_seconds,
                    max_retries=self.config.max_retries,
                    requests_per_minute=self.config.requests_per_minute,
                    log_requests=self.config.log_requests,
                    log_responses=self.config.log_responses,
                )
            )
            self._owns_generator = True
            await self._generator.start()
        logger.info(
            f"RefinementEngine initialized with {self.config.provider.value} provider"
        )

    async def stop(self) -> None:
        """Clean up resources."""
        if self._generator and self._owns_generator:
            await self._generator.stop()
            self._generator = None
        logger.info("RefinementEngine stopped")

    def _ensure_generator(self) -> ContentGenerator:
        """Ensure the generation backend is available."""
        if self._generator is None:
            raise RuntimeError(
                "Engine not started. Use 'async with RefinementEngine()' or call start()."
            )
        return self._generator

    # Sessions

    def start_session(
        self,
        content_type: ContentType = ContentType.BLOG,
        user_brief: str = "",
        session_id: Optional[str] = None,
    ) -> SessionState:
        """Register a new content-creation session."""
        return self.sessions.create(content_type, user_brief, session_id)

    def end_session(self, session_id: str) -> bool:
        """Discard a session with its preferences and metrics."""
        return self.sessions.destroy(session_id)

    async def generate_initial(
        self,
        session_id: str,
        tone: Optional[str] = None,
        length: Optional[str] = None,
        audience: Optional[str] = None,
    ) -> ContentIteration:
        """
        Generate the first draft for a session's brief.

        Args:
            session_id: Session created with start_session
            tone: Optional tone name for the draft
            length: Optional length name for the draft
            audience: Optional audience description

        Returns:
            The recorded first iteration
        """
        session = self.sessions.get(session_id)
        generator = self._ensure_generator()

        prompt = build_generation_prompt(
            session.content_type, session.user_brief, tone, length, audience
        )
        options = GenerationOptions(max_length=BASE_LENGTHS[session.content_type])

        request_time = now_ms()
        response = await generator.generate(session.content_type, prompt, options)
        response_time = now_ms()

        if not response.text.strip():
            raise EmptyGenerationError(
                f"Empty draft for session {session_id}"
            )

        iteration = session.add_iteration(
            prompt=prompt,
            generated_content=response.text,
            request_time=request_time,
            response_time=response_time,
        )
        logger.info(
            f"Generated initial {session.content_type.value} draft for {session_id} "
            f"({iteration.word_count()} words)"
        )
        return iteration

    def add_feedback(
        self,
        session_id: str,
        iteration_id: str,
        feedback: UserFeedback,
    ) -> ContentIteration:
        """
        Attach the user's response to an iteration.

        Raises:
            SessionNotFoundError: Unknown session
            IterationNotFoundError: The session has no such iteration
        """
        session = self.sessions.get(session_id)
        iteration = session.attach_feedback(iteration_id, feedback)
        if iteration is None:
            raise IterationNotFoundError(session_id, iteration_id)

        if feedback.rating is not None:
            self.metrics.record_rating(session_id, feedback.rating)

        logger.debug(
            f"Session {session_id}: {feedback.type.value} feedback on {iteration_id}"
        )
        return iteration

    # Refinement

    def _previous_iterations(self, request: RefinementRequest) -> list[ContentIteration]:
        if request.previous_iterations is not None:
            return request.previous_iterations
        session = self.sessions.find(request.session_id)
        return list(session.iterations) if session else []

    def build_context(self, request: RefinementRequest) -> RefinementContext:
        """Context for a request, derived from its history and preferences."""
        return self.context_builder.build(request, self._previous_iterations(request))

    def rank_strategies(self, request: RefinementRequest) -> list[ScoredStrategy]:
        """Preview the ranked candidates for a request without generating."""
        return self.catalog.rank(request, self.build_context(request))

    async def process_refinement(self, request: RefinementRequest) -> RefinementResult:
        """
        Refine content based on user feedback.

        Generation backend errors propagate unchanged.

        Args:
            request: The refinement request

        Returns:
            RefinementResult with the new iteration and the chosen strategy
        """
        start_time = time.time()
        context = self.build_context(request)
        strategy = self.catalog.select(request, context)
        return await self._refine(request, context, strategy, start_time)

    async def process_refinement_alternatives(
        self,
        request: RefinementRequest,
        count: Optional[int] = None,
    ) -> list[RefinementResult]:
        """
        Generate several variations, one per top-ranked strategy.

        Variations run concurrently. A failed variation is logged and left out,
        so the result may hold fewer than ``count`` entries, or none.

        Args:
            request: The refinement request
            count: Number of variations; defaults to config.default_alternatives

        Returns:
            Successful results in strategy rank order
        """
        if count is None:
            count = self.config.default_alternatives
        if count <= 0:
            return []

        start_time = time.time()
        context = self.build_context(request)
        strategies = self.catalog.select_many(request, context, count)

        tasks = []
        for approach, strategy in enumerate(strategies, start=1):
            feedback = request.user_feedback.model_copy(
                update={
                    "refinement_request": (
                        f"{request.feedback_text or DEFAULT_FEEDBACK} (approach {approach})"
                    )
                }
            )
            variant = request.model_copy(update={"user_feedback": feedback})
            tasks.append(self._refine(variant, context, strategy, start_time))

        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[RefinementResult] = []
        for strategy, outcome in zip(strategies, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(
                    f"Alternative with {strategy.type.value} strategy failed: {outcome}"
                )
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            results.append(outcome)

        logger.info(
            f"Generated {len(results)}/{len(strategies)} alternatives "
            f"for session {request.session_id}"
        )
        return results

    async def _refine(
        self,
        request: RefinementRequest,
        context: RefinementContext,
        strategy: RefinementStrategy,
        start_time: float,
    ) -> RefinementResult:
        generator = self._ensure_generator()

        directive = self.augmenter.build(request, context, strategy)
        options = GenerationOptions(
            temperature=get_temperature(
                strategy.type, self.config.temperature_overrides
            ),
            max_length=get_max_length(strategy.type, request.content_type),
        )

        request_time = now_ms()
        response = await generator.generate(request.content_type, directive, options)
        response_time = now_ms()

        if not response.text.strip():
            raise EmptyGenerationError(
                f"Empty {strategy.type.value} refinement for session {request.session_id}"
            )

        session = self.sessions.get_or_create(request.session_id)
        iteration = session.add_iteration(
            prompt=directive,
            generated_content=response.text,
            request_time=request_time,
            response_time=response_time,
            attempt_number=context.iteration_count + 1,
        )

        self.preferences.update(request.session_id, request.user_feedback, strategy)

        elapsed_ms = (time.time() - start_time) * 1000
        self.metrics.record_refinement(request.session_id, strategy, elapsed_ms)

        result = RefinementResult(
            iteration=iteration,
            strategy=strategy,
            context_used=context.get_sources(),
            improvement_hypothesis=build_improvement_hypothesis(strategy, context),
            confidence_score=calculate_confidence(strategy, context),
            tokens_used=response.tokens_used,
            cost_usd=response.cost_usd,
            latency_ms=elapsed_ms,
        )

        logger.info(
            f"Refinement complete: {strategy.type.value} "
            f"(confidence {result.confidence_score:.2f}) in {elapsed_ms:.0f}ms"
        )
        return result

    # Analysis

    def analyze_feedback_patterns(self, session_id: str) -> FeedbackPatternAnalysis:
        """Batch analysis of a session's feedback; empty for unknown sessions."""
        session = self.sessions.find(session_id)
        history = session.feedback_history() if session else []
        return self.analyzer.analyze(history)

    def get_processing_metrics(self, session_id: str) -> Optional[ProcessingMetrics]:
        return self.metrics.get(session_id)
