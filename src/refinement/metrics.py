"""Per-session processing metrics and the confidence heuristic."""

import logging
from typing import Optional

from .models import ProcessingMetrics, RefinementContext, RefinementStrategy
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)


def calculate_confidence(
    strategy: RefinementStrategy, context: RefinementContext
) -> float:
    """
    Heuristic confidence that the strategy will satisfy the user.

    Starts from the strategy's success probability and adds 0.1 each for a
    history longer than two iterations, more than one piece of feedback, and
    more successful than failure patterns.
    """
    confidence = strategy.success_probability

    if context.iteration_count > 2:
        confidence += 0.1

    if len(context.feedback_history) > 1:
        confidence += 0.1

    if len(context.successful_patterns) > len(context.failure_patterns):
        confidence += 0.1

    return min(max(confidence, 0.0), 1.0)


class MetricsTracker:
    """Records timing and strategy usage per session; entries are created lazily."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    def get(self, session_id: str) -> Optional[ProcessingMetrics]:
        """Metrics for a session, or None if nothing was recorded yet."""
        session = self.registry.find(session_id)
        return session.metrics if session else None

    def _ensure(self, session_id: str) -> ProcessingMetrics:
        session = self.registry.get_or_create(session_id)
        if session.metrics is None:
            session.metrics = ProcessingMetrics()
        return session.metrics

    def record_refinement(
        self,
        session_id: str,
        strategy: RefinementStrategy,
        elapsed_ms: float,
    ) -> ProcessingMetrics:
        """Record one completed refinement call."""
        metrics = self._ensure(session_id)
        metrics.processing_time_ms = elapsed_ms
        metrics.refinement_count += 1

        # Effectiveness is not fed back from user outcomes yet; only ensure the entry
        metrics.strategy_effectiveness.setdefault(strategy.type, 0.0)
        return metrics

    def record_rating(self, session_id: str, rating: int) -> None:
        """Append a user rating to the satisfaction trend, if metrics exist."""
        metrics = self.get(session_id)
        if metrics is not None:
            metrics.user_satisfaction_trend.append(rating)
