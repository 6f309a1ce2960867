"""Builds a RefinementContext from a request and the session's prior iterations."""

import logging

from src.models.iteration import ContentIteration

from .models import RefinementContext, RefinementRequest
from .preferences import PreferenceStore

logger = logging.getLogger(__name__)

# Successful-pattern extraction: keep tokens longer than this many characters...
MIN_PATTERN_TOKEN_LENGTH = 4
# ...and at most this many tokens per accepted iteration.
MAX_PATTERNS_PER_ITERATION = 5


def extract_successful_patterns(iterations: list[ContentIteration]) -> list[str]:
    """
    Keywords from content the user accepted or rated up.

    Returns the first few long lower-cased tokens of each positive iteration,
    de-duplicated across iterations.
    """
    patterns: list[str] = []

    for iteration in iterations:
        feedback = iteration.user_feedback
        if feedback is None or not feedback.is_positive:
            continue

        words = [
            word
            for word in iteration.generated_content.lower().split()
            if len(word) > MIN_PATTERN_TOKEN_LENGTH
        ]
        patterns.extend(words[:MAX_PATTERNS_PER_ITERATION])

    return list(dict.fromkeys(patterns))


def extract_failure_patterns(iterations: list[ContentIteration]) -> list[str]:
    """Critiques and quick-feedback tags from rejected or rated-down iterations."""
    patterns: list[str] = []

    for iteration in iterations:
        feedback = iteration.user_feedback
        if feedback is None or not feedback.is_negative:
            continue

        if feedback.refinement_request:
            patterns.append(feedback.refinement_request)
        patterns.extend(feedback.quick_feedback)

    return patterns


class ContextBuilder:
    """Derives refinement context; a pure function of in-memory state."""

    def __init__(self, preferences: PreferenceStore):
        self.preferences = preferences

    def build(
        self,
        request: RefinementRequest,
        previous_iterations: list[ContentIteration],
    ) -> RefinementContext:
        """
        Build the context for one refinement call.

        A referenced iteration that is missing from the history is tolerated:
        the original content is then empty.
        """
        current = next(
            (
                iteration
                for iteration in previous_iterations
                if iteration.iteration_id == request.iteration_id
            ),
            None,
        )
        if current is None:
            logger.debug(
                f"Iteration {request.iteration_id} not in history; "
                "refining from empty content"
            )

        return RefinementContext(
            original_content=current.generated_content if current else "",
            feedback_history=[
                iteration.user_feedback
                for iteration in previous_iterations
                if iteration.user_feedback is not None
            ],
            iteration_count=len(previous_iterations),
            successful_patterns=extract_successful_patterns(previous_iterations),
            failure_patterns=extract_failure_patterns(previous_iterations),
            # Snapshot: the store is updated after generation
            user_preferences=self.preferences.get(request.session_id).model_copy(
                deep=True
            ),
        )
