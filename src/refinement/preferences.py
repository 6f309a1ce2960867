"""Per-session preference store and the rule that learns from feedback."""

import logging
from typing import Optional

from src.models.iteration import FeedbackType, UserFeedback

from .classifier import IntentClassifier, KeywordIntentClassifier
from .models import RefinementStrategy, UserPreferences
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)


class PreferenceStore:
    """
    Learned tone/length preferences and strategy patterns, keyed by session.

    Entries are created lazily with empty defaults and live as long as the
    session does in the registry.

    Conflicting tone signals across turns are resolved last-writer-wins;
    there is no weighting or voting.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        classifier: Optional[IntentClassifier] = None,
    ):
        self.registry = registry
        self.classifier = classifier or KeywordIntentClassifier()

    def get(self, session_id: str) -> UserPreferences:
        """Current preferences for a session, created empty if absent."""
        return self.registry.get_or_create(session_id).preferences

    def update(
        self,
        session_id: str,
        feedback: UserFeedback,
        strategy: RefinementStrategy,
    ) -> UserPreferences:
        """
        Learn from the feedback that triggered a completed refinement.

        Args:
            session_id: Session the refinement belongs to
            feedback: Feedback that triggered the refinement
            strategy: Strategy that was used to answer it

        Returns:
            The updated preferences
        """
        preferences = self.get(session_id)

        if feedback.type == FeedbackType.ACCEPT:
            preferences.accepted_patterns.append(strategy.type.value)
        elif feedback.type == FeedbackType.REJECT:
            preferences.avoided_patterns.append(strategy.type.value)

        if feedback.refinement_request:
            tone = self.classifier.classify_intent(feedback.refinement_request).tone
            if tone is not None:
                if preferences.preferred_tone not in (None, tone):
                    logger.debug(
                        f"Session {session_id}: tone preference "
                        f"{preferences.preferred_tone.value} -> {tone.value}"
                    )
                preferences.preferred_tone = tone

        return preferences

    def reset(self, session_id: str) -> None:
        """Forget everything learned for a session."""
        session = self.registry.find(session_id)
        if session is not None:
            session.preferences = UserPreferences()
