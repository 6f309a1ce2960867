"""Batch analysis of a session's whole feedback history."""

from collections import Counter
from typing import Optional

from src.models.iteration import FeedbackType, UserFeedback

from .classifier import IntentClassifier, KeywordIntentClassifier
from .models import FeedbackPatternAnalysis, UserPreferences

DOMINANT_TYPE_COUNT = 3

SUGGESTION_ON_REJECT = "Consider trying alternative content generation approaches"
SUGGESTION_ON_REFINE = "Focus on incremental improvements rather than complete rewrites"
SUGGESTION_TONE = "Consistently use {tone} tone across all content"
SUGGESTION_LENGTH = "Default to {length} content length"


class FeedbackPatternAnalyzer:
    """
    Summarizes what a user keeps asking for.

    Feedback types and quick-feedback tags share one frequency table. Tone and
    length signals are read from all refinement requests at once. The analysis
    is a pure function of the history it is given.
    """

    def __init__(self, classifier: Optional[IntentClassifier] = None):
        self.classifier = classifier or KeywordIntentClassifier()

    def analyze(self, feedback_history: list[UserFeedback]) -> FeedbackPatternAnalysis:
        counts: Counter[str] = Counter()
        refinement_requests: list[str] = []

        for feedback in feedback_history:
            counts[feedback.type.value] += 1
            if feedback.refinement_request:
                refinement_requests.append(feedback.refinement_request)
            for tag in feedback.quick_feedback:
                counts[tag] += 1

        # Counter.most_common keeps first-seen order among equal counts
        dominant = [name for name, _ in counts.most_common(DOMINANT_TYPE_COUNT)]
        signals = self.extract_preference_signals(refinement_requests)

        return FeedbackPatternAnalysis(
            dominant_feedback_types=dominant,
            preference_signals=signals,
            improvement_suggestions=self.generate_suggestions(dominant, signals),
        )

    def extract_preference_signals(self, refinement_requests: list[str]) -> UserPreferences:
        intent = self.classifier.classify_intent(" ".join(refinement_requests))
        return UserPreferences(
            preferred_tone=intent.tone,
            preferred_length=intent.length,
        )

    def generate_suggestions(
        self,
        dominant_feedback_types: list[str],
        preferences: UserPreferences,
    ) -> list[str]:
        suggestions = []

        if FeedbackType.REJECT.value in dominant_feedback_types:
            suggestions.append(SUGGESTION_ON_REJECT)

        if FeedbackType.REFINE.value in dominant_feedback_types:
            suggestions.append(SUGGESTION_ON_REFINE)

        if preferences.preferred_tone:
            suggestions.append(
                SUGGESTION_TONE.format(tone=preferences.preferred_tone.value)
            )

        if preferences.preferred_length:
            suggestions.append(
                SUGGESTION_LENGTH.format(length=preferences.preferred_length.value)
            )

        return suggestions
