"""Tests for context building and pattern extraction."""

import pytest

from src.models.iteration import (
    ContentIteration,
    ContentType,
    FeedbackType,
    IterationTiming,
    UserFeedback,
)
from src.refinement.context import (
    ContextBuilder,
    extract_failure_patterns,
    extract_successful_patterns,
)
from src.refinement.models import RefinementRequest, Tone, UserPreferences
from src.refinement.preferences import PreferenceStore
from src.refinement.sessions import SessionRegistry


def make_iteration(content, feedback=None, attempt=1, iteration_id=None):
    iteration = ContentIteration(
        attempt_number=attempt,
        prompt="prompt",
        generated_content=content,
        user_feedback=feedback,
        timing=IterationTiming(request_time=0, response_time=10),
    )
    if iteration_id:
        iteration.iteration_id = iteration_id
    return iteration


def make_request(iteration_id="iter_1", text="improve it", session_id="s1"):
    return RefinementRequest(
        session_id=session_id,
        iteration_id=iteration_id,
        user_feedback=UserFeedback(type=FeedbackType.REFINE, refinement_request=text),
        content_type=ContentType.BLOG,
    )


@pytest.fixture
def builder():
    return ContextBuilder(PreferenceStore(SessionRegistry()))


class TestExtractSuccessfulPatterns:
    """Tests for successful pattern extraction."""

    def test_first_five_long_tokens_lowercased(self):
        iteration = make_iteration(
            "The quarterly revenue growth exceeded expectations significantly",
            UserFeedback(type=FeedbackType.ACCEPT, rating=1),
        )
        patterns = extract_successful_patterns([iteration])
        assert sorted(patterns) == sorted(
            ["quarterly", "revenue", "growth", "exceeded", "expectations"]
        )

    def test_positive_rating_counts(self):
        iteration = make_iteration(
            "Launch pricing starts today",
            UserFeedback(type=FeedbackType.REFINE, rating=1),
        )
        assert extract_successful_patterns([iteration]) == ["launch", "pricing", "starts", "today"]

    def test_tokens_of_four_chars_excluded(self):
        iteration = make_iteration(
            "This deal ends soon",
            UserFeedback(type=FeedbackType.ACCEPT),
        )
        assert extract_successful_patterns([iteration]) == []

    def test_union_removes_duplicates(self):
        feedback = UserFeedback(type=FeedbackType.ACCEPT)
        iterations = [
            make_iteration("Customers loved the dashboard", feedback),
            make_iteration("Customers praised the dashboard", feedback, attempt=2),
        ]
        patterns = extract_successful_patterns(iterations)
        assert sorted(patterns) == ["customers", "dashboard", "loved", "praised"]

    def test_ignores_unrated_and_rejected(self):
        iterations = [
            make_iteration("Unreviewed content here"),
            make_iteration(
                "Rejected content entirely",
                UserFeedback(type=FeedbackType.REJECT),
            ),
        ]
        assert extract_successful_patterns(iterations) == []


class TestExtractFailurePatterns:
    """Tests for failure pattern extraction."""

    def test_request_and_tags(self):
        iteration = make_iteration(
            "Some draft",
            UserFeedback(
                type=FeedbackType.REJECT,
                refinement_request="too salesy",
                quick_feedback=["too_long", "off_topic"],
            ),
        )
        assert extract_failure_patterns([iteration]) == [
            "too salesy",
            "too_long",
            "off_topic",
        ]

    def test_negative_rating_counts(self):
        iteration = make_iteration(
            "Some draft",
            UserFeedback(type=FeedbackType.REFINE, rating=-1, quick_feedback=["bland"]),
        )
        assert extract_failure_patterns([iteration]) == ["bland"]

    def test_duplicates_kept(self):
        feedback = UserFeedback(type=FeedbackType.REJECT, quick_feedback=["bland"])
        iterations = [make_iteration("a", feedback), make_iteration("b", feedback)]
        assert extract_failure_patterns(iterations) == ["bland", "bland"]

    def test_rejection_without_text_or_tags(self):
        iteration = make_iteration("draft", UserFeedback(type=FeedbackType.REJECT))
        assert extract_failure_patterns([iteration]) == []


class TestContextBuilder:
    """Tests for ContextBuilder."""

    def test_empty_history(self, builder):
        context = builder.build(make_request(), [])
        assert context.iteration_count == 0
        assert context.original_content == ""
        assert context.feedback_history == []
        assert context.successful_patterns == []
        assert context.failure_patterns == []
        assert context.user_preferences == UserPreferences()

    def test_original_content_from_referenced_iteration(self, builder):
        iterations = [
            make_iteration("First draft", iteration_id="iter_1"),
            make_iteration("Second draft", attempt=2, iteration_id="iter_2"),
        ]
        context = builder.build(make_request(iteration_id="iter_1"), iterations)
        assert context.original_content == "First draft"
        assert context.iteration_count == 2

    def test_missing_iteration_tolerated(self, builder):
        iterations = [make_iteration("First draft", iteration_id="iter_1")]
        context = builder.build(make_request(iteration_id="iter_missing"), iterations)
        assert context.original_content == ""
        assert context.iteration_count == 1

    def test_feedback_history_in_order(self, builder):
        first = UserFeedback(type=FeedbackType.REJECT)
        second = UserFeedback(type=FeedbackType.REFINE, refinement_request="warmer")
        iterations = [
            make_iteration("a", first),
            make_iteration("b", attempt=2),
            make_iteration("c", second, attempt=3),
        ]
        context = builder.build(make_request(), iterations)
        assert context.feedback_history == [first, second]

    def test_uses_session_preferences(self):
        registry = SessionRegistry()
        store = PreferenceStore(registry)
        store.get("s1").preferred_tone = Tone.CASUAL

        context = ContextBuilder(store).build(make_request(session_id="s1"), [])
        assert context.user_preferences.preferred_tone == Tone.CASUAL

    def test_preferences_are_a_snapshot(self):
        store = PreferenceStore(SessionRegistry())
        context = ContextBuilder(store).build(make_request(session_id="s1"), [])

        store.get("s1").preferred_tone = Tone.FORMAL

        assert context.user_preferences.preferred_tone is None
        assert context.user_preferences is not store.get("s1")
        assert "tone_preferences" not in context.get_sources()

    def test_sources(self, builder):
        iterations = [
            make_iteration(
                "Quarterly numbers improved",
                UserFeedback(type=FeedbackType.ACCEPT),
            ),
        ]
        context = builder.build(make_request(), iterations)
        assert context.get_sources() == ["feedback_history", "successful_patterns"]
