"""Tests for directive assembly."""

import pytest

from src.models.iteration import ContentType, FeedbackType, UserFeedback
from src.refinement.models import (
    LengthPreference,
    RefinementContext,
    RefinementRequest,
    StrategyType,
    Tone,
    UserPreferences,
)
from src.refinement.prompts import (
    DEFAULT_FEEDBACK,
    PromptAugmenter,
    build_base_directive,
)
from src.refinement.strategies import StrategyCatalog


def make_request(text="make it warmer", content_type=ContentType.EMAIL, brief=""):
    return RefinementRequest(
        session_id="s1",
        iteration_id="iter_1",
        user_feedback=UserFeedback(type=FeedbackType.REFINE, refinement_request=text),
        content_type=content_type,
        user_brief=brief,
    )


@pytest.fixture
def augmenter():
    return PromptAugmenter()


@pytest.fixture
def catalog():
    return StrategyCatalog()


class TestBaseDirective:
    """Tests for the base refinement directive."""

    def test_contains_inputs(self):
        directive = build_base_directive(
            ContentType.BLOG, "Original text", "Too long"
        )
        assert "refine the following blog content" in directive
        assert "Original content:\nOriginal text" in directive
        assert "User feedback: Too long" in directive
        assert directive.endswith("while maintaining the core message:")

    def test_brief_and_guidance(self):
        directive = build_base_directive(
            ContentType.EMAIL,
            "Hi team",
            "More formal",
            user_brief="Quarterly update",
            tone="formal",
            length="short",
        )
        assert "Original brief: Quarterly update" in directive
        assert "Tone: Use formal business language" in directive
        assert "Length: Brief and to the point" in directive


class TestPromptAugmenter:
    """Tests for PromptAugmenter."""

    def test_includes_every_modification(self, augmenter, catalog):
        context = RefinementContext(original_content="Draft")
        for strategy_type in (
            StrategyType.TONE_ADJUSTMENT,
            StrategyType.LENGTH_MODIFICATION,
            StrategyType.STRUCTURE_REORGANIZATION,
            StrategyType.STYLE_REFINEMENT,
        ):
            strategy = catalog.build_strategy(strategy_type)
            directive = augmenter.build(make_request(), context, strategy)
            for modification in strategy.prompt_modifications:
                assert modification in directive

    def test_section_order(self, augmenter, catalog):
        context = RefinementContext(
            original_content="Draft",
            successful_patterns=["quarterly", "revenue"],
            failure_patterns=["too salesy"],
        )
        strategy = catalog.build_strategy(StrategyType.STYLE_REFINEMENT)
        directive = augmenter.build(make_request(), context, strategy)

        base_end = directive.index("while maintaining the core message:")
        first_mod = directive.index(strategy.prompt_modifications[0])
        second_mod = directive.index(strategy.prompt_modifications[1])
        retain = directive.index("incorporate these successful elements")
        avoid = directive.index("avoid these elements")

        assert base_end < first_mod < second_mod < retain < avoid
        assert "previous attempts: quarterly, revenue" in directive
        assert "negative feedback: too salesy" in directive

    def test_no_hints_without_patterns(self, augmenter, catalog):
        context = RefinementContext(original_content="Draft")
        strategy = catalog.build_strategy(StrategyType.STYLE_REFINEMENT)
        directive = augmenter.build(make_request(), context, strategy)
        assert "successful elements" not in directive
        assert "negative feedback" not in directive

    def test_tone_injected_for_tone_strategy(self, augmenter, catalog):
        context = RefinementContext(
            original_content="Draft",
            user_preferences=UserPreferences(preferred_tone=Tone.CASUAL),
        )
        strategy = catalog.build_strategy(StrategyType.TONE_ADJUSTMENT)
        directive = augmenter.build(make_request(), context, strategy)
        assert "Tone: Friendly but respectful" in directive

    def test_tone_not_injected_for_other_strategies(self, augmenter, catalog):
        context = RefinementContext(
            original_content="Draft",
            user_preferences=UserPreferences(preferred_tone=Tone.CASUAL),
        )
        strategy = catalog.build_strategy(StrategyType.STYLE_REFINEMENT)
        directive = augmenter.build(make_request(), context, strategy)
        assert "Tone:" not in directive

    def test_length_injected_for_length_strategy(self, augmenter, catalog):
        context = RefinementContext(
            original_content="Draft",
            user_preferences=UserPreferences(preferred_length=LengthPreference.LONG),
        )
        strategy = catalog.build_strategy(StrategyType.LENGTH_MODIFICATION)
        directive = augmenter.build(
            make_request(content_type=ContentType.BLOG), context, strategy
        )
        assert "Length: In-depth coverage" in directive

    def test_default_feedback(self, augmenter, catalog):
        request = RefinementRequest(
            session_id="s1",
            iteration_id="iter_1",
            user_feedback=UserFeedback(type=FeedbackType.REJECT),
            content_type=ContentType.SOCIAL,
        )
        strategy = catalog.build_strategy(StrategyType.STYLE_REFINEMENT)
        directive = augmenter.build(
            request, RefinementContext(original_content="Draft"), strategy
        )
        assert f"User feedback: {DEFAULT_FEEDBACK}" in directive

    def test_no_truncation(self, augmenter, catalog):
        long_content = "word " * 5000
        strategy = catalog.build_strategy(StrategyType.STYLE_REFINEMENT)
        directive = augmenter.build(
            make_request(), RefinementContext(original_content=long_content), strategy
        )
        assert long_content in directive
