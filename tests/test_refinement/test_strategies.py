"""Tests for the strategy catalog and scorer."""

import pytest

from src.models.iteration import ContentType, FeedbackType, UserFeedback
from src.refinement.classifier import KeywordIntentClassifier
from src.refinement.models import (
    LengthDirection,
    RefinementContext,
    RefinementRequest,
    StrategyType,
)
from src.refinement.strategies import (
    STRATEGY_TEMPLATES,
    StrategyCatalog,
    clamp,
    default_strategy,
    get_max_length,
    get_temperature,
)


def make_request(text):
    return RefinementRequest(
        session_id="s1",
        iteration_id="iter_1",
        user_feedback=UserFeedback(type=FeedbackType.REFINE, refinement_request=text),
        content_type=ContentType.BLOG,
    )


def scores_by_type(ranked):
    return {item.strategy.type: item.score for item in ranked}


@pytest.fixture
def catalog():
    return StrategyCatalog()


@pytest.fixture
def empty_context():
    return RefinementContext(original_content="Draft")


class TestCandidates:
    """Tests for candidate generation."""

    def test_longer_and_formal(self, catalog, empty_context):
        """Length (expand) and tone surface, style is always present."""
        ranked = catalog.rank(
            make_request("please make this longer and more formal"), empty_context
        )
        by_type = {item.strategy.type: item.strategy for item in ranked}

        assert set(by_type) == {
            StrategyType.TONE_ADJUSTMENT,
            StrategyType.LENGTH_MODIFICATION,
            StrategyType.STYLE_REFINEMENT,
        }
        length = by_type[StrategyType.LENGTH_MODIFICATION]
        assert length.length_direction == LengthDirection.EXPAND
        assert length.description == "Expand content with more details"

    def test_style_always_present(self, catalog, empty_context):
        ranked = catalog.rank(make_request("hmm"), empty_context)
        assert [item.strategy.type for item in ranked] == [StrategyType.STYLE_REFINEMENT]

    def test_condense_direction(self, catalog, empty_context):
        ranked = catalog.rank(make_request("make it shorter"), empty_context)
        length = next(
            item.strategy
            for item in ranked
            if item.strategy.type == StrategyType.LENGTH_MODIFICATION
        )
        assert length.length_direction == LengthDirection.CONDENSE
        assert length.prompt_modifications == [
            "Condense the content while preserving key information and impact"
        ]

    def test_structure_gated(self, catalog, empty_context):
        ranked = catalog.rank(make_request("fix the format"), empty_context)
        assert StrategyType.STRUCTURE_REORGANIZATION in scores_by_type(ranked)

    def test_non_length_strategies_have_no_direction(self, catalog):
        strategy = catalog.build_strategy(
            StrategyType.TONE_ADJUSTMENT, LengthDirection.EXPAND
        )
        assert strategy.length_direction is None


class TestScoring:
    """Tests for the scoring function."""

    def test_base_and_boost(self, catalog, empty_context):
        scores = scores_by_type(
            catalog.rank(make_request("longer and more formal"), empty_context)
        )
        # 0.75 * 0.8 + 0.2
        assert scores[StrategyType.TONE_ADJUSTMENT] == pytest.approx(0.8)
        # 0.65 * 0.6 + 0.2
        assert scores[StrategyType.LENGTH_MODIFICATION] == pytest.approx(0.59)
        # 0.8 * 0.5
        assert scores[StrategyType.STYLE_REFINEMENT] == pytest.approx(0.4)

    def test_gated_without_boost(self, catalog, empty_context):
        scores = scores_by_type(
            catalog.rank(make_request("sound more professional"), empty_context)
        )
        assert scores[StrategyType.TONE_ADJUSTMENT] == pytest.approx(0.6)

    def test_formal_keyword_never_lowers_tone_rank(self, catalog, empty_context):
        with_keyword = scores_by_type(
            catalog.rank(make_request("more professional and formal"), empty_context)
        )
        without_keyword = scores_by_type(
            catalog.rank(make_request("more professional"), empty_context)
        )
        assert (
            with_keyword[StrategyType.TONE_ADJUSTMENT]
            >= without_keyword[StrategyType.TONE_ADJUSTMENT]
        )

    def test_successful_pattern_boost(self, catalog):
        context = RefinementContext(
            original_content="Draft",
            successful_patterns=["style_refinement"],
        )
        scores = scores_by_type(catalog.rank(make_request("hmm"), context))
        assert scores[StrategyType.STYLE_REFINEMENT] == pytest.approx(0.55)

    def test_failure_pattern_penalty(self, catalog):
        context = RefinementContext(
            original_content="Draft",
            failure_patterns=["tried style_refinement already"],
        )
        scores = scores_by_type(catalog.rank(make_request("hmm"), context))
        assert scores[StrategyType.STYLE_REFINEMENT] == pytest.approx(0.3)

    def test_scores_clamped(self, empty_context):
        catalog = StrategyCatalog(
            success_rates={
                StrategyType.TONE_ADJUSTMENT: 1.0,
                StrategyType.STYLE_REFINEMENT: 0.0,
            }
        )
        context = RefinementContext(
            original_content="Draft",
            successful_patterns=["tone_adjustment"],
            failure_patterns=["style_refinement"],
        )
        ranked = catalog.rank(make_request("formal tone"), context)
        for item in ranked:
            assert 0.0 <= item.score <= 1.0
        scores = scores_by_type(ranked)
        assert scores[StrategyType.TONE_ADJUSTMENT] == 1.0
        assert scores[StrategyType.STYLE_REFINEMENT] == 0.0


class TestSelection:
    """Tests for strategy selection."""

    def test_sorted_descending(self, catalog, empty_context):
        ranked = catalog.rank(make_request("longer and more formal"), empty_context)
        scores = [item.score for item in ranked]
        assert scores == sorted(scores, reverse=True)
        assert ranked[0].strategy.type == StrategyType.TONE_ADJUSTMENT

    def test_ties_keep_catalog_order(self, empty_context):
        catalog = StrategyCatalog(
            success_rates={
                StrategyType.TONE_ADJUSTMENT: 0.5,
                StrategyType.STYLE_REFINEMENT: 0.8,
            }
        )
        # tone: 0.5 * 0.8 = 0.4, style: 0.8 * 0.5 = 0.4
        ranked = catalog.rank(make_request("friendlier please, friendly"), empty_context)
        assert [item.strategy.type for item in ranked] == [
            StrategyType.TONE_ADJUSTMENT,
            StrategyType.STYLE_REFINEMENT,
        ]

    def test_select_returns_top(self, catalog, empty_context):
        strategy = catalog.select(make_request("more formal"), empty_context)
        assert strategy.type == StrategyType.TONE_ADJUSTMENT

    def test_select_falls_back_on_empty_catalog(self, empty_context):
        catalog = StrategyCatalog(templates={})
        strategy = catalog.select(make_request("anything"), empty_context)
        assert strategy == default_strategy()
        assert strategy.context_weight == 0.5
        assert strategy.success_probability == 0.6

    def test_select_many_distinct(self, catalog, empty_context):
        strategies = catalog.select_many(
            make_request("longer and more formal"), empty_context, 2
        )
        assert [s.type for s in strategies] == [
            StrategyType.TONE_ADJUSTMENT,
            StrategyType.LENGTH_MODIFICATION,
        ]

    def test_select_many_limited_by_candidates(self, catalog, empty_context):
        strategies = catalog.select_many(make_request("hmm"), empty_context, 4)
        assert len(strategies) == 1

    def test_select_many_zero_count(self, catalog, empty_context):
        request = make_request("longer and more formal")
        assert catalog.select_many(request, empty_context, 0) == []
        assert catalog.select_many(request, empty_context, -1) == []

    def test_custom_classifier(self, empty_context):
        classifier = KeywordIntentClassifier(
            gating_keywords={StrategyType.STRUCTURE_REORGANIZATION: ("bullet",)},
            boost_keywords={StrategyType.STRUCTURE_REORGANIZATION: ("bullet",)},
        )
        catalog = StrategyCatalog(classifier=classifier)
        strategy = catalog.select(make_request("use bullet points"), empty_context)
        assert strategy.type == StrategyType.STRUCTURE_REORGANIZATION


class TestSuccessRates:
    """Tests for the mutable success-rate table."""

    def test_defaults(self, catalog):
        assert catalog.get_success_rate(StrategyType.STYLE_REFINEMENT) == 0.80
        assert catalog.get_success_rate(StrategyType.TONE_ADJUSTMENT) == 0.75

    def test_set_is_clamped(self, catalog):
        catalog.set_success_rate(StrategyType.TONE_ADJUSTMENT, 1.7)
        assert catalog.get_success_rate(StrategyType.TONE_ADJUSTMENT) == 1.0
        catalog.set_success_rate(StrategyType.TONE_ADJUSTMENT, -0.2)
        assert catalog.get_success_rate(StrategyType.TONE_ADJUSTMENT) == 0.0

    def test_catalogs_do_not_share_rates(self):
        first = StrategyCatalog()
        second = StrategyCatalog()
        first.set_success_rate(StrategyType.STYLE_REFINEMENT, 0.1)
        assert second.get_success_rate(StrategyType.STYLE_REFINEMENT) == 0.80

    def test_built_strategy_uses_current_rate(self, catalog):
        catalog.set_success_rate(StrategyType.STYLE_REFINEMENT, 0.3)
        strategy = catalog.build_strategy(StrategyType.STYLE_REFINEMENT)
        assert strategy.success_probability == 0.3


class TestGenerationOptions:
    """Tests for per-strategy temperature and length budget."""

    def test_temperature_table(self):
        assert get_temperature(StrategyType.TONE_ADJUSTMENT) == 0.8
        assert get_temperature(StrategyType.CONTENT_CONDENSATION) == 0.5

    def test_temperature_override(self):
        overrides = {StrategyType.TONE_ADJUSTMENT: 0.2}
        assert get_temperature(StrategyType.TONE_ADJUSTMENT, overrides) == 0.2
        assert get_temperature(StrategyType.STYLE_REFINEMENT, overrides) == 0.7

    def test_max_length(self):
        assert get_max_length(StrategyType.STYLE_REFINEMENT, ContentType.BLOG) == 400
        assert get_max_length(StrategyType.LENGTH_MODIFICATION, ContentType.EMAIL) == 300
        assert get_max_length(StrategyType.CONTENT_CONDENSATION, ContentType.SOCIAL) == 70

    def test_clamp(self):
        assert clamp(1.2) == 1.0
        assert clamp(-0.1) == 0.0
        assert clamp(0.4) == 0.4

    def test_template_order(self):
        assert list(STRATEGY_TEMPLATES) == [
            StrategyType.TONE_ADJUSTMENT,
            StrategyType.LENGTH_MODIFICATION,
            StrategyType.STRUCTURE_REORGANIZATION,
            StrategyType.STYLE_REFINEMENT,
        ]
