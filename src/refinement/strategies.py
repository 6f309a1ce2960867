"""Strategy catalog, scoring and selection."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from src.models.iteration import ContentType

from .classifier import Intent, IntentClassifier, KeywordIntentClassifier
from .models import (
    LengthDirection,
    RefinementContext,
    RefinementRequest,
    RefinementStrategy,
    ScoredStrategy,
    StrategyType,
)

logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


@dataclass
class StrategyTemplate:
    """Static definition of a strategy in the catalog."""

    type: StrategyType
    description: str
    prompt_modifications: list[str]
    context_weight: float
    always_available: bool = False
    # Length strategies describe themselves per direction
    directional: dict[LengthDirection, tuple[str, list[str]]] = field(
        default_factory=dict
    )


# Seed success rates; the live table on a catalog is mutable at runtime
DEFAULT_SUCCESS_RATES: dict[StrategyType, float] = {
    StrategyType.TONE_ADJUSTMENT: 0.75,
    StrategyType.LENGTH_MODIFICATION: 0.65,
    StrategyType.STRUCTURE_REORGANIZATION: 0.70,
    StrategyType.CONTENT_EXPANSION: 0.60,
    StrategyType.CONTENT_CONDENSATION: 0.65,
    StrategyType.STYLE_REFINEMENT: 0.80,
    StrategyType.TOPIC_REFOCUS: 0.55,
    StrategyType.FORMAT_CHANGE: 0.60,
}

# Sampling temperature per strategy
STRATEGY_TEMPERATURES: dict[StrategyType, float] = {
    StrategyType.TONE_ADJUSTMENT: 0.8,
    StrategyType.LENGTH_MODIFICATION: 0.6,
    StrategyType.STRUCTURE_REORGANIZATION: 0.7,
    StrategyType.CONTENT_EXPANSION: 0.8,
    StrategyType.CONTENT_CONDENSATION: 0.5,
    StrategyType.STYLE_REFINEMENT: 0.7,
    StrategyType.TOPIC_REFOCUS: 0.9,
    StrategyType.FORMAT_CHANGE: 0.6,
}

BASE_LENGTHS: dict[ContentType, int] = {
    ContentType.BLOG: 400,
    ContentType.EMAIL: 200,
    ContentType.SOCIAL: 100,
}


# Candidate order here is the tie-break order for equal scores
STRATEGY_TEMPLATES: dict[StrategyType, StrategyTemplate] = {
    StrategyType.TONE_ADJUSTMENT: StrategyTemplate(
        type=StrategyType.TONE_ADJUSTMENT,
        description="Adjust the tone and style of the content",
        prompt_modifications=[
            "Focus on adjusting the tone to better match user preferences",
            "Maintain the core message while changing the communication style",
        ],
        context_weight=0.8,
    ),
    StrategyType.LENGTH_MODIFICATION: StrategyTemplate(
        type=StrategyType.LENGTH_MODIFICATION,
        description="Adjust content length",
        prompt_modifications=[],
        context_weight=0.6,
        directional={
            LengthDirection.EXPAND: (
                "Expand content with more details",
                ["Expand the content with more details, examples, and explanations"],
            ),
            LengthDirection.CONDENSE: (
                "Condense content for brevity",
                ["Condense the content while preserving key information and impact"],
            ),
        },
    ),
    StrategyType.STRUCTURE_REORGANIZATION: StrategyTemplate(
        type=StrategyType.STRUCTURE_REORGANIZATION,
        description="Reorganize content structure and flow",
        prompt_modifications=[
            "Reorganize the content structure for better flow and readability",
            "Use clear headings, bullet points, or numbered lists where appropriate",
        ],
        context_weight=0.7,
    ),
    StrategyType.STYLE_REFINEMENT: StrategyTemplate(
        type=StrategyType.STYLE_REFINEMENT,
        description="Refine writing style and word choice",
        prompt_modifications=[
            "Refine the writing style with better word choices and sentence flow",
            "Ensure consistency in voice and style throughout",
        ],
        context_weight=0.5,
        always_available=True,
    ),
}


def default_strategy() -> RefinementStrategy:
    """Fallback when the catalog yields no candidates."""
    return RefinementStrategy(
        type=StrategyType.STYLE_REFINEMENT,
        description="General style and content refinement",
        prompt_modifications=[
            "Please improve the overall quality and clarity of the content",
            "Focus on better word choices and sentence structure",
        ],
        context_weight=0.5,
        success_probability=0.6,
    )


def get_temperature(
    strategy_type: StrategyType,
    overrides: Optional[dict[StrategyType, float]] = None,
) -> float:
    """Sampling temperature for a strategy."""
    if overrides and strategy_type in overrides:
        return overrides[strategy_type]
    return STRATEGY_TEMPERATURES.get(strategy_type, 0.7)


def get_max_length(strategy_type: StrategyType, content_type: ContentType) -> int:
    """Length budget for a regeneration, scaled by what the strategy does."""
    base_length = float(BASE_LENGTHS[content_type])

    if strategy_type in (
        StrategyType.CONTENT_EXPANSION,
        StrategyType.LENGTH_MODIFICATION,
    ):
        base_length *= 1.5
    elif strategy_type == StrategyType.CONTENT_CONDENSATION:
        base_length *= 0.7

    return round(base_length)


class StrategyCatalog:
    """
    Enumerates, scores and ranks refinement strategies.

    Usage:
        catalog = StrategyCatalog()
        ranked = catalog.rank(request, context)
        best = catalog.select(request, context)
    """

    def __init__(
        self,
        classifier: Optional[IntentClassifier] = None,
        templates: Optional[dict[StrategyType, StrategyTemplate]] = None,
        success_rates: Optional[dict[StrategyType, float]] = None,
    ):
        self.classifier = classifier or KeywordIntentClassifier()
        self.templates = STRATEGY_TEMPLATES if templates is None else templates
        self.success_rates = dict(DEFAULT_SUCCESS_RATES)
        if success_rates:
            for strategy_type, rate in success_rates.items():
                self.set_success_rate(strategy_type, rate)

    def get_success_rate(self, strategy_type: StrategyType) -> float:
        return self.success_rates.get(strategy_type, 0.5)

    def set_success_rate(self, strategy_type: StrategyType, rate: float) -> None:
        """Replace the running estimate for a strategy (clamped to [0, 1])."""
        self.success_rates[strategy_type] = clamp(rate)

    def build_strategy(
        self,
        strategy_type: StrategyType,
        direction: Optional[LengthDirection] = None,
    ) -> RefinementStrategy:
        """Instantiate a catalog entry with its current success rate."""
        template = self.templates[strategy_type]
        description = template.description
        modifications = list(template.prompt_modifications)

        if template.directional:
            direction = direction or LengthDirection.CONDENSE
            description, directional_mods = template.directional[direction]
            modifications = list(directional_mods)
        else:
            direction = None

        return RefinementStrategy(
            type=strategy_type,
            description=description,
            prompt_modifications=modifications,
            context_weight=template.context_weight,
            success_probability=self.get_success_rate(strategy_type),
            length_direction=direction,
        )

    def candidates(self, intent: Intent) -> list[RefinementStrategy]:
        """Strategies whose gating keywords were found, plus the always-on fallback."""
        strategies = []
        for strategy_type, template in self.templates.items():
            if template.always_available or strategy_type in intent.requested:
                strategies.append(
                    self.build_strategy(strategy_type, intent.length_direction)
                )
        return strategies

    def score(
        self,
        strategy: RefinementStrategy,
        context: RefinementContext,
        intent: Intent,
    ) -> float:
        """
        Score a candidate against the context and feedback.

        score = success_probability * context_weight, boosted when the
        feedback confirms the strategy or it appears among accepted patterns,
        penalized when it appears among rejected ones, clamped to [0, 1].
        """
        score = strategy.success_probability * strategy.context_weight

        if strategy.type in intent.confirmed:
            score += 0.2

        type_name = strategy.type.value
        if any(type_name in pattern for pattern in context.successful_patterns):
            score += 0.15

        if any(type_name in pattern for pattern in context.failure_patterns):
            score -= 0.1

        return clamp(score)

    def rank(
        self,
        request: RefinementRequest,
        context: RefinementContext,
    ) -> list[ScoredStrategy]:
        """Candidates sorted by score, highest first; ties keep catalog order."""
        intent = self.classifier.classify_intent(request.feedback_text)

        scored = [
            ScoredStrategy(strategy=strategy, score=self.score(strategy, context, intent))
            for strategy in self.candidates(intent)
        ]
        scored.sort(key=lambda item: item.score, reverse=True)

        logger.debug(
            "Ranked strategies: "
            + ", ".join(f"{s.strategy.type.value}={s.score:.3f}" for s in scored)
        )
        return scored

    def select(
        self,
        request: RefinementRequest,
        context: RefinementContext,
    ) -> RefinementStrategy:
        """The single best strategy for a request."""
        ranked = self.rank(request, context)
        if not ranked:
            return default_strategy()
        return ranked[0].strategy

    def select_many(
        self,
        request: RefinementRequest,
        context: RefinementContext,
        count: int,
    ) -> list[RefinementStrategy]:
        """Top-N distinct strategies, for generating N parallel variations."""
        selected: list[RefinementStrategy] = []
        seen: set[StrategyType] = set()

        for item in self.rank(request, context):
            if len(selected) >= count:
                break
            if item.strategy.type in seen:
                continue
            seen.add(item.strategy.type)
            selected.append(item.strategy)

        return selected
