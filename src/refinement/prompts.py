"""Prompt templates and the augmenter that assembles refinement directives."""

import logging
from typing import Optional

from src.generation.templates import get_length_guidance, get_tone_guidance
from src.models.iteration import ContentType

from .models import (
    RefinementContext,
    RefinementRequest,
    RefinementStrategy,
    StrategyType,
)

logger = logging.getLogger(__name__)


DEFAULT_FEEDBACK = "Please improve this content"

REFINEMENT_DIRECTIVE = """Please refine the following {content_type} content based on the user's feedback.

Original content:
{original_content}

User feedback: {feedback}

"""

REFINEMENT_CLOSING = (
    "Please provide an improved version that addresses the feedback "
    "while maintaining the core message:"
)

RETAIN_PATTERNS_TEMPLATE = (
    "Please incorporate these successful elements from previous attempts: {patterns}"
)

AVOID_PATTERNS_TEMPLATE = (
    "Please avoid these elements that received negative feedback: {patterns}"
)


def build_base_directive(
    content_type: ContentType,
    original_content: str,
    feedback: str,
    user_brief: str = "",
    tone: Optional[str] = None,
    length: Optional[str] = None,
) -> str:
    """
    Base refinement directive: content type, original content and feedback.

    Tone and length guidance, when given, go before the closing instruction.
    """
    prompt = REFINEMENT_DIRECTIVE.format(
        content_type=content_type.value,
        original_content=original_content,
        feedback=feedback,
    )

    if user_brief:
        prompt += f"Original brief: {user_brief}\n\n"

    if tone:
        prompt += f"Tone: {get_tone_guidance(tone, content_type)}\n\n"

    if length:
        prompt += f"Length: {get_length_guidance(length, content_type)}\n\n"

    return prompt + REFINEMENT_CLOSING


class PromptAugmenter:
    """
    Turns a chosen strategy and its context into one generation directive.

    Sections are appended in a fixed order: base directive (with any
    preference constraint the strategy calls for), the strategy's prompt
    modifications, then retain and avoid hints. Nothing is truncated.
    """

    def build(
        self,
        request: RefinementRequest,
        context: RefinementContext,
        strategy: RefinementStrategy,
    ) -> str:
        preferences = context.user_preferences

        tone = None
        if strategy.type == StrategyType.TONE_ADJUSTMENT and preferences.preferred_tone:
            tone = preferences.preferred_tone.value

        length = None
        if (
            strategy.type == StrategyType.LENGTH_MODIFICATION
            and preferences.preferred_length
        ):
            length = preferences.preferred_length.value

        directive = build_base_directive(
            content_type=request.content_type,
            original_content=context.original_content,
            feedback=request.feedback_text or DEFAULT_FEEDBACK,
            user_brief=request.user_brief,
            tone=tone,
            length=length,
        )

        for modification in strategy.prompt_modifications:
            directive += f"\n\n{modification}"

        if context.successful_patterns:
            directive += "\n\n" + RETAIN_PATTERNS_TEMPLATE.format(
                patterns=", ".join(context.successful_patterns)
            )

        if context.failure_patterns:
            directive += "\n\n" + AVOID_PATTERNS_TEMPLATE.format(
                patterns=", ".join(context.failure_patterns)
            )

        logger.debug(
            f"Built {strategy.type.value} directive ({len(directive)} chars)"
        )
        return directive
