"""Data models for the refinement engine."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.llm import ProviderType
from src.models.iteration import ContentIteration, ContentType, UserFeedback


class StrategyType(str, Enum):
    """Closed set of refinement strategies."""

    TONE_ADJUSTMENT = "tone_adjustment"
    LENGTH_MODIFICATION = "length_modification"
    STRUCTURE_REORGANIZATION = "structure_reorganization"
    CONTENT_EXPANSION = "content_expansion"
    CONTENT_CONDENSATION = "content_condensation"
    STYLE_REFINEMENT = "style_refinement"
    TOPIC_REFOCUS = "topic_refocus"
    FORMAT_CHANGE = "format_change"


class LengthDirection(str, Enum):
    """Direction for length refinement."""

    EXPAND = "expand"
    CONDENSE = "condense"


class Tone(str, Enum):
    """Tones the learner can pick up from feedback."""

    FORMAL = "formal"
    CASUAL = "casual"
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"


class LengthPreference(str, Enum):
    """Coarse content length preference."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class RefinementStrategy(BaseModel):
    """A named approach for turning a critique into a regeneration directive."""

    type: StrategyType
    description: str
    prompt_modifications: list[str] = Field(
        default_factory=list,
        description="Directive fragments appended to the refinement prompt",
    )
    context_weight: float = Field(ge=0.0, le=1.0)
    success_probability: float = Field(
        ge=0.0,
        le=1.0,
        description="Running process-wide estimate that this strategy satisfies the user",
    )
    length_direction: Optional[LengthDirection] = Field(
        default=None,
        description="Set only for length_modification",
    )


class UserPreferences(BaseModel):
    """Preferences learned for one session."""

    preferred_tone: Optional[Tone] = None
    preferred_length: Optional[LengthPreference] = None
    style_preferences: list[str] = Field(default_factory=list)
    avoided_patterns: list[str] = Field(default_factory=list)
    accepted_patterns: list[str] = Field(default_factory=list)


@dataclass
class RefinementContext:
    """Context derived fresh for every refinement call; never stored."""

    original_content: str
    feedback_history: list[UserFeedback] = field(default_factory=list)
    iteration_count: int = 0
    successful_patterns: list[str] = field(default_factory=list)
    failure_patterns: list[str] = field(default_factory=list)
    user_preferences: UserPreferences = field(default_factory=UserPreferences)

    def get_sources(self) -> list[str]:
        """Names of the context sources that carried any signal."""
        sources = []
        if self.feedback_history:
            sources.append("feedback_history")
        if self.successful_patterns:
            sources.append("successful_patterns")
        if self.failure_patterns:
            sources.append("failure_patterns")
        if self.user_preferences.preferred_tone:
            sources.append("tone_preferences")
        return sources


class RefinementRequest(BaseModel):
    """A request to refine one iteration of a session."""

    session_id: str
    iteration_id: str = Field(description="Iteration the feedback refers to")
    user_feedback: UserFeedback
    content_type: ContentType
    user_brief: str = ""

    previous_iterations: Optional[list[ContentIteration]] = Field(
        default=None,
        description="Prior iterations in order; defaults to the session's recorded history",
    )

    @property
    def feedback_text(self) -> str:
        """The free-text critique, or an empty string."""
        return self.user_feedback.refinement_request or ""


@dataclass
class ScoredStrategy:
    """A candidate strategy with its score for one request."""

    strategy: RefinementStrategy
    score: float


class RefinementResult(BaseModel):
    """Result of a refinement operation."""

    iteration: ContentIteration
    strategy: RefinementStrategy
    context_used: list[str] = Field(default_factory=list)
    improvement_hypothesis: str = ""
    confidence_score: float = Field(ge=0.0, le=1.0)

    # Backend usage
    tokens_used: int = 0
    cost_usd: float = 0.0
    latency_ms: float = 0.0

    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class ProcessingMetrics(BaseModel):
    """Per-session processing metrics."""

    processing_time_ms: float = Field(
        default=0.0,
        description="Wall-clock time of the most recent refinement call",
    )
    strategy_effectiveness: dict[StrategyType, float] = Field(default_factory=dict)
    user_satisfaction_trend: list[int] = Field(default_factory=list)
    context_accuracy_score: float = 0.0
    refinement_count: int = 0


class FeedbackPatternAnalysis(BaseModel):
    """Batch analysis over a session's feedback history."""

    dominant_feedback_types: list[str] = Field(default_factory=list)
    preference_signals: UserPreferences = Field(default_factory=UserPreferences)
    improvement_suggestions: list[str] = Field(default_factory=list)


class RefinementConfig(BaseModel):
    """Configuration for the refinement engine."""

    # Provider settings
    provider: ProviderType = Field(
        default=ProviderType.ANTHROPIC,
        description="LLM provider used by the generation backend",
    )
    model: Optional[str] = Field(
        default=None,
        description="Model name; provider default when unset",
    )

    # Alternatives
    default_alternatives: int = Field(
        default=2,
        ge=1,
        le=8,
        description="Number of variations produced by process_refinement_alternatives",
    )

    # Per-strategy sampling temperature overrides
    temperature_overrides: dict[StrategyType, float] = Field(
        default_factory=dict,
        description="Replaces the built-in temperature for the given strategies",
    )

    # Rate limiting / transport
    requests_per_minute: Optional[int] = Field(
        default=None,
        description="Rate limit for LLM requests",
    )
    timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for LLM requests",
    )
    max_retries: int = Field(default=3, ge=0, le=10)

    # Logging
    log_requests: bool = False
    log_responses: bool = False
