"""
Refinement decision engine for generated blog, email and social copy.

Given a draft, the user's critique and the session's earlier attempts, the
engine chooses a refinement strategy, builds an augmented generation
directive and learns per-session preferences that bias later choices:
- Strategy ranking from keyword-gated candidates
- Success and failure patterns mined from history
- Tone preferences learned from feedback
- Parallel alternatives, one per top-ranked strategy
- Feedback pattern analysis per session

Usage:
    from src.refinement import RefinementEngine, RefinementConfig, RefinementRequest

    async with RefinementEngine(RefinementConfig()) as engine:
        session = engine.start_session(ContentType.BLOG, "Launch post for v2")
        draft = await engine.generate_initial(session.session_id)
        result = await engine.process_refinement(
            RefinementRequest(
                session_id=session.session_id,
                iteration_id=draft.iteration_id,
                user_feedback=UserFeedback(
                    type=FeedbackType.REFINE,
                    refinement_request="shorter and more casual",
                ),
                content_type=ContentType.BLOG,
            )
        )
        print(result.improvement_hypothesis)
"""

from .analyzer import FeedbackPatternAnalyzer
from .classifier import Intent, IntentClassifier, KeywordIntentClassifier
from .context import ContextBuilder
from .engine import RefinementEngine
from .errors import (
    EmptyGenerationError,
    IterationNotFoundError,
    RefinementError,
    SessionNotFoundError,
)
from .metrics import MetricsTracker, calculate_confidence
from .models import (
    FeedbackPatternAnalysis,
    LengthDirection,
    LengthPreference,
    ProcessingMetrics,
    RefinementConfig,
    RefinementContext,
    RefinementRequest,
    RefinementResult,
    RefinementStrategy,
    ScoredStrategy,
    StrategyType,
    Tone,
    UserPreferences,
)
from .preferences import PreferenceStore
from .prompts import PromptAugmenter
from .sessions import SessionRegistry, SessionState
from .strategies import StrategyCatalog

__all__ = [
    # Core
    "RefinementEngine",
    "RefinementConfig",
    # Request/Response
    "RefinementRequest",
    "RefinementResult",
    "RefinementContext",
    "RefinementStrategy",
    "ScoredStrategy",
    "StrategyType",
    "LengthDirection",
    "Tone",
    "LengthPreference",
    "UserPreferences",
    "ProcessingMetrics",
    "FeedbackPatternAnalysis",
    # Components
    "ContextBuilder",
    "StrategyCatalog",
    "PromptAugmenter",
    "PreferenceStore",
    "MetricsTracker",
    "FeedbackPatternAnalyzer",
    "calculate_confidence",
    # Sessions
    "SessionRegistry",
    "SessionState",
    # Intent
    "Intent",
    "IntentClassifier",
    "KeywordIntentClassifier",
    # Errors
    "RefinementError",
    "SessionNotFoundError",
    "IterationNotFoundError",
    "EmptyGenerationError",
]
