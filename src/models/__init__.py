"""Data models for the content refinement system."""

from src.models.iteration import (
    AcceptanceLevel,
    ContentIteration,
    ContentType,
    FeedbackType,
    IterationTiming,
    UserFeedback,
    new_iteration_id,
    new_turn_id,
    now_ms,
)

__all__ = [
    "AcceptanceLevel",
    "ContentIteration",
    "ContentType",
    "FeedbackType",
    "IterationTiming",
    "UserFeedback",
    "new_iteration_id",
    "new_turn_id",
    "now_ms",
]
