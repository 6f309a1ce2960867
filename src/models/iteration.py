"""Content iteration models: one generation attempt and the feedback on it."""

import time
import uuid
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ContentType(str, Enum):
    """Kinds of copy the system produces."""

    BLOG = "blog"
    EMAIL = "email"
    SOCIAL = "social"


class FeedbackType(str, Enum):
    """User verdict on a generated draft."""

    ACCEPT = "accept"
    REJECT = "reject"
    REFINE = "refine"


class AcceptanceLevel(str, Enum):
    """How much the user intends to change accepted content."""

    AS_IS = "as_is"
    LIGHT_EDIT = "light_edit"
    HEAVY_EDIT = "heavy_edit"
    INSPIRATION = "inspiration"


def new_iteration_id() -> str:
    return f"iter_{uuid.uuid4().hex[:12]}"


def new_turn_id() -> str:
    return f"turn_{uuid.uuid4().hex[:12]}"


def now_ms() -> int:
    """Wall-clock time in milliseconds."""
    return int(time.time() * 1000)


class UserFeedback(BaseModel):
    """User response to a generated draft."""

    type: FeedbackType
    rating: Optional[Literal[1, -1]] = Field(
        default=None,
        description="Thumbs up (1) or thumbs down (-1)",
    )
    refinement_request: Optional[str] = Field(
        default=None,
        description="Free-text critique or instruction",
    )
    quick_feedback: list[str] = Field(
        default_factory=list,
        description="Preset feedback tags selected by the user",
    )
    acceptance_level: Optional[AcceptanceLevel] = None

    @property
    def is_positive(self) -> bool:
        """Accepted, or rated up."""
        return self.type == FeedbackType.ACCEPT or self.rating == 1

    @property
    def is_negative(self) -> bool:
        """Rejected, or rated down."""
        return self.type == FeedbackType.REJECT or self.rating == -1


class IterationTiming(BaseModel):
    """Timestamps (ms since epoch) for one generate-then-critique round."""

    request_time: int
    response_time: int
    user_response_time: Optional[int] = None

    @property
    def generation_ms(self) -> int:
        return self.response_time - self.request_time


class ContentIteration(BaseModel):
    """A single attempt at generating content within a session."""

    iteration_id: str = Field(default_factory=new_iteration_id)
    attempt_number: int = Field(ge=1)
    prompt: str = Field(description="Directive sent to the generation backend")
    generated_content: str
    user_feedback: Optional[UserFeedback] = None
    turn_id: str = Field(
        default_factory=new_turn_id,
        description="Correlation id for the analytics subsystem",
    )
    timing: IterationTiming

    def word_count(self) -> int:
        return len(self.generated_content.split())
