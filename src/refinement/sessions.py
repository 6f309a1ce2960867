"""Session-scoped state: iteration history, learned preferences and metrics."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterator, Optional

from pydantic import BaseModel, Field

from src.models.iteration import (
    ContentIteration,
    ContentType,
    FeedbackType,
    IterationTiming,
    UserFeedback,
    now_ms,
)

from .errors import SessionNotFoundError
from .models import ProcessingMetrics, UserPreferences

logger = logging.getLogger(__name__)


class SessionState(BaseModel):
    """
    Everything the engine knows about one content-creation session.

    Iterations are append-only; feedback is attached to an existing
    iteration after the user responds.
    """

    session_id: str
    content_type: ContentType = ContentType.BLOG
    user_brief: str = ""

    iterations: list[ContentIteration] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    metrics: Optional[ProcessingMetrics] = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def add_iteration(
        self,
        prompt: str,
        generated_content: str,
        request_time: int,
        response_time: int,
        attempt_number: Optional[int] = None,
    ) -> ContentIteration:
        """
        Record a new generation attempt and return it.

        Alternatives generated for the same round share an attempt number,
        so callers may pass it explicitly.
        """
        iteration = ContentIteration(
            attempt_number=attempt_number or len(self.iterations) + 1,
            prompt=prompt,
            generated_content=generated_content,
            timing=IterationTiming(
                request_time=request_time,
                response_time=response_time,
            ),
        )
        self.iterations.append(iteration)
        logger.debug(
            f"Session {self.session_id}: recorded attempt {iteration.attempt_number} "
            f"({iteration.iteration_id})"
        )
        return iteration

    def get_iteration(self, iteration_id: str) -> Optional[ContentIteration]:
        for iteration in self.iterations:
            if iteration.iteration_id == iteration_id:
                return iteration
        return None

    def latest_iteration(self) -> Optional[ContentIteration]:
        return self.iterations[-1] if self.iterations else None

    def attach_feedback(
        self, iteration_id: str, feedback: UserFeedback
    ) -> Optional[ContentIteration]:
        """
        Attach user feedback to an iteration.

        Returns:
            The updated iteration, or None if the id is unknown
        """
        iteration = self.get_iteration(iteration_id)
        if iteration is None:
            return None

        iteration.user_feedback = feedback
        iteration.timing.user_response_time = now_ms()
        return iteration

    def feedback_history(self) -> list[UserFeedback]:
        """All feedback attached so far, in iteration order."""
        return [
            iteration.user_feedback
            for iteration in self.iterations
            if iteration.user_feedback is not None
        ]

    def get_summary(self) -> dict:
        """Get a summary of the session state."""
        feedback = self.feedback_history()
        return {
            "session_id": self.session_id,
            "content_type": self.content_type.value,
            "total_iterations": len(self.iterations),
            "feedback_count": len(feedback),
            "accepted": sum(1 for f in feedback if f.type == FeedbackType.ACCEPT),
            "rejected": sum(1 for f in feedback if f.type == FeedbackType.REJECT),
            "preferred_tone": (
                self.preferences.preferred_tone.value
                if self.preferences.preferred_tone
                else None
            ),
        }


class SessionRegistry:
    """
    Owns every live session.

    Sessions are created explicitly (or lazily on first preference access)
    and live until ``destroy`` is called. Nothing is persisted. There is no
    locking: at most one in-flight refinement per session is assumed.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SessionState] = {}

    def create(
        self,
        content_type: ContentType = ContentType.BLOG,
        user_brief: str = "",
        session_id: Optional[str] = None,
    ) -> SessionState:
        """Create and register a new session."""
        session_id = session_id or f"session_{uuid.uuid4().hex[:12]}"
        if session_id in self._sessions:
            raise ValueError(f"Session '{session_id}' already exists")

        session = SessionState(
            session_id=session_id,
            content_type=content_type,
            user_brief=user_brief,
        )
        self._sessions[session_id] = session
        logger.info(f"Created session {session_id} ({content_type.value})")
        return session

    def get(self, session_id: str) -> SessionState:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def find(self, session_id: str) -> Optional[SessionState]:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> SessionState:
        """Return the session, creating an empty one if it does not exist."""
        session = self._sessions.get(session_id)
        if session is None:
            session = SessionState(session_id=session_id)
            self._sessions[session_id] = session
            logger.debug(f"Lazily created session {session_id}")
        return session

    def destroy(self, session_id: str) -> bool:
        """Drop all state for a session. Returns whether it existed."""
        existed = self._sessions.pop(session_id, None) is not None
        if existed:
            logger.info(f"Destroyed session {session_id}")
        return existed

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[SessionState]:
        return iter(list(self._sessions.values()))
