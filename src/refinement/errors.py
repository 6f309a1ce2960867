"""Exceptions raised by the refinement engine."""


class RefinementError(Exception):
    """Base class for refinement errors."""


class SessionNotFoundError(RefinementError, KeyError):
    """No session is registered under the given id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' not found")

    def __str__(self) -> str:
        return self.args[0]


class IterationNotFoundError(RefinementError, KeyError):
    """The session has no iteration with the given id."""

    def __init__(self, session_id: str, iteration_id: str):
        self.session_id = session_id
        self.iteration_id = iteration_id
        super().__init__(
            f"Iteration '{iteration_id}' not found in session '{session_id}'"
        )

    def __str__(self) -> str:
        return self.args[0]


class EmptyGenerationError(RefinementError):
    """The generation backend returned no text."""
