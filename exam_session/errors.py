"""Error taxonomy for the session state machine."""
from __future__ import annotations

from typing import Optional


class SessionError(RuntimeError):  # Base for every session-core failure
    code = "session_error"


class InvariantViolation(SessionError):
    """A structural rule of the session was broken by the caller."""

    code = "invariant_violation"


class OutOfRange(SessionError):
    code = "out_of_range"

    def __init__(self, message: str, *, round_index: Optional[int] = None, question_index: Optional[int] = None):
        super().__init__(message)
        self.round_index = round_index
        self.question_index = question_index


class NothingToSubmit(SessionError):
    code = "nothing_to_submit"


class RoundLocked(SessionError):
    """Navigation denied because an earlier round still has empty slots."""

    code = "round_locked"

    def __init__(self, target_round: int, blocking_round: int):
        super().__init__(
            f"Round {target_round + 1} is locked until round {blocking_round + 1} is complete"
        )
        self.target_round = target_round
        self.blocking_round = blocking_round


class SessionClosed(SessionError):
    code = "session_closed"


class SessionNotFound(SessionError):
    code = "session_not_found"

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class BackendError(SessionError):  # Authoritative store rejected or failed a write
    code = "backend_error"


class CollaboratorError(SessionError):  # Evaluation/summary/generation service failed
    code = "collaborator_error"

    def __init__(self, collaborator: str, message: str):
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator


__all__ = [
    "SessionError",
    "InvariantViolation",
    "OutOfRange",
    "NothingToSubmit",
    "RoundLocked",
    "SessionClosed",
    "SessionNotFound",
    "BackendError",
    "CollaboratorError",
]
