"""Session state machine for simulated exams and interviews."""
from .errors import (
    BackendError,
    CollaboratorError,
    InvariantViolation,
    NothingToSubmit,
    OutOfRange,
    RoundLocked,
    SessionClosed,
    SessionError,
    SessionNotFound,
)
from .indexer import AnswerIndexer
from .models import (
    AnswerEntry,
    BehavioralMetrics,
    CompletionStage,
    Question,
    Round,
    Session,
    VideoFrame,
    stage_reached,
)
from .navigation import NavigationGuard
from .progress import ProgressCalculator
from .runtime import ActiveSession
from .slots import AnswerSlots
from .timer import TimerService

__all__ = [
    "ActiveSession",
    "AnswerEntry",
    "AnswerIndexer",
    "AnswerSlots",
    "BackendError",
    "BehavioralMetrics",
    "CollaboratorError",
    "CompletionStage",
    "InvariantViolation",
    "NavigationGuard",
    "NothingToSubmit",
    "OutOfRange",
    "ProgressCalculator",
    "Question",
    "Round",
    "RoundLocked",
    "Session",
    "SessionClosed",
    "SessionError",
    "SessionNotFound",
    "TimerService",
    "VideoFrame",
    "stage_reached",
]
