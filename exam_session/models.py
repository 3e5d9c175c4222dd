"""Entity model for exam and interview sessions."""
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Dict, Iterator, List, Literal, Optional, Sequence, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .errors import InvariantViolation

SessionMode = Literal["exam", "interview"]
RoundCategory = Literal["technical", "behavioral", "coding", "system_design", "hr", "general", "exam"]


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class CompletionStage(str, Enum):
    ACTIVE = "active"
    ANSWERS_SUBMITTED = "answers_submitted"
    EVALUATED = "evaluated"
    SUMMARIZED = "summarized"
    COMPLETE = "complete"


STAGE_ORDER: Tuple[CompletionStage, ...] = (
    CompletionStage.ACTIVE,
    CompletionStage.ANSWERS_SUBMITTED,
    CompletionStage.EVALUATED,
    CompletionStage.SUMMARIZED,
    CompletionStage.COMPLETE,
)


def stage_reached(current: CompletionStage, target: CompletionStage) -> bool:
    return STAGE_ORDER.index(current) >= STAGE_ORDER.index(target)


class Question(BaseModel):
    prompt: str
    answer: Optional[str] = None
    score: Optional[float] = None
    feedback: Optional[str] = None
    is_correct: Optional[bool] = None
    answered_at: Optional[dt.datetime] = None
    elapsed_seconds: Optional[float] = None


class Round(BaseModel):
    index: int = Field(ge=0)
    name: str
    category: RoundCategory = "general"
    duration_minutes: int = Field(default=30, ge=0)
    description: str = ""
    questions: List[Question] = Field(default_factory=list)


class VideoFrame(BaseModel):
    """One behavioral sample forwarded by the client's face/emotion sensor."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: dt.datetime = Field(default_factory=utcnow)
    face_detected: bool = Field(default=True, validation_alias=AliasChoices("face_detected", "faceDetected"))
    num_faces: int = Field(default=1, ge=0, validation_alias=AliasChoices("num_faces", "numFaces"))
    emotions: Dict[str, float] = Field(default_factory=dict)
    simulated: bool = False


class BehavioralMetrics(BaseModel):
    frames_count: int = 0
    presence_pct: float = 0.0
    multiple_faces_pct: float = 0.0
    avg_emotions: Dict[str, float] = Field(default_factory=dict)
    simulated_frames: int = 0


class AnswerEntry(BaseModel):
    """A ``(round, question, answer)`` triple addressed to one slot."""

    model_config = ConfigDict(populate_by_name=True)

    round_index: int = Field(validation_alias=AliasChoices("round_index", "roundIndex"))
    question_index: int = Field(validation_alias=AliasChoices("question_index", "questionIndex"))
    answer: str = ""


class Session(BaseModel):
    """Serializable session document.

    Interview sessions carry ``rounds``; exam sessions carry a flat
    ``questions`` list whose length equals ``total_questions``. Callers that
    only need the round structure use :meth:`rounds_view`, which presents an
    exam as a single implicit round.
    """

    session_id: str
    owner_id: str = "anonymous"
    mode: SessionMode

    exam_type: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    experience: Optional[str] = None

    rounds: List[Round] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)
    total_questions: int = Field(default=0, ge=0)
    total_duration_minutes: int = Field(default=0, ge=0)

    is_completed: bool = False
    stage: CompletionStage = CompletionStage.ACTIVE
    summary: Optional[str] = None

    video_frames: List[VideoFrame] = Field(default_factory=list)
    behavioral_metrics: Optional[BehavioralMetrics] = None

    current_round: int = Field(default=0, ge=0)
    furthest_round: int = Field(default=0, ge=0)

    started_at: dt.datetime = Field(default_factory=utcnow)
    created_at: dt.datetime = Field(default_factory=utcnow)
    updated_at: dt.datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_shape(self) -> "Session":
        if self.mode == "exam":
            if self.rounds:
                raise InvariantViolation("exam sessions hold a flat question list, not rounds")
            if len(self.questions) != self.total_questions:
                raise InvariantViolation(
                    f"exam declares {self.total_questions} questions but holds {len(self.questions)}"
                )
        else:
            if self.questions:
                raise InvariantViolation("interview sessions hold questions inside rounds")
            for position, rnd in enumerate(self.rounds):
                if rnd.index != position:
                    raise InvariantViolation(f"round at position {position} declares index {rnd.index}")
            self.total_questions = sum(len(r.questions) for r in self.rounds)
        if self.is_completed and self.stage != CompletionStage.COMPLETE:
            raise InvariantViolation("completed session must be at the complete stage")
        return self

    def rounds_view(self) -> List[Round]:
        if self.mode == "interview":
            return self.rounds
        # model_construct keeps the same list object, so answers written
        # through the implicit round land on self.questions.
        implicit = Round.model_construct(
            index=0,
            name=self.exam_type or "Exam",
            category="exam",
            duration_minutes=self.total_duration_minutes,
            description="",
            questions=self.questions,
        )
        return [implicit]

    def round_sizes(self) -> List[int]:
        return [len(r.questions) for r in self.rounds_view()]

    def iter_questions(self) -> Iterator[Question]:
        """Yield every question in slot order."""

        for rnd in self.rounds_view():
            yield from rnd.questions

    @property
    def slot_count(self) -> int:
        return sum(self.round_sizes())

    def mark_completed(self) -> bool:
        """Flip the completion flag; returns False when it was already set."""

        if self.is_completed:
            return False
        self.is_completed = True
        self.stage = CompletionStage.COMPLETE
        self.touch()
        return True

    def touch(self) -> None:
        self.updated_at = utcnow()

    @classmethod
    def for_exam(
        cls,
        *,
        session_id: str,
        exam_type: str,
        prompts: Sequence[str],
        total_questions: int,
        time_minutes: int,
        owner_id: str = "anonymous",
    ) -> "Session":
        return cls(
            session_id=session_id,
            owner_id=owner_id,
            mode="exam",
            exam_type=exam_type,
            questions=[Question(prompt=p) for p in prompts],
            total_questions=total_questions,
            total_duration_minutes=time_minutes,
        )

    @classmethod
    def for_interview(
        cls,
        *,
        session_id: str,
        rounds: Sequence[Round],
        company: Optional[str] = None,
        role: Optional[str] = None,
        experience: Optional[str] = None,
        owner_id: str = "anonymous",
    ) -> "Session":
        return cls(
            session_id=session_id,
            owner_id=owner_id,
            mode="interview",
            company=company,
            role=role,
            experience=experience,
            rounds=list(rounds),
            total_duration_minutes=sum(r.duration_minutes for r in rounds),
        )


__all__ = [
    "AnswerEntry",
    "BehavioralMetrics",
    "CompletionStage",
    "Question",
    "Round",
    "RoundCategory",
    "STAGE_ORDER",
    "Session",
    "SessionMode",
    "VideoFrame",
    "stage_reached",
    "utcnow",
]
