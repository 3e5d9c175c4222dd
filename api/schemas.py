"""Pydantic schemas for the session API."""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from exam_session.models import AnswerEntry, Session, SessionMode


class StartReq(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mode: SessionMode = "interview"
    exam_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("exam_type", "examType"))
    company: Optional[str] = None
    role: Optional[str] = None
    experience: Optional[str] = None
    owner_id: str = Field(default="anonymous", validation_alias=AliasChoices("owner_id", "ownerId"))


class NavigateReq(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    round_index: int = Field(validation_alias=AliasChoices("round_index", "roundIndex"))


class SubmitReq(BaseModel):
    answers: List[AnswerEntry] = Field(default_factory=list)


class CompleteReq(BaseModel):  # Optional final batch sent with completion
    answers: Optional[List[AnswerEntry]] = None


class SubmitResp(BaseModel):
    accepted: int
    session: Session


class SessionView(BaseModel):
    session: Session
    progress: Dict[str, Any]


class FrameResp(BaseModel):
    accepted: bool


class SessionListItem(BaseModel):
    session_id: str
    mode: SessionMode
    exam_type: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    stage: str
    is_completed: bool
    created_at: dt.datetime
