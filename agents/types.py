"""Shared type definitions for collaborator outputs."""
from typing import List, Optional

from pydantic import BaseModel, Field


class GeneratedRound(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    description: str = ""
    duration: Optional[int] = Field(default=None, ge=0)
    questions: List[str] = Field(default_factory=list)


class GeneratedContent(BaseModel):
    rounds: List[GeneratedRound] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)


class QuestionEvaluation(BaseModel):
    index: int = Field(ge=0)
    score: Optional[float] = None  # 0..10
    feedback: str = ""
    is_correct: Optional[bool] = None


class EvaluationReport(BaseModel):
    evaluations: List[QuestionEvaluation] = Field(default_factory=list)


class SummaryOut(BaseModel):
    summary: str
