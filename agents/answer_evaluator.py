"""Answer-evaluation collaborator adapter."""
from __future__ import annotations

from typing import List

from pydantic import ValidationError

from agents.common import call_model, session_payload
from agents.types import EvaluationReport, QuestionEvaluation
from config.registry import EVAL_KEY
from exam_session.models import Session


def _bounded(score: float | None) -> float | None:
    if score is None:
        return None
    return float(f"{max(0.0, min(10.0, float(score))):.1f}")


async def evaluate_session(session: Session) -> List[QuestionEvaluation]:
    """Score every question of ``session``; one evaluation per slot.

    Malformed collaborator output degrades to neutral, unscored entries
    rather than failing the pipeline.
    """

    raw = await call_model(EVAL_KEY, session=session_payload(session))
    if isinstance(raw, list):
        raw = {"evaluations": raw}
    try:
        report = EvaluationReport.model_validate(raw)
    except ValidationError:
        report = EvaluationReport()

    by_index = {ev.index: ev for ev in report.evaluations if ev.index < session.slot_count}
    results: List[QuestionEvaluation] = []
    for index in range(session.slot_count):
        ev = by_index.get(index)
        if ev is None:
            results.append(QuestionEvaluation(index=index, feedback="No evaluation returned."))
            continue
        results.append(
            QuestionEvaluation(
                index=index,
                score=_bounded(ev.score),
                feedback=ev.feedback[:500],
                is_correct=ev.is_correct,
            )
        )
    return results


def apply_evaluations(session: Session, evaluations: List[QuestionEvaluation]) -> None:
    questions = list(session.iter_questions())
    for ev in evaluations:
        question = questions[ev.index]
        question.score = ev.score
        question.feedback = ev.feedback
        question.is_correct = ev.is_correct
    session.touch()


__all__ = ["evaluate_session", "apply_evaluations", "EVAL_KEY"]
