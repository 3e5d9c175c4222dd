"""Summary-generation collaborator adapter."""
from __future__ import annotations

from pydantic import ValidationError

from agents.common import call_model, session_payload
from agents.types import SummaryOut
from config.registry import SUMMARY_KEY
from exam_session.models import Session


def _fallback_summary(session: Session) -> str:
    questions = list(session.iter_questions())
    answered = sum(1 for q in questions if (q.answer or "").strip())
    scores = [q.score for q in questions if q.score is not None]
    line = f"Answered {answered} of {len(questions)} questions."
    if scores:
        line += f" Average score {sum(scores) / len(scores):.1f}/10."
    return line


async def write_summary(session: Session) -> str:
    raw = await call_model(SUMMARY_KEY, session=session_payload(session))
    if isinstance(raw, str):
        raw = {"summary": raw}
    try:
        parsed = SummaryOut.model_validate(raw)
    except ValidationError:
        return _fallback_summary(session)
    return parsed.summary.strip() or _fallback_summary(session)


__all__ = ["write_summary", "SUMMARY_KEY"]
