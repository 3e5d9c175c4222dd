"""Question-generation collaborator adapter."""
from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import ValidationError

from agents.common import call_model
from agents.types import GeneratedContent, GeneratedRound
from config.exams import FALLBACK_FLOW, ExamProfile, exam_profile, normalize_category
from config.registry import QUESTION_GEN_KEY
from config.settings import settings
from exam_session.models import Question, Round


def _parse(raw: object) -> GeneratedContent:
    if isinstance(raw, list):
        raw = {"questions": raw}
    try:
        return GeneratedContent.model_validate(raw)
    except ValidationError:
        return GeneratedContent()


def _clean(prompts: List[str]) -> List[str]:
    return [p.strip() for p in prompts if isinstance(p, str) and p.strip()]


def _filler(exam_type: str, number: int) -> str:
    return f"Question {number}: explain one core {exam_type} concept and apply it to an example."


async def generate_exam_questions(exam_type: str) -> Tuple[ExamProfile, List[str]]:
    """Return the exam profile and exactly ``profile.questions`` prompts."""

    profile = exam_profile(exam_type)
    raw = await call_model(
        QUESTION_GEN_KEY,
        mode="exam",
        exam_type=exam_type,
        count=profile.questions,
    )
    content = _parse(raw)
    prompts = _clean(content.questions)
    if not prompts:
        prompts = _clean([q for rnd in content.rounds for q in rnd.questions])

    prompts = prompts[: profile.questions]
    while len(prompts) < profile.questions:
        prompts.append(_filler(exam_type, len(prompts) + 1))
    return profile, prompts


def _fallback_rounds(company: str, role: str) -> List[GeneratedRound]:
    rounds: List[GeneratedRound] = []
    for template in FALLBACK_FLOW:
        questions = [str(q).format(company=company, role=role) for q in template["questions"]]  # type: ignore[union-attr]
        rounds.append(
            GeneratedRound(
                name=str(template["name"]),
                type=str(template["type"]),
                description=str(template["description"]),
                duration=int(template["duration"]),  # type: ignore[arg-type]
                questions=questions,
            )
        )
    return rounds


async def generate_interview_rounds(
    company: str,
    role: str,
    experience: Optional[str] = None,
) -> List[Round]:
    """Ask the generator for an interview flow and normalise it into rounds.

    Rounds without usable questions are dropped; if nothing usable remains
    the built-in fallback flow is used instead.
    """

    raw = await call_model(
        QUESTION_GEN_KEY,
        mode="interview",
        company=company,
        role=role,
        experience=experience,
    )
    generated = [rnd for rnd in _parse(raw).rounds if _clean(rnd.questions)]
    if not generated:
        generated = _fallback_rounds(company, role)

    rounds: List[Round] = []
    for index, rnd in enumerate(generated):
        rounds.append(
            Round(
                index=index,
                name=(rnd.name or "").strip() or f"Round {index + 1}",
                category=normalize_category(rnd.type),
                duration_minutes=rnd.duration if rnd.duration is not None else settings.DEFAULT_ROUND_MINUTES,
                description=rnd.description,
                questions=[Question(prompt=p) for p in _clean(rnd.questions)],
            )
        )
    return rounds


__all__ = ["generate_exam_questions", "generate_interview_rounds"]
