"""Offline collaborator implementations used when no AI provider is bound."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from config.exams import FALLBACK_FLOW
from config.registry import EVAL_KEY, QUESTION_GEN_KEY, SUMMARY_KEY, bind_model, is_bound

_EXAM_TEMPLATES = [
    "Explain a fundamental concept tested in {exam} and give an example.",
    "Solve a representative {exam} problem and show each step.",
    "Compare two approaches commonly used in {exam} questions.",
    "Identify a common mistake candidates make in {exam} and how to avoid it.",
    "Summarise a topic from the {exam} syllabus in your own words.",
]


def generate_offline(
    *,
    mode: str,
    exam_type: Optional[str] = None,
    count: int = 0,
    company: Optional[str] = None,
    role: Optional[str] = None,
    **_: Any,
) -> Dict[str, Any]:
    if mode == "exam":
        exam = exam_type or "general"
        questions = [
            f"Q{i + 1}. " + _EXAM_TEMPLATES[i % len(_EXAM_TEMPLATES)].format(exam=exam)
            for i in range(count)
        ]
        return {"questions": questions}
    rounds: List[Dict[str, Any]] = []
    for template in FALLBACK_FLOW:
        rounds.append(
            {
                **template,
                "questions": [
                    str(q).format(company=company or "the company", role=role or "this role")
                    for q in template["questions"]  # type: ignore[union-attr]
                ],
            }
        )
    return {"rounds": rounds}


def evaluate_offline(*, session: Dict[str, Any], **_: Any) -> Dict[str, Any]:
    """Length-based heuristic: rewards detailed answers, zero for blanks."""

    evaluations = []
    for pair in session.get("qa_pairs", []):
        answer = pair.get("answer") or ""
        words = 0 if answer == "Not answered" else len(answer.split())
        if words == 0:
            evaluations.append({"index": pair["index"], "score": 0, "feedback": "Not answered.", "is_correct": False})
            continue
        score = min(10, 3 + words // 10)
        feedback = "Detailed answer." if score >= 7 else "Answer recorded; add more depth and examples."
        evaluations.append({"index": pair["index"], "score": score, "feedback": feedback, "is_correct": score >= 5})
    return {"evaluations": evaluations}


def summarize_offline(*, session: Dict[str, Any], **_: Any) -> Dict[str, Any]:
    pairs = session.get("qa_pairs", [])
    answered = sum(1 for pair in pairs if pair.get("answer") not in (None, "", "Not answered"))
    target = session.get("role") or session.get("exam_type") or "the session"
    return {"summary": f"Performance summary for {target}: answered {answered} of {len(pairs)} questions."}


def bind_defaults(*, override: bool = False) -> None:
    """Bind the offline collaborators for any key that is still unbound."""

    for key, fn in (
        (QUESTION_GEN_KEY, generate_offline),
        (EVAL_KEY, evaluate_offline),
        (SUMMARY_KEY, summarize_offline),
    ):
        if override or not is_bound(key):
            bind_model(key, fn)


__all__ = ["bind_defaults", "generate_offline", "evaluate_offline", "summarize_offline"]
