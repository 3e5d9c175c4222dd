from __future__ import annotations  # Exam profiles and interview fallback flow

from typing import Dict, List

from pydantic import BaseModel, Field


class ExamProfile(BaseModel):  # Question count and time limit for one exam type
    name: str
    questions: int = Field(ge=1)
    time_minutes: int = Field(ge=1)


EXAM_PROFILES: Dict[str, ExamProfile] = {
    "CAT": ExamProfile(name="CAT", questions=12, time_minutes=25),
    "UPSC": ExamProfile(name="UPSC", questions=8, time_minutes=40),
    "GATE": ExamProfile(name="GATE", questions=10, time_minutes=30),
    "SSC": ExamProfile(name="SSC", questions=15, time_minutes=20),
    "DEFAULT": ExamProfile(name="DEFAULT", questions=10, time_minutes=20),
}


def exam_profile(exam_type: str) -> ExamProfile:  # Unknown exam types use DEFAULT
    key = (exam_type or "").strip().upper()
    return EXAM_PROFILES.get(key, EXAM_PROFILES["DEFAULT"])


_CATEGORY_ALIASES: Dict[str, str] = {
    "technical": "technical",
    "tech": "technical",
    "dsa": "coding",
    "coding": "coding",
    "behavioral": "behavioral",
    "behavioural": "behavioral",
    "leadership": "behavioral",
    "system-design": "system_design",
    "system design": "system_design",
    "system_design": "system_design",
    "hr": "hr",
    "exam": "exam",
}


def normalize_category(raw: str | None) -> str:
    """Map a free-form round type onto the fixed category set."""

    text = (raw or "").strip().lower()
    if not text:
        return "general"
    if text in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[text]
    if "coding" in text:
        return "coding"
    if "design" in text:
        return "system_design"
    if "behav" in text:
        return "behavioral"
    if "hr" in text.replace("/", " ").split():
        return "hr"
    if "tech" in text:
        return "technical"
    return "general"


FALLBACK_FLOW: List[Dict[str, object]] = [
    {
        "name": "Technical Questions",
        "type": "technical",
        "description": "Short technical Q&A",
        "duration": 30,
        "questions": [
            "What is an algorithm you frequently use for {role}?",
            "Explain time vs space complexity with an example.",
            "What data structures would you choose for caching?",
        ],
    },
    {
        "name": "Coding Round",
        "type": "coding",
        "description": "Solve a coding problem with discussion.",
        "duration": 45,
        "questions": [
            "Implement a function to reverse a linked list.",
            "Find the missing number in an array of size n-1 with numbers from 1..n.",
            "Given a string, find the longest palindromic substring.",
        ],
    },
    {
        "name": "Behavioral / HR",
        "type": "hr",
        "description": "Behavioral questions and fitment",
        "duration": 20,
        "questions": [
            "Tell me about a time you faced conflict in a team and how you resolved it.",
            "What are your long-term career goals?",
            "Why do you want to join {company}?",
        ],
    },
]


__all__ = ["ExamProfile", "EXAM_PROFILES", "exam_profile", "normalize_category", "FALLBACK_FLOW"]
