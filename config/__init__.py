"""Configuration package for the exam session service."""
from .exams import ExamProfile, FALLBACK_FLOW, exam_profile, normalize_category
from .registry import EVAL_KEY, QUESTION_GEN_KEY, SUMMARY_KEY, bind_model, get_model, is_bound
from .settings import Settings, settings

__all__ = [
    "ExamProfile",
    "FALLBACK_FLOW",
    "exam_profile",
    "normalize_category",
    "EVAL_KEY",
    "QUESTION_GEN_KEY",
    "SUMMARY_KEY",
    "bind_model",
    "get_model",
    "is_bound",
    "Settings",
    "settings",
]
