import os
import sys
import tempfile
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.migrate import migrate
from config.settings import settings
from config.registry import bind_model, EVAL_KEY, QUESTION_GEN_KEY, SUMMARY_KEY
from exam_session.models import Question, Round, Session
from services.sessions import session_registry


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield
    finally:
        session_registry.clear()
        td.cleanup()


@pytest.fixture
def fake_models():
    calls = {"generate": 0, "evaluate": 0, "summarize": 0}

    def generate(**kwargs):
        calls["generate"] += 1
        if kwargs["mode"] == "exam":
            return {"questions": [f"Exam question {i + 1}" for i in range(kwargs["count"])]}
        return {
            "rounds": [
                {"name": "Technical", "type": "technical", "duration": 10, "questions": ["T1", "T2"]},
                {"name": "Behavioral", "type": "behavioral", "duration": 5, "questions": ["B1", "B2"]},
            ]
        }

    def evaluate(*, session, **_):
        calls["evaluate"] += 1
        return {
            "evaluations": [
                {"index": pair["index"], "score": 7, "feedback": "Good answer.", "is_correct": True}
                for pair in session["qa_pairs"]
            ]
        }

    def summarize(**_):
        calls["summarize"] += 1
        return {"summary": "Solid performance across both rounds."}

    bind_model(QUESTION_GEN_KEY, generate)
    bind_model(EVAL_KEY, evaluate)
    bind_model(SUMMARY_KEY, summarize)
    return calls


def build_interview(sizes=(2, 2), session_id="s1", minutes=10):
    rounds = [
        Round(
            index=i,
            name=f"Round {i + 1}",
            duration_minutes=minutes,
            questions=[Question(prompt=f"Q{i}.{j}") for j in range(n)],
        )
        for i, n in enumerate(sizes)
    ]
    return Session.for_interview(session_id=session_id, rounds=rounds, company="Acme", role="Engineer")


@pytest.fixture
def make_interview():
    return build_interview


class MemoryBackend:
    """Authoritative copy kept in memory; optionally blocks or fails."""

    def __init__(self, session, fail=None):
        self.session = session.model_copy(deep=True)
        self.fail = fail
        self.calls = []
        self.gate = None

    async def write_answers(self, session_id, entries):
        self.calls.append(list(entries))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail is not None:
            raise self.fail
        rounds = self.session.rounds_view()
        for entry in entries:
            rounds[entry.round_index].questions[entry.question_index].answer = entry.answer
        return self.session.model_copy(deep=True)


@pytest.fixture
def memory_backend():
    return MemoryBackend
