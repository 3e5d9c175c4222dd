import pytest

from agents.answer_evaluator import apply_evaluations, evaluate_session
from agents.question_generator import generate_exam_questions, generate_interview_rounds
from agents.summary_writer import write_summary
from config.registry import EVAL_KEY, QUESTION_GEN_KEY, SUMMARY_KEY, bind_model
from exam_session.errors import CollaboratorError


@pytest.mark.asyncio
async def test_exam_questions_are_padded_to_profile():
    bind_model(QUESTION_GEN_KEY, lambda **_: {"questions": ["one", " ", "two"]})
    profile, prompts = await generate_exam_questions("cat")
    assert profile.name == "CAT"
    assert len(prompts) == profile.questions == 12
    assert prompts[:2] == ["one", "two"]


@pytest.mark.asyncio
async def test_exam_questions_are_truncated():
    async def many(**kwargs):
        return {"questions": [f"q{i}" for i in range(kwargs["count"] + 5)]}

    bind_model(QUESTION_GEN_KEY, many)
    profile, prompts = await generate_exam_questions("unknown-exam")
    assert profile.name == "DEFAULT"
    assert len(prompts) == 10


@pytest.mark.asyncio
async def test_interview_rounds_normalised():
    bind_model(
        QUESTION_GEN_KEY,
        lambda **_: {
            "rounds": [
                {"name": "DSA", "type": "Coding Challenge", "questions": ["Reverse a list"]},
                {"name": "Empty", "type": "technical", "questions": []},
                {"type": "HR", "duration": 15, "questions": ["Why us?"]},
            ]
        },
    )
    rounds = await generate_interview_rounds("Acme", "Engineer")
    assert [r.index for r in rounds] == [0, 1]
    assert rounds[0].category == "coding"
    assert rounds[0].duration_minutes == 30
    assert rounds[1].name == "Round 2"
    assert rounds[1].category == "hr"
    assert rounds[1].duration_minutes == 15


@pytest.mark.asyncio
async def test_malformed_generator_output_uses_fallback_flow():
    bind_model(QUESTION_GEN_KEY, lambda **_: "not json at all")
    rounds = await generate_interview_rounds("Acme", "Data Engineer")
    assert len(rounds) == 3
    assert all(r.questions for r in rounds)
    assert "Data Engineer" in rounds[0].questions[0].prompt


@pytest.mark.asyncio
async def test_generator_exception_is_collaborator_error():
    def boom(**_):
        raise TimeoutError("provider timed out")

    bind_model(QUESTION_GEN_KEY, boom)
    with pytest.raises(CollaboratorError):
        await generate_exam_questions("GATE")


@pytest.mark.asyncio
async def test_evaluation_clamps_and_fills_gaps(make_interview):
    session = make_interview(sizes=(1, 2))
    bind_model(
        EVAL_KEY,
        lambda **_: {"evaluations": [{"index": 0, "score": 14, "feedback": "great"}, {"index": 2, "score": -1}]},
    )
    evaluations = await evaluate_session(session)
    assert [e.index for e in evaluations] == [0, 1, 2]
    assert evaluations[0].score == 10.0
    assert evaluations[1].score is None
    assert evaluations[2].score == 0.0
    apply_evaluations(session, evaluations)
    assert session.rounds[0].questions[0].feedback == "great"


@pytest.mark.asyncio
async def test_summary_accepts_plain_text_and_falls_back(make_interview):
    session = make_interview(sizes=(1,))
    bind_model(SUMMARY_KEY, lambda **_: "  Clear communicator.  ")
    assert await write_summary(session) == "Clear communicator."
    bind_model(SUMMARY_KEY, lambda **_: {"unexpected": True})
    assert (await write_summary(session)).startswith("Answered 0 of 1")


@pytest.mark.asyncio
async def test_unbound_collaborator(monkeypatch, make_interview):
    monkeypatch.setattr("config.registry._REGISTRY", {})
    with pytest.raises(CollaboratorError):
        await write_summary(make_interview())
