import asyncio

import pytest

from exam_session.errors import BackendError, NothingToSubmit, OutOfRange, SessionClosed
from exam_session.models import CompletionStage
from exam_session.runtime import ActiveSession
from services.submission import SubmissionCoordinator


def _setup(make_interview, memory_backend, **kwargs):
    session = make_interview(sizes=(2, 2))
    runtime = ActiveSession(session)
    backend = memory_backend(session, **kwargs)
    return runtime, backend, SubmissionCoordinator(runtime, backend)


@pytest.mark.asyncio
async def test_single_answer_is_confirmed(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend)
    session = await coordinator.submit_single("s1", 1, 0, "Because teams matter")
    assert runtime.slots.confirmed(2) == "Because teams matter"
    assert session.rounds[1].questions[0].answer == "Because teams matter"
    assert not coordinator.submitting


@pytest.mark.asyncio
async def test_failed_write_rolls_back(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend, fail=ConnectionError("store down"))
    with pytest.raises(BackendError):
        await coordinator.submit_single("s1", 0, 0, "lost")
    assert runtime.slots.get(0) == ""
    assert runtime.slots.pending_slots() == []
    assert runtime.progress.overall_progress() == 0.0


@pytest.mark.asyncio
async def test_session_errors_pass_through_unchanged(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend, fail=SessionClosed("closed upstream"))
    with pytest.raises(SessionClosed):
        await coordinator.submit_batch("s1", [{"round_index": 0, "question_index": 1, "answer": "x"}])
    assert runtime.slots.get(1) == ""


@pytest.mark.asyncio
async def test_blank_batch_is_rejected_without_backend_call(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend)
    with pytest.raises(NothingToSubmit):
        await coordinator.submit_batch("s1", [{"roundIndex": 0, "questionIndex": 0, "answer": "  "}])
    assert backend.calls == []


@pytest.mark.asyncio
async def test_batch_validates_every_index_first(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend)
    with pytest.raises(OutOfRange):
        await coordinator.submit_batch(
            "s1",
            [
                {"round_index": 0, "question_index": 0, "answer": "fine"},
                {"round_index": 0, "question_index": 5, "answer": "bad"},
            ],
        )
    assert runtime.slots.get(0) == ""
    assert backend.calls == []


@pytest.mark.asyncio
async def test_progress_reflects_pending_write(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend)
    backend.gate = asyncio.Event()
    task = asyncio.create_task(coordinator.submit_single("s1", 0, 0, "in flight"))
    await asyncio.sleep(0)
    assert coordinator.submitting
    assert runtime.slots.is_pending(0)
    assert runtime.progress.overall_progress() == 25.0
    backend.gate.set()
    await task
    assert not coordinator.submitting
    await coordinator.settle()
    assert runtime.slots.confirmed(0) == "in flight"


@pytest.mark.asyncio
async def test_closed_session_rejects_writes(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend)
    runtime.session.stage = CompletionStage.ANSWERS_SUBMITTED
    with pytest.raises(SessionClosed):
        await coordinator.submit_single("s1", 0, 0, "late")
    assert backend.calls == []


@pytest.mark.asyncio
async def test_unanswered_lists_empty_slots(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend)
    await coordinator.submit_batch(
        "s1",
        [
            {"round_index": 0, "question_index": 0, "answer": "a"},
            {"round_index": 1, "question_index": 1, "answer": "d"},
        ],
    )
    assert coordinator.unanswered() == [1, 2]


@pytest.mark.asyncio
async def test_writes_to_one_slot_are_serialized(make_interview, memory_backend):
    runtime, backend, coordinator = _setup(make_interview, memory_backend)
    backend.gate = asyncio.Event()
    first = asyncio.create_task(coordinator.submit_single("s1", 0, 0, "first"))
    second = asyncio.create_task(coordinator.submit_single("s1", 0, 0, "second"))
    for _ in range(5):
        await asyncio.sleep(0)
    assert [[e.answer for e in call] for call in backend.calls] == [["first"]]
    assert runtime.slots.get(0) == "first"

    backend.gate.set()
    await asyncio.gather(first, second)
    assert [[e.answer for e in call] for call in backend.calls] == [["first"], ["second"]]
    assert runtime.slots.confirmed(0) == "second"
    assert runtime.slots.pending_slots() == []
