import itertools

from exam_session.indexer import AnswerIndexer
from exam_session.progress import ProgressCalculator
from exam_session.slots import AnswerSlots


def _calc(sizes):
    indexer = AnswerIndexer(sizes)
    slots = AnswerSlots(indexer.total)
    return ProgressCalculator(indexer, slots), slots


def test_progress_steps_by_answer():
    progress, slots = _calc([2, 3])
    seen = [progress.overall_progress()]
    for slot in range(5):
        slots.stage(slot, f"answer {slot}")
        seen.append(progress.overall_progress())
    assert seen == [0.0, 20.0, 40.0, 60.0, 80.0, 100.0]
    assert progress.all_answered()


def test_progress_ignores_answer_order():
    for order in itertools.permutations(range(4)):
        progress, slots = _calc([2, 2])
        for slot in order[:3]:
            slots.stage(slot, "x")
        assert progress.overall_progress() == 75.0


def test_empty_session_reports_zero():
    progress, _ = _calc([])
    assert progress.overall_progress() == 0.0
    assert progress.snapshot(0)["percent"] == 0.0


def test_round_completion_and_snapshot():
    progress, slots = _calc([2, 1])
    slots.stage(0, "a")
    assert not progress.is_round_complete(0)
    slots.stage(1, "b")
    assert progress.is_round_complete(0)
    assert progress.first_incomplete_round(before=2) == 1
    snap = progress.snapshot(current_round=0)
    assert snap["answered"] == 2
    assert snap["rounds"][0] == {"round_index": 0, "answered": 2, "total": 2, "complete": True}
    assert progress.round_answers(0) == ["a", "b"]
