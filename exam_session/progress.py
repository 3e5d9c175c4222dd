"""Progress derived from live answer slots."""
from __future__ import annotations

from typing import Any, Dict, List

from .indexer import AnswerIndexer
from .slots import AnswerSlots


class ProgressCalculator:
    def __init__(self, indexer: AnswerIndexer, slots: AnswerSlots):
        self._indexer = indexer
        self._slots = slots

    def is_round_complete(self, round_index: int) -> bool:
        return all(self._slots.is_filled(slot) for slot in self._indexer.round_range(round_index))

    def round_answered_count(self, round_index: int) -> int:
        return sum(1 for slot in self._indexer.round_range(round_index) if self._slots.is_filled(slot))

    def answered_count(self) -> int:
        return sum(1 for slot in range(self._indexer.total) if self._slots.is_filled(slot))

    def overall_progress(self) -> float:
        total = self._indexer.total
        if total == 0:
            return 0.0
        return self.answered_count() / total * 100

    def all_answered(self) -> bool:
        return self.answered_count() == self._indexer.total

    def round_answers(self, round_index: int) -> List[str]:
        return self._slots.window(self._indexer.round_range(round_index))

    def first_incomplete_round(self, before: int) -> int | None:
        for round_index in range(min(before, self._indexer.round_count)):
            if not self.is_round_complete(round_index):
                return round_index
        return None

    def snapshot(self, current_round: int) -> Dict[str, Any]:
        rounds = [
            {
                "round_index": index,
                "answered": self.round_answered_count(index),
                "total": self._indexer.sizes[index],
                "complete": self.is_round_complete(index),
            }
            for index in range(self._indexer.round_count)
        ]
        return {
            "current_round": current_round,
            "answered": self.answered_count(),
            "total": self._indexer.total,
            "percent": round(self.overall_progress(), 2),
            "rounds": rounds,
        }


__all__ = ["ProgressCalculator"]
