"""Mapping between (round, question) coordinates and flat answer slots."""
from __future__ import annotations

from bisect import bisect_right
from itertools import accumulate
from typing import List, Sequence, Tuple

from .errors import OutOfRange
from .models import Session


class AnswerIndexer:
    """Prefix-sum index over per-round question counts.

    The prefix sums are computed once; round sizes never change for the
    lifetime of a session, so every lookup is O(1) (O(log n) for the inverse).
    """

    def __init__(self, round_sizes: Sequence[int]):
        if any(size < 0 for size in round_sizes):
            raise ValueError("round sizes must be non-negative")
        self._sizes: Tuple[int, ...] = tuple(int(size) for size in round_sizes)
        self._offsets: List[int] = [0, *accumulate(self._sizes)]

    @classmethod
    def for_session(cls, session: Session) -> "AnswerIndexer":
        return cls(session.round_sizes())

    @property
    def sizes(self) -> Tuple[int, ...]:
        return self._sizes

    @property
    def round_count(self) -> int:
        return len(self._sizes)

    @property
    def total(self) -> int:
        return self._offsets[-1]

    def _check_round(self, round_index: int) -> None:
        if round_index < 0 or round_index >= len(self._sizes):
            raise OutOfRange(
                f"round index {round_index} outside 0..{len(self._sizes) - 1}",
                round_index=round_index,
            )

    def absolute_index(self, round_index: int, question_index: int) -> int:
        self._check_round(round_index)
        size = self._sizes[round_index]
        if question_index < 0 or question_index >= size:
            raise OutOfRange(
                f"question index {question_index} outside round {round_index} (size {size})",
                round_index=round_index,
                question_index=question_index,
            )
        return self._offsets[round_index] + question_index

    def coordinates(self, slot: int) -> Tuple[int, int]:
        """Inverse of :meth:`absolute_index`."""

        if slot < 0 or slot >= self.total:
            raise OutOfRange(f"slot {slot} outside 0..{self.total - 1}")
        # Empty rounds share an offset with their successor; bisect_right
        # skips past them to the round that actually owns the slot.
        round_index = bisect_right(self._offsets, slot) - 1
        return round_index, slot - self._offsets[round_index]

    def round_range(self, round_index: int) -> range:
        self._check_round(round_index)
        return range(self._offsets[round_index], self._offsets[round_index + 1])


__all__ = ["AnswerIndexer"]
