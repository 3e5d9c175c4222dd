"""Sequential round navigation rules."""
from __future__ import annotations

from .errors import OutOfRange, RoundLocked
from .indexer import AnswerIndexer
from .progress import ProgressCalculator


class NavigationGuard:
    """Decide whether a client may move to a round.

    The guard reads completeness live from the progress calculator and never
    mutates anything; the caller owns the round pointer.
    """

    def __init__(self, indexer: AnswerIndexer, progress: ProgressCalculator):
        self._indexer = indexer
        self._progress = progress

    def can_navigate_to(self, target_round: int, *, current_round: int, furthest_round: int) -> bool:
        """Return True when allowed; raise :class:`RoundLocked` otherwise."""

        if target_round < 0 or target_round >= self._indexer.round_count:
            raise OutOfRange(
                f"round index {target_round} outside 0..{self._indexer.round_count - 1}",
                round_index=target_round,
            )
        if target_round == current_round or target_round <= furthest_round:
            return True
        if target_round == current_round + 1:
            if not self._progress.is_round_complete(current_round):
                raise RoundLocked(target_round, current_round)
            return True
        blocking = self._progress.first_incomplete_round(before=target_round)
        if blocking is not None:
            raise RoundLocked(target_round, blocking)
        return True

    def is_navigable(self, target_round: int, *, current_round: int, furthest_round: int) -> bool:
        try:
            return self.can_navigate_to(target_round, current_round=current_round, furthest_round=furthest_round)
        except RoundLocked:
            return False


__all__ = ["NavigationGuard"]
