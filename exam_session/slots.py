"""Fixed-length answer slots with a pending overlay."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .errors import InvariantViolation, OutOfRange


class AnswerSlots:
    """Flat answer storage split into confirmed and pending layers.

    Writes are staged in the pending layer and become confirmed only once the
    authoritative store acknowledges them; a failed write is rolled back so
    the confirmed layer always mirrors what the store holds. Reads see the
    pending value when one exists.
    """

    def __init__(self, size: int, initial: Optional[Sequence[Optional[str]]] = None):
        if size < 0:
            raise InvariantViolation("slot count must be non-negative")
        self._confirmed: List[str] = [""] * size
        self._pending: Dict[int, str] = {}
        if initial is not None:
            if len(initial) != size:
                raise InvariantViolation(f"expected {size} initial answers, got {len(initial)}")
            self._confirmed = [value or "" for value in initial]

    def __len__(self) -> int:
        return len(self._confirmed)

    def _check(self, slot: int) -> None:
        if slot < 0 or slot >= len(self._confirmed):
            raise OutOfRange(f"slot {slot} outside 0..{len(self._confirmed) - 1}")

    def resize(self, size: int) -> None:
        if size != len(self._confirmed):
            raise InvariantViolation(
                f"slot count is fixed at {len(self._confirmed)} for the session lifetime (requested {size})"
            )

    def get(self, slot: int) -> str:
        self._check(slot)
        if slot in self._pending:
            return self._pending[slot]
        return self._confirmed[slot]

    def confirmed(self, slot: int) -> str:
        self._check(slot)
        return self._confirmed[slot]

    def is_filled(self, slot: int) -> bool:
        return bool(self.get(slot).strip())

    def is_pending(self, slot: int) -> bool:
        return slot in self._pending

    def pending_slots(self) -> List[int]:
        return sorted(self._pending)

    def stage(self, slot: int, text: str) -> None:
        self._check(slot)
        self._pending[slot] = text

    def confirm(self, slot: int) -> None:
        self._check(slot)
        if slot in self._pending:
            self._confirmed[slot] = self._pending.pop(slot)

    def rollback(self, slot: int) -> None:
        self._check(slot)
        self._pending.pop(slot, None)

    def load_confirmed(self, values: Sequence[Optional[str]]) -> None:
        """Replace the confirmed layer with authoritative values."""

        self.resize(len(values))
        self._confirmed = [value or "" for value in values]

    def values(self) -> List[str]:
        return [self.get(slot) for slot in range(len(self._confirmed))]

    def window(self, slots: range) -> List[str]:
        return [self.get(slot) for slot in slots]


__all__ = ["AnswerSlots"]
