"""Session-scoped runtime bundling the entity with its derived state."""
from __future__ import annotations

import asyncio
import datetime as dt
from typing import Any, Dict, Iterable, List, Optional

from .errors import InvariantViolation
from .indexer import AnswerIndexer
from .models import STAGE_ORDER, Session
from .navigation import NavigationGuard
from .progress import ProgressCalculator
from .slots import AnswerSlots
from .timer import TimerService

_ANSWER_FIELDS = ("answer", "answered_at", "elapsed_seconds")
_EVALUATION_FIELDS = ("score", "feedback", "is_correct")


class ActiveSession:
    """One live session: entity, slots, indexer, guard, progress and timer.

    Built once per session by the start (or load) operation and passed around
    explicitly; nothing here is shared between sessions.
    """

    def __init__(self, session: Session):
        self.session = session
        self.indexer = AnswerIndexer.for_session(session)
        self.slots = AnswerSlots(self.indexer.total, [q.answer for q in session.iter_questions()])
        self.progress = ProgressCalculator(self.indexer, self.slots)
        self.guard = NavigationGuard(self.indexer, self.progress)
        self.timer = TimerService(session.total_duration_minutes * 60)
        self.lock = asyncio.Lock()

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def current_round(self) -> int:
        return self.session.current_round

    @property
    def deadline(self) -> dt.datetime:
        return self.session.started_at + dt.timedelta(minutes=self.session.total_duration_minutes)

    def can_navigate_to(self, target_round: int) -> bool:
        return self.guard.can_navigate_to(
            target_round,
            current_round=self.session.current_round,
            furthest_round=self.session.furthest_round,
        )

    def navigate_to(self, target_round: int) -> None:
        self.can_navigate_to(target_round)
        self.session.current_round = target_round
        self.session.furthest_round = max(self.session.furthest_round, target_round)
        self.session.touch()

    def current_round_answers(self) -> List[str]:
        return self.progress.round_answers(self.session.current_round)

    def reconcile(self, authoritative: Session, written: Optional[Iterable[int]] = None) -> None:
        """Merge the store's copy of the session into the local one.

        Evaluation fields and the summary come from the store. Answer fields
        are taken only for the ``written`` slots (all slots when omitted), so
        an older snapshot cannot undo a concurrent write to another slot.
        The completion flag and stage only ever move forward, and slots with
        a write still in flight keep their pending value.
        """

        if authoritative.session_id != self.session.session_id:
            raise InvariantViolation("cannot reconcile against a different session")
        if tuple(authoritative.round_sizes()) != self.indexer.sizes:
            raise InvariantViolation(
                f"round sizes changed from {list(self.indexer.sizes)} to {authoritative.round_sizes()}"
            )
        targets = set(range(self.indexer.total)) if written is None else set(written)
        pairs = zip(self.session.iter_questions(), authoritative.iter_questions())
        for slot, (local, remote) in enumerate(pairs):
            names = _EVALUATION_FIELDS + _ANSWER_FIELDS if slot in targets else _EVALUATION_FIELDS
            for name in names:
                setattr(local, name, getattr(remote, name))
        self.slots.load_confirmed([q.answer for q in self.session.iter_questions()])

        if authoritative.summary:
            self.session.summary = authoritative.summary
        if authoritative.behavioral_metrics is not None:
            self.session.behavioral_metrics = authoritative.behavioral_metrics
        if STAGE_ORDER.index(authoritative.stage) > STAGE_ORDER.index(self.session.stage):
            self.session.stage = authoritative.stage
        if authoritative.is_completed:
            self.session.mark_completed()
        self.session.touch()

    def timer_payload(self) -> Dict[str, Any]:
        return {
            "remaining_seconds": self.timer.display_seconds,
            "display": self.timer.format(),
            "overrun": self.timer.remaining < 0,
            "expired": self.timer.expired,
        }

    def progress_payload(self) -> Dict[str, Any]:
        payload = self.progress.snapshot(self.session.current_round)
        payload["furthest_round"] = self.session.furthest_round
        payload["navigable"] = [
            self.guard.is_navigable(
                index,
                current_round=self.session.current_round,
                furthest_round=self.session.furthest_round,
            )
            for index in range(self.indexer.round_count)
        ]
        payload["current_round_answers"] = self.current_round_answers()
        payload["stage"] = self.session.stage.value
        payload["is_completed"] = self.session.is_completed
        payload["timer"] = self.timer_payload()
        return payload


__all__ = ["ActiveSession"]
