"""Answer submission with optimistic pending writes and rollback."""
from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Mapping, Protocol, Sequence, Union

from exam_session.errors import BackendError, InvariantViolation, NothingToSubmit, SessionClosed, SessionError
from exam_session.models import AnswerEntry, CompletionStage, Session
from exam_session.runtime import ActiveSession
from observability.logger import log_event
from storage.sessions import apply_answers

EntryLike = Union[AnswerEntry, Mapping[str, object]]


class AnswerBackend(Protocol):  # Authoritative store for answers
    async def write_answers(self, session_id: str, entries: Sequence[AnswerEntry]) -> Session: ...


class StoreBackend:
    """Server-side backend writing straight into the SQLite session store."""

    async def write_answers(self, session_id: str, entries: Sequence[AnswerEntry]) -> Session:
        return await asyncio.to_thread(apply_answers, session_id, list(entries))


class SubmissionCoordinator:
    """Apply single or batched answer writes for one active session.

    Each write is staged in the slot array's pending layer first, so progress
    reflects it immediately. The backend's reply promotes it to confirmed and
    is merged into the local session; a failure rolls the pending layer back
    and the error propagates unchanged in meaning.
    """

    def __init__(self, runtime: ActiveSession, backend: AnswerBackend):
        self.runtime = runtime
        self.backend = backend
        self._slot_locks: Dict[int, asyncio.Lock] = {}
        self._outstanding = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def submitting(self) -> bool:
        return self._outstanding > 0

    async def settle(self) -> None:
        """Wait until no submission is in flight."""

        await self._idle.wait()

    def _check_open(self, session_id: str) -> None:
        if session_id != self.runtime.session_id:
            raise InvariantViolation(f"coordinator bound to {self.runtime.session_id}, not {session_id}")
        session = self.runtime.session
        if session.is_completed or session.stage != CompletionStage.ACTIVE:
            raise SessionClosed(f"session {session_id} no longer accepts answers ({session.stage.value})")

    @asynccontextmanager
    async def _in_flight(self, slots: Iterable[int]) -> AsyncIterator[None]:
        self._outstanding += 1
        self._idle.clear()
        try:
            async with AsyncExitStack() as stack:
                # Sorted acquisition keeps overlapping batches from deadlocking.
                for slot in sorted(set(slots)):
                    await stack.enter_async_context(self._slot_locks.setdefault(slot, asyncio.Lock()))
                yield
        finally:
            self._outstanding -= 1
            if self._outstanding == 0:
                self._idle.set()

    async def _write(self, session_id: str, staged: Dict[int, AnswerEntry]) -> Session:
        slots = self.runtime.slots
        async with self._in_flight(staged):
            for slot, entry in staged.items():
                slots.stage(slot, entry.answer)
            try:
                authoritative = await self.backend.write_answers(session_id, list(staged.values()))
            except SessionError:
                self._rollback(session_id, staged)
                raise
            except Exception as exc:
                self._rollback(session_id, staged)
                raise BackendError(str(exc) or exc.__class__.__name__) from exc

            for slot in staged:
                slots.confirm(slot)
            self.runtime.reconcile(authoritative, written=staged.keys())
        log_event("answer.submit", session_id, count=len(staged), outcome="confirmed")
        return self.runtime.session

    def _rollback(self, session_id: str, staged: Dict[int, AnswerEntry]) -> None:
        for slot in staged:
            self.runtime.slots.rollback(slot)
        log_event("answer.rollback", session_id, count=len(staged))

    async def submit_single(
        self,
        session_id: str,
        round_index: int,
        question_index: int,
        answer_text: str,
    ) -> Session:
        self._check_open(session_id)
        slot = self.runtime.indexer.absolute_index(round_index, question_index)
        entry = AnswerEntry(round_index=round_index, question_index=question_index, answer=answer_text)
        return await self._write(session_id, {slot: entry})

    async def submit_batch(self, session_id: str, entries: Sequence[EntryLike]) -> Session:
        """Submit several answers in one round-trip.

        Blank answers are dropped before sending; if nothing remains
        :class:`NothingToSubmit` is raised and the backend is not called.
        Every index is validated before any slot is touched.
        """

        self._check_open(session_id)
        staged: Dict[int, AnswerEntry] = {}
        for raw in entries:
            entry = raw if isinstance(raw, AnswerEntry) else AnswerEntry.model_validate(raw)
            if not entry.answer.strip():
                continue
            slot = self.runtime.indexer.absolute_index(entry.round_index, entry.question_index)
            staged[slot] = entry
        if not staged:
            raise NothingToSubmit(f"no non-empty answers to submit for session {session_id}")
        return await self._write(session_id, staged)

    def unanswered(self) -> List[int]:
        return [slot for slot in range(self.runtime.indexer.total) if not self.runtime.slots.is_filled(slot)]


__all__ = ["AnswerBackend", "StoreBackend", "SubmissionCoordinator"]
