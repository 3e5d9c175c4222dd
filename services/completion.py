"""Staged finalization: submit → evaluate → summarize → complete."""
from __future__ import annotations

from typing import Awaitable, Callable, List, Optional, Sequence

from agents.answer_evaluator import apply_evaluations, evaluate_session
from agents.summary_writer import write_summary
from agents.types import QuestionEvaluation
from exam_session.errors import NothingToSubmit
from exam_session.models import CompletionStage, Session, stage_reached
from exam_session.runtime import ActiveSession
from observability.logger import log_event
from observability.tracing import span
from services.submission import EntryLike, SubmissionCoordinator

Evaluator = Callable[[Session], Awaitable[List[QuestionEvaluation]]]
Summarizer = Callable[[Session], Awaitable[str]]
Persist = Callable[[Session], Awaitable[None]]
Hook = Callable[[], Awaitable[None]]


class CompletionPipeline:
    """Advance a session through the finalization stages one step at a time.

    Each step persists before the next begins. A step that raises leaves the
    stage where it was, so calling :meth:`run` again resumes from the last
    reached stage. Running against a completed session is a no-op.
    """

    def __init__(
        self,
        runtime: ActiveSession,
        coordinator: SubmissionCoordinator,
        *,
        persist: Persist,
        evaluator: Evaluator = evaluate_session,
        summarizer: Summarizer = write_summary,
        on_complete: Sequence[Hook] = (),
    ):
        self.runtime = runtime
        self.coordinator = coordinator
        self._persist = persist
        self._evaluator = evaluator
        self._summarizer = summarizer
        self._on_complete = list(on_complete)

    @property
    def stage(self) -> CompletionStage:
        return self.runtime.session.stage

    async def run(
        self,
        until: CompletionStage = CompletionStage.COMPLETE,
        entries: Optional[Sequence[EntryLike]] = None,
    ) -> Session:
        session = self.runtime.session
        if session.is_completed or stage_reached(session.stage, until):
            log_event("pipeline.skip", session.session_id, stage=session.stage.value)
            return session

        while not stage_reached(session.stage, until):
            current = session.stage
            with span("pipeline.step", session.session_id, stage=current.value):
                if current == CompletionStage.ACTIVE:
                    await self._submit_answers(entries)
                    await self._advance(CompletionStage.ANSWERS_SUBMITTED)
                elif current == CompletionStage.ANSWERS_SUBMITTED:
                    await self._evaluate()
                elif current == CompletionStage.EVALUATED:
                    await self._summarize()
                elif current == CompletionStage.SUMMARIZED:
                    await self._complete()
        return session

    async def _advance(self, stage: CompletionStage, apply: Callable[[Session], None] = lambda _: None) -> None:
        """Persist a draft of the next state, then apply it to the live session."""

        session = self.runtime.session
        draft = session.model_copy(deep=True)
        apply(draft)
        draft.stage = stage
        draft.touch()
        await self._persist(draft)
        apply(session)
        session.stage = stage
        session.updated_at = draft.updated_at

    async def _submit_answers(self, entries: Optional[Sequence[EntryLike]]) -> None:
        session_id = self.runtime.session_id
        if entries:
            try:
                await self.coordinator.submit_batch(session_id, entries)
            except NothingToSubmit:
                pass  # answers were already written one by one
        await self.coordinator.settle()
        log_event(
            "pipeline.checkpoint",
            session_id,
            count=len(self.coordinator.unanswered()),
            reason="unanswered_slots",
        )

    async def _evaluate(self) -> None:
        evaluations = await self._evaluator(self.runtime.session)
        await self._advance(CompletionStage.EVALUATED, lambda s: apply_evaluations(s, evaluations))

    async def _summarize(self) -> None:
        summary = await self._summarizer(self.runtime.session)
        await self._advance(CompletionStage.SUMMARIZED, lambda s: setattr(s, "summary", summary))

    async def _complete(self) -> None:
        await self._advance(CompletionStage.COMPLETE, lambda s: s.mark_completed())
        self.runtime.timer.stop()
        for hook in self._on_complete:
            await hook()


__all__ = ["CompletionPipeline"]

