"""Session lifecycle: start, load and the in-memory registry of live sessions."""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from agents.question_generator import generate_exam_questions, generate_interview_rounds
from config.settings import settings
from exam_session.errors import InvariantViolation, SessionNotFound
from exam_session.models import Session, SessionMode, VideoFrame
from exam_session.runtime import ActiveSession
from observability.logger import log_event
from services.behavior import compute_metrics
from services.completion import CompletionPipeline
from services.submission import AnswerBackend, StoreBackend, SubmissionCoordinator
from services.telemetry import TelemetryCollector
from storage.frames import insert_frame, list_frames
from storage.sessions import load_session, save_session

logger = logging.getLogger(__name__)


class StoreTelemetrySink:
    """Append accepted frames to the frame table and refresh the metrics."""

    def __init__(self, runtime: ActiveSession):
        self.runtime = runtime

    async def __call__(self, session_id: str, frame: VideoFrame) -> None:
        await asyncio.to_thread(insert_frame, session_id, frame)
        frames = await asyncio.to_thread(list_frames, session_id)
        self.runtime.session.video_frames = frames
        self.runtime.session.behavioral_metrics = compute_metrics(frames)


async def _persist(session: Session) -> None:
    await asyncio.to_thread(save_session, session)


@dataclass
class SessionHandle:  # Everything the API needs for one live session
    runtime: ActiveSession
    coordinator: SubmissionCoordinator
    pipeline: CompletionPipeline
    telemetry: TelemetryCollector
    touched_at: float = field(default_factory=time.monotonic)

    @property
    def session(self) -> Session:
        return self.runtime.session

    def touch(self) -> None:
        self.touched_at = time.monotonic()


def build_handle(session: Session, backend: Optional[AnswerBackend] = None) -> SessionHandle:
    """Wire the runtime objects for ``session`` and start its countdown."""

    runtime = ActiveSession(session)
    if session.video_frames and session.behavioral_metrics is None:
        session.behavioral_metrics = compute_metrics(session.video_frames)
    coordinator = SubmissionCoordinator(runtime, backend or StoreBackend())
    telemetry = TelemetryCollector(StoreTelemetrySink(runtime))
    if session.is_completed:
        telemetry.closed = True
    pipeline = CompletionPipeline(runtime, coordinator, persist=_persist, on_complete=[telemetry.stop])
    if not session.is_completed:
        runtime.timer.start()
    return SessionHandle(runtime=runtime, coordinator=coordinator, pipeline=pipeline, telemetry=telemetry)


class SessionRegistry:
    """Live sessions keyed by id, loaded lazily from the store."""

    def __init__(self) -> None:
        self._handles: Dict[str, SessionHandle] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def register(self, handle: SessionHandle) -> SessionHandle:
        sid = handle.runtime.session_id
        if sid in self._handles and self._handles[sid] is not handle:
            raise InvariantViolation(f"session {sid} is already registered")
        self._handles[sid] = handle
        return handle

    async def get(self, session_id: str) -> SessionHandle:
        handle = self._handles.get(session_id)
        if handle is None:
            async with self._lock:
                handle = self._handles.get(session_id)
                if handle is None:
                    session = await asyncio.to_thread(load_session, session_id)
                    if session is None:
                        raise SessionNotFound(session_id)
                    handle = self.register(build_handle(session))
        handle.touch()
        return handle

    async def close(self, session_id: str) -> None:
        handle = self._handles.pop(session_id, None)
        if handle is None:
            return
        await handle.runtime.timer.shutdown()
        await handle.telemetry.stop()

    async def close_all(self) -> None:
        for session_id in list(self._handles):
            await self.close(session_id)

    async def cleanup_idle(self, ttl: Optional[float] = None) -> List[str]:
        """Evict sessions untouched for ``ttl`` seconds; they reload on demand."""

        limit = settings.SESSION_IDLE_TTL_S if ttl is None else ttl
        now = time.monotonic()
        stale = [sid for sid, h in self._handles.items() if now - h.touched_at >= limit]
        for session_id in stale:
            await self.close(session_id)
        if stale:
            logger.info("evicted %d idle sessions", len(stale))
        return stale

    def clear(self) -> None:
        """Drop every handle without awaiting shutdown (tests only)."""

        for handle in self._handles.values():
            handle.runtime.timer.stop()
            handle.telemetry.closed = True
        self._handles.clear()


session_registry = SessionRegistry()


async def start_session(
    mode: SessionMode,
    *,
    exam_type: Optional[str] = None,
    company: Optional[str] = None,
    role: Optional[str] = None,
    experience: Optional[str] = None,
    owner_id: str = "anonymous",
    registry: Optional[SessionRegistry] = None,
) -> SessionHandle:
    """Generate content, persist a fresh session and register its runtime.

    Exams take their question count and time limit from the exam table;
    interviews take their rounds from the question-generation collaborator.
    """

    session_id = str(uuid.uuid4())
    if mode == "exam":
        exam = (exam_type or "DEFAULT").strip() or "DEFAULT"
        profile, prompts = await generate_exam_questions(exam)
        session = Session.for_exam(
            session_id=session_id,
            exam_type=exam,
            prompts=prompts,
            total_questions=profile.questions,
            time_minutes=profile.time_minutes,
            owner_id=owner_id,
        )
    else:
        company = (company or "").strip() or "the company"
        role = (role or "").strip() or "Software Engineer"
        rounds = await generate_interview_rounds(company, role, experience)
        session = Session.for_interview(
            session_id=session_id,
            rounds=rounds,
            company=company,
            role=role,
            experience=experience,
            owner_id=owner_id,
        )

    await _persist(session)
    target = registry if registry is not None else session_registry
    handle = target.register(build_handle(session))
    if settings.TELEMETRY_SIMULATE:
        handle.telemetry.start(session_id)
    log_event(
        "session.start",
        session_id,
        stage=session.stage.value,
        count=session.slot_count,
        reason=mode,
    )
    return handle


__all__ = [
    "SessionHandle",
    "SessionRegistry",
    "StoreTelemetrySink",
    "build_handle",
    "session_registry",
    "start_session",
]
