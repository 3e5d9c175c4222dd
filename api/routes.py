"""FastAPI routes for exam and interview session control."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, HTTPException

from api.schemas import (
    CompleteReq,
    FrameResp,
    NavigateReq,
    SessionListItem,
    SessionView,
    StartReq,
    SubmitReq,
    SubmitResp,
)
from exam_session.errors import (
    BackendError,
    CollaboratorError,
    InvariantViolation,
    NothingToSubmit,
    OutOfRange,
    RoundLocked,
    SessionClosed,
    SessionError,
    SessionNotFound,
)
from exam_session.models import AnswerEntry, BehavioralMetrics, CompletionStage, Session, VideoFrame
from observability.logger import log_event
from services.expiry import maybe_auto_submit
from services.sessions import SessionHandle, session_registry, start_session
from storage.sessions import list_sessions, save_session


router = APIRouter(prefix="/api")

_STATUS = (
    (OutOfRange, 422),
    (NothingToSubmit, 400),
    (RoundLocked, 409),
    (SessionClosed, 409),
    (InvariantViolation, 409),
    (SessionNotFound, 404),
    (CollaboratorError, 502),
    (BackendError, 502),
)


def _http_error(exc: SessionError, session_id: str = "-") -> HTTPException:
    status = next((code for cls, code in _STATUS if isinstance(exc, cls)), 500)
    detail: Dict[str, Any] = {"error": exc.code, "message": str(exc)}
    if isinstance(exc, RoundLocked):
        detail["target_round"] = exc.target_round
        detail["blocking_round"] = exc.blocking_round
    log_event(
        "request.rejected",
        session_id,
        level=logging.WARNING if status >= 500 else logging.INFO,
        reason=exc.code,
        target_round=detail.get("target_round"),
        blocking_round=detail.get("blocking_round"),
        collaborator=getattr(exc, "collaborator", None),
    )
    return HTTPException(status_code=status, detail=detail)


@asynccontextmanager
async def _open(session_id: str, *, exclusive: bool = True) -> AsyncIterator[SessionHandle]:
    """Resolve a live session, hold its lock and apply deadline expiry first."""

    try:
        handle = await session_registry.get(session_id)
        if not exclusive:
            yield handle
            return
        async with handle.runtime.lock:
            await maybe_auto_submit(handle)
            yield handle
    except SessionError as exc:
        raise _http_error(exc, session_id) from exc


@router.post("/session/start", response_model=Session, status_code=201)
async def start(req: StartReq) -> Session:
    try:
        handle = await start_session(
            req.mode,
            exam_type=req.exam_type,
            company=req.company,
            role=req.role,
            experience=req.experience,
            owner_id=req.owner_id,
        )
    except SessionError as exc:
        raise _http_error(exc) from exc
    return handle.session


@router.get("/sessions", response_model=List[SessionListItem])
async def sessions_for_owner(owner_id: str = "anonymous") -> List[SessionListItem]:
    stored = await asyncio.to_thread(list_sessions, owner_id)
    return [
        SessionListItem(
            session_id=s.session_id,
            mode=s.mode,
            exam_type=s.exam_type,
            company=s.company,
            role=s.role,
            stage=s.stage.value,
            is_completed=s.is_completed,
            created_at=s.created_at,
        )
        for s in stored
    ]


@router.get("/session/{session_id}", response_model=SessionView)
async def get_session(session_id: str) -> SessionView:
    async with _open(session_id) as handle:
        return SessionView(session=handle.session, progress=handle.runtime.progress_payload())


@router.get("/session/{session_id}/progress")
async def get_progress(session_id: str) -> Dict[str, Any]:
    async with _open(session_id) as handle:
        return handle.runtime.progress_payload()


@router.post("/session/{session_id}/navigate")
async def navigate(session_id: str, req: NavigateReq) -> Dict[str, Any]:
    async with _open(session_id) as handle:
        handle.runtime.navigate_to(req.round_index)
        await asyncio.to_thread(save_session, handle.session)
        return handle.runtime.progress_payload()


@router.post("/session/{session_id}/answer", response_model=Session)
async def answer(session_id: str, req: AnswerEntry) -> Session:
    async with _open(session_id) as handle:
        return await handle.coordinator.submit_single(
            session_id, req.round_index, req.question_index, req.answer
        )


@router.post("/session/{session_id}/submit", response_model=SubmitResp)
async def submit(session_id: str, req: SubmitReq) -> SubmitResp:
    async with _open(session_id) as handle:
        session = await handle.coordinator.submit_batch(session_id, req.answers)
        accepted = {(e.round_index, e.question_index) for e in req.answers if e.answer.strip()}
        return SubmitResp(accepted=len(accepted), session=session)


async def _advance(session_id: str, until: CompletionStage, req: Optional[CompleteReq] = None) -> Session:
    async with _open(session_id) as handle:
        entries = req.answers if req is not None else None
        return await handle.pipeline.run(until=until, entries=entries)


@router.post("/session/{session_id}/complete", response_model=Session)
async def complete(session_id: str, req: Optional[CompleteReq] = None) -> Session:
    return await _advance(session_id, CompletionStage.COMPLETE, req)


@router.post("/session/{session_id}/evaluate", response_model=Session)
async def evaluate(session_id: str) -> Session:
    return await _advance(session_id, CompletionStage.EVALUATED)


@router.post("/session/{session_id}/summary", response_model=Session)
async def summarize(session_id: str) -> Session:
    return await _advance(session_id, CompletionStage.SUMMARIZED)


@router.post("/session/{session_id}/video-frame", response_model=FrameResp)
async def video_frame(session_id: str, frame: VideoFrame) -> FrameResp:
    async with _open(session_id, exclusive=False) as handle:
        accepted = await handle.telemetry.push_sample(session_id, frame)
        return FrameResp(accepted=accepted)


@router.get("/session/{session_id}/metrics", response_model=BehavioralMetrics)
async def metrics(session_id: str) -> BehavioralMetrics:
    async with _open(session_id, exclusive=False) as handle:
        return handle.session.behavioral_metrics or BehavioralMetrics()


__all__ = ["router"]
