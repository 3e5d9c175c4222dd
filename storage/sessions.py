"""Persistence helpers for session documents."""
from __future__ import annotations

import datetime as dt
import json
from typing import List, Optional, Sequence

from exam_session.errors import SessionClosed, SessionNotFound
from exam_session.models import AnswerEntry, CompletionStage, Session

from .frames import list_frames
from .sqlite import get_conn


def save_session(session: Session) -> None:
    """Insert or replace the session document.

    Video frames live in their own table and are not duplicated into the
    document.
    """

    document = session.model_dump(mode="json", exclude={"video_frames"})
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO sessions
               (session_id, owner_id, mode, stage, is_completed, document, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(session_id) DO UPDATE SET
                 stage = excluded.stage,
                 is_completed = MAX(sessions.is_completed, excluded.is_completed),
                 document = excluded.document,
                 updated_at = excluded.updated_at""",
            (
                session.session_id,
                session.owner_id,
                session.mode,
                session.stage.value,
                int(session.is_completed),
                json.dumps(document, ensure_ascii=False),
                session.created_at.isoformat(),
                session.updated_at.isoformat(),
            ),
        )


def load_session(session_id: str, *, with_frames: bool = True) -> Optional[Session]:
    """Load the stored session document, or ``None`` when absent."""

    with get_conn() as conn:
        row = conn.execute(
            "SELECT document FROM sessions WHERE session_id = ?", (session_id,)
        ).fetchone()
    if row is None:
        return None
    session = Session.model_validate(json.loads(row["document"]))
    if with_frames:
        session.video_frames = list_frames(session_id)
    return session


def list_sessions(owner_id: str) -> List[Session]:
    with get_conn() as conn:
        rows = conn.execute(
            "SELECT document FROM sessions WHERE owner_id = ? ORDER BY created_at DESC",
            (owner_id,),
        ).fetchall()
    return [Session.model_validate(json.loads(row["document"])) for row in rows]


def _last_activity(session: Session) -> dt.datetime:
    stamps = [q.answered_at for q in session.iter_questions() if q.answered_at is not None]
    return max([session.started_at, *stamps])


def apply_answers(
    session_id: str,
    entries: Sequence[AnswerEntry],
    *,
    now: Optional[dt.datetime] = None,
) -> Session:
    """Write answers into the stored session and return the stored copy."""

    session = load_session(session_id, with_frames=False)
    if session is None:
        raise SessionNotFound(session_id)
    if session.stage != CompletionStage.ACTIVE:
        raise SessionClosed(f"session {session_id} no longer accepts answers ({session.stage.value})")

    current = now or dt.datetime.now(dt.timezone.utc)
    rounds = session.rounds_view()
    elapsed = max(0.0, (current - _last_activity(session)).total_seconds())
    for entry in entries:
        question = rounds[entry.round_index].questions[entry.question_index]
        question.elapsed_seconds = elapsed
        question.answer = entry.answer
        question.answered_at = current
    session.updated_at = current
    save_session(session)
    return session


__all__ = ["save_session", "load_session", "list_sessions", "apply_answers"]
