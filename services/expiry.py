"""Deadline expiry: sync a session's countdown and auto-submit when it runs out."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from config.settings import settings
from exam_session.models import CompletionStage
from observability.logger import log_event
from services.sessions import SessionHandle


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


async def maybe_auto_submit(handle: SessionHandle, now: Optional[dt.datetime] = None) -> bool:
    """Submit the session's answers when its deadline has passed.

    Returns True when this call moved the session past ``active``. The
    caller must hold the session lock.
    """

    runtime = handle.runtime
    session = runtime.session
    if session.is_completed:
        return False

    current = _as_utc(now) if now else dt.datetime.now(dt.timezone.utc)
    fired = runtime.timer.sync_to(_as_utc(runtime.deadline), now=current)
    if fired:
        log_event("timer.expired", session.session_id, stage=session.stage.value)
    if not runtime.timer.expired:
        return False
    if not settings.AUTO_SUBMIT_ON_EXPIRY or session.stage != CompletionStage.ACTIVE:
        return False

    await handle.pipeline.run(until=CompletionStage.ANSWERS_SUBMITTED)
    return True


__all__ = ["maybe_auto_submit"]
