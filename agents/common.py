"""Shared helpers for calling registry-bound collaborators."""
from __future__ import annotations

import inspect
from typing import Any, Dict

from config.registry import get_model
from exam_session.errors import CollaboratorError
from exam_session.models import Session


async def call_model(key: str, **kwargs: Any) -> Any:
    """Invoke the callable bound to ``key``; sync and async callables both work.

    Any exception raised by the collaborator is a transport failure and is
    re-raised as :class:`CollaboratorError`.
    """

    try:
        fn = get_model(key)
    except KeyError as exc:
        raise CollaboratorError(key, "no collaborator bound") from exc
    try:
        result = fn(**kwargs)
        if inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        raise CollaboratorError(key, str(exc) or exc.__class__.__name__) from exc
    return result


def session_payload(session: Session) -> Dict[str, Any]:
    """Serializable view of a session handed to collaborators."""

    payload = session.model_dump(mode="json", exclude={"video_frames"})
    payload["qa_pairs"] = [
        {
            "index": index,
            "question": question.prompt,
            "answer": question.answer or "Not answered",
        }
        for index, question in enumerate(session.iter_questions())
    ]
    return payload


__all__ = ["call_model", "session_payload"]
