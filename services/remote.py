"""HTTP client for the session API, usable as a coordinator backend and telemetry sink."""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import httpx

from exam_session.errors import BackendError, OutOfRange, SessionClosed, SessionNotFound
from exam_session.models import AnswerEntry, Session, VideoFrame


class HttpSessionBackend:
    """Talks to a running session server.

    A single entry goes to ``/answer`` and larger batches to ``/submit``.
    HTTP errors map back onto the session error types where the server names
    one, otherwise onto :class:`BackendError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._prefix = base_url.rstrip("/") + "/api/session"

    def _url(self, session_id: str, action: str = "") -> str:
        path = f"{self._prefix}/{session_id}"
        return f"{path}/{action}" if action else path

    @staticmethod
    def _raise_for(response: httpx.Response, session_id: str) -> None:
        if response.status_code < 400:
            return
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = None
        code = detail.get("error") if isinstance(detail, dict) else None
        message = detail.get("message") if isinstance(detail, dict) else response.text
        if code == "session_not_found":
            raise SessionNotFound(session_id)
        if code == "session_closed":
            raise SessionClosed(message or "session closed")
        if code == "out_of_range":
            raise OutOfRange(message or "index out of range")
        raise BackendError(f"HTTP {response.status_code}: {message or 'request failed'}")

    async def _post(self, session_id: str, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(self._url(session_id, action), json=payload)
        except httpx.HTTPError as exc:
            raise BackendError(str(exc) or exc.__class__.__name__) from exc
        self._raise_for(response, session_id)
        return response.json()

    async def write_answers(self, session_id: str, entries: Sequence[AnswerEntry]) -> Session:
        if len(entries) == 1:
            data = await self._post(session_id, "answer", entries[0].model_dump())
            return Session.model_validate(data)
        data = await self._post(session_id, "submit", {"answers": [e.model_dump() for e in entries]})
        return Session.model_validate(data["session"])

    async def send_frame(self, session_id: str, frame: VideoFrame) -> bool:
        data = await self._post(session_id, "video-frame", frame.model_dump(mode="json"))
        return bool(data.get("accepted"))

    async def complete(self, session_id: str) -> Session:
        data = await self._post(session_id, "complete", {})
        return Session.model_validate(data)

    async def fetch(self, session_id: str) -> Session:
        try:
            response = await self._client.get(self._url(session_id))
        except httpx.HTTPError as exc:
            raise BackendError(str(exc) or exc.__class__.__name__) from exc
        self._raise_for(response, session_id)
        return Session.model_validate(response.json()["session"])

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["HttpSessionBackend"]
