"""Simple span helper for recording step timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from .logger import log_event


@contextmanager
def span(name: str, session_id: str, **fields: Any) -> Iterator[None]:
    start = time.time()
    outcome = "error"
    try:
        yield
        outcome = "ok"
    except Exception as exc:
        collaborator = getattr(exc, "collaborator", None)
        if collaborator is not None:
            fields["collaborator"] = collaborator
        raise
    finally:
        elapsed_ms = int((time.time() - start) * 1000)
        log_event(name, session_id, ms=elapsed_ms, outcome=outcome, **fields)


__all__ = ["span"]
