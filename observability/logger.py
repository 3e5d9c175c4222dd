"""Structured session events: a human line on stdout, JSON and human files on disk."""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/sessions.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"

# Events that mean an answer write or a telemetry sample was lost.
WARNING_KINDS = frozenset({"answer.rollback", "telemetry.drop"})

HUMAN_KEYS = (
    "stage",
    "round",
    "target_round",
    "blocking_round",
    "slot",
    "count",
    "collaborator",
    "ms",
    "reason",
    "outcome",
)

_logger = logging.getLogger("exam_session.events")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False


def _human_formatter() -> logging.Formatter:
    return logging.Formatter(HUMAN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _is_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _rotating(path: str) -> logging.handlers.RotatingFileHandler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
    handler.setLevel(LOG_LEVEL)
    return handler


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel(LOG_LEVEL)
    console.setFormatter(_human_formatter())
    console.addFilter(lambda record: not _is_json(record))
    _logger.addHandler(console)

    if not ENABLE_FILE_LOGS:
        return

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    json_file = _rotating(LOG_FILE)
    json_file.setFormatter(logging.Formatter("%(message)s"))
    json_file.addFilter(_is_json)
    _logger.addHandler(json_file)

    root, ext = os.path.splitext(LOG_FILE)
    human_file = _rotating(f"{root}-human{ext or '.log'}")
    human_file.setFormatter(_human_formatter())
    human_file.addFilter(lambda record: not _is_json(record))
    _logger.addHandler(human_file)


def event_level(kind: str, fields: dict[str, Any]) -> int:
    """WARNING for loss and failure events, INFO for everything else."""

    if kind in WARNING_KINDS or fields.get("outcome") == "error":
        return logging.WARNING
    return logging.INFO


def _format_human(evt: dict[str, Any]) -> str:
    parts = [f"session={evt.get('session_id')}", f"kind={evt.get('kind')}"]
    parts.extend(f"{key}={evt[key]}" for key in HUMAN_KEYS if evt.get(key) is not None)
    return " ".join(parts)


def _emit(level: int, msg: str, *, is_json: bool) -> None:
    record = _logger.makeRecord(_logger.name, level, "", 0, msg, (), None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, session_id: str, *, level: Optional[int] = None, **fields: Any) -> None:
    """Record one session event; ``level`` defaults from :func:`event_level`."""

    _ensure_handlers()
    if level is None:
        level = event_level(kind, fields)
    if not _logger.isEnabledFor(level):
        return

    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": str(uuid.uuid4()),
        "kind": kind,
        "level": logging.getLevelName(level),
        "session_id": session_id,
    }
    payload.update(fields)

    _emit(level, _format_human(payload), is_json=False)
    if ENABLE_FILE_LOGS:
        _emit(level, json.dumps(payload, ensure_ascii=False, default=str), is_json=True)


__all__ = ["event_level", "log_event"]
