"""Persistence helpers for behavioral telemetry frames."""
from __future__ import annotations

import datetime as dt
import json
from typing import List

from exam_session.models import VideoFrame

from .sqlite import get_conn


def insert_frame(session_id: str, frame: VideoFrame) -> int:
    """Insert a video frame row and return its primary key."""

    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT INTO video_frames
               (session_id, timestamp, face_detected, num_faces, emotions, simulated)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                session_id,
                frame.timestamp.isoformat(),
                int(frame.face_detected),
                frame.num_faces,
                json.dumps(frame.emotions),
                int(frame.simulated),
            ),
        )
        return int(cur.lastrowid)


def list_frames(session_id: str) -> List[VideoFrame]:
    with get_conn() as conn:
        rows = conn.execute(
            """SELECT timestamp, face_detected, num_faces, emotions, simulated
               FROM video_frames WHERE session_id = ? ORDER BY id""",
            (session_id,),
        ).fetchall()
    return [
        VideoFrame(
            timestamp=dt.datetime.fromisoformat(row["timestamp"]),
            face_detected=bool(row["face_detected"]),
            num_faces=row["num_faces"],
            emotions=json.loads(row["emotions"]),
            simulated=bool(row["simulated"]),
        )
        for row in rows
    ]


__all__ = ["insert_frame", "list_frames"]
