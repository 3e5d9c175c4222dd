"""Aggregation of raw video frames into behavioral metrics."""
from __future__ import annotations

from typing import Dict, Sequence

from exam_session.models import BehavioralMetrics, VideoFrame


def compute_metrics(frames: Sequence[VideoFrame]) -> BehavioralMetrics:
    """Summarise face presence and average emotions across ``frames``.

    Emotion keys are taken from the first frame; later frames missing a key
    contribute zero for it.
    """

    total = len(frames)
    if total == 0:
        return BehavioralMetrics()

    present = sum(1 for frame in frames if frame.face_detected)
    multiple = sum(1 for frame in frames if frame.num_faces > 1)
    keys = list(frames[0].emotions)
    sums: Dict[str, float] = {key: 0.0 for key in keys}
    for frame in frames:
        for key in keys:
            sums[key] += frame.emotions.get(key, 0.0)

    return BehavioralMetrics(
        frames_count=total,
        presence_pct=round(present / total * 100, 2),
        multiple_faces_pct=round(multiple / total * 100, 2),
        avg_emotions={key: round(value / total, 3) for key, value in sums.items()},
        simulated_frames=sum(1 for frame in frames if frame.simulated),
    )


__all__ = ["compute_metrics"]
