from exam_session.models import VideoFrame
from services.behavior import compute_metrics


def test_empty_frames_give_zeros():
    metrics = compute_metrics([])
    assert metrics.frames_count == 0
    assert metrics.presence_pct == 0.0
    assert metrics.avg_emotions == {}


def test_presence_and_emotion_averages():
    frames = [
        VideoFrame(face_detected=True, num_faces=1, emotions={"happy": 0.5, "neutral": 0.5}),
        VideoFrame(face_detected=True, num_faces=2, emotions={"happy": 0.2, "neutral": 0.8}),
        VideoFrame(face_detected=False, num_faces=0, emotions={"happy": 0.0}, simulated=True),
    ]
    metrics = compute_metrics(frames)
    assert metrics.frames_count == 3
    assert metrics.presence_pct == 66.67
    assert metrics.multiple_faces_pct == 33.33
    assert metrics.avg_emotions == {"happy": 0.233, "neutral": 0.433}
    assert metrics.simulated_frames == 1
