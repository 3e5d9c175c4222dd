import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import router
from config.settings import settings


app = FastAPI()
app.include_router(router)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_frames_feed_behavioral_metrics(client, fake_models, monkeypatch):
    monkeypatch.setattr(settings, "TELEMETRY_MIN_INTERVAL_S", 0.0)
    sid = client.post("/api/session/start", json={"mode": "interview"}).json()["session_id"]

    frames = [
        {"faceDetected": True, "numFaces": 1, "emotions": {"happy": 0.6, "neutral": 0.4}},
        {"faceDetected": True, "numFaces": 2, "emotions": {"happy": 0.2, "neutral": 0.8}},
        {"face_detected": False, "num_faces": 0, "emotions": {"happy": 0.1}, "simulated": True},
        {"faceDetected": True, "numFaces": 1, "emotions": {"happy": 0.5, "neutral": 0.5}},
    ]
    for frame in frames:
        resp = client.post(f"/api/session/{sid}/video-frame", json=frame)
        assert resp.status_code == 200
        assert resp.json() == {"accepted": True}

    metrics = client.get(f"/api/session/{sid}/metrics").json()
    assert metrics["frames_count"] == 4
    assert metrics["presence_pct"] == 75.0
    assert metrics["multiple_faces_pct"] == 25.0
    assert metrics["avg_emotions"] == {"happy": 0.35, "neutral": 0.425}
    assert metrics["simulated_frames"] == 1


def test_oversampled_frames_are_dropped(client, fake_models):
    sid = client.post("/api/session/start", json={"mode": "interview"}).json()["session_id"]
    first = client.post(f"/api/session/{sid}/video-frame", json={"faceDetected": True, "numFaces": 1})
    second = client.post(f"/api/session/{sid}/video-frame", json={"faceDetected": True, "numFaces": 1})
    assert first.json() == {"accepted": True}
    assert second.json() == {"accepted": False}
    assert client.get(f"/api/session/{sid}/metrics").json()["frames_count"] == 1


def test_frames_after_completion_are_not_accepted(client, fake_models, monkeypatch):
    monkeypatch.setattr(settings, "TELEMETRY_MIN_INTERVAL_S", 0.0)
    sid = client.post("/api/session/start", json={"mode": "interview"}).json()["session_id"]
    assert client.post(f"/api/session/{sid}/complete").status_code == 200
    resp = client.post(f"/api/session/{sid}/video-frame", json={"faceDetected": True, "numFaces": 1})
    assert resp.status_code == 200
    assert resp.json() == {"accepted": False}
