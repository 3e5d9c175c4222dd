"""Basic smoke tests for the package layout."""


def test_imports():
    import api_server  # noqa: F401
    import exam_session
    from config.settings import settings

    assert settings.DB_PATH.endswith(".db")
    assert exam_session.CompletionStage.COMPLETE.value == "complete"


def test_offline_defaults_bind(monkeypatch):
    from agents.defaults import bind_defaults, evaluate_offline
    from config.registry import EVAL_KEY, get_model, is_bound

    monkeypatch.setattr("config.registry._REGISTRY", {})
    bind_defaults()
    assert is_bound(EVAL_KEY)
    assert get_model(EVAL_KEY) is evaluate_offline
    report = evaluate_offline(session={"qa_pairs": [{"index": 0, "answer": "Not answered"}]})
    assert report["evaluations"][0]["score"] == 0
