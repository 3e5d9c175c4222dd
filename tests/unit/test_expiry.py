import datetime as dt

import pytest

from config.settings import settings
from exam_session.models import CompletionStage
from services.expiry import maybe_auto_submit
from services.sessions import SessionRegistry, start_session


async def _started():
    registry = SessionRegistry()
    handle = await start_session("interview", company="Acme", role="Engineer", registry=registry)
    return registry, handle


@pytest.mark.asyncio
async def test_before_deadline_nothing_happens(fake_models):
    registry, handle = await _started()
    assert await maybe_auto_submit(handle) is False
    assert handle.session.stage == CompletionStage.ACTIVE
    assert handle.runtime.timer.remaining > 0
    await registry.close_all()


@pytest.mark.asyncio
async def test_expiry_auto_submits_once(fake_models):
    registry, handle = await _started()
    late = handle.runtime.deadline + dt.timedelta(seconds=3)
    assert await maybe_auto_submit(handle, now=late) is True
    assert handle.session.stage == CompletionStage.ANSWERS_SUBMITTED
    assert handle.runtime.timer.expired
    assert handle.runtime.timer.format() == "-00:03"
    assert await maybe_auto_submit(handle, now=late) is False
    assert fake_models["evaluate"] == 0
    await registry.close_all()


@pytest.mark.asyncio
async def test_auto_submit_can_be_disabled(fake_models, monkeypatch):
    monkeypatch.setattr(settings, "AUTO_SUBMIT_ON_EXPIRY", False)
    registry, handle = await _started()
    late = handle.runtime.deadline + dt.timedelta(minutes=1)
    assert await maybe_auto_submit(handle, now=late) is False
    assert handle.runtime.timer.expired
    assert handle.session.stage == CompletionStage.ACTIVE
    await registry.close_all()
