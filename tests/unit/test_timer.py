import asyncio
import datetime as dt

import pytest

from exam_session.timer import TimerService


def test_expires_exactly_once():
    fired = []
    timer = TimerService(5, on_expired=lambda: fired.append(True))
    timer.start()
    results = [timer.tick() for _ in range(5)]
    assert results == [False, False, False, False, True]
    assert timer.expired
    assert timer.tick() is False
    assert timer.tick() is False
    assert fired == [True]
    assert timer.remaining == -2
    assert timer.display_seconds == 0
    assert timer.format() == "-00:02"


def test_tick_does_nothing_when_stopped():
    timer = TimerService(3)
    assert timer.tick() is False
    assert timer.remaining == 3
    timer.start()
    timer.tick()
    timer.stop()
    timer.tick()
    assert timer.remaining == 2


def test_format():
    assert TimerService(125).format() == "02:05"
    assert TimerService(0).format() == "00:00"


def test_sync_to_deadline():
    now = dt.datetime(2024, 1, 1, 12, 0, tzinfo=dt.timezone.utc)
    timer = TimerService(600)
    assert timer.sync_to(now + dt.timedelta(seconds=90.2), now=now) is False
    assert timer.remaining == 91
    assert timer.sync_to(now - dt.timedelta(seconds=4), now=now) is True
    assert timer.remaining == -4
    assert timer.sync_to(now - dt.timedelta(seconds=10), now=now) is False


@pytest.mark.asyncio
async def test_background_ticker_expires_and_shuts_down():
    expired = asyncio.Event()
    timer = TimerService(2, on_expired=expired.set)
    timer.start_background(interval=0.01)
    await asyncio.wait_for(expired.wait(), timeout=2)
    await timer.shutdown()
    assert not timer.running
    assert timer.expired
