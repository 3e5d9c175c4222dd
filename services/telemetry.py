"""Best-effort, rate-limited forwarding of behavioral samples."""
from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Optional, Protocol, Set

from config.settings import settings
from exam_session.models import VideoFrame
from observability.logger import log_event

logger = logging.getLogger(__name__)

Sink = Callable[[str, VideoFrame], Awaitable[Any]]


class Sensor(Protocol):  # Source of behavioral samples
    simulated: bool

    def read(self) -> Optional[VideoFrame]: ...


class SimulatedSensor:
    """Placeholder samples for clients without a working camera pipeline.

    Every frame is tagged ``simulated=True`` so it can never be mistaken for
    a real observation downstream.
    """

    simulated = True

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def read(self) -> VideoFrame:
        r = self._rng.random
        return VideoFrame(
            face_detected=True,
            num_faces=1,
            emotions={
                "happy": 0.1 + r() * 0.3,
                "sad": r() * 0.1,
                "neutral": 0.4 + r() * 0.3,
                "angry": r() * 0.05,
                "surprised": r() * 0.1,
                "disgusted": r() * 0.05,
                "fearful": r() * 0.1,
            },
            simulated=True,
        )


class TelemetryCollector:
    """Forward samples to ``sink`` at most once per ``min_interval`` seconds.

    Sending never raises: a failing sink is logged and the sample is lost.
    Samples offered faster than the interval are discarded locally.
    While a simulated sensor is feeding placeholders, the first real sample
    stops it, so placeholders never displace an actual observation.
    """

    def __init__(
        self,
        sink: Sink,
        *,
        min_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._sink = sink
        self._min_interval = settings.TELEMETRY_MIN_INTERVAL_S if min_interval is None else min_interval
        self._clock = clock
        self._last_push: Optional[float] = None
        self._task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self.simulated = False
        self.closed = False
        self.sent = 0
        self.dropped = 0
        self.failed = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _admit(self) -> bool:
        now = self._clock()
        if self._last_push is not None and now - self._last_push < self._min_interval:
            return False
        self._last_push = now
        return True

    def _retire_placeholders(self, session_id: str) -> None:
        """A real sample ends the simulated loop and frees its rate budget."""

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
        self.simulated = False
        self._last_push = None
        log_event("telemetry.real_signal", session_id, reason="simulation_stopped")

    async def push_sample(self, session_id: str, sample: VideoFrame) -> bool:
        """Send one sample; returns True only when the sink accepted it."""

        if self.simulated and not sample.simulated and not self.closed:
            self._retire_placeholders(session_id)
        if self.closed or not self._admit():
            self.dropped += 1
            log_event("telemetry.drop", session_id, reason="closed" if self.closed else "rate_limited")
            return False
        try:
            await self._sink(session_id, sample)
        except Exception as exc:  # telemetry loss must not reach the answer flow
            self.failed += 1
            logger.warning("telemetry push failed for session %s: %s", session_id, exc)
            return False
        self.sent += 1
        return True

    def fire(self, session_id: str, sample: VideoFrame) -> None:
        """Schedule :meth:`push_sample` without waiting for it."""

        task = asyncio.get_running_loop().create_task(self.push_sample(session_id, sample))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _sample_loop(self, session_id: str, sensor: Sensor, interval: float) -> None:
        while not self.closed:
            sample = sensor.read()
            if sample is not None:
                await self.push_sample(session_id, sample)
            await asyncio.sleep(interval)

    def start(
        self,
        session_id: str,
        sensor: Optional[Sensor] = None,
        *,
        interval: Optional[float] = None,
    ) -> asyncio.Task:
        """Begin periodic sampling; without a sensor the simulated one is used."""

        if self.running:
            return self._task  # type: ignore[return-value]
        if sensor is None:
            sensor = SimulatedSensor()
        self.simulated = bool(getattr(sensor, "simulated", False))
        period = self._min_interval if interval is None else interval
        self._task = asyncio.get_running_loop().create_task(
            self._sample_loop(session_id, sensor, max(period, 0.01))
        )
        return self._task

    async def stop(self) -> None:
        """Cancel the sampling loop and any in-flight pushes, then wait for them."""

        self.closed = True
        tasks = [t for t in (self._task, *self._inflight) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._inflight.clear()


__all__ = ["Sensor", "SimulatedSensor", "Sink", "TelemetryCollector"]
