"""Countdown bookkeeping for a session's time limit."""
from __future__ import annotations

import asyncio
import datetime as dt
import math
from typing import Callable, List, Optional


class TimerService:
    """Signed countdown with a one-shot expiry signal.

    ``remaining`` keeps counting below zero while running so an overrun can
    be shown; :attr:`display_seconds` is the clamped value. Expiry callbacks
    fire once, on the tick (or sync) that first reaches zero.
    """

    def __init__(self, seconds: int, *, on_expired: Optional[Callable[[], None]] = None):
        self.remaining = int(seconds)
        self.running = False
        self._expired = False
        self._callbacks: List[Callable[[], None]] = []
        if on_expired is not None:
            self._callbacks.append(on_expired)
        self._task: Optional[asyncio.Task] = None

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def display_seconds(self) -> int:
        return max(0, self.remaining)

    def on_expired(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def shutdown(self) -> None:
        """Stop and wait until the background ticker has exited."""

        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None

    def _fire(self) -> bool:
        if self._expired or self.remaining > 0:
            return False
        self._expired = True
        for callback in list(self._callbacks):
            callback()
        return True

    def tick(self) -> bool:
        """Advance one second; returns True only on the tick that expires."""

        if not self.running:
            return False
        self.remaining -= 1
        return self._fire()

    def sync_to(self, deadline: dt.datetime, now: Optional[dt.datetime] = None) -> bool:
        """Set ``remaining`` from a wall-clock deadline."""

        current = now or dt.datetime.now(dt.timezone.utc)
        self.remaining = math.ceil((deadline - current).total_seconds())
        return self._fire()

    def format(self) -> str:
        sign = "-" if self.remaining < 0 else ""
        minutes, seconds = divmod(abs(self.remaining), 60)
        return f"{sign}{minutes:02d}:{seconds:02d}"

    async def run(self, interval: float = 1.0) -> None:
        self.start()
        while self.running:
            await asyncio.sleep(interval)
            self.tick()

    def start_background(self, interval: float = 1.0) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run(interval))
        return self._task


__all__ = ["TimerService"]
