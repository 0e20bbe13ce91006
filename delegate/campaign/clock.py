"""Time sources and the periodic driver for orchestration cycles.

The orchestrator never reads the wall clock directly: it asks a ``Clock``.
Production uses ``SystemClock``; tests drive ``ManualClock`` forward and
call ``run_cycle`` themselves, so a 30-minute campaign runs in
milliseconds.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Protocol

from ..utils.tasks import cancel_and_wait, safe_create_task

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> datetime:
        """Current instant, timezone-aware UTC."""
        ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """Virtual time that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float = 0, *, minutes: float = 0) -> datetime:
        """Move time forward and return the new instant."""
        delta = timedelta(seconds=seconds, minutes=minutes)
        if delta < timedelta(0):
            raise ValueError("ManualClock cannot move backwards")
        self._now += delta
        return self._now


class Ticker:
    """Runs ``callback`` every ``interval`` seconds on one asyncio task.

    Each callback is awaited before the next sleep begins, so cycles can
    never overlap. ``stop()`` is idempotent and safe before ``start()``; a
    callback already in progress is allowed to finish, and no further
    callback starts after ``stop()`` returns.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Awaitable[object]],
        *,
        name: str = "orchestration-ticker",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval <= 0:
            raise ValueError("Ticker interval must be positive")
        self.interval = interval
        self._callback = callback
        self._name = name
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._stopped = asyncio.Event()
        self._in_callback = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stopped.clear()
        self._task = safe_create_task(self._run(), name=self._name)

    def stop(self) -> None:
        """Request the loop to end before its next tick."""
        self._stopped.set()
        task = self._task
        # Sleeping: cancel right away. Mid-callback: let the cycle finish,
        # the loop checks the flag before the next one.
        if task is not None and not task.done() and not self._in_callback:
            if task is not asyncio.current_task():
                task.cancel()

    async def wait_stopped(self) -> None:
        """Stop and wait for the loop task to exit."""
        self.stop()
        task = self._task
        if task is None or task is asyncio.current_task():
            return
        if self._in_callback:
            await asyncio.wait({task})
        else:
            await cancel_and_wait(task)

    async def _run(self) -> None:
        while not self._stopped.is_set():
            await self._sleep(self.interval)
            if self._stopped.is_set():
                break
            self.ticks += 1
            self._in_callback = True
            try:
                await self._callback()
            except Exception as e:
                logger.error(f"Orchestration cycle error: {e}", exc_info=True)
            finally:
                self._in_callback = False
        logger.debug("Ticker '%s' exited after %d ticks", self._name, self.ticks)
