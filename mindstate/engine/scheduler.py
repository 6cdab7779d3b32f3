"""TickScheduler — drives BrainStateEngine.tick on a fixed asyncio period."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from .engine import BrainStateEngine

logger = logging.getLogger(__name__)


class TickScheduler:
    """Runs engine ticks strictly in sequence from one asyncio task.

    A tick that overruns its slot delays the next one instead of
    overlapping it; the schedule re-anchors rather than bursting to
    catch up. Cancellation only lands on the ``sleep`` between ticks, so
    a tick is never left half-applied.

    Usage::

        scheduler = TickScheduler(engine, interval=0.1)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(self, engine: BrainStateEngine, interval: float = 0.1):
        if interval <= 0:
            raise ValueError(f"tick interval must be positive, got {interval}")
        self.engine = engine
        self.interval = interval
        self.ticks = 0
        self.failures = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        """Tick forever; returns only through cancellation.

        A tick that raises is logged and counted in :attr:`failures`; the
        schedule continues.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            try:
                self.engine.tick()
            except Exception:
                self.failures += 1
                logger.exception("Tick %d failed", self.ticks)
            self.ticks += 1

            deadline += self.interval
            delay = deadline - loop.time()
            if delay < 0:
                logger.warning("Tick overran its slot by %.1fms", -delay * 1000)
                deadline = loop.time()
                delay = 0.0
            await asyncio.sleep(delay)

    def start(self) -> asyncio.Task:
        """Schedule the tick loop on the running event loop."""
        if self.running:
            return self._task
        self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the tick loop and wait until it has fully exited."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
