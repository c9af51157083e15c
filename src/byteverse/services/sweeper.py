"""Periodic cleanup of abuse-monitor state."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from byteverse.services.abuse import AbuseMonitor, SweepResult

logger = logging.getLogger(__name__)


class AbuseSweepWorker:
    """Runs :meth:`AbuseMonitor.sweep` every ``interval`` seconds in the background."""

    def __init__(self, monitor: AbuseMonitor, interval: float = 600.0) -> None:
        self.monitor = monitor
        self.interval = max(0.01, float(interval))
        self.runs = 0
        self.last_result: SweepResult | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop and wait for it to exit."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    def run_once(self) -> SweepResult:
        result = self.monitor.sweep()
        self.runs += 1
        self.last_result = result
        return result

    async def _run(self) -> None:
        while not self._stopping.is_set():
            with suppress(TimeoutError):
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            if self._stopping.is_set():
                break
            try:
                self.run_once()
            except Exception as e:
                logger.error("AbuseSweepWorker failed to sweep: %s", e, exc_info=True)
