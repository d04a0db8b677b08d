"""Periodic ingestion scheduler.

Polls an ingestion source every ``interval`` seconds and feeds each
reading to the monitor. Ticks never overlap: the next sleep starts only
after the previous tick finished. Stopping the scheduler cancels the loop.
"""

import asyncio
import logging
import time

from livemetrics.clock import Clock, SystemClock
from livemetrics.monitor import IngestResult, MetricsMonitor
from livemetrics.sources import IngestionSource

logger = logging.getLogger(__name__)


class MetricScheduler:
    """
    Drives ingestion ticks on a fixed interval.

    Supports start/stop, pause/resume (the dashboard's streaming toggle)
    and changing the interval while running.
    """

    def __init__(
        self,
        monitor: MetricsMonitor,
        source: IngestionSource,
        interval: float = 5.0,
        clock: Clock | None = None,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._monitor = monitor
        self._source = source
        self._interval = interval
        self._clock = clock or SystemClock()
        self._running = False
        self._paused = False
        self._task: asyncio.Task | None = None
        self._tick_lock = asyncio.Lock()
        self._wakeup = asyncio.Event()
        self.ticks_completed = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused

    async def start(self) -> None:
        """Start the periodic loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._periodic_loop())
        logger.info("Scheduler started (interval %.1fs)", self._interval)

    async def stop(self) -> None:
        """Stop the periodic loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Scheduler stopped after %d ticks", self.ticks_completed)

    def pause(self) -> None:
        """Keep the loop alive but skip ticks."""
        if not self._paused:
            self._paused = True
            logger.info("Streaming paused")

    def resume(self) -> None:
        if self._paused:
            self._paused = False
            logger.info("Streaming resumed")

    def set_interval(self, interval: float) -> None:
        """Change the tick interval.

        The wait in progress is re-timed against the new interval, measured
        from when that wait began. No extra tick is run.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._interval = interval
        self._wakeup.set()
        logger.info("Scheduler interval set to %.1fs", interval)

    async def run_once(self) -> list[IngestResult]:
        """Poll the source once and ingest every reading.

        A failing source is logged and the tick is skipped.

        Returns:
            Results of the readings that were recorded
        """
        async with self._tick_lock:
            now = self._clock.now()
            try:
                readings = await self._source.poll(now)
            except Exception:
                logger.exception("Ingestion source failed; skipping tick")
                return []

            start = time.perf_counter()
            results = []
            for reading in readings:
                result = self._monitor.ingest(reading.metric_id, reading.value, reading.timestamp)
                if result is not None:
                    results.append(result)
            self.ticks_completed += 1
            logger.debug(
                "Tick %d: %d/%d readings recorded in %.1fms",
                self.ticks_completed,
                len(results),
                len(readings),
                (time.perf_counter() - start) * 1000,
            )
            return results

    async def _periodic_loop(self) -> None:
        while self._running:
            await self._sleep()
            if not self._running:
                break
            if self._paused:
                continue
            await self.run_once()

    async def _sleep(self) -> None:
        # set_interval wakes the wait so it can be re-timed, never to tick early
        loop = asyncio.get_running_loop()
        started = loop.time()
        while self._running:
            self._wakeup.clear()
            remaining = started + self._interval - loop.time()
            if remaining <= 0:
                return
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=remaining)
            except TimeoutError:
                return


__all__ = ["MetricScheduler"]
