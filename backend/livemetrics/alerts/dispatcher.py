"""NotificationDispatcher for fire-and-forget alert delivery.

This module provides the NotificationDispatcher class which handles:
- Non-blocking hand-off of fired alerts (``dispatch`` never awaits)
- Async queue-based delivery with configurable workers
- A per-attempt timeout so a slow channel cannot stall anything upstream
- Exponential backoff retry for failed deliveries
- Bypass delivery for CRITICAL alerts when the queue is full

Usage:
    from livemetrics.alerts.dispatcher import NotificationDispatcher

    dispatcher = NotificationDispatcher(
        channels={"email": email_channel, "webhook": webhook_channel},
    )
    await dispatcher.start()

    # Called from the evaluator, inside the event loop thread
    dispatcher.dispatch(alert_event)

    await dispatcher.stop()
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence

from livemetrics.alerts.channels import NotificationChannel
from livemetrics.alerts.models import AlertEvent, AlertSeverity, ChannelType, NotificationTarget
from livemetrics.config import DispatchConfig

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Async notification dispatcher with queue-based delivery and retry.

    Features:
    - ``dispatch()`` uses put_nowait and returns immediately
    - Background worker tasks deliver alerts to each enabled target
    - Every channel call is bounded by ``config.timeout_seconds``
    - CRITICAL alerts are never dropped for a full queue: they are
      delivered by a dedicated task instead, which ``stop()`` waits for

    Attributes:
        channels: Mapping of channel type to channel implementation
        config: Queue, worker, retry and timeout settings
        default_targets: Targets used for alerts that carry none
    """

    def __init__(
        self,
        channels: Mapping[ChannelType | str, NotificationChannel],
        config: DispatchConfig | None = None,
        default_targets: Sequence[NotificationTarget] = (),
    ) -> None:
        self.channels: dict[str, NotificationChannel] = {
            ChannelType(key).value: channel
            for key, channel in channels.items()
        }
        self.config = config or DispatchConfig()
        self.default_targets = tuple(default_targets)

        self._queue: asyncio.Queue[AlertEvent] = asyncio.Queue(maxsize=self.config.queue_size)
        self._workers: list[asyncio.Task[None]] = []
        self._bypass_tasks: set[asyncio.Task[None]] = set()
        self._running = False

        self.delivered_count = 0
        self.failed_count = 0
        self.dropped_count = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        """Start worker tasks. Safe to call multiple times."""
        if self._running:
            return
        self._running = True
        for worker_id in range(self.config.workers):
            task = asyncio.create_task(
                self._worker(worker_id), name=f"notification_worker_{worker_id}"
            )
            self._workers.append(task)
        logger.info("NotificationDispatcher started with %d workers", self.config.workers)

    async def stop(self, grace_seconds: float | None = None) -> None:
        """Stop all worker tasks. Undelivered alerts stay in the queue.

        In-flight CRITICAL bypass deliveries are awaited for up to
        ``grace_seconds`` (one timeout per attempt by default) before
        being cancelled.
        """
        self._running = False

        if not self._workers and not self._bypass_tasks:
            return

        if self._bypass_tasks:
            if grace_seconds is None:
                grace_seconds = self.config.timeout_seconds * self.config.max_retries
            _, pending = await asyncio.wait(set(self._bypass_tasks), timeout=grace_seconds)
            if pending:
                logger.warning(
                    "Cancelling %d CRITICAL deliveries still running at shutdown", len(pending)
                )

        tasks = [*self._workers, *self._bypass_tasks]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._workers.clear()
        self._bypass_tasks.clear()
        logger.info("NotificationDispatcher stopped")

    async def drain(self) -> None:
        """Wait until every queued alert has been processed."""
        await self._queue.join()

    def dispatch(self, event: AlertEvent) -> None:
        """Queue an alert for delivery without blocking.

        Must be called from the event loop thread.
        """
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            if event.severity == AlertSeverity.CRITICAL:
                logger.warning(
                    "Queue full, delivering CRITICAL alert %s outside the queue",
                    event.event_id,
                )
                self._spawn_bypass(event)
            else:
                self.dropped_count += 1
                logger.warning(
                    "Queue full, dropping alert %s (rule=%s, severity=%s)",
                    event.event_id,
                    event.rule_id,
                    event.severity.value,
                )

    def _spawn_bypass(self, event: AlertEvent) -> None:
        try:
            task = asyncio.get_running_loop().create_task(self._deliver_event(event))
        except RuntimeError:
            self.dropped_count += 1
            logger.error("No running event loop, dropping CRITICAL alert %s", event.event_id)
            return
        self._bypass_tasks.add(task)
        task.add_done_callback(self._bypass_tasks.discard)

    async def _worker(self, worker_id: int) -> None:
        logger.debug("Worker %d starting", worker_id)
        while self._running:
            try:
                await self._process_one()
            except asyncio.CancelledError:
                logger.debug("Worker %d cancelled", worker_id)
                raise
            except Exception as e:
                logger.exception("Worker %d error processing alert: %s", worker_id, e)
        logger.debug("Worker %d stopped", worker_id)

    async def _process_one(self) -> None:
        try:
            # Timeout lets the worker notice a stop request
            event = await asyncio.wait_for(self._queue.get(), timeout=1.0)
        except TimeoutError:
            return

        try:
            await self._deliver_event(event)
        finally:
            self._queue.task_done()

    async def _deliver_event(self, event: AlertEvent) -> None:
        targets = event.notifications or self.default_targets
        if not targets:
            logger.debug("No notification targets for alert %s", event.event_id)
            return

        for target in targets:
            if not target.enabled:
                continue
            channel = self.channels.get(target.type.value)
            if channel is None:
                logger.warning(
                    "No channel registered for '%s', skipping alert %s",
                    target.type.value,
                    event.event_id,
                )
                continue
            await self._deliver_with_retry(event, channel, target)

    async def _deliver_with_retry(
        self,
        event: AlertEvent,
        channel: NotificationChannel,
        target: NotificationTarget,
    ) -> bool:
        """Deliver to one target with exponential backoff.

        Retry delays: base_delay * (multiplier ^ (attempt - 1)).

        Returns:
            True if delivery succeeded, False if all retries exhausted
        """
        last_error = "Unknown error"
        max_retries = self.config.max_retries

        for attempt in range(1, max_retries + 1):
            try:
                result = await asyncio.wait_for(
                    channel.send(event, target.target), timeout=self.config.timeout_seconds
                )
                if result.success:
                    self.delivered_count += 1
                    logger.debug(
                        "Alert %s delivered via %s to %s (attempt %d)",
                        event.event_id,
                        target.type.value,
                        target.target,
                        attempt,
                    )
                    return True
                last_error = result.error_message or "Unknown error"
            except TimeoutError:
                last_error = f"Delivery timed out after {self.config.timeout_seconds}s"
            except Exception as e:
                last_error = str(e)

            logger.warning(
                "Alert %s delivery failed via %s (attempt %d/%d): %s",
                event.event_id,
                target.type.value,
                attempt,
                max_retries,
                last_error,
            )
            if attempt < max_retries:
                delay = self.config.retry_base_delay * (
                    self.config.retry_multiplier ** (attempt - 1)
                )
                await asyncio.sleep(delay)

        self.failed_count += 1
        logger.error(
            "Alert %s (%s) delivery failed via %s after all retries: %s",
            event.event_id,
            event.severity.value,
            target.type.value,
            last_error,
        )
        return False


__all__ = ["NotificationDispatcher"]
