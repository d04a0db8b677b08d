"""MetricStore: bounded, time-ordered sample history per metric.

Each registered metric gets a ring buffer of ``capacity`` samples (FIFO
eviction) and a re-entrant lock. Recording never raises: malformed input is
logged and dropped so a bad reading cannot break the ingestion loop.

Classes:
    MetricStore: Registry of metric definitions and their sample buffers

Example:
    >>> store = MetricStore(capacity=60)
    >>> store.register(definition)
    >>> store.record("error_rate", 0.4, datetime.now(timezone.utc))
    >>> store.latest("error_rate").value
    0.4
"""

from __future__ import annotations

import logging
import math
import threading
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from livemetrics.errors import UnknownMetric
from livemetrics.metrics.models import (
    HealthStatus,
    MetricDefinition,
    MetricSample,
    MetricState,
)
from livemetrics.metrics.status import classify

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAPACITY = 60


class _MetricBuffer:
    """Mutable per-metric storage. Guarded by ``lock``."""

    def __init__(self, definition: MetricDefinition, capacity: int) -> None:
        self.definition = definition
        self.samples: deque[MetricSample] = deque(maxlen=capacity)
        self.status: HealthStatus | None = None
        self.last_updated: datetime | None = None
        self.lock = threading.RLock()

    def snapshot(self) -> MetricState:
        return MetricState(
            definition=self.definition,
            history=list(self.samples),
            current_status=self.status,
            last_updated=self.last_updated,
        )


class MetricStore:
    """Registry of metric definitions with bounded sample history.

    Thread-safe. Writes to one metric are serialized by that metric's lock;
    different metrics never contend with each other.

    Attributes:
        capacity: Maximum samples retained per metric
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._buffers: dict[str, _MetricBuffer] = {}
        self._registry_lock = threading.Lock()

    def register(self, definition: MetricDefinition) -> None:
        """Register a metric definition.

        Raises:
            ValueError: If a metric with the same id is already registered
        """
        with self._registry_lock:
            if definition.id in self._buffers:
                raise ValueError(f"Metric already registered: {definition.id}")
            self._buffers[definition.id] = _MetricBuffer(definition, self.capacity)
        logger.debug("Registered metric %s (%s)", definition.id, definition.direction.value)

    def __contains__(self, metric_id: object) -> bool:
        return metric_id in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)

    @property
    def metric_ids(self) -> list[str]:
        return list(self._buffers)

    def definition(self, metric_id: str) -> MetricDefinition:
        return self._buffer(metric_id).definition

    def definitions(self) -> list[MetricDefinition]:
        return [b.definition for b in self._buffers.values()]

    @contextmanager
    def locked(self, metric_id: str) -> Iterator[None]:
        """Hold a metric's write lock across several operations.

        Used by the monitor so that one ingestion tick (record, classify,
        evaluate rules) completes before the next tick for the same metric
        starts.

        Raises:
            UnknownMetric: If the metric is not registered
        """
        buffer = self._buffer(metric_id)
        with buffer.lock:
            yield

    def record(self, metric_id: str, value: float, timestamp: datetime) -> MetricSample | None:
        """Append a sample, evicting the oldest one when the buffer is full.

        Never raises. Input is dropped (and logged) when the metric is
        unknown, the value is not a finite number, the timestamp is not a
        timezone-aware datetime, or the timestamp is older than the latest
        recorded sample.

        Args:
            metric_id: Registered metric id
            value: Observed value
            timestamp: Observation time (timezone-aware)

        Returns:
            The recorded sample, or None if the input was dropped
        """
        buffer = self._buffers.get(metric_id)
        if buffer is None:
            logger.warning("Dropping sample for unknown metric %s", metric_id)
            return None

        if not isinstance(timestamp, datetime) or timestamp.tzinfo is None:
            logger.warning(
                "Dropping sample for %s: malformed timestamp %r", metric_id, timestamp
            )
            return None

        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            logger.warning("Dropping sample for %s: invalid value %r", metric_id, value)
            return None

        with buffer.lock:
            if buffer.samples and timestamp < buffer.samples[-1].timestamp:
                logger.warning(
                    "Dropping out-of-order sample for %s: %s is before %s",
                    metric_id,
                    timestamp.isoformat(),
                    buffer.samples[-1].timestamp.isoformat(),
                )
                return None

            sample = MetricSample(timestamp=timestamp, value=float(value))
            buffer.samples.append(sample)
            buffer.last_updated = timestamp
            buffer.status = classify(
                sample.value,
                buffer.definition.thresholds,
                buffer.definition.direction,
            )
            return sample

    def latest(self, metric_id: str) -> MetricSample | None:
        """Most recent sample, or None if nothing has been recorded yet.

        Raises:
            UnknownMetric: If the metric is not registered
        """
        buffer = self._buffer(metric_id)
        with buffer.lock:
            return buffer.samples[-1] if buffer.samples else None

    def history(self, metric_id: str, count: int) -> list[MetricSample]:
        """Up to ``count`` most recent samples, oldest first.

        Returns fewer samples when the history is shorter; never pads.

        Raises:
            UnknownMetric: If the metric is not registered
        """
        buffer = self._buffer(metric_id)
        if count <= 0:
            return []
        with buffer.lock:
            samples = list(buffer.samples)
        return samples[-count:]

    def state(self, metric_id: str) -> MetricState:
        """Consistent snapshot of a metric's state.

        Raises:
            UnknownMetric: If the metric is not registered
        """
        buffer = self._buffer(metric_id)
        with buffer.lock:
            return buffer.snapshot()

    def states(self) -> list[MetricState]:
        return [self.state(metric_id) for metric_id in self.metric_ids]

    def _buffer(self, metric_id: str) -> _MetricBuffer:
        buffer = self._buffers.get(metric_id)
        if buffer is None:
            raise UnknownMetric(metric_id)
        return buffer


__all__ = ["DEFAULT_HISTORY_CAPACITY", "MetricStore"]
