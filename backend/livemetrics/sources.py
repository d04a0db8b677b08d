"""Ingestion sources that feed readings to the scheduler.

Classes:
    Reading: One (metric_id, value, timestamp) observation
    IngestionSource: Protocol for anything that can be polled for readings
    StaticSource: Replays queued readings (tests, backfills)
    RandomWalkSource: Demo source that jitters each metric by up to +/-2%
"""

from __future__ import annotations

import random
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

# Per-tick jitter of the demo source: value *= 1 + uniform(-2%, +2%)
RANDOM_WALK_JITTER = 0.02


@dataclass(frozen=True)
class Reading:
    metric_id: str
    value: float
    timestamp: datetime


class IngestionSource(Protocol):
    """Protocol for ingestion sources."""

    async def poll(self, now: datetime) -> list[Reading]:
        """Return the readings available at ``now``."""
        ...


class StaticSource:
    """Hands out pre-queued batches of readings, one batch per poll."""

    def __init__(self, batches: Iterable[Iterable[Reading]] = ()) -> None:
        self._batches: deque[list[Reading]] = deque(list(b) for b in batches)

    def push(self, readings: Iterable[Reading]) -> None:
        self._batches.append(list(readings))

    async def poll(self, now: datetime) -> list[Reading]:
        if not self._batches:
            return []
        return self._batches.popleft()


class RandomWalkSource:
    """Demo source producing a bounded random walk per metric.

    Each poll multiplies every metric's last value by a factor drawn from
    [1 - jitter, 1 + jitter], the same drift the dashboard demo applies.

    Attributes:
        values: Current value per metric id
    """

    def __init__(
        self,
        baselines: Mapping[str, float],
        seed: int | None = None,
        jitter: float = RANDOM_WALK_JITTER,
    ) -> None:
        self.values: dict[str, float] = dict(baselines)
        self._jitter = jitter
        self._rng = random.Random(seed)

    async def poll(self, now: datetime) -> list[Reading]:
        readings = []
        for metric_id, value in self.values.items():
            factor = 1 + self._rng.uniform(-self._jitter, self._jitter)
            new_value = value * factor
            self.values[metric_id] = new_value
            readings.append(Reading(metric_id=metric_id, value=new_value, timestamp=now))
        return readings


__all__ = [
    "IngestionSource",
    "RANDOM_WALK_JITTER",
    "RandomWalkSource",
    "Reading",
    "StaticSource",
]
