"""Alert statistics over a time range."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from livemetrics.alerts.models import AlertEvent


class TimeRange(str, Enum):
    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"


TIME_RANGE_DELTAS: dict[TimeRange, timedelta] = {
    TimeRange.DAY: timedelta(hours=24),
    TimeRange.WEEK: timedelta(days=7),
    TimeRange.MONTH: timedelta(days=30),
    TimeRange.QUARTER: timedelta(days=90),
}


@dataclass
class AlertStats:
    """Counts of fired alerts inside a time range.

    Attributes:
        time_range: The range the counts cover
        total: Number of alerts fired in range
        by_severity: Severity value -> count
        by_rule: Rule id -> count
        by_metric: Metric id -> count
        first_at: Earliest alert in range
        last_at: Latest alert in range
    """

    time_range: TimeRange
    total: int = 0
    by_severity: dict[str, int] = field(default_factory=dict)
    by_rule: dict[str, int] = field(default_factory=dict)
    by_metric: dict[str, int] = field(default_factory=dict)
    first_at: datetime | None = None
    last_at: datetime | None = None


def summarize_alerts(
    events: Iterable[AlertEvent],
    now: datetime,
    time_range: TimeRange = TimeRange.MONTH,
) -> AlertStats:
    """Aggregate fired alerts triggered within ``time_range`` before ``now``."""
    since = now - TIME_RANGE_DELTAS[time_range]
    in_range = [e for e in events if since <= e.triggered_at <= now]
    if not in_range:
        return AlertStats(time_range=time_range)

    return AlertStats(
        time_range=time_range,
        total=len(in_range),
        by_severity=dict(Counter(e.severity.value for e in in_range)),
        by_rule=dict(Counter(e.rule_id for e in in_range)),
        by_metric=dict(Counter(e.metric_id for e in in_range)),
        first_at=min(e.triggered_at for e in in_range),
        last_at=max(e.triggered_at for e in in_range),
    )


__all__ = ["AlertStats", "TIME_RANGE_DELTAS", "TimeRange", "summarize_alerts"]
