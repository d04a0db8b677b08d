"""Live event models for the dashboard feed.

Live events are immutable once created. Each carries a small metadata map
whose known keys are listed in ``EventMetadata``; producers should not add
keys outside that set.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, TypedDict

if TYPE_CHECKING:
    from livemetrics.alerts.models import AlertEvent
    from livemetrics.metrics.models import HealthStatus, MetricDefinition


class EventType(str, Enum):
    USER_ACTION = "user_action"
    TRANSACTION = "transaction"
    SYSTEM_EVENT = "system_event"
    MILESTONE = "milestone"
    ALERT = "alert"


class EventSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class EventMetadata(TypedDict, total=False):
    """Known metadata keys.

    ip, user_agent: origin of user_action / transaction events
    value: numeric payload (amount, metric value)
    metric_id, rule_id, threshold: alert and status-change context
    previous_status, current_status: status-change context
    """

    ip: str
    user_agent: str
    value: float
    metric_id: str
    rule_id: str
    threshold: float
    previous_status: str
    current_status: str


# Alert severity -> feed severity
_ALERT_FEED_SEVERITY = {
    "low": EventSeverity.INFO,
    "medium": EventSeverity.WARNING,
    "high": EventSeverity.ERROR,
    "critical": EventSeverity.ERROR,
}

_STATUS_FEED_SEVERITY = {
    "healthy": EventSeverity.SUCCESS,
    "warning": EventSeverity.WARNING,
    "critical": EventSeverity.ERROR,
}


def _new_event_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class LiveEvent:
    """One entry of the live event feed.

    Attributes:
        timestamp: When the event happened
        type: Event type
        category: Free-form grouping ("System", "Revenue", metric category...)
        title: Short headline
        description: Longer text
        severity: Feed severity
        source: Producer ("Web App", "API", "livemetrics", ...)
        user_id: Acting user, if any
        metadata: Read-only map restricted to EventMetadata keys
        id: Unique event id
    """

    timestamp: datetime
    type: EventType
    category: str
    title: str
    description: str = ""
    severity: EventSeverity = EventSeverity.INFO
    source: str = "livemetrics"
    user_id: str | None = None
    metadata: Mapping[str, object] = field(default_factory=dict)
    id: str = field(default_factory=_new_event_id)

    def __post_init__(self) -> None:
        unknown = set(self.metadata) - set(EventMetadata.__annotations__)
        if unknown:
            raise ValueError(f"Unknown metadata keys: {sorted(unknown)}")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def from_alert(cls, alert: AlertEvent) -> LiveEvent:
        """Project a fired alert into the feed."""
        metadata: EventMetadata = {
            "rule_id": alert.rule_id,
            "metric_id": alert.metric_id,
            "value": alert.metric_value,
        }
        if alert.threshold is not None:
            metadata["threshold"] = alert.threshold
        return cls(
            timestamp=alert.triggered_at,
            type=EventType.ALERT,
            category="Alert",
            title=alert.rule_name or alert.rule_id,
            description=alert.message,
            severity=_ALERT_FEED_SEVERITY.get(alert.severity.value, EventSeverity.WARNING),
            metadata=metadata,
        )

    @classmethod
    def status_change(
        cls,
        definition: MetricDefinition,
        previous: HealthStatus | None,
        current: HealthStatus,
        value: float,
        timestamp: datetime,
    ) -> LiveEvent:
        """System event for a metric changing health status."""
        before = previous.value if previous is not None else "unknown"
        return cls(
            timestamp=timestamp,
            type=EventType.SYSTEM_EVENT,
            category=definition.category.value.capitalize(),
            title=f"{definition.name} is {current.value}",
            description=f"{definition.name} went from {before} to {current.value}",
            severity=_STATUS_FEED_SEVERITY[current.value],
            metadata={
                "metric_id": definition.id,
                "value": value,
                "previous_status": before,
                "current_status": current.value,
            },
        )


__all__ = ["EventMetadata", "EventSeverity", "EventType", "LiveEvent"]
