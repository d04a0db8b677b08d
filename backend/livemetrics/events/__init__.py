"""Live event feed."""

from livemetrics.events.log import DEFAULT_EVENT_LOG_CAPACITY, LiveEventLog
from livemetrics.events.models import EventMetadata, EventSeverity, EventType, LiveEvent

__all__ = [
    "DEFAULT_EVENT_LOG_CAPACITY",
    "EventMetadata",
    "EventSeverity",
    "EventType",
    "LiveEvent",
    "LiveEventLog",
]
