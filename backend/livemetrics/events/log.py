"""LiveEventLog: bounded, newest-first event feed."""

from __future__ import annotations

import threading
from collections import deque

from livemetrics.events.models import EventType, LiveEvent

DEFAULT_EVENT_LOG_CAPACITY = 50


class LiveEventLog:
    """Bounded append-only feed of live events.

    New events go to the head; once ``capacity`` is exceeded the oldest
    event falls off the tail. Events cannot be updated or removed.

    Example:
        >>> log = LiveEventLog(capacity=3)
        >>> for event in [e1, e2, e3, e4, e5]:
        ...     log.append(event)
        >>> log.recent(3) == [e5, e4, e3]
        True
    """

    def __init__(self, capacity: int = DEFAULT_EVENT_LOG_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._events: deque[LiveEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._events)

    def append(self, event: LiveEvent) -> None:
        with self._lock:
            # appendleft on a bounded deque drops from the right (oldest)
            self._events.appendleft(event)

    def recent(self, count: int | None = None, event_type: EventType | None = None) -> list[LiveEvent]:
        """Up to ``count`` most recent events, newest first.

        Args:
            count: Maximum number of events (all retained events if None)
            event_type: Only return events of this type
        """
        with self._lock:
            events = list(self._events)
        if event_type is not None:
            events = [e for e in events if e.type == event_type]
        if count is None:
            return events
        return events[: max(count, 0)]


__all__ = ["DEFAULT_EVENT_LOG_CAPACITY", "LiveEventLog"]
