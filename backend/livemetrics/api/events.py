"""Live event feed API endpoints (read-only)."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from livemetrics.api.deps import get_monitor
from livemetrics.events.models import EventType
from livemetrics.monitor import MetricsMonitor


class LiveEventResponse(BaseModel):
    id: str
    timestamp: datetime
    type: str
    category: str
    title: str
    description: str
    severity: str
    source: str
    user_id: str | None
    metadata: dict[str, Any]


class EventListResponse(BaseModel):
    events: list[LiveEventResponse]
    total: int


router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=EventListResponse)
async def list_events(
    count: int = Query(default=20, ge=1, le=500),
    type: EventType | None = Query(default=None),
    monitor: MetricsMonitor = Depends(get_monitor),
) -> EventListResponse:
    """Most recent live events, newest first.

    Args:
        count: Maximum number of events (default 20)
        type: Only return events of this type
        monitor: Injected monitor
    """
    events = monitor.recent(count, event_type=type)
    return EventListResponse(
        events=[
            LiveEventResponse(
                id=e.id,
                timestamp=e.timestamp,
                type=e.type.value,
                category=e.category,
                title=e.title,
                description=e.description,
                severity=e.severity.value,
                source=e.source,
                user_id=e.user_id,
                metadata=dict(e.metadata),
            )
            for e in events
        ],
        total=len(events),
    )
