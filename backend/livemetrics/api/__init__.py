"""Read-only HTTP API for the dashboard."""

from livemetrics.api.alerts import router as alerts_router
from livemetrics.api.events import router as events_router
from livemetrics.api.metrics import router as metrics_router

__all__ = ["alerts_router", "events_router", "metrics_router"]
