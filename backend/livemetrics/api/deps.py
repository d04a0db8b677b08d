"""Shared FastAPI dependencies."""

from fastapi import Request

from livemetrics.monitor import MetricsMonitor


def get_monitor(request: Request) -> MetricsMonitor:
    """The monitor built by the app lifespan, kept on ``app.state``."""
    return request.app.state.monitor
