"""Metrics API endpoints (read-only)."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from livemetrics.api.deps import get_monitor
from livemetrics.errors import InsufficientData, UnknownMetric
from livemetrics.metrics.formatting import format_value
from livemetrics.metrics.models import MetricState
from livemetrics.metrics.trend import trend_for_state
from livemetrics.monitor import MetricsMonitor


# Response schemas
class SampleResponse(BaseModel):
    timestamp: datetime
    value: float


class TrendResponse(BaseModel):
    """Change between the two latest samples.

    ``change_percent`` is null when the previous value is zero.
    """

    direction: str
    change: float
    change_percent: float | None


class MetricResponse(BaseModel):
    """Response model for one metric card."""

    id: str
    name: str
    category: str
    unit: str
    format: str
    direction: str
    target: float | None
    warning: float
    critical: float
    value: float | None
    display_value: str | None
    status: str | None
    last_updated: datetime | None
    target_progress: float | None
    trend: TrendResponse | None


class MetricListResponse(BaseModel):
    metrics: list[MetricResponse]
    total: int


class HistoryResponse(BaseModel):
    metric_id: str
    samples: list[SampleResponse]


class SummaryResponse(BaseModel):
    """Response model for the dashboard overview."""

    overall_status: str
    status_counts: dict[str, int]
    metric_count: int
    metrics_with_data: int
    active_rules: int
    total_rules: int
    event_count: int
    alerts_fired: int
    generated_at: datetime


def _metric_response(state: MetricState) -> MetricResponse:
    definition = state.definition
    latest = state.latest

    try:
        trend = trend_for_state(state)
        trend_response = TrendResponse(
            direction=trend.direction.value,
            change=trend.change,
            change_percent=trend.change_percent if trend.has_baseline else None,
        )
    except InsufficientData:
        trend_response = None

    return MetricResponse(
        id=definition.id,
        name=definition.name,
        category=definition.category.value,
        unit=definition.unit,
        format=definition.format.value,
        direction=definition.direction.value,
        target=definition.target,
        warning=definition.thresholds.warning,
        critical=definition.thresholds.critical,
        value=latest.value if latest else None,
        display_value=(
            format_value(latest.value, definition.format, definition.unit) if latest else None
        ),
        status=state.current_status.value if state.current_status else None,
        last_updated=state.last_updated,
        target_progress=state.target_progress,
        trend=trend_response,
    )


# Router
router = APIRouter(prefix="/api", tags=["metrics"])


@router.get("/metrics", response_model=MetricListResponse)
async def list_metrics(monitor: MetricsMonitor = Depends(get_monitor)) -> MetricListResponse:
    """List every registered metric with its latest value, status and trend."""
    metrics = [_metric_response(state) for state in monitor.states()]
    return MetricListResponse(metrics=metrics, total=len(metrics))


@router.get("/metrics/{metric_id}", response_model=MetricResponse)
async def get_metric(
    metric_id: str, monitor: MetricsMonitor = Depends(get_monitor)
) -> MetricResponse:
    try:
        return _metric_response(monitor.state(metric_id))
    except UnknownMetric as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/metrics/{metric_id}/history", response_model=HistoryResponse)
async def get_metric_history(
    metric_id: str,
    count: int = Query(default=60, ge=1, le=1000),
    monitor: MetricsMonitor = Depends(get_monitor),
) -> HistoryResponse:
    """Up to ``count`` most recent samples, oldest first.

    Args:
        metric_id: Metric identifier
        count: Maximum number of samples (default 60)
        monitor: Injected monitor

    Returns:
        Sample history, never padded
    """
    try:
        samples = monitor.history(metric_id, count)
    except UnknownMetric as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return HistoryResponse(
        metric_id=metric_id,
        samples=[SampleResponse(timestamp=s.timestamp, value=s.value) for s in samples],
    )


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(monitor: MetricsMonitor = Depends(get_monitor)) -> SummaryResponse:
    summary = monitor.summary()
    return SummaryResponse(
        overall_status=summary.overall_status.value,
        status_counts=summary.status_counts,
        metric_count=summary.metric_count,
        metrics_with_data=summary.metrics_with_data,
        active_rules=summary.active_rules,
        total_rules=summary.total_rules,
        event_count=summary.event_count,
        alerts_fired=summary.alerts_fired,
        generated_at=summary.generated_at,
    )
