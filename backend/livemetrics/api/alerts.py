"""Alert rule and alert statistics API endpoints (read-only)."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from livemetrics.alerts.stats import TimeRange
from livemetrics.api.deps import get_monitor
from livemetrics.monitor import MetricsMonitor


# Response schemas
class NotificationTargetResponse(BaseModel):
    type: str
    target: str
    enabled: bool


class AlertRuleResponse(BaseModel):
    """Response model for a single alert rule."""

    id: str
    name: str
    metric_id: str
    condition: str
    threshold: float
    time_window: float
    severity: str
    cooldown: float
    enabled: bool
    notifications: list[NotificationTargetResponse]
    last_triggered: datetime | None


class AlertRuleListResponse(BaseModel):
    rules: list[AlertRuleResponse]
    total: int


class AlertStatsResponse(BaseModel):
    """Response model for alert statistics."""

    time_range: str
    total: int
    by_severity: dict[str, int]
    by_rule: dict[str, int]
    by_metric: dict[str, int]
    first_at: datetime | None
    last_at: datetime | None


# Router
router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("/rules", response_model=AlertRuleListResponse)
async def list_rules(
    metric_id: str | None = Query(default=None),
    monitor: MetricsMonitor = Depends(get_monitor),
) -> AlertRuleListResponse:
    """List alert rules, optionally only those watching ``metric_id``."""
    rules = [
        AlertRuleResponse(
            id=rule.id,
            name=rule.name,
            metric_id=rule.metric_id,
            condition=rule.condition.value,
            threshold=rule.threshold,
            time_window=rule.time_window,
            severity=rule.severity.value,
            cooldown=rule.cooldown,
            enabled=rule.enabled,
            notifications=[
                NotificationTargetResponse(type=n.type.value, target=n.target, enabled=n.enabled)
                for n in rule.notifications
            ],
            last_triggered=rule.last_triggered,
        )
        for rule in monitor.rules(metric_id)
    ]
    return AlertRuleListResponse(rules=rules, total=len(rules))


@router.get("/stats", response_model=AlertStatsResponse)
async def get_alert_stats(
    time_range: TimeRange = Query(default=TimeRange.MONTH),
    monitor: MetricsMonitor = Depends(get_monitor),
) -> AlertStatsResponse:
    """Get statistics of fired alerts.

    Args:
        time_range: One of 24h, 7d, 30d, 90d (default 30d)
        monitor: Injected monitor

    Returns:
        Totals with breakdowns by severity, rule and metric
    """
    stats = monitor.alert_stats(time_range)
    return AlertStatsResponse(
        time_range=stats.time_range.value,
        total=stats.total,
        by_severity=stats.by_severity,
        by_rule=stats.by_rule,
        by_metric=stats.by_metric,
        first_at=stats.first_at,
        last_at=stats.last_at,
    )
