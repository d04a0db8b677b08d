"""Test data builders shared across test modules."""

from datetime import datetime, timedelta, timezone

from livemetrics.metrics.models import (
    MetricCategory,
    MetricDefinition,
    MetricFormat,
    ThresholdDirection,
    Thresholds,
)

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Synthetic timestamp ``seconds`` after T0."""
    return T0 + timedelta(seconds=seconds)


def make_definition(
    metric_id: str = "error_rate",
    warning: float = 1.0,
    critical: float = 2.0,
    direction: ThresholdDirection = ThresholdDirection.HIGHER_IS_WORSE,
    **kwargs,
) -> MetricDefinition:
    """Create a test metric definition."""
    defaults = {
        "name": metric_id.replace("_", " ").title(),
        "category": MetricCategory.SYSTEM,
        "unit": "%",
        "format": MetricFormat.PERCENTAGE,
    }
    defaults.update(kwargs)
    return MetricDefinition(
        id=metric_id,
        thresholds=Thresholds(warning=warning, critical=critical),
        direction=direction,
        **defaults,
    )
