"""Metric definitions, bounded sample storage, status and trend."""

from livemetrics.metrics.formatting import format_value
from livemetrics.metrics.models import (
    STATUS_SEVERITY,
    HealthStatus,
    MetricCategory,
    MetricDefinition,
    MetricFormat,
    MetricSample,
    MetricState,
    ThresholdDirection,
    Thresholds,
)
from livemetrics.metrics.status import classify
from livemetrics.metrics.store import DEFAULT_HISTORY_CAPACITY, MetricStore
from livemetrics.metrics.trend import (
    NO_BASELINE,
    Baseline,
    Trend,
    TrendDirection,
    compute_trend,
    trend_for_state,
)

__all__ = [
    # Models
    "HealthStatus",
    "MetricCategory",
    "MetricDefinition",
    "MetricFormat",
    "MetricSample",
    "MetricState",
    "STATUS_SEVERITY",
    "ThresholdDirection",
    "Thresholds",
    # Store
    "DEFAULT_HISTORY_CAPACITY",
    "MetricStore",
    # Pure functions
    "classify",
    "compute_trend",
    "format_value",
    "trend_for_state",
    # Trend
    "Baseline",
    "NO_BASELINE",
    "Trend",
    "TrendDirection",
]
