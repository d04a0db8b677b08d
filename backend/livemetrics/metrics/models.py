"""Models for metric definitions, samples and per-metric state.

Classes:
    MetricCategory: Dashboard grouping for a metric
    MetricFormat: How a metric value is rendered
    ThresholdDirection: Which direction of movement is adverse
    HealthStatus: Result of classifying a value against thresholds
    Thresholds: Warning and critical boundaries
    MetricDefinition: Static configuration of a metric (validated)
    MetricSample: One immutable (timestamp, value) observation
    MetricState: Definition plus bounded history and current status
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LiveMetricsBaseModel(BaseModel):
    """Base model for configuration entities.

    ``extra='forbid'`` rejects unknown keys so typos in YAML files fail
    loudly at load time.
    """

    model_config = ConfigDict(extra="forbid")


class MetricCategory(str, Enum):
    REVENUE = "revenue"
    USERS = "users"
    ENGAGEMENT = "engagement"
    PERFORMANCE = "performance"
    SYSTEM = "system"
    MARKETING = "marketing"


class MetricFormat(str, Enum):
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DURATION = "duration"
    RATE = "rate"


class ThresholdDirection(str, Enum):
    """Adverse direction for a metric.

    HIGHER_IS_WORSE: error rate, latency, bounce rate
    LOWER_IS_WORSE: revenue, active users, conversion rate
    """

    HIGHER_IS_WORSE = "higher_is_worse"
    LOWER_IS_WORSE = "lower_is_worse"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


# Higher number = worse
STATUS_SEVERITY: dict[HealthStatus, int] = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.WARNING: 1,
    HealthStatus.CRITICAL: 2,
}


class Thresholds(LiveMetricsBaseModel):
    """Warning and critical boundaries for a metric.

    Both boundaries are inclusive: a value equal to the boundary counts as
    breaching it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    warning: float
    critical: float


class MetricDefinition(LiveMetricsBaseModel):
    """Static configuration of a metric.

    ``direction`` is mandatory. The warning threshold must be less extreme
    than the critical threshold in the adverse direction; definitions that
    violate this are rejected, never silently reordered.

    Attributes:
        id: Stable metric identifier (e.g. "error_rate")
        name: Display name
        category: Dashboard grouping
        unit: Unit suffix ("ms", "%", "$", "/hour", ...)
        format: Rendering format
        target: Optional goal value
        thresholds: Warning/critical boundaries
        direction: Which direction of movement is adverse
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: MetricCategory
    unit: str = ""
    format: MetricFormat = MetricFormat.NUMBER
    target: float | None = None
    thresholds: Thresholds
    direction: ThresholdDirection

    @model_validator(mode="after")
    def _check_threshold_order(self) -> MetricDefinition:
        warning = self.thresholds.warning
        critical = self.thresholds.critical
        if self.direction == ThresholdDirection.HIGHER_IS_WORSE and warning > critical:
            raise ValueError(
                f"warning ({warning}) must not exceed critical ({critical}) "
                f"for a higher_is_worse metric"
            )
        if self.direction == ThresholdDirection.LOWER_IS_WORSE and warning < critical:
            raise ValueError(
                f"warning ({warning}) must not be below critical ({critical}) "
                f"for a lower_is_worse metric"
            )
        return self


@dataclass(frozen=True)
class MetricSample:
    """A single observation. Immutable once recorded."""

    timestamp: datetime
    value: float


@dataclass
class MetricState:
    """Definition, bounded history and derived status for one metric.

    Owned by the store; only the ingestion step mutates it. ``history`` is a
    snapshot list, oldest first, when handed out by the store.

    Attributes:
        definition: The metric's configuration
        history: Samples, oldest first
        current_status: Status of the latest sample, None before any sample
        last_updated: Timestamp of the latest sample, None before any sample
    """

    definition: MetricDefinition
    history: list[MetricSample] = field(default_factory=list)
    current_status: HealthStatus | None = None
    last_updated: datetime | None = None

    @property
    def metric_id(self) -> str:
        return self.definition.id

    @property
    def latest(self) -> MetricSample | None:
        return self.history[-1] if self.history else None

    @property
    def previous(self) -> MetricSample | None:
        return self.history[-2] if len(self.history) >= 2 else None

    @property
    def target_progress(self) -> float | None:
        """Latest value as a percentage of the target, if both exist."""
        latest = self.latest
        target = self.definition.target
        if latest is None or not target:
            return None
        return latest.value / target * 100


__all__ = [
    "HealthStatus",
    "LiveMetricsBaseModel",
    "MetricCategory",
    "MetricDefinition",
    "MetricFormat",
    "MetricSample",
    "MetricState",
    "STATUS_SEVERITY",
    "ThresholdDirection",
    "Thresholds",
]
