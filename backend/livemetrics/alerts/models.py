"""Alert rule, alert event and evaluation outcome models.

Classes:
    AlertCondition: Comparison applied by a rule
    AlertSeverity: Severity attached to fired alerts
    ChannelType: Notification channel kinds
    NotificationTarget: One delivery destination of a rule
    AlertRule: Validated rule configuration plus its lastTriggered state
    AlertEvent: Immutable record of a fired rule
    EvaluationOutcome: Why an evaluation did or did not fire
    EvaluationResult: Outcome of evaluating one rule once
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from pydantic import ConfigDict, Field, model_validator

from livemetrics.metrics.models import LiveMetricsBaseModel


class AlertCondition(str, Enum):
    """Comparison applied by a rule.

    GREATER_THAN / LESS_THAN / EQUALS compare the latest value.
    CHANGE_PERCENT compares the percent change; a positive threshold fires
    on rises of at least that size, a negative one on drops.
    """

    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    EQUALS = "equals"
    CHANGE_PERCENT = "change_percent"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ChannelType(str, Enum):
    EMAIL = "email"
    SLACK = "slack"
    WEBHOOK = "webhook"
    SMS = "sms"
    LOG = "log"


class NotificationTarget(LiveMetricsBaseModel):
    """A single delivery destination for a rule's alerts."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: ChannelType
    target: str = Field(min_length=1)
    enabled: bool = True


class AlertRule(LiveMetricsBaseModel):
    """Alert rule configuration.

    Everything except ``last_triggered`` is read-only after registration.
    ``last_triggered`` is written only by the evaluator, under the rule's
    lock, when the rule fires.

    Attributes:
        id: Rule identifier
        name: Display name (defaults to the id)
        metric_id: Metric the rule watches
        condition: Comparison to apply
        threshold: Comparison operand (value, or percent for CHANGE_PERCENT)
        time_window: Seconds of history a CHANGE_PERCENT rule compares over;
            0 compares the two latest samples
        severity: Severity of fired alerts
        cooldown: Minimum seconds between two firings
        enabled: Disabled rules are never evaluated
        notifications: Delivery destinations
        last_triggered: When the rule last fired
    """

    id: str = Field(min_length=1)
    name: str = ""
    metric_id: str = Field(min_length=1)
    condition: AlertCondition
    threshold: float
    time_window: float = Field(default=0.0, ge=0)
    severity: AlertSeverity = AlertSeverity.MEDIUM
    cooldown: float = Field(default=0.0, ge=0)
    enabled: bool = True
    notifications: list[NotificationTarget] = Field(default_factory=list)
    last_triggered: datetime | None = None

    @model_validator(mode="after")
    def _check_rule(self) -> AlertRule:
        if not self.name:
            self.name = self.id
        if self.condition == AlertCondition.CHANGE_PERCENT and self.threshold == 0:
            raise ValueError("change_percent rules need a non-zero threshold")
        return self

    @property
    def cooldown_delta(self) -> timedelta:
        return timedelta(seconds=self.cooldown)

    def in_cooldown(self, now: datetime) -> bool:
        """True while ``now - last_triggered < cooldown``."""
        if self.last_triggered is None:
            return False
        return now - self.last_triggered < self.cooldown_delta


def _new_event_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class AlertEvent:
    """Immutable record of a fired rule.

    Attributes:
        rule_id: Rule that fired
        triggered_at: Evaluation time at which the rule fired
        metric_value: Latest metric value at firing
        severity: Rule severity
        message: Human-readable description
        rule_name: Rule display name
        metric_id: Metric the rule watches
        condition: Rule condition
        threshold: Rule threshold
        change_percent: Percent change, for CHANGE_PERCENT rules
        notifications: Enabled targets copied from the rule at firing
        event_id: Unique id of this event
    """

    rule_id: str
    triggered_at: datetime
    metric_value: float
    severity: AlertSeverity
    message: str
    rule_name: str = ""
    metric_id: str = ""
    condition: AlertCondition | None = None
    threshold: float | None = None
    change_percent: float | None = None
    notifications: tuple[NotificationTarget, ...] = ()
    event_id: str = field(default_factory=_new_event_id)


class EvaluationOutcome(str, Enum):
    """Result of evaluating a rule once.

    COOLDOWN_SUPPRESSED is distinct from NOT_MATCHED: it means the
    condition matched but the rule fired too recently.
    """

    FIRED = "fired"
    NOT_MATCHED = "not_matched"
    COOLDOWN_SUPPRESSED = "cooldown_suppressed"
    INSUFFICIENT_DATA = "insufficient_data"
    NO_BASELINE = "no_baseline"
    DISABLED = "disabled"


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one rule evaluation.

    Attributes:
        rule_id: Evaluated rule
        outcome: What happened
        observed: Value the condition was checked against (latest value or
            percent change), None when it could not be computed
        event: The fired AlertEvent, only for FIRED
    """

    rule_id: str
    outcome: EvaluationOutcome
    observed: float | None = None
    event: AlertEvent | None = None

    @property
    def fired(self) -> bool:
        return self.outcome == EvaluationOutcome.FIRED


__all__ = [
    "AlertCondition",
    "AlertEvent",
    "AlertRule",
    "AlertSeverity",
    "ChannelType",
    "EvaluationOutcome",
    "EvaluationResult",
    "NotificationTarget",
]
