"""Alert rules, evaluation with cooldown, and notification delivery.

This package provides:
- Alert rule / event / outcome models
- AlertRuleEvaluator with per-rule cooldown
- Notification channels (Email, Webhook, Slack, Log)
- NotificationDispatcher for non-blocking delivery with retry
- Alert statistics
"""

from livemetrics.alerts.channels import (
    DeliveryResult,
    EmailChannel,
    LogChannel,
    NotificationChannel,
    SlackChannel,
    WebhookChannel,
)
from livemetrics.alerts.dispatcher import NotificationDispatcher
from livemetrics.alerts.evaluator import AlertDispatcher, AlertRuleEvaluator
from livemetrics.alerts.models import (
    AlertCondition,
    AlertEvent,
    AlertRule,
    AlertSeverity,
    ChannelType,
    EvaluationOutcome,
    EvaluationResult,
    NotificationTarget,
)
from livemetrics.alerts.stats import AlertStats, TimeRange, summarize_alerts

__all__ = [
    # Models
    "AlertCondition",
    "AlertEvent",
    "AlertRule",
    "AlertSeverity",
    "ChannelType",
    "EvaluationOutcome",
    "EvaluationResult",
    "NotificationTarget",
    # Evaluation
    "AlertDispatcher",
    "AlertRuleEvaluator",
    # Channels
    "DeliveryResult",
    "EmailChannel",
    "LogChannel",
    "NotificationChannel",
    "SlackChannel",
    "WebhookChannel",
    # Delivery
    "NotificationDispatcher",
    # Stats
    "AlertStats",
    "TimeRange",
    "summarize_alerts",
]
