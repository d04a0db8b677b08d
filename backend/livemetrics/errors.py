"""Error taxonomy for the metrics evaluator.

Classes:
    LiveMetricsError: Base class for all livemetrics errors
    UnknownMetric: Metric id has not been registered
    InsufficientData: A computation needs samples that do not exist yet
    InvalidRuleConfiguration: An alert rule failed validation at registration

``NoBaseline`` and ``CooldownSuppressed`` are not exceptions.
They are result values, see ``livemetrics.metrics.trend`` and
``livemetrics.alerts.models.EvaluationOutcome``.
"""


class LiveMetricsError(Exception):
    """Base class for livemetrics errors."""


class UnknownMetric(LiveMetricsError):
    """Raised when a metric id is not registered with the store."""

    def __init__(self, metric_id: str) -> None:
        self.metric_id = metric_id
        super().__init__(f"Unknown metric: {metric_id}")


class InsufficientData(LiveMetricsError):
    """Raised when status or trend is requested before enough samples exist.

    Non-fatal. Callers should skip the computation or display "no data".

    Attributes:
        metric_id: Metric that lacks samples
        required: Number of samples the computation needs
        available: Number of samples currently held
    """

    def __init__(self, metric_id: str, required: int = 1, available: int = 0) -> None:
        self.metric_id = metric_id
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient data for metric {metric_id}: "
            f"need {required} sample(s), have {available}"
        )


class InvalidRuleConfiguration(LiveMetricsError):
    """Raised when an alert rule cannot be activated.

    Only the offending rule is rejected; the evaluator keeps running.

    Attributes:
        rule_id: Identifier of the rejected rule (if known)
        reasons: Individual validation messages
    """

    def __init__(self, rule_id: str | None, reasons: list[str]) -> None:
        self.rule_id = rule_id
        self.reasons = reasons
        label = rule_id or "<unnamed>"
        super().__init__(f"Invalid alert rule {label}: {'; '.join(reasons)}")


__all__ = [
    "InsufficientData",
    "InvalidRuleConfiguration",
    "LiveMetricsError",
    "UnknownMetric",
]
