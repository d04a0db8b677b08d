"""Status classification of a metric value against its thresholds."""

from livemetrics.metrics.models import HealthStatus, ThresholdDirection, Thresholds


def _breaches(value: float, boundary: float, direction: ThresholdDirection) -> bool:
    if direction == ThresholdDirection.HIGHER_IS_WORSE:
        return value >= boundary
    return value <= boundary


def classify(
    value: float,
    thresholds: Thresholds,
    direction: ThresholdDirection,
) -> HealthStatus:
    """Classify a value as healthy, warning or critical.

    Pure function: the result depends only on the arguments. Boundaries are
    inclusive, so with ``warning=100`` on a higher_is_worse metric the value
    100 is already a warning.

    Args:
        value: The metric value to classify
        thresholds: Warning/critical boundaries
        direction: Adverse direction of the metric

    Returns:
        CRITICAL if the critical boundary is breached, WARNING if the warning
        boundary is breached, HEALTHY otherwise
    """
    if _breaches(value, thresholds.critical, direction):
        return HealthStatus.CRITICAL
    if _breaches(value, thresholds.warning, direction):
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


__all__ = ["classify"]
