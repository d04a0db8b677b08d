"""Trend computation between two consecutive samples.

A percent change needs a non-zero baseline. When the previous value is zero
the result carries ``NO_BASELINE`` instead of a number, so callers can pick
a display fallback without catching exceptions.

Example:
    >>> compute_trend(10, 15)
    Trend(direction=<TrendDirection.UP: 'up'>, change=5, change_percent=50.0)
    >>> compute_trend(0, 5).has_baseline
    False
"""

from dataclasses import dataclass
from enum import Enum

from livemetrics.errors import InsufficientData
from livemetrics.metrics.models import MetricState


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Baseline(str, Enum):
    """Marker for a percent change that is undefined."""

    MISSING = "no_baseline"


NO_BASELINE = Baseline.MISSING


@dataclass(frozen=True)
class Trend:
    """Signed change between two samples.

    Attributes:
        direction: UP, DOWN, or STABLE (only when change is exactly zero)
        change: current - previous
        change_percent: change relative to abs(previous) in percent, or
            NO_BASELINE when previous is zero
    """

    direction: TrendDirection
    change: float
    change_percent: float | Baseline

    @property
    def has_baseline(self) -> bool:
        return self.change_percent is not NO_BASELINE


def compute_trend(previous: float, current: float) -> Trend:
    """Compute direction, change and percent change from previous to current.

    Args:
        previous: Earlier value
        current: Later value

    Returns:
        Trend for the pair
    """
    change = current - previous
    if change == 0:
        direction = TrendDirection.STABLE
    elif change > 0:
        direction = TrendDirection.UP
    else:
        direction = TrendDirection.DOWN

    if previous == 0:
        change_percent: float | Baseline = NO_BASELINE
    else:
        change_percent = change / abs(previous) * 100

    return Trend(direction=direction, change=change, change_percent=change_percent)


def trend_for_state(state: MetricState) -> Trend:
    """Trend between the two most recent samples of a metric.

    Raises:
        InsufficientData: If fewer than two samples are recorded
    """
    if len(state.history) < 2:
        raise InsufficientData(state.metric_id, required=2, available=len(state.history))
    return compute_trend(state.history[-2].value, state.history[-1].value)


__all__ = [
    "Baseline",
    "NO_BASELINE",
    "Trend",
    "TrendDirection",
    "compute_trend",
    "trend_for_state",
]
