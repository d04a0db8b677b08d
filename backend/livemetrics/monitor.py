"""MetricsMonitor: owns the metric registry, rules and event feed.

One monitor instance is built by its caller (the app factory, a test, a
script) and torn down with it. There is no module-level state.

An ingestion tick for one metric runs entirely under that metric's lock:

    1. record the sample (dropped input ends the tick)
    2. reclassify; a status transition is appended to the event feed
    3. evaluate every rule on the metric at the sample's timestamp
    4. each fired alert is appended to the event feed and was already
       handed to the dispatcher by the evaluator

Example:
    >>> monitor = MetricsMonitor.from_config(config, dispatcher=dispatcher)
    >>> monitor.ingest("error_rate", 2.4)
    >>> monitor.recent(5)
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from livemetrics.alerts.evaluator import (
    DEFAULT_ALERT_HISTORY,
    AlertDispatcher,
    AlertRuleEvaluator,
)
from livemetrics.alerts.models import AlertEvent, AlertRule, EvaluationResult
from livemetrics.alerts.stats import AlertStats, TimeRange, summarize_alerts
from livemetrics.clock import Clock, SystemClock
from livemetrics.errors import InsufficientData, InvalidRuleConfiguration
from livemetrics.events.log import DEFAULT_EVENT_LOG_CAPACITY, LiveEventLog
from livemetrics.events.models import EventType, LiveEvent
from livemetrics.metrics.models import (
    STATUS_SEVERITY,
    HealthStatus,
    MetricDefinition,
    MetricSample,
    MetricState,
)
from livemetrics.metrics.store import DEFAULT_HISTORY_CAPACITY, MetricStore
from livemetrics.metrics.trend import Trend, trend_for_state

if TYPE_CHECKING:
    from livemetrics.loader import MonitorConfig

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    """What one ingestion tick produced.

    Attributes:
        sample: The recorded sample
        status: Metric status after the tick
        status_event: Feed entry for a status transition, if one happened
        evaluations: Outcome of every rule watching the metric
    """

    sample: MetricSample
    status: HealthStatus | None
    status_event: LiveEvent | None = None
    evaluations: list[EvaluationResult] = field(default_factory=list)

    @property
    def alerts(self) -> list[AlertEvent]:
        return [r.event for r in self.evaluations if r.event is not None]


@dataclass
class MonitorSummary:
    """Dashboard-level overview.

    ``overall_status`` is the worst status among metrics that have data,
    healthy when no metric has data yet.
    """

    overall_status: HealthStatus
    status_counts: dict[str, int]
    metric_count: int
    metrics_with_data: int
    active_rules: int
    total_rules: int
    event_count: int
    alerts_fired: int
    generated_at: datetime


class MetricsMonitor:
    """Facade over the store, the rule evaluator and the event feed.

    Attributes:
        store: Metric definitions and sample history
        evaluator: Alert rules and cooldown state
        event_log: Live event feed
        clock: Time source for operations called without a timestamp
        rejected_rules: Rules refused at load time (from_config only)
    """

    def __init__(
        self,
        store: MetricStore | None = None,
        evaluator: AlertRuleEvaluator | None = None,
        event_log: LiveEventLog | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.store = store or MetricStore()
        self.evaluator = evaluator or AlertRuleEvaluator(store=self.store)
        self.event_log = event_log or LiveEventLog()
        self.clock = clock or SystemClock()
        self.rejected_rules: list[InvalidRuleConfiguration] = []

    @classmethod
    def from_config(
        cls,
        config: MonitorConfig,
        dispatcher: AlertDispatcher | None = None,
        clock: Clock | None = None,
        history_capacity: int = DEFAULT_HISTORY_CAPACITY,
        event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY,
        alert_history_capacity: int = DEFAULT_ALERT_HISTORY,
    ) -> MetricsMonitor:
        """Build a monitor from a loaded configuration.

        Invalid rules are logged and collected in ``rejected_rules``; the
        remaining rules are still activated.
        """
        store = MetricStore(capacity=history_capacity)
        monitor = cls(
            store=store,
            evaluator=AlertRuleEvaluator(
                dispatcher=dispatcher, store=store, history_size=alert_history_capacity
            ),
            event_log=LiveEventLog(capacity=event_log_capacity),
            clock=clock,
        )
        for definition in config.metrics:
            monitor.register_metric(definition)
        for raw_rule in config.rules:
            try:
                monitor.register_rule(raw_rule)
            except InvalidRuleConfiguration as e:
                logger.error("Skipping alert rule: %s", e)
                monitor.rejected_rules.append(e)
        logger.info(
            "Monitor ready: %d metrics, %d rules (%d rejected)",
            len(monitor.store),
            len(monitor.evaluator.rules()),
            len(monitor.rejected_rules),
        )
        return monitor

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_metric(self, definition: MetricDefinition) -> None:
        self.store.register(definition)

    def register_rule(self, rule: AlertRule | dict[str, Any]) -> AlertRule:
        """Validate and activate an alert rule.

        Raises:
            InvalidRuleConfiguration: If the rule is rejected
        """
        return self.evaluator.register_rule(rule)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(
        self, metric_id: str, value: float, timestamp: datetime | None = None
    ) -> IngestResult | None:
        """Run one ingestion tick for a metric.

        Never raises for bad input. Unknown metrics and samples the store
        drops end the tick early.

        Args:
            metric_id: Registered metric id
            value: Observed value
            timestamp: Observation time; the clock's time when omitted

        Returns:
            IngestResult, or None if the sample was dropped
        """
        if metric_id not in self.store:
            logger.warning("Ignoring reading for unknown metric %s", metric_id)
            return None
        if timestamp is None:
            timestamp = self.clock.now()

        with self.store.locked(metric_id):
            previous_status = self.store.state(metric_id).current_status
            sample = self.store.record(metric_id, value, timestamp)
            if sample is None:
                return None

            state = self.store.state(metric_id)
            result = IngestResult(sample=sample, status=state.current_status)
            result.status_event = self._status_transition(state, previous_status)

            result.evaluations = self.evaluator.evaluate_metric(state, sample.timestamp)
            for alert in result.alerts:
                self.event_log.append(LiveEvent.from_alert(alert))
            return result

    def evaluate(self, metric_id: str, now: datetime | None = None) -> list[EvaluationResult]:
        """Re-evaluate a metric's rules without recording a sample.

        Raises:
            UnknownMetric: If the metric is not registered
        """
        now = now or self.clock.now()
        with self.store.locked(metric_id):
            results = self.evaluator.evaluate_metric(self.store.state(metric_id), now)
            for result in results:
                if result.event is not None:
                    self.event_log.append(LiveEvent.from_alert(result.event))
        return results

    def record_event(self, event: LiveEvent) -> None:
        """Append an externally produced event (user action, milestone...)."""
        self.event_log.append(event)

    def _status_transition(
        self, state: MetricState, previous: HealthStatus | None
    ) -> LiveEvent | None:
        current = state.current_status
        if current is None or current == previous:
            return None
        # First sample only produces an event when it is already unhealthy
        if previous is None and current == HealthStatus.HEALTHY:
            return None

        latest = state.latest
        event = LiveEvent.status_change(
            state.definition, previous, current, latest.value, latest.timestamp
        )
        self.event_log.append(event)
        log = logger.warning if current != HealthStatus.HEALTHY else logger.info
        log(
            "Metric %s status %s -> %s (value %s)",
            state.metric_id,
            previous.value if previous else "unknown",
            current.value,
            latest.value,
        )
        return event

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def latest(self, metric_id: str) -> MetricSample | None:
        return self.store.latest(metric_id)

    def history(self, metric_id: str, count: int) -> list[MetricSample]:
        return self.store.history(metric_id, count)

    def recent(self, count: int | None = None, event_type: EventType | None = None) -> list[LiveEvent]:
        return self.event_log.recent(count, event_type=event_type)

    def state(self, metric_id: str) -> MetricState:
        return self.store.state(metric_id)

    def states(self) -> list[MetricState]:
        return self.store.states()

    def status(self, metric_id: str) -> HealthStatus:
        """Current status of a metric.

        Raises:
            UnknownMetric: If the metric is not registered
            InsufficientData: If no sample has been recorded yet
        """
        state = self.store.state(metric_id)
        if state.current_status is None:
            raise InsufficientData(metric_id, required=1, available=0)
        return state.current_status

    def trend(self, metric_id: str) -> Trend:
        """Trend between the two latest samples.

        Raises:
            UnknownMetric: If the metric is not registered
            InsufficientData: With fewer than two samples
        """
        return trend_for_state(self.store.state(metric_id))

    def rules(self, metric_id: str | None = None) -> list[AlertRule]:
        return self.evaluator.rules(metric_id)

    def summary(self) -> MonitorSummary:
        states = self.store.states()
        statuses = [s.current_status for s in states if s.current_status is not None]
        overall = max(statuses, key=STATUS_SEVERITY.__getitem__, default=HealthStatus.HEALTHY)
        counts = Counter(status.value for status in statuses)
        rules = self.evaluator.rules()
        return MonitorSummary(
            overall_status=overall,
            status_counts={status.value: counts.get(status.value, 0) for status in HealthStatus},
            metric_count=len(states),
            metrics_with_data=len(statuses),
            active_rules=sum(1 for rule in rules if rule.enabled),
            total_rules=len(rules),
            event_count=len(self.event_log),
            alerts_fired=len(self.evaluator.fired_events()),
            generated_at=self.clock.now(),
        )

    def alert_stats(
        self, time_range: TimeRange = TimeRange.MONTH, now: datetime | None = None
    ) -> AlertStats:
        now = now or self.clock.now()
        return summarize_alerts(self.evaluator.fired_events(), now, time_range)


__all__ = ["IngestResult", "MetricsMonitor", "MonitorSummary"]
