"""Alert rule evaluation with cooldown.

This module provides the AlertRuleEvaluator, which owns the set of active
alert rules, checks them against metric state and forwards fired alerts to
a dispatcher.

Evaluation order for one rule:
    1. Disabled rule -> DISABLED
    2. No usable sample(s) -> INSUFFICIENT_DATA (non-fatal, skipped)
    3. Percent change without baseline -> NO_BASELINE
    4. Condition false -> NOT_MATCHED
    5. Condition true but fired less than ``cooldown`` ago -> COOLDOWN_SUPPRESSED
    6. Otherwise -> FIRED: ``last_triggered`` is set, an AlertEvent is built
       and handed to the dispatcher

Steps 5 and 6 run under a per-rule lock so that overlapping evaluations of
the same rule cannot both fire inside one cooldown window.

Example:
    >>> evaluator = AlertRuleEvaluator(dispatcher=hub, store=store)
    >>> evaluator.register_rule({"id": "r1", "metric_id": "error_rate",
    ...                          "condition": "greater_than", "threshold": 2.0})
    >>> results = evaluator.evaluate_metric(store.state("error_rate"), now)
"""

from __future__ import annotations

import logging
import math
import threading
from collections import deque
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

from livemetrics.alerts.models import (
    AlertCondition,
    AlertEvent,
    AlertRule,
    EvaluationOutcome,
    EvaluationResult,
)
from livemetrics.errors import InvalidRuleConfiguration
from livemetrics.metrics.formatting import format_value
from livemetrics.metrics.models import MetricSample, MetricState
from livemetrics.metrics.trend import NO_BASELINE, compute_trend

if TYPE_CHECKING:
    from livemetrics.metrics.store import MetricStore

logger = logging.getLogger(__name__)

DEFAULT_ALERT_HISTORY = 500

# Tolerance for EQUALS comparisons on floats
EQUALS_TOLERANCE = 1e-9


class AlertDispatcher(Protocol):
    """Receives fired alerts. Must not block the caller."""

    def dispatch(self, event: AlertEvent) -> None:
        """Hand an alert over for delivery (fire-and-forget)."""
        ...


def _validation_reasons(error: ValidationError) -> list[str]:
    reasons = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item["loc"])
        reasons.append(f"{loc}: {item['msg']}" if loc else item["msg"])
    return reasons


class AlertRuleEvaluator:
    """Evaluates alert rules against metric state.

    Attributes:
        dispatcher: Optional receiver for fired alerts
    """

    def __init__(
        self,
        dispatcher: AlertDispatcher | None = None,
        store: MetricStore | None = None,
        history_size: int = DEFAULT_ALERT_HISTORY,
    ) -> None:
        """Initialize the evaluator.

        Args:
            dispatcher: Receives every fired AlertEvent
            store: When given, rules referencing unknown metrics are rejected
            history_size: Number of fired alerts kept for statistics
        """
        self.dispatcher = dispatcher
        self._store = store
        self._rules: dict[str, AlertRule] = {}
        self._rule_locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._fired: deque[AlertEvent] = deque(maxlen=history_size)

    # ------------------------------------------------------------------
    # Rule registry
    # ------------------------------------------------------------------

    def register_rule(self, rule: AlertRule | Mapping[str, Any]) -> AlertRule:
        """Validate and activate a rule.

        Accepts either an AlertRule or a raw mapping (e.g. from YAML). The
        rule is re-validated either way, so instances built with
        ``model_construct`` cannot skip validation.

        Returns:
            The registered AlertRule

        Raises:
            InvalidRuleConfiguration: Unknown condition, missing threshold,
                unknown metric, or duplicate id. Other rules are unaffected.
        """
        raw = rule.model_dump() if isinstance(rule, AlertRule) else dict(rule)
        rule_id = raw.get("id") if isinstance(raw.get("id"), str) else None

        try:
            validated = AlertRule.model_validate(raw)
        except ValidationError as e:
            raise InvalidRuleConfiguration(rule_id, _validation_reasons(e)) from e

        if self._store is not None and validated.metric_id not in self._store:
            raise InvalidRuleConfiguration(
                validated.id, [f"metric_id: unknown metric '{validated.metric_id}'"]
            )

        with self._registry_lock:
            if validated.id in self._rules:
                raise InvalidRuleConfiguration(validated.id, ["id: rule already registered"])
            self._rules[validated.id] = validated
            self._rule_locks.setdefault(validated.id, threading.Lock())

        logger.info(
            "Registered alert rule %s on %s (%s %s, cooldown=%ss)",
            validated.id,
            validated.metric_id,
            validated.condition.value,
            validated.threshold,
            validated.cooldown,
        )
        return validated

    def remove_rule(self, rule_id: str) -> bool:
        with self._registry_lock:
            removed = self._rules.pop(rule_id, None)
            self._rule_locks.pop(rule_id, None)
        return removed is not None

    def get_rule(self, rule_id: str) -> AlertRule | None:
        return self._rules.get(rule_id)

    def rules(self, metric_id: str | None = None) -> list[AlertRule]:
        rules = list(self._rules.values())
        if metric_id is not None:
            rules = [r for r in rules if r.metric_id == metric_id]
        return rules

    def set_enabled(self, rule_id: str, enabled: bool) -> bool:
        """Enable or disable a registered rule.

        Returns:
            True if the rule exists
        """
        rule = self._rules.get(rule_id)
        if rule is None:
            return False
        rule.enabled = enabled
        logger.info("Alert rule %s %s", rule_id, "enabled" if enabled else "disabled")
        return True

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, rule: AlertRule, state: MetricState, now: datetime) -> EvaluationResult:
        """Evaluate one rule against a metric state at time ``now``.

        Args:
            rule: A validated rule
            state: Snapshot of the rule's metric
            now: Evaluation time (injected; never read from the wall clock)

        Returns:
            EvaluationResult describing the outcome
        """
        if not rule.enabled:
            return EvaluationResult(rule.id, EvaluationOutcome.DISABLED)

        latest = state.latest
        if latest is None:
            logger.debug("Rule %s skipped: no samples for %s", rule.id, state.metric_id)
            return EvaluationResult(rule.id, EvaluationOutcome.INSUFFICIENT_DATA)

        change_percent: float | None = None
        if rule.condition == AlertCondition.CHANGE_PERCENT:
            baseline = self._baseline_sample(rule, state)
            if baseline is None:
                return EvaluationResult(rule.id, EvaluationOutcome.INSUFFICIENT_DATA)
            trend = compute_trend(baseline.value, latest.value)
            if trend.change_percent is NO_BASELINE:
                return EvaluationResult(rule.id, EvaluationOutcome.NO_BASELINE)
            change_percent = trend.change_percent
            observed = change_percent
        else:
            observed = latest.value

        if not self._condition_matches(rule, observed):
            return EvaluationResult(rule.id, EvaluationOutcome.NOT_MATCHED, observed=observed)

        # Cooldown state is shared by id with the registered copy of the rule
        registered = self._rules.get(rule.id, rule)
        lock = self._lock_for(rule.id)
        with lock:
            if registered.in_cooldown(now) or rule.in_cooldown(now):
                last = max(
                    t for t in (registered.last_triggered, rule.last_triggered) if t is not None
                )
                logger.debug(
                    "Rule %s matched but suppressed by cooldown (last fired %s)",
                    rule.id,
                    last.isoformat(),
                )
                return EvaluationResult(
                    rule.id, EvaluationOutcome.COOLDOWN_SUPPRESSED, observed=observed
                )
            registered.last_triggered = now
            rule.last_triggered = now

        event = AlertEvent(
            rule_id=rule.id,
            triggered_at=now,
            metric_value=latest.value,
            severity=rule.severity,
            message=self._format_message(rule, state, latest, change_percent),
            rule_name=rule.name,
            metric_id=rule.metric_id,
            condition=rule.condition,
            threshold=rule.threshold,
            change_percent=change_percent,
            notifications=tuple(n for n in rule.notifications if n.enabled),
        )
        self._fired.append(event)
        logger.info(
            "Alert rule %s fired (%s): %s", rule.id, rule.severity.value, event.message
        )
        self._dispatch(event)
        return EvaluationResult(rule.id, EvaluationOutcome.FIRED, observed=observed, event=event)

    def evaluate_metric(self, state: MetricState, now: datetime) -> list[EvaluationResult]:
        """Evaluate every registered rule that watches ``state``'s metric.

        A failure in one rule is logged and does not stop the others.
        """
        results: list[EvaluationResult] = []
        for rule in self.rules(state.metric_id):
            try:
                results.append(self.evaluate(rule, state, now))
            except Exception:
                logger.exception("Alert rule %s evaluation failed", rule.id)
        return results

    def fired_events(self, since: datetime | None = None) -> list[AlertEvent]:
        """Fired alerts kept in memory, oldest first."""
        events = list(self._fired)
        if since is not None:
            events = [e for e in events if e.triggered_at >= since]
        return events

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_for(self, rule_id: str) -> threading.Lock:
        lock = self._rule_locks.get(rule_id)
        if lock is None:
            with self._registry_lock:
                lock = self._rule_locks.setdefault(rule_id, threading.Lock())
        return lock

    @staticmethod
    def _baseline_sample(rule: AlertRule, state: MetricState) -> MetricSample | None:
        """Sample the percent change is measured from.

        With ``time_window == 0`` this is the previous sample. Otherwise it
        is the oldest sample no older than ``time_window`` seconds before
        the latest one.
        """
        history = state.history
        if len(history) < 2:
            return None
        if rule.time_window == 0:
            return history[-2]

        cutoff = history[-1].timestamp - timedelta(seconds=rule.time_window)
        for sample in history[:-1]:
            if sample.timestamp >= cutoff:
                return sample
        return None

    @staticmethod
    def _condition_matches(rule: AlertRule, observed: float) -> bool:
        if rule.condition == AlertCondition.GREATER_THAN:
            return observed > rule.threshold
        if rule.condition == AlertCondition.LESS_THAN:
            return observed < rule.threshold
        if rule.condition == AlertCondition.EQUALS:
            return math.isclose(
                observed, rule.threshold, rel_tol=EQUALS_TOLERANCE, abs_tol=EQUALS_TOLERANCE
            )
        # CHANGE_PERCENT: sign of the threshold selects rise or drop
        if rule.threshold > 0:
            return observed >= rule.threshold
        return observed <= rule.threshold

    @staticmethod
    def _format_message(
        rule: AlertRule,
        state: MetricState,
        latest: MetricSample,
        change_percent: float | None,
    ) -> str:
        definition = state.definition
        value_text = format_value(latest.value, definition.format, definition.unit)
        if change_percent is not None:
            return (
                f"{rule.name}: {definition.name} changed {change_percent:+.1f}% "
                f"to {value_text} (threshold {rule.threshold:+.1f}%)"
            )
        threshold_text = format_value(rule.threshold, definition.format, definition.unit)
        return (
            f"{rule.name}: {definition.name} is {value_text} "
            f"({rule.condition.value} {threshold_text})"
        )

    def _dispatch(self, event: AlertEvent) -> None:
        if self.dispatcher is None:
            return
        try:
            self.dispatcher.dispatch(event)
        except Exception:
            logger.warning("Dispatcher rejected alert %s", event.event_id, exc_info=True)


__all__ = ["AlertDispatcher", "AlertRuleEvaluator", "DEFAULT_ALERT_HISTORY"]
