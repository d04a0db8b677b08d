"""Tests for alert rule models."""

from datetime import timedelta

import pytest
from livemetrics.alerts.models import (
    AlertCondition,
    AlertRule,
    AlertSeverity,
    ChannelType,
    EvaluationOutcome,
    EvaluationResult,
    NotificationTarget,
)
from pydantic import ValidationError

from tests.factories import at


class TestAlertRule:
    """Tests for AlertRule validation."""

    def test_defaults(self):
        rule = AlertRule(id="r1", metric_id="m", condition="greater_than", threshold=1)
        assert rule.name == "r1"
        assert rule.severity == AlertSeverity.MEDIUM
        assert rule.cooldown == 0
        assert rule.time_window == 0
        assert rule.enabled is True
        assert rule.notifications == []
        assert rule.last_triggered is None

    def test_from_yaml_shape(self):
        rule = AlertRule.model_validate(
            {
                "id": "rule-1",
                "name": "High Error Rate",
                "metric_id": "error_rate",
                "condition": "greater_than",
                "threshold": 2.0,
                "time_window": 300,
                "severity": "critical",
                "cooldown": 900,
                "notifications": [
                    {"type": "email", "target": "alerts@company.com"},
                    {"type": "slack", "target": "#alerts"},
                ],
            }
        )
        assert rule.condition == AlertCondition.GREATER_THAN
        assert rule.cooldown_delta == timedelta(seconds=900)
        assert rule.notifications[1] == NotificationTarget(type=ChannelType.SLACK, target="#alerts")

    @pytest.mark.parametrize("field,value", [("cooldown", -1), ("time_window", -5)])
    def test_negative_durations_rejected(self, field, value):
        with pytest.raises(ValidationError):
            AlertRule(id="r1", metric_id="m", condition="less_than", threshold=1, **{field: value})

    def test_unknown_notification_type_rejected(self):
        with pytest.raises(ValidationError):
            NotificationTarget(type="carrier_pigeon", target="roof")


class TestCooldownWindow:
    """AlertRule.in_cooldown."""

    def test_never_fired(self):
        rule = AlertRule(id="r1", metric_id="m", condition="equals", threshold=1, cooldown=60)
        assert rule.in_cooldown(at(0)) is False

    def test_window(self):
        rule = AlertRule(
            id="r1",
            metric_id="m",
            condition="equals",
            threshold=1,
            cooldown=60,
            last_triggered=at(0),
        )
        assert rule.in_cooldown(at(59)) is True
        assert rule.in_cooldown(at(60)) is False


def test_evaluation_result_fired_flag():
    assert EvaluationResult("r1", EvaluationOutcome.FIRED).fired is True
    assert EvaluationResult("r1", EvaluationOutcome.COOLDOWN_SUPPRESSED).fired is False
