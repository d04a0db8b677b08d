"""Tests for metric definition models."""

import pytest
from livemetrics.metrics.models import (
    MetricDefinition,
    MetricSample,
    MetricState,
    ThresholdDirection,
)
from pydantic import ValidationError

from tests.factories import at, make_definition


class TestMetricDefinition:
    """Validation of metric definitions."""

    def test_direction_is_required(self):
        with pytest.raises(ValidationError):
            MetricDefinition(
                id="x",
                name="X",
                category="system",
                thresholds={"warning": 1, "critical": 2},
            )

    def test_unknown_direction_rejected(self):
        with pytest.raises(ValidationError):
            make_definition(direction="sideways")

    def test_higher_is_worse_requires_warning_below_critical(self):
        with pytest.raises(ValidationError, match="must not exceed critical"):
            make_definition(warning=5, critical=2)

    def test_lower_is_worse_requires_warning_above_critical(self):
        with pytest.raises(ValidationError, match="must not be below critical"):
            make_definition(
                warning=500, critical=800, direction=ThresholdDirection.LOWER_IS_WORSE
            )

    def test_thresholds_are_not_reordered(self):
        definition = make_definition(
            warning=800, critical=500, direction=ThresholdDirection.LOWER_IS_WORSE
        )
        assert definition.thresholds.warning == 800
        assert definition.thresholds.critical == 500

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            make_definition(colour="red")

    def test_definition_is_frozen(self):
        definition = make_definition()
        with pytest.raises(ValidationError):
            definition.name = "other"


class TestMetricState:
    """Derived properties of MetricState."""

    def test_latest_and_previous(self):
        state = MetricState(
            definition=make_definition(),
            history=[MetricSample(at(0), 1.0), MetricSample(at(1), 2.0)],
        )
        assert state.latest.value == 2.0
        assert state.previous.value == 1.0
        assert state.metric_id == "error_rate"

    def test_empty_state(self):
        state = MetricState(definition=make_definition())
        assert state.latest is None
        assert state.previous is None
        assert state.target_progress is None

    def test_target_progress(self, active_users):
        state = MetricState(definition=active_users, history=[MetricSample(at(0), 1200)])
        assert state.target_progress == pytest.approx(80.0)
