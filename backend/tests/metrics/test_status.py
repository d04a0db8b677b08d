"""Tests for threshold status classification."""

import pytest
from livemetrics.metrics.models import HealthStatus, ThresholdDirection, Thresholds
from livemetrics.metrics.status import classify

HIGH = ThresholdDirection.HIGHER_IS_WORSE
LOW = ThresholdDirection.LOWER_IS_WORSE


class TestClassifyHigherIsWorse:
    """Boundaries for metrics where larger values are adverse."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (99, HealthStatus.HEALTHY),
            (100, HealthStatus.WARNING),
            (150, HealthStatus.WARNING),
            (199.999, HealthStatus.WARNING),
            (200, HealthStatus.CRITICAL),
            (10_000, HealthStatus.CRITICAL),
        ],
    )
    def test_inclusive_boundaries(self, value, expected):
        """A value equal to a boundary counts as breaching it."""
        thresholds = Thresholds(warning=100, critical=200)
        assert classify(value, thresholds, HIGH) == expected

    def test_negative_values_are_healthy(self):
        thresholds = Thresholds(warning=1.0, critical=2.0)
        assert classify(-5, thresholds, HIGH) == HealthStatus.HEALTHY


class TestClassifyLowerIsWorse:
    """Boundaries for metrics where smaller values are adverse."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1250, HealthStatus.HEALTHY),
            (801, HealthStatus.HEALTHY),
            (800, HealthStatus.WARNING),
            (501, HealthStatus.WARNING),
            (500, HealthStatus.CRITICAL),
            (0, HealthStatus.CRITICAL),
        ],
    )
    def test_inclusive_boundaries(self, value, expected):
        thresholds = Thresholds(warning=800, critical=500)
        assert classify(value, thresholds, LOW) == expected


class TestClassifyPurity:
    """classify depends only on its arguments."""

    def test_same_inputs_same_output(self):
        thresholds = Thresholds(warning=100, critical=200)
        results = {classify(150, thresholds, HIGH) for _ in range(100)}
        assert results == {HealthStatus.WARNING}

    def test_direction_changes_result(self):
        """The same value and thresholds classify differently per direction."""
        thresholds = Thresholds(warning=5, critical=5)
        assert classify(10, thresholds, HIGH) == HealthStatus.CRITICAL
        assert classify(10, thresholds, LOW) == HealthStatus.HEALTHY

    def test_equal_thresholds_skip_warning(self):
        thresholds = Thresholds(warning=5, critical=5)
        assert classify(5, thresholds, HIGH) == HealthStatus.CRITICAL
        assert classify(4.9, thresholds, HIGH) == HealthStatus.HEALTHY
