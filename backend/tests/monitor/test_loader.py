"""Tests for YAML configuration loading."""

from pathlib import Path

import pytest
from livemetrics.config import DEFAULT_METRICS_CONFIG
from livemetrics.loader import ConfigLoadError, MonitorConfig, YAMLLoader, load_monitor_config
from livemetrics.metrics.models import ThresholdDirection
from livemetrics.monitor import MetricsMonitor

VALID = """
metrics:
  - id: error_rate
    name: Error Rate
    category: system
    unit: "%"
    format: percentage
    thresholds: {warning: 1.0, critical: 2.0}
    direction: higher_is_worse
rules:
  - id: r1
    metric_id: error_rate
    condition: greater_than
    threshold: 2.0
demo_baselines:
  error_rate: 0.5
"""


class TestYAMLLoader:
    """Tests for YAMLLoader."""

    def test_load_file(self, tmp_path):
        path = tmp_path / "metrics.yml"
        path.write_text(VALID)

        config = YAMLLoader().load_file(path, MonitorConfig)

        assert config.metrics[0].direction == ThresholdDirection.HIGHER_IS_WORSE
        assert config.rules[0]["id"] == "r1"
        assert config.demo_baselines == {"error_rate": 0.5}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            YAMLLoader().load_file(tmp_path / "absent.yml", MonitorConfig)

    def test_empty_file_is_empty_config(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        config = YAMLLoader().load_file(path, MonitorConfig)
        assert config.metrics == []

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("metrics: [unclosed")
        with pytest.raises(ConfigLoadError, match="YAML syntax error"):
            YAMLLoader().load_file(path, MonitorConfig)

    def test_missing_direction_fails_validation(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text(VALID.replace("    direction: higher_is_worse\n", ""))
        with pytest.raises(ConfigLoadError) as exc_info:
            YAMLLoader().load_file(path, MonitorConfig)
        assert "direction" in exc_info.value.message
        assert exc_info.value.path == path

    def test_duplicate_metric_ids(self, tmp_path):
        path = tmp_path / "dup.yml"
        first_metric = VALID.split("rules:")[0]
        duplicate = first_metric + first_metric.replace("metrics:\n", "")
        path.write_text(duplicate)
        with pytest.raises(ConfigLoadError, match="duplicate metric id"):
            YAMLLoader().load_file(path, MonitorConfig)

    def test_validate_yaml_reports_without_raising(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("metrics: [{id: x}]")
        errors = YAMLLoader().validate_yaml(path, MonitorConfig)
        assert errors
        assert YAMLLoader().validate_yaml(tmp_path / "absent.yml", MonitorConfig) == [
            f"File not found: {tmp_path / 'absent.yml'}"
        ]


class TestBundledCatalogue:
    """The default metrics.yml shipped with the backend."""

    def test_loads_and_builds_monitor(self):
        config = load_monitor_config(Path(DEFAULT_METRICS_CONFIG))
        monitor = MetricsMonitor.from_config(config)

        assert len(config.metrics) == 10
        assert set(config.demo_baselines) == {m.id for m in config.metrics}
        assert {r.id for r in monitor.rules()} == {"rule-1", "rule-2"}
        assert monitor.rejected_rules == []
