"""YAML loader for metric and alert rule configuration.

This module provides utilities for loading YAML configuration files into
Pydantic models with proper validation and error handling.

Classes:
    MonitorConfig: Top-level configuration document
    YAMLLoader: Load YAML files into Pydantic models
    ConfigLoadError: Exception raised when YAML loading fails

Rules are kept as raw mappings here. They are validated one by one when
registered with the evaluator so a single bad rule does not reject the
whole file.

Example:
    >>> loader = YAMLLoader()
    >>> config = loader.load_file(Path("config/metrics.yml"), MonitorConfig)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from livemetrics.metrics.models import LiveMetricsBaseModel, MetricDefinition

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class MonitorConfig(LiveMetricsBaseModel):
    """Metric catalogue, alert rules and demo baselines.

    Attributes:
        metrics: Metric definitions
        rules: Raw alert rule mappings
        demo_baselines: Starting values for the random-walk demo source
    """

    metrics: list[MetricDefinition] = Field(default_factory=list)
    rules: list[dict[str, Any]] = Field(default_factory=list)
    demo_baselines: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_unique_metric_ids(self) -> MonitorConfig:
        seen: set[str] = set()
        for definition in self.metrics:
            if definition.id in seen:
                raise ValueError(f"duplicate metric id '{definition.id}'")
            seen.add(definition.id)
        return self


class ConfigLoadError(Exception):
    """Exception raised when YAML loading or validation fails.

    Attributes:
        message: Human-readable error description
        path: Path to the file that failed to load
    """

    def __init__(self, message: str, path: Path) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{message} ({path})")


def _format_errors(error: ValidationError) -> list[str]:
    messages = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item["loc"])
        messages.append(f"{loc}: {item['msg']}")
    return messages


class YAMLLoader:
    """Load YAML files into Pydantic models with validation."""

    def load_file(self, path: Path, model_cls: type[T]) -> T:
        """Load a single YAML file into a Pydantic model.

        Args:
            path: Path to the YAML file
            model_cls: Pydantic model class to deserialize into

        Returns:
            Validated Pydantic model instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigLoadError: If YAML parsing or model validation fails
        """
        if not path.exists():
            raise FileNotFoundError(f"YAML file not found: {path}")

        try:
            content = path.read_text(encoding="utf-8")
            return self.load_string(content, model_cls)
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"YAML syntax error: {e}", path) from e
        except ValidationError as e:
            raise ConfigLoadError(
                f"Validation failed: {'; '.join(_format_errors(e))}", path
            ) from e

    def load_string(self, content: str, model_cls: type[T]) -> T:
        """Parse YAML text into a model.

        Raises:
            yaml.YAMLError: On syntax errors
            ValidationError: On schema errors
        """
        data = yaml.safe_load(content)
        if data is None:
            data = {}
        return model_cls.model_validate(data)

    def validate_yaml(self, path: Path, model_cls: type[T]) -> list[str]:
        """Validate a YAML file without raising.

        Returns:
            List of error messages (empty if valid)
        """
        if not path.exists():
            return [f"File not found: {path}"]

        try:
            self.load_string(path.read_text(encoding="utf-8"), model_cls)
            return []
        except yaml.YAMLError as e:
            return [f"YAML syntax error: {e}"]
        except ValidationError as e:
            return _format_errors(e)


def load_monitor_config(path: Path) -> MonitorConfig:
    """Load the metric catalogue and rules from ``path``."""
    config = YAMLLoader().load_file(path, MonitorConfig)
    logger.info(
        "Loaded %d metrics and %d rules from %s",
        len(config.metrics),
        len(config.rules),
        path,
    )
    return config


__all__ = ["ConfigLoadError", "MonitorConfig", "YAMLLoader", "load_monitor_config"]
