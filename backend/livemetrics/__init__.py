"""Real-time business and system metrics evaluator.

Bounded per-metric history, threshold status, trends, alert rules with
cooldown and a live event feed behind a small read-only HTTP API.
"""

from livemetrics.monitor import IngestResult, MetricsMonitor, MonitorSummary

__version__ = "0.1.0"

__all__ = ["IngestResult", "MetricsMonitor", "MonitorSummary", "__version__"]
