from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings

from livemetrics.log_setup import DEFAULT_FORMAT

DEFAULT_METRICS_CONFIG = Path(__file__).resolve().parent.parent / "config" / "metrics.yml"


class Settings(BaseSettings):
    # Buffers
    history_capacity: int = 60
    event_log_capacity: int = 50
    alert_history_capacity: int = 500

    # Streaming
    tick_interval_seconds: float = 5.0
    streaming_enabled: bool = True
    demo_source_enabled: bool = True
    demo_source_seed: int | None = None

    # Metric and rule definitions
    metrics_config_path: Path = DEFAULT_METRICS_CONFIG

    # Notification dispatch
    dispatch_queue_size: int = 1000
    dispatch_workers: int = 2
    dispatch_max_retries: int = 3
    dispatch_retry_base_delay: float = 1.0
    dispatch_timeout_seconds: float = 5.0

    # SMTP (email channel is only enabled when smtp_host is set)
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_sender: str = "alerts@localhost"
    smtp_username: str | None = None
    smtp_password: str | None = None

    # Slack incoming webhook (slack targets are logged when unset)
    slack_webhook_url: str | None = None

    # Logging
    log_level: str = "INFO"
    log_format: str = DEFAULT_FORMAT

    class Config:
        env_file = ".env"
        env_prefix = "LIVEMETRICS_"


@dataclass(frozen=True)
class DispatchConfig:
    """Tuning for the notification dispatcher.

    Delivery to a channel is always bounded by ``timeout_seconds`` so a slow
    channel cannot hold up ingestion.
    """

    queue_size: int = 1000
    workers: int = 2
    max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_multiplier: float = 2.0
    timeout_seconds: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "DispatchConfig":
        return cls(
            queue_size=settings.dispatch_queue_size,
            workers=settings.dispatch_workers,
            max_retries=settings.dispatch_max_retries,
            retry_base_delay=settings.dispatch_retry_base_delay,
            timeout_seconds=settings.dispatch_timeout_seconds,
        )


settings = Settings()
