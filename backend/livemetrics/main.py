"""FastAPI application factory for the live metrics dashboard backend.

Run with:
    uvicorn livemetrics.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from livemetrics.alerts.channels import (
    EmailChannel,
    LogChannel,
    NotificationChannel,
    SlackChannel,
    WebhookChannel,
)
from livemetrics.alerts.dispatcher import NotificationDispatcher
from livemetrics.alerts.models import ChannelType, NotificationTarget
from livemetrics.api import alerts_router, events_router, metrics_router
from livemetrics.config import DispatchConfig, Settings
from livemetrics.config import settings as default_settings
from livemetrics.loader import load_monitor_config
from livemetrics.log_setup import configure_logging
from livemetrics.monitor import MetricsMonitor
from livemetrics.scheduler import MetricScheduler
from livemetrics.sources import RandomWalkSource

logger = logging.getLogger(__name__)

# Alerts from rules without notification targets still reach the log
DEFAULT_TARGETS = (NotificationTarget(type=ChannelType.LOG, target="alerts"),)


def build_channels(settings: Settings) -> dict[ChannelType, NotificationChannel]:
    """Channel per target type.

    Email and Slack fall back to the log channel when not configured; SMS
    and LOG always go to the log.
    """
    log_channel = LogChannel()
    channels: dict[ChannelType, NotificationChannel] = {
        ChannelType.EMAIL: log_channel,
        ChannelType.SLACK: log_channel,
        ChannelType.WEBHOOK: WebhookChannel(timeout_seconds=settings.dispatch_timeout_seconds),
        ChannelType.SMS: log_channel,
        ChannelType.LOG: log_channel,
    }
    if settings.smtp_host:
        channels[ChannelType.EMAIL] = EmailChannel(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            sender=settings.smtp_sender,
            username=settings.smtp_username,
            password=settings.smtp_password,
        )
    if settings.slack_webhook_url:
        channels[ChannelType.SLACK] = SlackChannel(
            settings.slack_webhook_url, timeout_seconds=settings.dispatch_timeout_seconds
        )
    return channels


def create_app(settings: Settings | None = None, monitor: MetricsMonitor | None = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Application settings (module defaults when omitted)
        monitor: Prebuilt monitor; when given, the lifespan does not load
            configuration or start the dispatcher and scheduler

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown events."""
        if monitor is not None:
            app.state.monitor = monitor
            yield
            return

        # Startup
        configure_logging(settings.log_level, settings.log_format)
        config = load_monitor_config(settings.metrics_config_path)

        dispatcher = NotificationDispatcher(
            channels=build_channels(settings),
            config=DispatchConfig.from_settings(settings),
            default_targets=DEFAULT_TARGETS,
        )
        await dispatcher.start()
        app.state.dispatcher = dispatcher

        app.state.monitor = MetricsMonitor.from_config(
            config,
            dispatcher=dispatcher,
            history_capacity=settings.history_capacity,
            event_log_capacity=settings.event_log_capacity,
            alert_history_capacity=settings.alert_history_capacity,
        )

        scheduler = None
        if settings.demo_source_enabled and config.demo_baselines:
            scheduler = MetricScheduler(
                app.state.monitor,
                RandomWalkSource(config.demo_baselines, seed=settings.demo_source_seed),
                interval=settings.tick_interval_seconds,
            )
            if not settings.streaming_enabled:
                scheduler.pause()
            await scheduler.start()
        app.state.scheduler = scheduler

        yield

        # Shutdown
        if scheduler is not None:
            await scheduler.stop()
        await dispatcher.stop()
        logger.info(
            "Dispatcher stopped: %d delivered, %d failed, %d dropped",
            dispatcher.delivered_count,
            dispatcher.failed_count,
            dispatcher.dropped_count,
        )

    app = FastAPI(title="Live Metrics", version="0.1.0", lifespan=lifespan)

    # Include routers
    app.include_router(metrics_router)
    app.include_router(events_router)
    app.include_router(alerts_router)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
