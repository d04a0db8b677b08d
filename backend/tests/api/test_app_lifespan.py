"""Tests for the application lifespan building the runtime from settings."""

import pytest
from httpx import ASGITransport, AsyncClient
from livemetrics.alerts.channels import LogChannel
from livemetrics.alerts.models import ChannelType
from livemetrics.config import Settings
from livemetrics.main import create_app


@pytest.mark.asyncio
async def test_lifespan_builds_monitor_from_bundled_catalogue():
    settings = Settings(
        _env_file=None,
        demo_source_enabled=True,
        demo_source_seed=3,
        tick_interval_seconds=60,
        streaming_enabled=False,
    )
    app = create_app(settings)

    async with app.router.lifespan_context(app):
        scheduler = app.state.scheduler
        assert scheduler is not None
        assert scheduler.is_paused

        await scheduler.run_once()

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            data = (await ac.get("/api/metrics")).json()
        assert data["total"] == 10
        assert all(m["value"] is not None for m in data["metrics"])

    assert scheduler.is_running is False


@pytest.mark.asyncio
async def test_lifespan_without_demo_source():
    app = create_app(Settings(_env_file=None, demo_source_enabled=False))
    async with app.router.lifespan_context(app):
        assert app.state.scheduler is None
        assert app.state.monitor.summary().metrics_with_data == 0


@pytest.mark.asyncio
async def test_alerts_without_targets_are_routed_to_the_log():
    app = create_app(Settings(_env_file=None, demo_source_enabled=False))
    async with app.router.lifespan_context(app):
        dispatcher = app.state.dispatcher
        assert [t.type for t in dispatcher.default_targets] == [ChannelType.LOG]
        assert isinstance(dispatcher.channels[ChannelType.LOG.value], LogChannel)
