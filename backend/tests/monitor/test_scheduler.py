"""Tests for MetricScheduler and ingestion sources."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from livemetrics.monitor import MetricsMonitor
from livemetrics.scheduler import MetricScheduler
from livemetrics.sources import RandomWalkSource, Reading, StaticSource

from tests.factories import at


@pytest.fixture
def monitor(clock, error_rate, active_users):
    monitor = MetricsMonitor(clock=clock)
    monitor.register_metric(error_rate)
    monitor.register_metric(active_users)
    return monitor


class TestRunOnce:
    """A single scheduler tick."""

    @pytest.mark.asyncio
    async def test_ingests_every_reading(self, monitor, clock):
        source = StaticSource(
            [[Reading("error_rate", 0.4, at(0)), Reading("active_users", 1200, at(0))]]
        )
        scheduler = MetricScheduler(monitor, source, interval=5, clock=clock)

        results = await scheduler.run_once()

        assert len(results) == 2
        assert monitor.latest("active_users").value == 1200
        assert scheduler.ticks_completed == 1

    @pytest.mark.asyncio
    async def test_unknown_metric_readings_are_skipped(self, monitor, clock):
        source = StaticSource([[Reading("nope", 1.0, at(0)), Reading("error_rate", 0.4, at(0))]])
        scheduler = MetricScheduler(monitor, source, clock=clock)
        assert len(await scheduler.run_once()) == 1

    @pytest.mark.asyncio
    async def test_source_failure_skips_tick(self, monitor, clock):
        source = AsyncMock()
        source.poll.side_effect = ConnectionError("feed down")
        scheduler = MetricScheduler(monitor, source, clock=clock)

        assert await scheduler.run_once() == []
        assert scheduler.ticks_completed == 0

    @pytest.mark.asyncio
    async def test_polls_with_clock_time(self, monitor, clock):
        source = AsyncMock()
        source.poll.return_value = []
        clock.advance(30)
        await MetricScheduler(monitor, source, clock=clock).run_once()
        source.poll.assert_awaited_once_with(at(30))


class TestSchedulerControl:
    """start/stop, pause/resume and interval changes."""

    def test_invalid_interval(self, monitor):
        with pytest.raises(ValueError):
            MetricScheduler(monitor, StaticSource(), interval=0)

    @pytest.mark.asyncio
    async def test_start_ticks_and_stop(self, monitor, clock):
        source = AsyncMock()
        source.poll.return_value = []
        scheduler = MetricScheduler(monitor, source, interval=0.01, clock=clock)

        await scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert scheduler.is_running is False
        assert scheduler.ticks_completed >= 1
        ticks = scheduler.ticks_completed
        await asyncio.sleep(0.05)
        assert scheduler.ticks_completed == ticks

    @pytest.mark.asyncio
    async def test_paused_scheduler_does_not_tick(self, monitor, clock):
        source = AsyncMock()
        source.poll.return_value = []
        scheduler = MetricScheduler(monitor, source, interval=0.01, clock=clock)
        scheduler.pause()

        await scheduler.start()
        await asyncio.sleep(0.05)
        assert scheduler.ticks_completed == 0

        scheduler.resume()
        await asyncio.sleep(0.05)
        await scheduler.stop()
        assert scheduler.ticks_completed >= 1

    @pytest.mark.asyncio
    async def test_set_interval(self, monitor, clock):
        source = AsyncMock()
        source.poll.return_value = []
        scheduler = MetricScheduler(monitor, source, interval=60, clock=clock)

        await scheduler.start()
        scheduler.set_interval(0.01)
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert scheduler.interval == 0.01
        assert scheduler.ticks_completed >= 1
        with pytest.raises(ValueError):
            scheduler.set_interval(-1)


    @pytest.mark.asyncio
    async def test_lengthening_interval_does_not_tick(self, monitor, clock):
        source = AsyncMock()
        source.poll.return_value = []
        scheduler = MetricScheduler(monitor, source, interval=60, clock=clock)

        await scheduler.start()
        await asyncio.sleep(0.05)
        scheduler.set_interval(120)
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert scheduler.interval == 120
        assert scheduler.ticks_completed == 0
        source.poll.assert_not_awaited()

class TestRandomWalkSource:
    """Demo source."""

    @pytest.mark.asyncio
    async def test_values_stay_within_jitter(self):
        source = RandomWalkSource({"active_users": 1000.0}, seed=7)
        previous = 1000.0
        for i in range(20):
            (reading,) = await source.poll(at(i))
            assert reading.timestamp == at(i)
            assert previous * 0.98 <= reading.value <= previous * 1.02
            previous = reading.value

    @pytest.mark.asyncio
    async def test_seed_is_reproducible(self):
        a = RandomWalkSource({"m": 10.0}, seed=1)
        b = RandomWalkSource({"m": 10.0}, seed=1)
        assert await a.poll(at(0)) == await b.poll(at(0))


@pytest.mark.asyncio
async def test_static_source_replays_batches_in_order():
    source = StaticSource([[Reading("m", 1, at(0))]])
    source.push([Reading("m", 2, at(1))])
    assert [r.value for r in await source.poll(at(0))] == [1]
    assert [r.value for r in await source.poll(at(1))] == [2]
    assert await source.poll(at(2)) == []
