"""Tests for samplers and rate derivation."""

import asyncio
import math
from unittest.mock import Mock

import pytest

from poptop.charts import ChartHandle, TextHandle
from poptop.monitor import (
    KIB,
    CPUSampler,
    DiskIOPSSampler,
    DiskIOSampler,
    LoadSampler,
    NetworkSampler,
    RateTracker,
    SamplerSettings,
    TopProcessesSampler,
    format_process_lines,
)
from poptop.sources import (
    DiskCounters,
    InterfaceCounters,
    LoadAverage,
    MetricSourceError,
    MetricSources,
    ProcessInfo,
)


@pytest.fixture
def settings():
    """Half-second sampling, four displayed samples, no smoothing."""
    return SamplerSettings(sample_interval=0.5, num_samples=4, smoothing_samples=1, top_rows=2)


@pytest.fixture
def sources():
    """Create a mock metric source."""
    return Mock(spec=MetricSources)


@pytest.fixture
def chart():
    return ChartHandle(title="Test")


def values(chart, name):
    return chart.series[name].values


def is_all_no_data(series):
    return all(math.isnan(v) for v in series)


def test_rate_tracker_primes_on_first_reading():
    """Test that no rate is reported relative to zero."""
    tracker = RateTracker(samples_per_second=2.0)

    assert not tracker.primed
    assert tracker.update(1000) is None
    assert tracker.primed
    assert tracker.update(1100) == 200.0


def test_rate_tracker_scale_and_reset():
    tracker = RateTracker(samples_per_second=1.0, scale=1 / KIB)
    tracker.update(0)

    assert tracker.update(4 * KIB) == 4.0

    tracker.reset()
    assert tracker.update(100 * KIB) is None


def test_settings_samples_per_second(settings):
    assert settings.samples_per_second == 2.0


@pytest.mark.asyncio
async def test_load_sampler_tick(chart, settings, sources):
    """Test that one tick pushes all three load averages."""
    sources.load_average.return_value = LoadAverage(load1=1.5, load5=1.0, load15=0.5)
    sampler = LoadSampler(chart, "load", settings, sources)

    await sampler.tick()

    assert sampler.tick_count == 1
    assert values(chart, "load1")[-1] == 1.5
    assert values(chart, "load5")[-1] == 1.0
    assert values(chart, "load15")[-1] == 0.5
    assert math.isnan(values(chart, "load1")[0])
    assert chart.x_labels[0] == "0s"


@pytest.mark.asyncio
async def test_cpu_sampler_min_avg_max(chart, settings, sources):
    sources.cpu_percents.side_effect = [[0.0, 0.0, 0.0], [10.0, 30.0, 50.0]]
    sampler = CPUSampler(chart, "cpu", settings, sources)

    await sampler.tick()
    await sampler.tick()

    assert values(chart, "min")[-1] == 10.0
    assert values(chart, "avg")[-1] == 30.0
    assert values(chart, "max")[-1] == 50.0


@pytest.mark.asyncio
async def test_cpu_sampler_discards_first_reading(chart, settings, sources):
    """Test that the reading which only starts the measurement is not charted as 0%."""
    sources.cpu_percents.return_value = [0.0, 0.0]
    sampler = CPUSampler(chart, "cpu", settings, sources)

    await sampler.tick()

    assert sampler.primed
    assert sampler.tick_count == 1
    for name in ("min", "avg", "max"):
        assert is_all_no_data(values(chart, name))


@pytest.mark.asyncio
async def test_cpu_sampler_publishes_smoothed_series(chart, sources):
    """Test that the chart receives the moving average, not raw samples."""
    settings = SamplerSettings(sample_interval=0.5, num_samples=3, smoothing_samples=2)
    sources.cpu_percents.side_effect = [[0.0], [10.0], [30.0]]
    sampler = CPUSampler(chart, "cpu", settings, sources)

    await sampler.tick()
    await sampler.tick()
    await sampler.tick()

    avg = values(chart, "avg")
    assert avg[0] == 10.0
    assert avg[1] == 20.0
    assert math.isnan(avg[2])


@pytest.mark.asyncio
async def test_network_sampler_rates(chart, settings, sources):
    """Test KiB/s rates on the busiest interface."""
    sources.network_counters.side_effect = [
        [InterfaceCounters("lo", 0, 0), InterfaceCounters("eth0", 1000, 50_000)],
        [InterfaceCounters("lo", 0, 0), InterfaceCounters("eth0", 1000 + 2 * KIB, 50_000 + 8 * KIB)],
    ]
    sampler = NetworkSampler(chart, "network", settings, sources)

    await sampler.tick()
    assert sampler.device == "eth0"
    assert is_all_no_data(values(chart, "sent"))

    await sampler.tick()
    assert values(chart, "sent")[-1] == 4.0
    assert values(chart, "recv")[-1] == 16.0


@pytest.mark.asyncio
async def test_network_device_hand_off_resets_without_spike(chart, settings, sources):
    """Test that switching interface starts the series over."""
    sources.network_counters.side_effect = [
        [InterfaceCounters("eth0", 0, 10 * KIB)],
        [InterfaceCounters("eth0", KIB, 11 * KIB)],
        [InterfaceCounters("eth0", KIB, 11 * KIB), InterfaceCounters("wlan0", 900 * KIB, 900 * KIB)],
        [InterfaceCounters("eth0", KIB, 11 * KIB), InterfaceCounters("wlan0", 901 * KIB, 902 * KIB)],
    ]
    sampler = NetworkSampler(chart, "network", settings, sources)

    await sampler.tick()
    await sampler.tick()
    assert values(chart, "recv")[-1] == 2.0

    await sampler.tick()
    assert sampler.device == "wlan0"
    assert is_all_no_data(values(chart, "recv"))
    assert is_all_no_data(values(chart, "sent"))

    await sampler.tick()
    assert values(chart, "recv")[-1] == 4.0
    assert values(chart, "sent")[-1] == 2.0
    assert len([v for v in values(chart, "recv") if not math.isnan(v)]) == 1


@pytest.mark.asyncio
async def test_disk_iops_sampler(chart, settings, sources):
    sources.disk_counters.side_effect = [
        DiskCounters(read_count=100, write_count=200, read_bytes=0, write_bytes=0),
        DiskCounters(read_count=110, write_count=205, read_bytes=0, write_bytes=0),
    ]
    sampler = DiskIOPSSampler(chart, "disk-iops", settings, sources)

    await sampler.tick()
    await sampler.tick()

    assert values(chart, "read")[-1] == 20.0
    assert values(chart, "write")[-1] == 10.0


@pytest.mark.asyncio
async def test_disk_io_sampler_kib(chart, settings, sources):
    sources.disk_counters.side_effect = [
        DiskCounters(read_count=0, write_count=0, read_bytes=0, write_bytes=0),
        DiskCounters(read_count=0, write_count=0, read_bytes=5 * KIB, write_bytes=KIB),
    ]
    sampler = DiskIOSampler(chart, "disk-io", settings, sources)

    await sampler.tick()
    await sampler.tick()

    assert values(chart, "read")[-1] == 10.0
    assert values(chart, "write")[-1] == 2.0


def test_format_process_lines():
    procs = [ProcessInfo(pid=42, user="root", cpu_percent=12.4, memory_percent=3.6, command="python")]

    assert format_process_lines(procs) == " 12%  42     python\n"
    assert format_process_lines(procs, by_memory=True) == "  4%  42     python\n"


@pytest.mark.asyncio
async def test_top_processes_sampler_feeds_both_panels(settings, sources):
    """Test that one snapshot updates the CPU and memory panels."""
    sources.processes.return_value = [
        ProcessInfo(pid=1, user="a", cpu_percent=90.0, memory_percent=1.0, command="busy"),
        ProcessInfo(pid=2, user="a", cpu_percent=1.0, memory_percent=80.0, command="hog"),
        ProcessInfo(pid=3, user="a", cpu_percent=5.0, memory_percent=5.0, command="idle"),
    ]
    cpu_panel = TextHandle(title="cpu")
    memory_panel = TextHandle(title="mem")
    sampler = TopProcessesSampler(cpu_panel, memory_panel, "top", settings, sources)

    assert sampler.interval == 2.0

    await sampler.tick()
    await sampler.tick()

    assert sources.processes.call_count == 2
    assert cpu_panel.text.splitlines()[0].endswith("busy")
    assert memory_panel.text.splitlines()[0].endswith("hog")
    assert len(cpu_panel.text.splitlines()) == 2


@pytest.mark.asyncio
async def test_start_stop_sampling(chart, sources):
    """Test starting and stopping a sampler task."""
    settings = SamplerSettings(sample_interval=0.01, num_samples=4)
    sources.load_average.return_value = LoadAverage(1.0, 1.0, 1.0)
    sampler = LoadSampler(chart, "load", settings, sources)

    sampler.start()
    assert sampler.running

    await asyncio.sleep(0.1)
    await sampler.stop()

    assert not sampler.running
    assert sampler.tick_count >= 2


@pytest.mark.asyncio
async def test_start_twice_is_noop(chart, settings, sources):
    sources.load_average.return_value = LoadAverage(1.0, 1.0, 1.0)
    sampler = LoadSampler(chart, "load", settings, sources)

    sampler.start()
    task = sampler._task
    sampler.start()

    assert sampler._task is task
    await sampler.stop()


@pytest.mark.asyncio
async def test_shutdown_observed_within_one_interval(chart, sources):
    """Test that setting the shutdown event ends a long-interval sampler promptly."""
    settings = SamplerSettings(sample_interval=30.0, num_samples=4)
    sources.load_average.return_value = LoadAverage(1.0, 1.0, 1.0)
    shutdown = asyncio.Event()
    sampler = LoadSampler(chart, "load", settings, sources, shutdown=shutdown)

    sampler.start()
    await asyncio.sleep(0.1)
    shutdown.set()

    await asyncio.wait_for(sampler._task, timeout=1.0)
    assert not sampler.running
    assert sampler.tick_count == 1


@pytest.mark.asyncio
async def test_metric_source_failure_reported(chart, sources):
    """Test that a source failure stops the sampler and calls back once."""
    settings = SamplerSettings(sample_interval=0.01, num_samples=4)
    error = MetricSourceError("load average unavailable")
    sources.load_average.side_effect = error
    on_failure = Mock()
    sampler = LoadSampler(chart, "load", settings, sources, on_failure=on_failure)

    sampler.start()
    await asyncio.wait_for(sampler._task, timeout=1.0)

    on_failure.assert_called_once_with(sampler, error)
    assert sampler.failure is error
    assert not sampler.running
    assert sampler.tick_count == 0


@pytest.mark.asyncio
async def test_stop_without_start(chart, settings, sources):
    sampler = LoadSampler(chart, "load", settings, sources)

    await sampler.stop()

    assert not sampler.running


@pytest.mark.asyncio
async def test_top_processes_first_snapshot_not_shown(settings, sources):
    """Test that the first snapshot, with meaningless CPU figures, is skipped."""
    sources.processes.return_value = [
        ProcessInfo(pid=1, user="a", cpu_percent=0.0, memory_percent=1.0, command="busy"),
    ]
    cpu_panel = TextHandle(title="cpu")
    memory_panel = TextHandle(title="mem")
    sampler = TopProcessesSampler(cpu_panel, memory_panel, "top", settings, sources)

    await sampler.tick()

    assert sampler.primed
    assert cpu_panel.text == ""
    assert memory_panel.text == ""
    assert cpu_panel.version == 0


@pytest.mark.asyncio
async def test_unexpected_error_reported(chart, sources):
    """Test that an error outside the metric source still reaches the failure callback."""
    settings = SamplerSettings(sample_interval=0.01, num_samples=4)
    error = ValueError("bad reading")
    sources.load_average.side_effect = error
    on_failure = Mock()
    sampler = LoadSampler(chart, "load", settings, sources, on_failure=on_failure)

    sampler.start()
    await asyncio.wait_for(sampler._task, timeout=1.0)

    on_failure.assert_called_once_with(sampler, error)
    assert sampler.failure is error
    assert not sampler.running

    await sampler.stop()
