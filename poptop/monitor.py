"""Periodic samplers that feed bounded series from local metric sources."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .charts import ChartHandle, TextHandle, format_labels
from .series import BoundedSeries, mean_of, min_max
from .sources import (
    MetricSourceError,
    MetricSources,
    ProcessInfo,
    busiest_interface,
    top_processes,
)

logger = logging.getLogger(__name__)

KIB = 1024

# Hex forms of 256-colour palette entries 87, 93, 124, 202, 196 and 33
COLOR_CYAN = "#5fffff"
COLOR_PURPLE = "#8700ff"
COLOR_DARK_RED = "#af0000"
COLOR_ORANGE = "#ff5f00"
COLOR_RED = "#ff0000"
COLOR_BLUE = "#0087ff"


@dataclass(frozen=True)
class SamplerSettings:
    """Immutable copy of the configuration a sampler needs."""

    sample_interval: float
    num_samples: int
    smoothing_samples: int = 1
    top_rows: int = 25

    @property
    def samples_per_second(self) -> float:
        return 1.0 / self.sample_interval


class RateTracker:
    """Turns a cumulative counter into a per-second rate.

    The first reading only primes the tracker, so no rate is reported
    relative to zero.
    """

    def __init__(self, samples_per_second: float, scale: float = 1.0):
        self.samples_per_second = samples_per_second
        self.scale = scale
        self._previous: int | None = None

    @property
    def primed(self) -> bool:
        return self._previous is not None

    def update(self, reading: int) -> float | None:
        """Record a reading and return the rate since the previous one."""
        previous = self._previous
        self._previous = reading
        if previous is None:
            return None
        return (reading - previous) * self.samples_per_second * self.scale

    def reset(self) -> None:
        self._previous = None


FailureCallback = Callable[["Sampler", Exception], None]


class Sampler:
    """Runs one metric source on its own fixed-interval timer.

    Subclasses implement ``_read`` (blocking, runs in a worker thread) and
    ``_record`` (pushes derived values and publishes display series).
    """

    def __init__(
        self,
        name: str,
        settings: SamplerSettings,
        sources: MetricSources,
        shutdown: asyncio.Event | None = None,
        on_failure: FailureCallback | None = None,
        interval: float | None = None,
    ):
        """Initialize the sampler.

        Args:
            name: Name used in logs and failure reports
            settings: Sampling parameters snapshot
            sources: Metric source capability
            shutdown: Shared event that stops every sampler when set
            on_failure: Called once if the metric source fails
            interval: Seconds between samples (defaults to settings.sample_interval)
        """
        self.name = name
        self.settings = settings
        self.sources = sources
        self.interval = interval if interval is not None else settings.sample_interval
        self.failure: Exception | None = None
        self.tick_count = 0

        self._shutdown = shutdown if shutdown is not None else asyncio.Event()
        self._on_failure = on_failure
        self._task: asyncio.Task | None = None

        logger.info(f"Sampler '{name}' initialized: interval={self.interval}s, num_samples={settings.num_samples}, smoothing={settings.smoothing_samples}")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start sampling in a background task (no-op if already running)."""
        if self.running:
            logger.warning(f"{self.name}: Sampler already running, skipping start")
            return

        self._task = asyncio.create_task(self._sample_loop(), name=f"sampler-{self.name}")
        logger.info(f"{self.name}: Sampling started (interval={self.interval}s)")

    async def stop(self) -> None:
        """Stop sampling and wait for the task to finish."""
        if self._task is None:
            return

        task, self._task = self._task, None
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info(f"{self.name}: Sampler task cancelled")
        except Exception as e:
            logger.error(f"{self.name}: Sampler task ended with error: {e}", exc_info=True)

        logger.info(f"{self.name}: Sampling stopped after {self.tick_count} ticks")

    async def tick(self) -> None:
        """Take one sample and publish it."""
        reading = await asyncio.to_thread(self._read)
        self._record(reading)
        self.tick_count += 1

    async def _sample_loop(self):
        """Sample until the shutdown event is set or the source fails."""
        logger.info(f"{self.name}: Sample loop started")

        while not self._shutdown.is_set():
            try:
                await self.tick()
            except MetricSourceError as e:
                logger.error(f"{self.name}: Metric source failed after {self.tick_count} ticks: {e}", exc_info=True)
                self._report_failure(e)
                break
            except Exception as e:
                logger.error(f"{self.name}: Unexpected error after {self.tick_count} ticks: {e}", exc_info=True)
                self._report_failure(e)
                break

            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=self.interval)
            except TimeoutError:
                pass

        logger.info(f"{self.name}: Sample loop exited after {self.tick_count} ticks")

    def _report_failure(self, error: Exception) -> None:
        self.failure = error
        if self._on_failure:
            self._on_failure(self, error)

    def _read(self) -> Any:
        raise NotImplementedError

    def _record(self, reading: Any) -> None:
        raise NotImplementedError


class ChartSampler(Sampler):
    """Sampler that owns a set of named series drawn on one chart."""

    # (series name, colour) in drawing order
    SERIES: tuple[tuple[str, str], ...] = ()

    def __init__(self, chart: ChartHandle, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.chart = chart
        self.x_labels = format_labels(self.settings.num_samples, self.settings.sample_interval)
        self.series: dict[str, BoundedSeries] = {}
        self._reset_series()

    def _reset_series(self) -> None:
        self.series = {name: BoundedSeries(self.settings.num_samples) for name, _ in self.SERIES}

    def _push(self, name: str, value: float | None) -> None:
        if value is not None:
            self.series[name].push(value)

    def _publish(self) -> None:
        """Send the smoothed display series of every line to the chart."""
        for name, color in self.SERIES:
            self.chart.set_series(
                name,
                self.series[name].smoothed(self.settings.smoothing_samples),
                color=color,
                x_labels=self.x_labels,
            )


class LoadSampler(ChartSampler):
    """CPU load averaged over 1, 5 and 15 minutes."""

    SERIES = (("load15", COLOR_DARK_RED), ("load5", COLOR_PURPLE), ("load1", COLOR_CYAN))

    def _read(self):
        return self.sources.load_average()

    def _record(self, reading) -> None:
        self._push("load1", reading.load1)
        self._push("load5", reading.load5)
        self._push("load15", reading.load15)
        self._publish()


class CPUSampler(ChartSampler):
    """Minimum, average and maximum busy percentage across cores.

    Min/avg/max is easier to read at a glance than one line per core. The
    first reading only starts psutil's measurement period and is discarded.
    """

    SERIES = (("min", COLOR_BLUE), ("max", COLOR_RED), ("avg", COLOR_ORANGE))

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.primed = False

    def _read(self):
        return self.sources.cpu_percents()

    def _record(self, reading) -> None:
        if not self.primed:
            self.primed = True
            self._publish()
            return

        low, high = min_max(reading)
        self._push("avg", mean_of(reading))
        self._push("min", low)
        self._push("max", high)
        self._publish()


class NetworkSampler(ChartSampler):
    """Throughput in KiB/s on the interface that has received the most data.

    When a different interface becomes the busiest the series and rate state
    start over, so two interfaces are never mixed into one line.
    """

    SERIES = (("recv", COLOR_BLUE), ("sent", COLOR_RED))

    def __init__(self, *args: Any, **kwargs: Any):
        self.device: str | None = None
        super().__init__(*args, **kwargs)
        self._sent_rate = RateTracker(self.settings.samples_per_second, scale=1 / KIB)
        self._recv_rate = RateTracker(self.settings.samples_per_second, scale=1 / KIB)

    def _read(self):
        return busiest_interface(self.sources.network_counters())

    def _record(self, reading) -> None:
        if reading.name != self.device:
            if self.device is not None:
                logger.info(f"{self.name}: Busiest interface changed from '{self.device}' to '{reading.name}', resetting series")
            else:
                logger.info(f"{self.name}: Tracking interface '{reading.name}'")
            self.device = reading.name
            self._reset_series()
            self._sent_rate.reset()
            self._recv_rate.reset()

        self._push("sent", self._sent_rate.update(reading.bytes_sent))
        self._push("recv", self._recv_rate.update(reading.bytes_recv))
        self._publish()


class DiskIOPSSampler(ChartSampler):
    """Disk read and write operations per second."""

    SERIES = (("write", COLOR_BLUE), ("read", COLOR_RED))
    READ_FIELD = "read_count"
    WRITE_FIELD = "write_count"
    SCALE = 1.0

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._read_rate = RateTracker(self.settings.samples_per_second, scale=self.SCALE)
        self._write_rate = RateTracker(self.settings.samples_per_second, scale=self.SCALE)

    def _read(self):
        return self.sources.disk_counters()

    def _record(self, reading) -> None:
        self._push("read", self._read_rate.update(getattr(reading, self.READ_FIELD)))
        self._push("write", self._write_rate.update(getattr(reading, self.WRITE_FIELD)))
        self._publish()


class DiskIOSampler(DiskIOPSSampler):
    """Disk read and write throughput in KiB/s."""

    SERIES = (("read", COLOR_BLUE), ("write", COLOR_RED))
    READ_FIELD = "read_bytes"
    WRITE_FIELD = "write_bytes"
    SCALE = 1 / KIB


def format_process_lines(processes: list[ProcessInfo], by_memory: bool = False) -> str:
    """Render processes as ``%  pid  command`` lines."""
    lines = []
    for proc in processes:
        percent = proc.memory_percent if by_memory else proc.cpu_percent
        lines.append(f"{percent:3.0f}%  {proc.pid:<5d}  {proc.command}\n")
    return "".join(lines)


class TopProcessesSampler(Sampler):
    """Feeds the top-CPU and top-memory panels from one process snapshot.

    The process list is a point-in-time measure, so it is sampled four times
    less often than the charts. Per-process CPU percentages are only
    meaningful from the second snapshot on, so the first one is not shown.
    """

    INTERVAL_MULTIPLIER = 4

    def __init__(
        self,
        cpu_panel: TextHandle,
        memory_panel: TextHandle,
        name: str,
        settings: SamplerSettings,
        sources: MetricSources,
        **kwargs: Any,
    ):
        kwargs.setdefault("interval", settings.sample_interval * self.INTERVAL_MULTIPLIER)
        super().__init__(name, settings, sources, **kwargs)
        self.cpu_panel = cpu_panel
        self.memory_panel = memory_panel
        self.primed = False

    def _read(self):
        return self.sources.processes()

    def _record(self, reading) -> None:
        if not self.primed:
            self.primed = True
            return

        by_cpu, by_memory = top_processes(reading, self.settings.top_rows)
        self.cpu_panel.write(format_process_lines(by_cpu))
        self.memory_panel.write(format_process_lines(by_memory, by_memory=True))
