"""Cache of constructed widgets so the layout can be rebuilt without data loss."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .charts import ChartHandle, TextHandle, format_no_point, format_one_point, format_percent
from .config import WidgetId
from .monitor import (
    COLOR_BLUE,
    COLOR_CYAN,
    COLOR_DARK_RED,
    COLOR_ORANGE,
    COLOR_PURPLE,
    COLOR_RED,
    CPUSampler,
    DiskIOPSSampler,
    DiskIOSampler,
    FailureCallback,
    LoadSampler,
    NetworkSampler,
    Sampler,
    SamplerSettings,
    TopProcessesSampler,
)
from .sources import MetricSources

logger = logging.getLogger(__name__)

RenderHandle = ChartHandle | TextHandle


@dataclass
class CacheEntry:
    """A constructed widget: its render handle and the sampler feeding it."""

    widget_id: WidgetId
    handle: RenderHandle
    sampler: Sampler


# title, y-axis formatter, legend, sampler class
_CHARTS: dict[WidgetId, tuple[str, Callable[[float], str], list[tuple[str, str]], type]] = {
    WidgetId.LOAD: (
        "CPU Load",
        format_one_point,
        [("1min", COLOR_CYAN), ("5min", COLOR_PURPLE), ("15min", COLOR_DARK_RED)],
        LoadSampler,
    ),
    WidgetId.CPU: (
        "CPU (%)",
        format_percent,
        [("min", COLOR_BLUE), ("avg", COLOR_ORANGE), ("max", COLOR_RED)],
        CPUSampler,
    ),
    WidgetId.NETWORK: (
        "Network IO (KiB/s)",
        format_no_point,
        [("send", COLOR_RED), ("recv", COLOR_BLUE)],
        NetworkSampler,
    ),
    WidgetId.DISK_IOPS: (
        "Disk IOPS",
        format_no_point,
        [("read", COLOR_RED), ("write", COLOR_BLUE)],
        DiskIOPSSampler,
    ),
    WidgetId.DISK_IO: (
        "Disk IO (KiB/s)",
        format_no_point,
        [("read", COLOR_BLUE), ("write", COLOR_RED)],
        DiskIOSampler,
    ),
}


class WidgetCache:
    """Maps widget ids to constructed widgets, starting each sampler once.

    All samplers share one shutdown event, set by ``close``.
    """

    def __init__(
        self,
        settings: SamplerSettings,
        sources: MetricSources | None = None,
        on_failure: FailureCallback | None = None,
    ):
        """Initialize the cache.

        Args:
            settings: Sampling parameters copied into every sampler
            sources: Metric source capability (psutil-backed by default)
            on_failure: Called when any sampler's metric source fails
        """
        self.settings = settings
        self.sources = sources if sources is not None else MetricSources()
        self.on_failure = on_failure
        self.shutdown = asyncio.Event()
        self._entries: dict[WidgetId, CacheEntry] = {}
        logger.info(f"WidgetCache initialized: num_samples={settings.num_samples}, sample_interval={settings.sample_interval}s")

    def __contains__(self, widget_id: object) -> bool:
        return widget_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def samplers(self) -> list[Sampler]:
        """Distinct samplers of all cached widgets."""
        unique: list[Sampler] = []
        for entry in self._entries.values():
            if not any(entry.sampler is s for s in unique):
                unique.append(entry.sampler)
        return unique

    def entry(self, widget_id: WidgetId) -> CacheEntry:
        return self._entries[WidgetId(widget_id)]

    def resolve(self, widget_id: WidgetId) -> RenderHandle:
        """Return the render handle for a widget, building it on first use."""
        widget_id = WidgetId(widget_id)
        cached = self._entries.get(widget_id)
        if cached is not None:
            return cached.handle

        if widget_id in (WidgetId.TOP_CPU, WidgetId.TOP_MEM):
            self._build_top_panels()
        else:
            self._build_chart(widget_id)

        return self._entries[widget_id].handle

    def resolve_all(self, widget_ids: Iterable[WidgetId]) -> list[RenderHandle]:
        return [self.resolve(widget_id) for widget_id in widget_ids]

    def _build_chart(self, widget_id: WidgetId) -> None:
        title, y_format, legend, sampler_cls = _CHARTS[widget_id]
        chart = ChartHandle(title=title, y_format=y_format, legend=legend)
        sampler = sampler_cls(
            chart,
            widget_id.label,
            self.settings,
            self.sources,
            shutdown=self.shutdown,
            on_failure=self.on_failure,
        )
        self._entries[widget_id] = CacheEntry(widget_id, chart, sampler)
        sampler.start()
        logger.info(f"Built widget '{widget_id.label}'")

    def _build_top_panels(self) -> None:
        # Both panels come from the same process snapshot, so they are built together
        cpu_panel = TextHandle(title="Top CPU Processes (%, pid, command)")
        memory_panel = TextHandle(title="Top Memory Processes (%, pid, command)")
        sampler = TopProcessesSampler(
            cpu_panel,
            memory_panel,
            "top",
            self.settings,
            self.sources,
            shutdown=self.shutdown,
            on_failure=self.on_failure,
        )
        self._entries[WidgetId.TOP_CPU] = CacheEntry(WidgetId.TOP_CPU, cpu_panel, sampler)
        self._entries[WidgetId.TOP_MEM] = CacheEntry(WidgetId.TOP_MEM, memory_panel, sampler)
        sampler.start()
        logger.info("Built widgets 'top-cpu' and 'top-mem'")

    async def drop(self, widget_id: WidgetId) -> None:
        """Forget a widget, stopping its sampler once nothing else uses it."""
        entry = self._entries.pop(WidgetId(widget_id), None)
        if entry is None:
            return

        if not any(other.sampler is entry.sampler for other in self._entries.values()):
            await entry.sampler.stop()
        logger.info(f"Dropped widget '{entry.widget_id.label}'")

    async def close(self) -> None:
        """Signal shutdown to every sampler and wait for them to exit."""
        logger.info(f"Closing WidgetCache with {len(self._entries)} widgets")
        self.shutdown.set()
        for widget_id in list(self._entries):
            await self.drop(widget_id)
