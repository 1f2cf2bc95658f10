"""Local metric sources backed by psutil.

Every call is synchronous and may block briefly; samplers run them in a
worker thread. Any failure is raised as MetricSourceError.
"""

import logging
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)


class MetricSourceError(RuntimeError):
    """Raised when the operating system cannot provide a metric."""


@dataclass
class LoadAverage:
    """System load averaged over 1, 5 and 15 minutes."""

    load1: float
    load5: float
    load15: float


@dataclass
class InterfaceCounters:
    """Cumulative byte counters for one network interface."""

    name: str
    bytes_sent: int
    bytes_recv: int


@dataclass
class DiskCounters:
    """Cumulative disk operation and byte counters across all disks."""

    read_count: int
    write_count: int
    read_bytes: int
    write_bytes: int


@dataclass
class ProcessInfo:
    """One row of a process table snapshot."""

    pid: int
    user: str
    cpu_percent: float
    memory_percent: float
    command: str


class MetricSources:
    """Reads host metrics through psutil."""

    PROCESS_ATTRS = ["pid", "username", "cpu_percent", "memory_percent", "name"]

    def load_average(self) -> LoadAverage:
        try:
            load1, load5, load15 = psutil.getloadavg()
        except (OSError, psutil.Error) as e:
            raise MetricSourceError(f"Unable to read load average: {e}") from e
        return LoadAverage(load1=load1, load5=load5, load15=load15)

    def cpu_percents(self) -> list[float]:
        """Busy percentage of each core since the previous call."""
        try:
            percents = psutil.cpu_percent(interval=None, percpu=True)
        except (OSError, psutil.Error) as e:
            raise MetricSourceError(f"Unable to read CPU usage: {e}") from e
        if not percents:
            raise MetricSourceError("No CPU usage reported")
        return list(percents)

    def network_counters(self) -> list[InterfaceCounters]:
        try:
            per_nic = psutil.net_io_counters(pernic=True)
        except (OSError, psutil.Error) as e:
            raise MetricSourceError(f"Unable to read network counters: {e}") from e
        return [
            InterfaceCounters(name=name, bytes_sent=stat.bytes_sent, bytes_recv=stat.bytes_recv)
            for name, stat in per_nic.items()
        ]

    def disk_counters(self) -> DiskCounters:
        try:
            stat = psutil.disk_io_counters(perdisk=False)
        except (OSError, psutil.Error) as e:
            raise MetricSourceError(f"Unable to read disk counters: {e}") from e
        if stat is None:
            raise MetricSourceError("No disks found")
        return DiskCounters(
            read_count=stat.read_count,
            write_count=stat.write_count,
            read_bytes=stat.read_bytes,
            write_bytes=stat.write_bytes,
        )

    def processes(self) -> list[ProcessInfo]:
        """Snapshot of the process table.

        Processes that exit or deny access mid-scan are skipped.
        """
        procs = []
        try:
            for proc in psutil.process_iter(self.PROCESS_ATTRS, ad_value=None):
                info = proc.info
                procs.append(
                    ProcessInfo(
                        pid=info["pid"],
                        user=info["username"] or "",
                        cpu_percent=info["cpu_percent"] or 0.0,
                        memory_percent=info["memory_percent"] or 0.0,
                        command=info["name"] or "",
                    )
                )
        except (OSError, psutil.Error) as e:
            raise MetricSourceError(f"Unable to list processes: {e}") from e
        return procs


def busiest_interface(counters: list[InterfaceCounters]) -> InterfaceCounters:
    """Interface that has received the most bytes since boot.

    Raises:
        MetricSourceError: If no interface has received any data
    """
    busiest: InterfaceCounters | None = None
    for stat in counters:
        if stat.bytes_recv > 0 and (busiest is None or stat.bytes_recv > busiest.bytes_recv):
            busiest = stat

    if busiest is None:
        raise MetricSourceError("Could not find network device")
    return busiest


def top_processes(processes: list[ProcessInfo], rows: int) -> tuple[list[ProcessInfo], list[ProcessInfo]]:
    """Heaviest processes by CPU and by memory from one snapshot."""
    by_cpu = sorted(processes, key=lambda p: p.cpu_percent, reverse=True)[:rows]
    by_memory = sorted(processes, key=lambda p: p.memory_percent, reverse=True)[:rows]
    return by_cpu, by_memory
