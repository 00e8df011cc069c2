"""Metric sources consumed by the sampler.

A MetricsSource is any object with the four query methods below. Each
query may raise; the sampler treats every failure as "unavailable" and
substitutes a fallback value.
"""

from dataclasses import dataclass
from typing import Protocol

import psutil
import structlog

log = structlog.get_logger()


@dataclass(frozen=True)
class DriveReading:
    """Raw capacity figures for one mounted drive."""

    name: str
    total_bytes: int
    free_bytes: int


@dataclass(frozen=True)
class ProcessReading:
    """Raw resident memory for one process."""

    name: str
    resident_bytes: int


class MetricsSource(Protocol):
    """Host metric queries. Any method may raise."""

    def cpu_percent(self) -> float: ...

    def ram_percent(self) -> float: ...

    def list_ready_drives(self) -> list[DriveReading]: ...

    def top_processes_by_memory(self, n: int) -> list[ProcessReading]: ...


class PsutilSource:
    """MetricsSource backed by psutil.

    cpu_percent() is non-blocking: psutil compares against the previous
    call, so the first reading is primed in __init__.
    """

    def __init__(self) -> None:
        # First call returns 0.0
        psutil.cpu_percent(interval=None)

    def cpu_percent(self) -> float:
        return float(psutil.cpu_percent(interval=None))

    def ram_percent(self) -> float:
        return float(psutil.virtual_memory().percent)

    def list_ready_drives(self) -> list[DriveReading]:
        """Mounted partitions whose usage can be read, in mount order."""
        drives: list[DriveReading] = []
        seen: set[str] = set()
        for part in psutil.disk_partitions(all=False):
            if part.mountpoint in seen:
                continue
            seen.add(part.mountpoint)
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError:
                # Not ready (empty card reader, unmounted network share)
                log.debug("drive_not_ready", mountpoint=part.mountpoint)
                continue
            drives.append(
                DriveReading(
                    name=part.mountpoint,
                    total_bytes=usage.total,
                    free_bytes=usage.free,
                )
            )
        return drives

    def top_processes_by_memory(self, n: int) -> list[ProcessReading]:
        """The n processes with the largest resident set, largest first."""
        readings: list[ProcessReading] = []
        for proc in psutil.process_iter(["name", "memory_info"]):
            try:
                info = proc.info
                mem_info = info.get("memory_info")
                if mem_info is None:
                    continue
                readings.append(
                    ProcessReading(
                        name=info.get("name") or "?",
                        resident_bytes=mem_info.rss,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        readings.sort(key=lambda r: r.resident_bytes, reverse=True)
        return readings[:n]


def default_source() -> MetricsSource | None:
    """psutil-backed source, or None where psutil can't read this platform."""
    try:
        return PsutilSource()
    except (psutil.Error, OSError, NotImplementedError) as e:
        log.warning("metrics_source_unavailable", error=str(e))
        return None


def process_start_time() -> float | None:
    """Epoch seconds when this process started, or None if psutil can't tell."""
    try:
        return psutil.Process().create_time()
    except (psutil.Error, OSError) as e:
        log.warning("process_start_time_unavailable", error=str(e))
        return None
