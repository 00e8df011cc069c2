"""Per-tick metric collection.

The Sampler assembles one immutable Sample per tick. It never raises:
every sub-metric is read independently and replaced by a documented
fallback when its source fails, so one broken subsystem never blanks the
rest of the dashboard.
"""

import asyncio
import math
import random
from dataclasses import dataclass

import structlog

from fluxvoid.source import MetricsSource

log = structlog.get_logger()

GIB = 1024**3
MIB = 1024**2

MAX_DRIVES = 2
MAX_PROCESSES = 5

# Fallback ranges, half-open like random.randrange
CPU_FALLBACK_RANGE = (10, 50)
RAM_FALLBACK_RANGE = (40, 70)
GPU_NOISE_RANGE = (-5, 15)
NET_UP_RANGE = (10, 500)
NET_DOWN_RANGE = (100, 20000)

GPU_CPU_FACTOR = 0.8


@dataclass(frozen=True)
class DriveInfo:
    """Display figures for one drive."""

    name: str
    free_gb: int
    used_pct: float


@dataclass(frozen=True)
class ProcInfo:
    """Display figures for one process."""

    name: str
    memory_mb: int


FALLBACK_DRIVE = DriveInfo(name="C:\\", free_gb=120, used_pct=65.0)
FALLBACK_PROCESS = ProcInfo(name="SYSTEM_IDLE", memory_mb=1024)


@dataclass(frozen=True)
class Sample:
    """Snapshot of every metric collected in one tick."""

    cpu_pct: float
    ram_pct: float
    gpu_pct: float
    drives: tuple[DriveInfo, ...]
    processes: tuple[ProcInfo, ...]
    net_up_kbs: int
    net_down_kbs: int


def clamp_pct(value: float) -> float:
    """Clamp a percentage to [0, 100]."""
    return max(0.0, min(100.0, float(value)))


def derive_gpu(cpu_pct: float, noise: float) -> float:
    """GPU proxy load: 80% of CPU load plus noise, clamped to [0, 100]."""
    return clamp_pct(cpu_pct * GPU_CPU_FACTOR + noise)


def drive_used_pct(total_bytes: int, free_bytes: int) -> float:
    """Percentage of a drive in use."""
    return clamp_pct(100 * (1.0 - free_bytes / total_bytes))


class Sampler:
    """Builds a Sample from a MetricsSource, falling back per sub-metric.

    Args:
        source: Metric queries, or None when the platform offers none
            (every metric then uses its fallback).
        rng: Random generator for fallback values, GPU noise and network
            throughput. Pass a seeded instance for reproducible output.
        max_drives: Number of ready drives to report.
        max_processes: Number of top processes to report.
    """

    def __init__(
        self,
        source: MetricsSource | None,
        rng: random.Random | None = None,
        max_drives: int = MAX_DRIVES,
        max_processes: int = MAX_PROCESSES,
    ) -> None:
        self._source = source
        self._rng = rng or random.Random()
        self._max_drives = max_drives
        self._max_processes = max_processes
        if source is None:
            log.debug("metrics_source_missing")

    def sample(self) -> Sample:
        """Collect one Sample. Never raises for source failures."""
        cpu = self._read_cpu()
        ram = self._read_ram()
        gpu = derive_gpu(cpu, self._rng.randrange(*GPU_NOISE_RANGE))
        drives = self._read_drives()
        processes = self._read_processes()
        # No network metering: throughput is a synthetic placeholder
        net_up = self._rng.randrange(*NET_UP_RANGE)
        net_down = self._rng.randrange(*NET_DOWN_RANGE)

        return Sample(
            cpu_pct=cpu,
            ram_pct=ram,
            gpu_pct=gpu,
            drives=drives,
            processes=processes,
            net_up_kbs=net_up,
            net_down_kbs=net_down,
        )

    async def collect(self) -> Sample:
        """Run sample() in executor (source queries are blocking)."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.sample)

    # ─────────────────────────────────────────────────────────────────────────

    def _read_cpu(self) -> float:
        if self._source is None:
            return self._cpu_fallback()
        try:
            return _finite_pct(self._source.cpu_percent())
        except Exception as e:
            log.debug("cpu_fallback", error=str(e))
            return self._cpu_fallback()

    def _read_ram(self) -> float:
        if self._source is None:
            return self._ram_fallback()
        try:
            return _finite_pct(self._source.ram_percent())
        except Exception as e:
            log.debug("ram_fallback", error=str(e))
            return self._ram_fallback()

    def _read_drives(self) -> tuple[DriveInfo, ...]:
        if self._source is None:
            return (FALLBACK_DRIVE,)
        try:
            drives: list[DriveInfo] = []
            for reading in self._source.list_ready_drives():
                if len(drives) >= self._max_drives:
                    break
                if reading.total_bytes <= 0:
                    continue
                drives.append(
                    DriveInfo(
                        name=reading.name,
                        free_gb=max(0, reading.free_bytes) // GIB,
                        used_pct=drive_used_pct(reading.total_bytes, reading.free_bytes),
                    )
                )
            return tuple(drives)
        except Exception as e:
            log.debug("drives_fallback", error=str(e))
            return (FALLBACK_DRIVE,)

    def _read_processes(self) -> tuple[ProcInfo, ...]:
        if self._source is None:
            return (FALLBACK_PROCESS,)
        try:
            readings = self._source.top_processes_by_memory(self._max_processes)
            procs = [
                ProcInfo(name=r.name, memory_mb=max(0, r.resident_bytes) // MIB)
                for r in readings
            ]
            procs.sort(key=lambda p: p.memory_mb, reverse=True)
            return tuple(procs[: self._max_processes])
        except Exception as e:
            log.debug("processes_fallback", error=str(e))
            return (FALLBACK_PROCESS,)

    def _cpu_fallback(self) -> float:
        return float(self._rng.randrange(*CPU_FALLBACK_RANGE))

    def _ram_fallback(self) -> float:
        return float(self._rng.randrange(*RAM_FALLBACK_RANGE))


def _finite_pct(value: float) -> float:
    value = float(value)
    if math.isnan(value):
        raise ValueError("metric is NaN")
    return clamp_pct(value)
