"""Shared test fixtures for fluxvoid."""

import asyncio
import random

import pytest

from fluxvoid.collector import DriveInfo, ProcInfo, Sample
from fluxvoid.config import Config
from fluxvoid.source import DriveReading, ProcessReading

GIB = 1024**3
MIB = 1024**2


class FakeSource:
    """MetricsSource returning fixed readings."""

    def __init__(
        self,
        cpu: float = 30.0,
        ram: float = 50.0,
        drives: list[DriveReading] | None = None,
        processes: list[ProcessReading] | None = None,
    ) -> None:
        self.cpu = cpu
        self.ram = ram
        self.drives = drives if drives is not None else [DriveReading("/", 100 * GIB, 35 * GIB)]
        self.processes = (
            processes if processes is not None else [ProcessReading("python", 512 * MIB)]
        )
        self.process_requests: list[int] = []

    def cpu_percent(self) -> float:
        return self.cpu

    def ram_percent(self) -> float:
        return self.ram

    def list_ready_drives(self) -> list[DriveReading]:
        return list(self.drives)

    def top_processes_by_memory(self, n: int) -> list[ProcessReading]:
        self.process_requests.append(n)
        return list(self.processes)


class BrokenSource:
    """MetricsSource where every query fails."""

    def cpu_percent(self) -> float:
        raise OSError("counter unavailable")

    def ram_percent(self) -> float:
        raise OSError("counter unavailable")

    def list_ready_drives(self) -> list[DriveReading]:
        raise PermissionError("drive enumeration denied")

    def top_processes_by_memory(self, n: int) -> list[ProcessReading]:
        raise RuntimeError("process table unreadable")


def make_sample(
    cpu: float = 30.0,
    ram: float = 50.0,
    gpu: float = 24.0,
    drives: tuple[DriveInfo, ...] = (DriveInfo("/", 35, 65.0),),
    processes: tuple[ProcInfo, ...] = (ProcInfo("python", 512),),
    net_up: int = 100,
    net_down: int = 1000,
) -> Sample:
    """Create a Sample for testing."""
    return Sample(
        cpu_pct=cpu,
        ram_pct=ram,
        gpu_pct=gpu,
        drives=drives,
        processes=processes,
        net_up_kbs=net_up,
        net_down_kbs=net_down,
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator."""
    return random.Random(1234)


@pytest.fixture
def config() -> Config:
    """Default configuration."""
    return Config()


async def wait_until(condition, timeout=1.0, interval=0.005):
    """Wait until condition() returns True, or timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise TimeoutError(f"Condition not met within {timeout}s")
        await asyncio.sleep(interval)
