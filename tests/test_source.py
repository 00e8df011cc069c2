"""Tests for the psutil-backed metrics source."""

import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import psutil

from fluxvoid.source import (
    DriveReading,
    ProcessReading,
    PsutilSource,
    default_source,
    process_start_time,
)


def _proc(name, rss):
    proc = MagicMock()
    proc.info = {"name": name, "memory_info": SimpleNamespace(rss=rss) if rss is not None else None}
    return proc


class TestPsutilSource:
    """PsutilSource with psutil patched out."""

    def test_cpu_and_ram(self) -> None:
        """CPU and RAM readings come from psutil."""
        with (
            patch("fluxvoid.source.psutil.cpu_percent", return_value=37.5),
            patch(
                "fluxvoid.source.psutil.virtual_memory",
                return_value=SimpleNamespace(percent=62.0),
            ),
        ):
            source = PsutilSource()
            assert source.cpu_percent() == 37.5
            assert source.ram_percent() == 62.0

    def test_primes_cpu_counter(self) -> None:
        """Construction makes the first non-blocking CPU call."""
        with patch("fluxvoid.source.psutil.cpu_percent", return_value=0.0) as cpu:
            PsutilSource()
        cpu.assert_called_once_with(interval=None)

    def test_drives_skip_unreadable_and_duplicates(self) -> None:
        """Partitions whose usage can't be read are not ready."""
        partitions = [
            SimpleNamespace(mountpoint="/"),
            SimpleNamespace(mountpoint="/media/cdrom"),
            SimpleNamespace(mountpoint="/"),
            SimpleNamespace(mountpoint="/home"),
        ]

        def usage(mountpoint):
            if mountpoint == "/media/cdrom":
                raise PermissionError("not ready")
            return SimpleNamespace(total=1000, free=250)

        with (
            patch("fluxvoid.source.psutil.cpu_percent", return_value=0.0),
            patch("fluxvoid.source.psutil.disk_partitions", return_value=partitions),
            patch("fluxvoid.source.psutil.disk_usage", side_effect=usage),
        ):
            drives = PsutilSource().list_ready_drives()

        assert drives == [DriveReading("/", 1000, 250), DriveReading("/home", 1000, 250)]

    def test_top_processes_sorted_and_limited(self) -> None:
        """Processes come back largest resident set first, limited to n."""
        procs = [_proc("a", 10), _proc("b", 300), _proc(None, 200), _proc("gone", None)]
        with (
            patch("fluxvoid.source.psutil.cpu_percent", return_value=0.0),
            patch("fluxvoid.source.psutil.process_iter", return_value=procs),
        ):
            top = PsutilSource().top_processes_by_memory(2)

        assert top == [ProcessReading("b", 300), ProcessReading("?", 200)]

    def test_vanished_process_is_skipped(self) -> None:
        """A process that exits mid-iteration is ignored."""

        class Vanished:
            @property
            def info(self):
                raise psutil.NoSuchProcess(1)

        with (
            patch("fluxvoid.source.psutil.cpu_percent", return_value=0.0),
            patch("fluxvoid.source.psutil.process_iter", return_value=[Vanished(), _proc("ok", 5)]),
        ):
            top = PsutilSource().top_processes_by_memory(5)

        assert top == [ProcessReading("ok", 5)]


def test_default_source_none_when_psutil_fails():
    """An unsupported platform yields no source instead of an error."""
    with patch("fluxvoid.source.psutil.cpu_percent", side_effect=NotImplementedError):
        assert default_source() is None


def test_default_source_is_psutil():
    """On a supported platform the psutil source is used."""
    with patch("fluxvoid.source.psutil.cpu_percent", return_value=0.0):
        assert isinstance(default_source(), PsutilSource)


class TestProcessStartTime:
    """Tests for process_start_time()."""

    def test_returns_create_time(self) -> None:
        with patch("fluxvoid.source.psutil.Process") as mock_process:
            mock_process.return_value.create_time.return_value = 1_700_000_000.5
            assert process_start_time() == 1_700_000_000.5

    def test_none_when_unavailable(self) -> None:
        """Denied process info falls back to None (state then uses now)."""
        with patch("fluxvoid.source.psutil.Process") as mock_process:
            mock_process.return_value.create_time.side_effect = psutil.AccessDenied(1)
            assert process_start_time() is None

    def test_real_process_started_in_past(self) -> None:
        started = process_start_time()
        assert started is not None
        assert started <= time.time()
