"""Dashboard state owned by the refresh loop."""

import time

from fluxvoid.collector import Sample
from fluxvoid.history import MAX_HISTORY_POINTS, HistoryBuffer


class DashboardState:
    """Histories plus the most recent sample.

    The refresh loop is the only writer; the renderer reads it between
    updates.
    """

    def __init__(
        self,
        history_size: int = MAX_HISTORY_POINTS,
        started_at: float | None = None,
    ) -> None:
        self.cpu_history = HistoryBuffer(history_size)
        self.gpu_history = HistoryBuffer(history_size)
        self.ram_history = HistoryBuffer(history_size)
        self.current: Sample | None = None
        self.started_at = time.time() if started_at is None else started_at
        self.tick_count = 0

    @property
    def history_size(self) -> int:
        return self.cpu_history.capacity

    def update(self, sample: Sample) -> None:
        """Push the sample's percentages into history and make it current."""
        self.cpu_history.push(sample.cpu_pct)
        self.gpu_history.push(sample.gpu_pct)
        self.ram_history.push(sample.ram_pct)
        self.current = sample
        self.tick_count += 1

    def uptime(self, now: float) -> float:
        """Seconds since the dashboard started (never negative)."""
        return max(0.0, now - self.started_at)
