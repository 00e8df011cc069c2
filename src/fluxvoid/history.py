"""Fixed-capacity history of recent metric values.

One buffer per tracked metric (CPU, GPU, RAM). The renderer draws each
buffer as a sparkline, oldest value on the left.
"""

from collections import deque

MAX_HISTORY_POINTS = 40


class HistoryBuffer:
    """FIFO window of the most recent values.

    Stores up to capacity values (default 40 = 10 seconds at 250ms).
    """

    def __init__(self, capacity: int = MAX_HISTORY_POINTS) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._values: deque[float] = deque(maxlen=capacity)

    def __len__(self) -> int:
        """Return number of values in buffer."""
        return len(self._values)

    @property
    def is_empty(self) -> bool:
        """Return True if buffer has no values."""
        return len(self._values) == 0

    @property
    def capacity(self) -> int:
        """Return maximum number of values the buffer can hold."""
        return self._values.maxlen or 0

    @property
    def latest(self) -> float | None:
        """Most recently pushed value, or None when empty."""
        return self._values[-1] if self._values else None

    def push(self, value: float) -> None:
        """Append a value, evicting the oldest when full."""
        self._values.append(float(value))

    def values(self) -> list[float]:
        """Values oldest to newest (returns a copy)."""
        return list(self._values)

    def clear(self) -> None:
        """Empty the buffer."""
        self._values.clear()
