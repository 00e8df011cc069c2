"""Cooperative refresh loop driving sample -> update -> render -> present."""

import asyncio
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog

from fluxvoid.collector import Sampler
from fluxvoid.state import DashboardState

log = structlog.get_logger()

DEFAULT_INTERVAL = 0.25


class LoopState(Enum):
    """Lifecycle of the refresh loop."""

    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class RefreshLoop:
    """Owns the dashboard state and ticks it at a fixed interval.

    Each tick:
    1. Poll for the quit key (non-blocking); stop without sampling if seen
    2. Collect a sample in the default executor
    3. Apply it to the dashboard state
    4. Render a frame and hand it to the presenter
    5. Sleep for the interval

    The quit check happens once per tick, so the worst-case quit latency
    is one interval plus one tick of work. Only one sample is ever in
    flight and rendering never overlaps a state update.

    Args:
        sampler: Produces one Sample per tick.
        state: Dashboard state; this loop is its only writer.
        render: Maps (state, now) to a frame.
        present: Draws a frame, replacing the previous one.
        should_quit: Non-blocking poll, True once quit was requested.
        interval: Seconds to sleep between ticks.
        on_stop: Called once during STOPPING, before STOPPED.
        max_ticks: Stop after this many ticks (None = until quit).
        clock: Wall clock passed to render() for uptime.
    """

    def __init__(
        self,
        sampler: Sampler,
        state: DashboardState,
        render: Callable[[DashboardState, float], Any],
        present: Callable[[Any], None],
        should_quit: Callable[[], bool],
        interval: float = DEFAULT_INTERVAL,
        on_stop: Callable[[], None] | None = None,
        max_ticks: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.sampler = sampler
        self.state = state
        self._render = render
        self._present = present
        self._should_quit = should_quit
        self._interval = interval
        self._on_stop = on_stop
        self._max_ticks = max_ticks
        self._clock = clock
        self.status = LoopState.RUNNING
        self.ticks = 0

    async def run(self) -> None:
        """Tick until quit is requested, max_ticks is reached or the task is cancelled."""
        log.info("refresh_loop_started", interval=self._interval)
        try:
            while self.status is LoopState.RUNNING:
                if self._should_quit():
                    log.info("quit_requested", ticks=self.ticks)
                    self.status = LoopState.STOPPING
                    break

                await self.tick()

                if self._max_ticks is not None and self.ticks >= self._max_ticks:
                    self.status = LoopState.STOPPING
                    break

                await asyncio.sleep(self._interval)
        except asyncio.CancelledError:
            log.info("refresh_loop_cancelled", ticks=self.ticks)
            self.status = LoopState.STOPPING
            raise
        finally:
            self._teardown()

    async def tick(self) -> None:
        """Run one sample/update/render/present step."""
        sample = await self.sampler.collect()
        self.state.update(sample)
        frame = self._render(self.state, self._clock())
        self._present(frame)
        self.ticks += 1

    def _teardown(self) -> None:
        self.status = LoopState.STOPPING
        try:
            if self._on_stop is not None:
                self._on_stop()
        finally:
            self.status = LoopState.STOPPED
            log.info("refresh_loop_stopped", ticks=self.ticks)
