"""Tests for the refresh loop state machine."""

import asyncio
import random

import pytest

from conftest import BrokenSource, FakeSource, wait_until
from fluxvoid.collector import Sampler
from fluxvoid.loop import LoopState, RefreshLoop
from fluxvoid.state import DashboardState


class CountingSampler(Sampler):
    """Sampler that records how many samples were taken."""

    def __init__(self, source=None) -> None:
        super().__init__(source or FakeSource(), random.Random(0))
        self.calls = 0

    def sample(self):
        self.calls += 1
        return super().sample()


def quit_before_tick(k: int):
    """should_quit that turns True at the top of tick k (1-based)."""
    polls = {"n": 0}

    def should_quit() -> bool:
        polls["n"] += 1
        return polls["n"] >= k

    return should_quit


def make_loop(should_quit, **kwargs) -> tuple[RefreshLoop, CountingSampler, list]:
    frames: list = []
    sampler = CountingSampler()
    loop = RefreshLoop(
        sampler,
        DashboardState(started_at=0.0),
        render=lambda state, now: (state.tick_count, now),
        present=frames.append,
        should_quit=should_quit,
        interval=kwargs.pop("interval", 0),
        clock=lambda: 42.0,
        **kwargs,
    )
    return loop, sampler, frames


class TestRefreshLoop:
    """RefreshLoop ticking and termination."""

    def test_initial_state_is_running(self) -> None:
        """A new loop starts in RUNNING."""
        loop, _, _ = make_loop(lambda: False)
        assert loop.status is LoopState.RUNNING
        assert loop.ticks == 0

    @pytest.mark.asyncio
    async def test_quit_before_first_tick(self) -> None:
        """Quit seen on the first poll: no sampling, no frames."""
        loop, sampler, frames = make_loop(lambda: True)
        await loop.run()
        assert loop.status is LoopState.STOPPED
        assert sampler.calls == 0
        assert frames == []

    @pytest.mark.parametrize("k", [1, 2, 3, 5])
    @pytest.mark.asyncio
    async def test_quit_before_tick_k(self, k: int) -> None:
        """Quit asserted before tick k: exactly k-1 ticks complete."""
        loop, sampler, frames = make_loop(quit_before_tick(k))
        await loop.run()
        assert loop.status is LoopState.STOPPED
        assert sampler.calls == k - 1
        assert loop.ticks == k - 1
        assert len(frames) == k - 1

    @pytest.mark.asyncio
    async def test_tick_order(self) -> None:
        """Each frame is rendered after its sample is applied."""
        loop, _, frames = make_loop(quit_before_tick(4))
        await loop.run()
        assert frames == [(1, 42.0), (2, 42.0), (3, 42.0)]
        assert loop.state.cpu_history.values() == [30.0, 30.0, 30.0]

    @pytest.mark.asyncio
    async def test_stops_within_one_interval(self) -> None:
        """A quit during the sleep is honoured on the next poll."""
        pressed = {"quit": False}
        loop, sampler, _ = make_loop(lambda: pressed["quit"], interval=0.05)

        task = asyncio.create_task(loop.run())
        await wait_until(lambda: loop.ticks == 1)
        pressed["quit"] = True
        await asyncio.wait_for(task, timeout=0.5)

        assert loop.status is LoopState.STOPPED
        assert sampler.calls == 1

    @pytest.mark.asyncio
    async def test_max_ticks(self) -> None:
        """The loop stops on its own after max_ticks."""
        loop, sampler, frames = make_loop(lambda: False, max_ticks=3)
        await loop.run()
        assert loop.status is LoopState.STOPPED
        assert sampler.calls == 3
        assert len(frames) == 3

    @pytest.mark.asyncio
    async def test_on_stop_runs_once_during_stopping(self) -> None:
        """Teardown hook runs once, while the loop is STOPPING."""
        seen: list[LoopState] = []
        loop, _, _ = make_loop(quit_before_tick(2), on_stop=lambda: seen.append(loop.status))
        await loop.run()
        assert seen == [LoopState.STOPPING]
        assert loop.status is LoopState.STOPPED

    @pytest.mark.asyncio
    async def test_cancellation_stops_cleanly(self) -> None:
        """Cancelling the task still runs teardown and ends STOPPED."""
        stopped: list[bool] = []
        loop, _, _ = make_loop(lambda: False, interval=10, on_stop=lambda: stopped.append(True))

        task = asyncio.create_task(loop.run())
        await wait_until(lambda: loop.ticks == 1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert stopped == [True]
        assert loop.status is LoopState.STOPPED
        assert loop.ticks == 1

    @pytest.mark.asyncio
    async def test_failing_source_never_stops_loop(self) -> None:
        """A broken metrics source degrades to fallbacks; ticks keep coming."""
        frames: list = []
        loop = RefreshLoop(
            CountingSampler(BrokenSource()),
            DashboardState(),
            render=lambda state, now: state.current,
            present=frames.append,
            should_quit=quit_before_tick(6),
            interval=0,
        )
        await loop.run()
        assert len(frames) == 5
        assert all(10 <= s.cpu_pct < 50 for s in frames)
