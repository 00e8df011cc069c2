"""Live terminal presentation of the dashboard."""

from __future__ import annotations

import asyncio
import random
import time
from typing import Any

import structlog
from rich.console import Console
from rich.live import Live

from fluxvoid import logging as console_log
from fluxvoid.collector import Sampler
from fluxvoid.config import Config
from fluxvoid.loop import RefreshLoop
from fluxvoid.source import MetricsSource, default_source, process_start_time
from fluxvoid.state import DashboardState
from fluxvoid.tui.keys import QuitKeyPoller
from fluxvoid.tui.render import render

log = structlog.get_logger()

TITLE = "SPECTRE_FLUX"


def build_sampler(
    config: Config,
    seed: int | None = None,
    source: MetricsSource | None = None,
) -> Sampler:
    """Sampler wired from config. seed overrides config.system.seed."""
    if seed is None:
        seed = config.system.seed
    return Sampler(
        source if source is not None else default_source(),
        rng=random.Random(seed),
        max_drives=config.system.max_drives,
        max_processes=config.system.max_processes,
    )


def snapshot_frame(config: Config, sampler: Sampler, now: float | None = None) -> Any:
    """Collect a single sample and render it."""
    state = DashboardState(config.system.history_size)
    state.update(sampler.sample())
    return render(state, config, time.time() if now is None else now)


def run_dashboard(
    config: Config,
    *,
    seed: int | None = None,
    ticks: int | None = None,
    show_splash: bool = True,
    console: Console | None = None,
) -> RefreshLoop:
    """Run the live dashboard until quit, Ctrl-C or the tick limit.

    Returns:
        The finished loop (status STOPPED), for callers that report ticks.
    """
    console = console or console_log.get_console()
    sampler = build_sampler(config, seed)
    state = DashboardState(config.system.history_size, started_at=process_start_time())

    if show_splash and config.system.splash_seconds > 0:
        console_log.splash(TITLE, config.tui.colors.primary)
        time.sleep(config.system.splash_seconds)
        console.clear()

    log.info(
        "dashboard_starting",
        interval=config.system.refresh_interval,
        history_size=config.system.history_size,
        ticks=ticks,
    )

    with (
        QuitKeyPoller() as keys,
        Live(console=console, screen=True, auto_refresh=False) as live,
    ):

        def shutdown() -> None:
            live.stop()
            console_log.shutdown_initiated()

        loop = RefreshLoop(
            sampler,
            state,
            render=lambda s, now: render(s, config, now),
            present=lambda frame: live.update(frame, refresh=True),
            should_quit=keys.poll,
            interval=config.system.refresh_interval,
            on_stop=shutdown,
            max_ticks=ticks,
        )
        try:
            asyncio.run(loop.run())
        except KeyboardInterrupt:
            log.info("keyboard_interrupt")

    log.info("dashboard_stopped", ticks=loop.ticks)
    return loop
