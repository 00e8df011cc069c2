"""CLI commands for fluxvoid."""

from pathlib import Path

import click


def _load_config(path: Path | None):
    from fluxvoid.config import Config
    from fluxvoid.logging import config_invalid

    try:
        return Config.load(path)
    except ValueError as e:
        config_invalid(str(e))
        raise click.exceptions.Exit(1) from e


@click.group(invoke_without_command=True)
@click.version_option(package_name="fluxvoid")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default ~/.config/fluxvoid/config.toml)",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """Live terminal dashboard for CPU, memory, disk, process and network load.

    Runs the dashboard when no command is given. Press Q to quit.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@main.command()
@click.option("--interval", "-i", type=float, default=None, help="Seconds between refreshes")
@click.option("--seed", type=int, default=None, help="Seed for fallback and synthetic values")
@click.option("--ticks", "-n", type=click.IntRange(min=1), default=None, help="Exit after N ticks")
@click.option("--no-splash", is_flag=True, help="Skip the startup banner")
@click.option("--debug", is_flag=True, help="Log per-metric fallbacks to the log file")
@click.pass_context
def run(
    ctx: click.Context,
    interval: float | None = None,
    seed: int | None = None,
    ticks: int | None = None,
    no_splash: bool = False,
    debug: bool = False,
) -> None:
    """Run the live dashboard."""
    import logging

    from fluxvoid.logging import configure
    from fluxvoid.tui import run_dashboard

    config = _load_config(ctx.obj.get("config_path"))
    if interval is not None:
        if interval <= 0:
            raise click.BadParameter("must be > 0", param_hint="--interval")
        config.system.refresh_interval = interval

    configure(config, level=logging.DEBUG if debug else logging.INFO)
    run_dashboard(config, seed=seed, ticks=ticks, show_splash=not no_splash)


@main.command()
@click.option("--seed", type=int, default=None, help="Seed for fallback and synthetic values")
@click.pass_context
def snapshot(ctx: click.Context, seed: int | None) -> None:
    """Sample once and print a single frame."""
    from fluxvoid.logging import configure, get_console
    from fluxvoid.tui.app import build_sampler, snapshot_frame

    config = _load_config(ctx.obj.get("config_path"))
    configure(config)
    frame = snapshot_frame(config, build_sampler(config, seed))
    get_console().print(frame)


@main.group()
def config() -> None:
    """Manage configuration."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Display current configuration."""
    cfg = _load_config(ctx.obj.get("config_path"))
    path = ctx.obj.get("config_path") or cfg.config_path

    click.echo(f"Config file: {path}")
    click.echo(f"Exists: {path.exists()}")
    click.echo()
    click.echo("[system]")
    click.echo(f"  refresh_interval = {cfg.system.refresh_interval}")
    click.echo(f"  history_size = {cfg.system.history_size}")
    click.echo(f"  max_drives = {cfg.system.max_drives}")
    click.echo(f"  max_processes = {cfg.system.max_processes}")
    click.echo(f"  splash_seconds = {cfg.system.splash_seconds}")
    click.echo(f"  seed = {cfg.system.seed}")
    click.echo()
    click.echo("[thresholds]")
    click.echo(f"  danger = {cfg.thresholds.danger}")
    click.echo(f"  warning = {cfg.thresholds.warning}")
    click.echo(f"  low_disk_gb = {cfg.thresholds.low_disk_gb}")


@config.command("path")
@click.pass_context
def config_path_cmd(ctx: click.Context) -> None:
    """Print the config file location."""
    from fluxvoid.config import Config

    click.echo(ctx.obj.get("config_path") or Config().config_path)


@config.command("reset")
@click.confirmation_option(prompt="Reset config to defaults?")
@click.pass_context
def config_reset(ctx: click.Context) -> None:
    """Write the default configuration."""
    from fluxvoid.config import Config
    from fluxvoid.logging import config_created

    cfg = Config()
    path = ctx.obj.get("config_path") or cfg.config_path
    cfg.save(path)
    config_created(str(path))
