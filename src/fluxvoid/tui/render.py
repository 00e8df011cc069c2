"""Frame composition: DashboardState -> Rich layout tree.

render() is pure: given the same state, config and clock reading it
builds the same tree, and it never touches the terminal. Drawing the
tree is the job of the Live view in fluxvoid.tui.app.

Layout regions (addressable by name, e.g. frame["cpu"]):

    root
    ├── header            status + uptime
    ├── main
    │   ├── left
    │   │   ├── cpu       sparkline
    │   │   └── gpu       sparkline
    │   └── right
    │       ├── ram_disk  RAM bar + storage table
    │       └── net_proc  throughput + process table
    └── footer            quit hint
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from functools import partial

from rich import box
from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from fluxvoid.collector import DriveInfo, ProcInfo, Sample
from fluxvoid.config import Config
from fluxvoid.formatting import format_load, format_rate, format_uptime
from fluxvoid.history import HistoryBuffer
from fluxvoid.state import DashboardState
from fluxvoid.tui.sparkline import render_sparkline, threshold_color

BAR_FILL = "█"
BAR_EMPTY = "░"
DISK_BAR = "|"


def render(state: DashboardState, config: Config, now: float) -> Layout:
    """Build the full frame for the current state."""
    colors = config.tui.colors
    sample = state.current

    layout = Layout(name="root")
    layout.split_column(
        Layout(name="header", size=3),
        Layout(name="main"),
        Layout(name="footer", size=3),
    )
    layout["main"].split_row(Layout(name="left"), Layout(name="right"))
    layout["left"].split_column(Layout(name="cpu"), Layout(name="gpu"))
    layout["right"].split_column(Layout(name="ram_disk"), Layout(name="net_proc"))

    layout["header"].update(header_panel(state.uptime(now), config))
    layout["cpu"].update(
        sparkline_panel(
            "CPU CORE FLUX",
            state.cpu_history,
            sample.cpu_pct if sample else None,
            colors.primary,
            config,
        )
    )
    layout["gpu"].update(
        sparkline_panel(
            "GPU NEURAL NET",
            state.gpu_history,
            sample.gpu_pct if sample else None,
            colors.accent,
            config,
        )
    )
    layout["ram_disk"].update(memory_storage_panel(sample, config))
    layout["net_proc"].update(network_tasks_panel(sample, config))
    layout["footer"].update(footer_panel(config))
    return layout


# ─────────────────────────────────────────────────────────────────────────────
# Panels
# ─────────────────────────────────────────────────────────────────────────────


def header_panel(uptime_seconds: float, config: Config) -> Panel:
    colors = config.tui.colors
    text = Text.assemble(
        ("SYSTEM STATUS :: ONLINE", f"bold {colors.primary}"),
        " | ",
        (f"UPTIME: {format_uptime(uptime_seconds)}", colors.muted),
    )
    return Panel(text, box=box.SIMPLE)


def sparkline_panel(
    title: str,
    history: HistoryBuffer,
    current: float | None,
    base_color: str,
    config: Config,
) -> Panel:
    """Sparkline of a history with the current value underneath.

    The chart is always history.capacity columns wide.
    """
    chart = render_sparkline(
        history.values(),
        history.capacity,
        partial(load_color, base=base_color, config=config),
    )
    load = Text.assemble(
        ("LOAD: ", "bold"),
        format_load(current) if current is not None else "--",
    )
    return Panel(
        Group(chart, Text(), load),
        title=Text(title, style="bold"),
        title_align="left",
        box=box.HEAVY,
        border_style=base_color,
    )


def memory_storage_panel(sample: Sample | None, config: Config) -> Panel:
    colors = config.tui.colors
    label = Text("VOLATILE MEMORY", style=colors.muted, justify="center")
    bar = ram_bar(sample.ram_pct if sample else None, config)
    table = disk_table(sample.drives if sample else (), config)
    return Panel(
        Group(label, bar, Rule(Text("STORAGE MATRIX", style=colors.muted), align="left"), table),
        title="MEMORY & STORAGE",
        title_align="left",
        box=box.ROUNDED,
        border_style=colors.warning,
    )


def network_tasks_panel(sample: Sample | None, config: Config) -> Panel:
    colors = config.tui.colors
    net = network_text(sample)
    table = process_table(sample.processes if sample else (), config)
    return Panel(
        Group(net, Rule(style=colors.muted), table),
        title="NETWORK & TASKS",
        title_align="left",
        box=box.ROUNDED,
        border_style=colors.primary,
    )


def footer_panel(config: Config) -> Panel:
    text = Text.assemble(
        (" [Q] QUIT ", "black on white"),
        " ",
        ("System Monitoring Active...", config.tui.colors.muted),
    )
    return Panel(text, box=box.SIMPLE)


# ─────────────────────────────────────────────────────────────────────────────
# Panel contents
# ─────────────────────────────────────────────────────────────────────────────


def load_color(value: float, *, base: str, config: Config) -> str:
    """Threshold colour for a CPU/GPU load value."""
    t = config.thresholds
    c = config.tui.colors
    return threshold_color(
        value,
        base,
        warning=t.warning,
        danger=t.danger,
        warning_color=c.warning,
        danger_color=c.danger,
    )


def ram_bar(ram_pct: float | None, config: Config) -> Text:
    """Single horizontal bar scaled to RAM usage.

    Danger colour above the danger threshold, warning colour otherwise.
    """
    colors = config.tui.colors
    width = config.tui.ram_bar_width
    if ram_pct is None:
        return Text.assemble(("RAM USAGE ", "bold"), (BAR_EMPTY * width, colors.muted), " --")

    filled = max(0, min(width, round(ram_pct / 100 * width)))
    color = colors.danger if ram_pct > config.thresholds.danger else colors.warning
    return Text.assemble(
        ("RAM USAGE ", "bold"),
        (BAR_FILL * filled, color),
        (BAR_EMPTY * (width - filled), colors.muted),
        f" {format_load(ram_pct)}",
    )


def disk_rows(drives: Sequence[DriveInfo], config: Config) -> list[tuple[Text, Text, Text]]:
    """Table cells for each drive: name, free space, usage bar.

    The bar is floor(used_pct / 10) characters long.
    """
    colors = config.tui.colors
    rows = []
    for drive in drives:
        color = colors.danger if drive.free_gb < config.thresholds.low_disk_gb else colors.normal
        bar = DISK_BAR * math.floor(drive.used_pct / 10)
        rows.append(
            (
                Text(drive.name, style="bold"),
                Text(f"{drive.free_gb} GB", style=color),
                Text(bar, style=color),
            )
        )
    return rows


def disk_table(drives: Sequence[DriveInfo], config: Config) -> Table:
    table = Table(box=None, expand=True)
    table.add_column("Drive")
    table.add_column("Free")
    table.add_column("Bar")
    for row in disk_rows(drives, config):
        table.add_row(*row)
    return table


def process_rows(processes: Sequence[ProcInfo], config: Config) -> list[tuple[Text, Text]]:
    """Table cells for each process, in the order given."""
    colors = config.tui.colors
    return [
        (Text(p.name, style=colors.normal), Text(f"{p.memory_mb}MB", style=colors.muted))
        for p in processes
    ]


def process_table(processes: Sequence[ProcInfo], config: Config) -> Table:
    table = Table(
        box=None,
        expand=True,
        title=Text("HEAVY THREADS", style=config.tui.colors.muted),
    )
    table.add_column("Proc")
    table.add_column("RAM")
    for row in process_rows(processes, config):
        table.add_row(*row)
    return table


def network_text(sample: Sample | None) -> Text:
    if sample is None:
        return Text.assemble(("UP:", "bold"), " --\n", ("DN:", "bold"), " --")
    return Text.assemble(
        ("UP:", "bold"),
        f" {format_rate(sample.net_up_kbs)}\n",
        ("DN:", "bold"),
        f" {format_rate(sample.net_down_kbs)}",
    )
