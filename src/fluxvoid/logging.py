"""Centralized logging: Rich console lines and structlog JSON file.

This module provides:
1. Icon vocabulary (Icon class namespace)
2. Core console functions (log, info, error)
3. Dashboard lifecycle helpers (splash, shutdown_initiated, ...)
4. Structlog configuration (configure)

The live dashboard owns the terminal while it runs, so structlog events
go only to the JSON log file. Console helpers are used before and after
the live view.
"""

from __future__ import annotations

import logging
import logging.handlers
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.text import Text

if TYPE_CHECKING:
    from fluxvoid.config import Config

# Rich console for colorful human-readable output
_console = Console(highlight=False)


# ─────────────────────────────────────────────────────────────────────────────
# Icons
# ─────────────────────────────────────────────────────────────────────────────


class Icon:
    """Icon vocabulary for console output."""

    OK = "[bold green]✓[/]"
    FAIL = "[bold red]✗[/]"


_LEVEL_STYLES = {
    "info": "[bright_blue]\\[info][/]",
    "error": "[bold red]\\[err][/] ",
}


# ─────────────────────────────────────────────────────────────────────────────
# Core Functions
# ─────────────────────────────────────────────────────────────────────────────


def get_console() -> Console:
    """Console shared by the log helpers and the live dashboard."""
    return _console


def log(level: str, msg: str, icon: str = "") -> None:
    """Print a log message with timestamp and level.

    Args:
        level: Log level (info, error)
        msg: Message to print (can include Rich markup)
        icon: Optional icon to show after level (e.g., Icon.OK)
    """
    ts = datetime.now().strftime("%H:%M:%S")
    lvl = _LEVEL_STYLES.get(level, f"[{level}]")
    icon_part = f" {icon}" if icon else ""
    _console.print(f"[dim]{ts}[/] {lvl}{icon_part} {msg}", soft_wrap=True)


def info(msg: str, icon: str = "") -> None:
    """Log an info message."""
    log("info", msg, icon)


def error(msg: str, icon: str = "") -> None:
    """Log an error message."""
    log("error", msg, icon)


# ─────────────────────────────────────────────────────────────────────────────
# Dashboard Helpers
# ─────────────────────────────────────────────────────────────────────────────


def splash(title: str, color: str) -> None:
    """Print the startup banner."""
    _console.print(Rule(Text(title, style=f"bold {color}"), align="left", style=color))
    _console.print("[bold grey50]INITIALIZING CORE SYSTEMS...[/]")


def shutdown_initiated() -> None:
    """Print the final line after the live view closes."""
    _console.print("[red]SYSTEM SHUTDOWN INITIATED...[/]")


def config_created(path: str) -> None:
    """Log config file created."""
    info(f"Created config at [cyan]{escape(path)}[/]", Icon.OK)


def config_invalid(msg: str) -> None:
    """Log config file rejected."""
    error(escape(msg), Icon.FAIL)


# ─────────────────────────────────────────────────────────────────────────────
# Structlog Configuration
# ─────────────────────────────────────────────────────────────────────────────


def _add_source(source: str) -> structlog.types.Processor:
    """Create a processor that adds a source field to log events."""

    def processor(
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict["source"] = source
        return event_dict

    return processor


def configure(config: Config, level: int = logging.INFO) -> None:
    """Configure structlog to write JSON Lines to a rotating log file.

    Args:
        config: Application config with paths and rotation limits
        level: Minimum stdlib level (DEBUG includes per-metric fallbacks)
    """
    config.state_dir.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        config.log_path,
        maxBytes=config.system.log_max_bytes,
        backupCount=config.system.log_backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
                structlog.processors.add_log_level,
                _add_source("dashboard"),
                structlog.processors.format_exc_info,
            ],
        )
    )

    stdlib_root = logging.getLogger()
    stdlib_root.setLevel(level)
    stdlib_root.handlers.clear()
    stdlib_root.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
            structlog.processors.add_log_level,
            _add_source("dashboard"),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
