"""Formatting utilities for consistent output across CLI and TUI."""


def format_uptime(seconds: float) -> str:
    """Format elapsed seconds as hh:mm:ss.

    Hours are not wrapped at 24, so a two-day session reads "48:00:00".
    Negative input is treated as zero.
    """
    total = int(max(0.0, seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_rate(kbs: int) -> str:
    """Format a throughput in KB/s.

    Returns:
        "<n> KB/s", e.g. "12345 KB/s".
    """
    return f"{kbs} KB/s"


def format_load(pct: float) -> str:
    """Format a percentage with one decimal place."""
    return f"{pct:.1f}%"
