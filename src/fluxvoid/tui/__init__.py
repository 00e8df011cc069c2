"""Terminal UI for fluxvoid."""

from fluxvoid.tui.app import run_dashboard

__all__ = ["run_dashboard"]
