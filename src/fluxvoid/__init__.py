"""fluxvoid - live terminal dashboard for host metrics."""
