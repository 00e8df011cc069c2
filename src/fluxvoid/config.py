"""Configuration system for fluxvoid."""

from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit


@dataclass
class SystemConfig:
    """Sampling and refresh configuration."""

    refresh_interval: float = 0.25  # Seconds between ticks (4Hz)
    history_size: int = 40  # Points kept per sparkline
    max_drives: int = 2  # Drives shown in the storage table
    max_processes: int = 5  # Processes shown in the task table
    splash_seconds: float = 1.0  # Startup banner duration, 0 disables
    seed: int | None = None  # Seed for fallback/synthetic values (None = random)
    # Log file rotation
    log_max_bytes: int = 1024 * 1024  # Max log file size (1MB)
    log_backup_count: int = 2  # Number of backup log files to keep


@dataclass
class ThresholdsConfig:
    """Colour thresholds for load and storage.

    Load values strictly above danger use the danger colour, strictly
    above warning the warning colour. Drives with less than low_disk_gb
    free are drawn in the danger colour.
    """

    danger: float = 80.0
    warning: float = 50.0
    low_disk_gb: int = 10


# =============================================================================
# TUI Color Configuration
# =============================================================================


@dataclass
class ThemeColors:
    """Rich colour names for the dashboard.

    Colors can be named colors ("red1"), hex ("#ff5555") or Rich styles
    ("bold red").
    """

    primary: str = "spring_green2"  # CPU sparkline, task panel border
    accent: str = "deep_sky_blue1"  # GPU sparkline
    danger: str = "red1"
    warning: str = "yellow"
    normal: str = "green"  # Healthy drives, process names
    muted: str = "grey50"  # Labels and secondary text


@dataclass
class TUIConfig:
    """TUI-specific configuration."""

    colors: ThemeColors = field(default_factory=ThemeColors)
    ram_bar_width: int = 40


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively.

    None values are skipped; TOML has no null.
    """
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if value is None:
            continue
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


@dataclass
class Config:
    """Main configuration container."""

    system: SystemConfig = field(default_factory=SystemConfig)
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    tui: TUIConfig = field(default_factory=TUIConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "fluxvoid"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs."""
        return Path.home() / ".local" / "state" / "fluxvoid"

    @property
    def log_path(self) -> Path:
        """Dashboard log path."""
        return self.state_dir / "dashboard.log"

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("system", "thresholds", "tui"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        All defaults come from the dataclass definitions, so Config() and
        Config.load() on a missing file are identical.

        Raises:
            ValueError: If the file can't be parsed, or a value has the wrong type
                or is out of range.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            system=_load_system_config(_section(data, "system")),
            thresholds=_load_thresholds_config(_section(data, "thresholds")),
            tui=_load_tui_config(_section(data, "tui")),
        )


def _int(data: dict, key: str, default: int, minimum: int) -> int:
    """Read an integer field, rejecting floats, bools and strings."""
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return int(value)


def _number(data: dict, key: str, default: float) -> float:
    """Read an int or float field as a float."""
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    return float(value)


def _str(data: dict, key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return str(value)


def _section(data: dict, key: str) -> dict:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"[{key}] must be a table, got {value!r}")
    return value


def _load_system_config(data: dict) -> SystemConfig:
    """Load system config from TOML data, using dataclass defaults for missing fields."""
    d = SystemConfig()

    refresh_interval = _number(data, "refresh_interval", d.refresh_interval)
    if refresh_interval <= 0:
        raise ValueError(f"refresh_interval must be > 0, got {refresh_interval}")
    splash_seconds = _number(data, "splash_seconds", d.splash_seconds)
    if splash_seconds < 0:
        raise ValueError(f"splash_seconds must be >= 0, got {splash_seconds}")

    seed = data.get("seed", d.seed)
    if seed is not None:
        seed = _int(data, "seed", 0, minimum=0)

    return SystemConfig(
        refresh_interval=refresh_interval,
        history_size=_int(data, "history_size", d.history_size, minimum=1),
        max_drives=_int(data, "max_drives", d.max_drives, minimum=0),
        max_processes=_int(data, "max_processes", d.max_processes, minimum=0),
        splash_seconds=splash_seconds,
        seed=seed,
        log_max_bytes=_int(data, "log_max_bytes", d.log_max_bytes, minimum=0),
        log_backup_count=_int(data, "log_backup_count", d.log_backup_count, minimum=0),
    )


def _load_thresholds_config(data: dict) -> ThresholdsConfig:
    """Load thresholds config from TOML data."""
    d = ThresholdsConfig()

    danger = _number(data, "danger", d.danger)
    warning = _number(data, "warning", d.warning)
    if not 0 <= warning <= danger <= 100:
        raise ValueError(
            f"thresholds must satisfy 0 <= warning <= danger <= 100, "
            f"got warning={warning}, danger={danger}"
        )

    return ThresholdsConfig(
        danger=danger,
        warning=warning,
        low_disk_gb=_int(data, "low_disk_gb", d.low_disk_gb, minimum=0),
    )


def _load_tui_config(data: dict) -> TUIConfig:
    """Load TUI config from TOML data.

    Handles the nested [tui.colors] section with defaults.
    """
    tui_defaults = TUIConfig()
    colors_data = _section(data, "colors")
    c = ThemeColors()

    return TUIConfig(
        colors=ThemeColors(
            primary=_str(colors_data, "primary", c.primary),
            accent=_str(colors_data, "accent", c.accent),
            danger=_str(colors_data, "danger", c.danger),
            warning=_str(colors_data, "warning", c.warning),
            normal=_str(colors_data, "normal", c.normal),
            muted=_str(colors_data, "muted", c.muted),
        ),
        ram_bar_width=_int(data, "ram_bar_width", tui_defaults.ram_bar_width, minimum=1),
    )
