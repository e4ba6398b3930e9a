"""User settings for pbsmon, read from a JSON file."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pbsmon.logger import get_logger

logger = get_logger(__name__)

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "WARNING"

# Refresh interval settings (in seconds)
MIN_REFRESH_INTERVAL = 5.0
MAX_REFRESH_INTERVAL = 600.0
DEFAULT_REFRESH_INTERVAL = 30.0

# Per-command timeout (in seconds)
MIN_COMMAND_TIMEOUT = 1.0
MAX_COMMAND_TIMEOUT = 120.0
DEFAULT_COMMAND_TIMEOUT = 10.0

DEFAULT_HOME_ROOT = "/home"
DEFAULT_SCRATCH_ROOT = "/scratch"


@dataclass(frozen=True)
class Settings:
    """User-configurable settings stored on disk."""

    log_level: str = DEFAULT_LOG_LEVEL
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    home_root: str = DEFAULT_HOME_ROOT
    scratch_root: str = DEFAULT_SCRATCH_ROOT
    # Tool name -> absolute path, as (name, path) pairs so the dataclass stays hashable
    executables: tuple[tuple[str, str], ...] = ()

    @property
    def executable_paths(self) -> dict[str, str]:
        """Get the executable path table as a dictionary."""
        return dict(self.executables)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> Settings:
        """Create settings from a mapping, applying defaults for invalid values.

        Args:
            data: Mapping containing raw settings values.

        Returns:
            A Settings instance with validated values.
        """
        log_level_value = _coerce_str(data.get("log_level"))
        log_level = (
            log_level_value.upper()
            if log_level_value is not None and log_level_value.upper() in LOG_LEVELS
            else DEFAULT_LOG_LEVEL
        )

        refresh_interval = _coerce_float(data.get("refresh_interval"))
        if (
            refresh_interval is None
            or refresh_interval < MIN_REFRESH_INTERVAL
            or refresh_interval > MAX_REFRESH_INTERVAL
        ):
            refresh_interval = DEFAULT_REFRESH_INTERVAL

        command_timeout = _coerce_float(data.get("command_timeout"))
        if command_timeout is None or command_timeout < MIN_COMMAND_TIMEOUT or command_timeout > MAX_COMMAND_TIMEOUT:
            command_timeout = DEFAULT_COMMAND_TIMEOUT

        home_root = _coerce_str(data.get("home_root")) or DEFAULT_HOME_ROOT
        scratch_root = _coerce_str(data.get("scratch_root")) or DEFAULT_SCRATCH_ROOT

        return cls(
            log_level=log_level,
            refresh_interval=refresh_interval,
            command_timeout=command_timeout,
            home_root=home_root,
            scratch_root=scratch_root,
            executables=_parse_executables(data.get("executables")),
        )


def get_config_dir() -> Path:
    """Get the directory used for persistent configuration.

    Returns:
        Path to the configuration directory.
    """
    override_dir = os.environ.get("PBSMON_CONFIG_DIR")
    if override_dir:
        return Path(override_dir).expanduser()

    base_dir = os.environ.get("XDG_CONFIG_HOME")
    if base_dir:
        return Path(base_dir).expanduser() / "pbsmon"

    return Path.home() / ".config" / "pbsmon"


def get_settings_path() -> Path:
    """Get the full path to the settings file."""
    return get_config_dir() / "settings.json"


def load_settings() -> Settings:
    """Load settings from disk.

    Returns:
        Loaded settings, or defaults if none exist.
    """
    settings_path = get_settings_path()
    if not settings_path.exists():
        return Settings()

    try:
        raw = json.loads(settings_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.warning(f"Failed to parse settings file {settings_path}: {exc}")
        return Settings()
    except OSError as exc:
        logger.warning(f"Failed to read settings file {settings_path}: {exc}")
        return Settings()

    if not isinstance(raw, dict):
        logger.warning(f"Settings file {settings_path} contains invalid data")
        return Settings()

    return Settings.from_mapping(raw)


def _coerce_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _coerce_float(value: object) -> float | None:
    """Coerce a value into a float if possible.

    Args:
        value: Raw value to coerce.

    Returns:
        Float value or None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _parse_executables(raw_table: object) -> tuple[tuple[str, str], ...]:
    """Parse the executable path table, keeping only absolute paths.

    Args:
        raw_table: Raw mapping of tool name to path.

    Returns:
        Tuple of (name, path) pairs.
    """
    if not isinstance(raw_table, dict):
        return ()

    parsed: list[tuple[str, str]] = []
    for name, path in raw_table.items():
        if not isinstance(name, str) or not isinstance(path, str):
            continue
        if not Path(path).is_absolute():
            logger.warning(f"Ignoring non-absolute path for {name!r}: {path!r}")
            continue
        parsed.append((name, path))
    return tuple(parsed)
