"""Per-application settings for the single instance guard."""

from __future__ import annotations

import math
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..pid_file import pid_file_name
from .errors import ConfigurationError
from .runtime import env_seconds, env_str

DATA_DIR_ENV = "SINGLE_APP_INSTANCE_DATA_DIR"
MARKER_ENV = "SINGLE_APP_INSTANCE_MARKER"
RACE_DELAY_ENV = "SINGLE_APP_INSTANCE_RACE_DELAY_SECONDS"

DEFAULT_MARKER = "SingleAppInstance"
DEFAULT_RACE_DELAY_SECONDS = 1.0
_FALLBACK_APP_NAME = "python"


def default_app_name() -> str:
    """Return the name of the running application, derived from its entry script."""
    argv0 = sys.argv[0] if sys.argv else ""
    stem = Path(argv0).stem if argv0 else ""
    if not stem or stem in {"-c", "-m"}:
        return _FALLBACK_APP_NAME
    return stem


def _platform_data_root() -> Path:
    if os.name == "nt":
        appdata = os.getenv("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"
    xdg_data_home = os.getenv("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home)
    return Path.home() / ".local" / "share"


def resolve_app_data_dir(app_name: Optional[str] = None) -> Path:
    """
    Resolve a stable, writable directory for *app_name*.

    ``SINGLE_APP_INSTANCE_DATA_DIR`` takes precedence. Otherwise the directory lives
    under ``%APPDATA%`` on Windows and ``$XDG_DATA_HOME`` (``~/.local/share``) elsewhere.
    The directory is not created here.
    """
    override = env_str(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()

    name = default_app_name() if app_name is None else app_name.strip()
    if not name:
        raise ConfigurationError.missing_value("app_name", "cannot derive a data directory")
    if any(sep in name for sep in ("/", "\\")) or name in {".", ".."}:
        raise ConfigurationError.invalid_value("app_name", name, "Must be a single path component")
    return _platform_data_root() / name


@dataclass(frozen=True)
class InstanceConfig:
    """Where the fingerprint lives and how long the race window lasts."""

    data_dir: Path
    marker: str = DEFAULT_MARKER
    race_delay_seconds: float = DEFAULT_RACE_DELAY_SECONDS

    def __post_init__(self) -> None:
        if not self.marker or any(sep in self.marker for sep in ("/", "\\")):
            raise ConfigurationError.invalid_value("marker", self.marker, "Must be a non-empty file name fragment")
        if not math.isfinite(self.race_delay_seconds) or self.race_delay_seconds < 0:
            raise ConfigurationError.invalid_value("race_delay_seconds", self.race_delay_seconds, "Must be a finite, non-negative number")

    @property
    def pid_file_path(self) -> Path:
        return Path(self.data_dir) / pid_file_name(self.marker)

    @classmethod
    def from_env(cls, app_name: Optional[str] = None) -> "InstanceConfig":
        """Build configuration from environment variables and .env defaults."""
        marker = env_str(MARKER_ENV, or_value=DEFAULT_MARKER)
        race_delay = env_seconds(RACE_DELAY_ENV, or_value=DEFAULT_RACE_DELAY_SECONDS)
        return cls(
            data_dir=resolve_app_data_dir(app_name),
            marker=marker if marker is not None else DEFAULT_MARKER,
            race_delay_seconds=race_delay if race_delay is not None else DEFAULT_RACE_DELAY_SECONDS,
        )


__all__ = [
    "DATA_DIR_ENV",
    "DEFAULT_MARKER",
    "DEFAULT_RACE_DELAY_SECONDS",
    "InstanceConfig",
    "MARKER_ENV",
    "RACE_DELAY_ENV",
    "default_app_name",
    "resolve_app_data_dir",
]
