"""Ensure only one instance of an application runs on a host."""

from __future__ import annotations

from typing import Optional

from .config import ConfigurationError, InstanceConfig, resolve_app_data_dir
from .errors import PidFileWriteError
from .fingerprint import ProcessFingerprint
from .instance_detector import SingleAppInstance
from .logging_config import setup_logging
from .process_table import LiveProcess, ProcessTable, PsutilProcessTable


def _detector(app_name: Optional[str], config: Optional[InstanceConfig]) -> SingleAppInstance:
    resolved = config if config is not None else InstanceConfig.from_env(app_name)
    return SingleAppInstance.from_config(resolved)


def should_launch(app_name: Optional[str] = None, *, config: Optional[InstanceConfig] = None) -> bool:
    """Return True if this process may run as the application's single instance."""
    return _detector(app_name, config).should_launch()


def exit_if_already_running(app_name: Optional[str] = None, *, config: Optional[InstanceConfig] = None) -> None:
    """Exit with status 0 if another instance of the application is running."""
    _detector(app_name, config).exit_if_already_running()


__all__ = [
    "ConfigurationError",
    "InstanceConfig",
    "LiveProcess",
    "PidFileWriteError",
    "ProcessFingerprint",
    "ProcessTable",
    "PsutilProcessTable",
    "SingleAppInstance",
    "exit_if_already_running",
    "resolve_app_data_dir",
    "setup_logging",
    "should_launch",
]
