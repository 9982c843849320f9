"""Shared configuration helpers and dataclasses."""

from .errors import ConfigurationError
from .instance import (
    DEFAULT_MARKER,
    DEFAULT_RACE_DELAY_SECONDS,
    InstanceConfig,
    default_app_name,
    resolve_app_data_dir,
)
from .runtime import env_bool, env_float, env_seconds, env_str

__all__ = [
    "ConfigurationError",
    "DEFAULT_MARKER",
    "DEFAULT_RACE_DELAY_SECONDS",
    "InstanceConfig",
    "default_app_name",
    "env_bool",
    "env_float",
    "env_seconds",
    "env_str",
    "resolve_app_data_dir",
]
