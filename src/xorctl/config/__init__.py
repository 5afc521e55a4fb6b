"""Shared configuration helpers and dataclasses."""

from .errors import ConfigurationError
from .runtime import (
    env_bool,
    env_float,
    env_int,
    env_seconds,
    env_str,
    reset_default_values,
)
from .settings import WatchdogSettings, get_watchdog_settings, load_watchdog_settings

__all__ = [
    "ConfigurationError",
    "WatchdogSettings",
    "env_bool",
    "env_float",
    "env_int",
    "env_seconds",
    "env_str",
    "get_watchdog_settings",
    "load_watchdog_settings",
    "reset_default_values",
]
