from __future__ import annotations

"""Watchdog settings resolved from the environment."""


from dataclasses import dataclass
from functools import lru_cache

from .errors import ConfigurationError
from .runtime import env_bool, env_int, env_seconds, env_str

DEFAULT_BIND_HOST = "0.0.0.0"
DEFAULT_BIND_PORT = 0
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 6076
DEFAULT_BUFFER_SIZE = 1024
DEFAULT_READ_TIMEOUT_SECONDS = 5.0
DEFAULT_STATUS_COMMAND = "status"
DEFAULT_PROCESS_NAME = "M17Gateway"
DEFAULT_INTERVAL_SECONDS = 30.0
DEFAULT_TICK_OFFSET_SECONDS = 1.0

_MAX_PORT = 65535


@dataclass(frozen=True)
class WatchdogSettings:
    bind_host: str = DEFAULT_BIND_HOST
    bind_port: int = DEFAULT_BIND_PORT
    server_host: str = DEFAULT_SERVER_HOST
    server_port: int = DEFAULT_SERVER_PORT
    status_command: str = DEFAULT_STATUS_COMMAND
    buffer_size: int = DEFAULT_BUFFER_SIZE
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT_SECONDS
    process_name: str = DEFAULT_PROCESS_NAME
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    tick_offset_seconds: float = DEFAULT_TICK_OFFSET_SECONDS
    align_to_wall_clock: bool = True

    def __post_init__(self) -> None:
        _validate_port("bind_port", self.bind_port, allow_zero=True)
        _validate_port("server_port", self.server_port, allow_zero=False)
        if not self.server_host:
            raise ConfigurationError.missing_value("server_host")
        if not self.status_command:
            raise ConfigurationError.missing_value("status_command")
        if not self.status_command.isascii():
            raise ConfigurationError.invalid_value("status_command", self.status_command, "Must be ASCII")
        if not self.process_name:
            raise ConfigurationError.missing_value("process_name", "a daemon name is required to match processes")
        if self.buffer_size <= 0:
            raise ConfigurationError.invalid_value("buffer_size", self.buffer_size, "Must be positive")
        if self.read_timeout_seconds <= 0:
            raise ConfigurationError.invalid_value("read_timeout_seconds", self.read_timeout_seconds, "Must be positive")
        if self.interval_seconds <= 0:
            raise ConfigurationError.invalid_value("interval_seconds", self.interval_seconds, "Must be positive")
        if not 0 <= self.tick_offset_seconds < self.interval_seconds:
            raise ConfigurationError.invalid_value(
                "tick_offset_seconds",
                self.tick_offset_seconds,
                f"Must be within [0, {self.interval_seconds})",
            )

    @property
    def bind_address(self) -> tuple[str, int]:
        return (self.bind_host, self.bind_port)

    @property
    def server_address(self) -> tuple[str, int]:
        return (self.server_host, self.server_port)


def _validate_port(name: str, value: int, *, allow_zero: bool) -> None:
    lower = 0 if allow_zero else 1
    if not lower <= value <= _MAX_PORT:
        raise ConfigurationError.invalid_value(name, value, f"Must be within [{lower}, {_MAX_PORT}]")


def load_watchdog_settings() -> WatchdogSettings:
    """Build settings from ``XORCTL_*`` environment variables, falling back to defaults."""

    return WatchdogSettings(
        bind_host=env_str("XORCTL_BIND_HOST", or_value=DEFAULT_BIND_HOST),
        bind_port=env_int("XORCTL_BIND_PORT", or_value=DEFAULT_BIND_PORT),
        server_host=env_str("XORCTL_SERVER_HOST", or_value=DEFAULT_SERVER_HOST),
        server_port=env_int("XORCTL_SERVER_PORT", or_value=DEFAULT_SERVER_PORT),
        status_command=env_str("XORCTL_STATUS_COMMAND", or_value=DEFAULT_STATUS_COMMAND),
        buffer_size=env_int("XORCTL_BUFFER_SIZE", or_value=DEFAULT_BUFFER_SIZE),
        read_timeout_seconds=env_seconds("XORCTL_READ_TIMEOUT_SECONDS", or_value=DEFAULT_READ_TIMEOUT_SECONDS),
        process_name=env_str("XORCTL_PROCESS_NAME", or_value=DEFAULT_PROCESS_NAME),
        interval_seconds=env_seconds("XORCTL_INTERVAL_SECONDS", or_value=DEFAULT_INTERVAL_SECONDS),
        tick_offset_seconds=env_seconds("XORCTL_TICK_OFFSET_SECONDS", or_value=DEFAULT_TICK_OFFSET_SECONDS),
        align_to_wall_clock=bool(env_bool("XORCTL_ALIGN_TO_WALL_CLOCK", or_value=True)),
    )


@lru_cache(maxsize=1)
def get_watchdog_settings() -> WatchdogSettings:
    return load_watchdog_settings()


__all__ = ["WatchdogSettings", "get_watchdog_settings", "load_watchdog_settings"]
