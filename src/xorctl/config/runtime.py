"""
Lookup of ``XORCTL_*`` settings.

The process environment wins; otherwise the first ``.env`` file (working
directory, then home directory) that assigns the key supplies it. Keys without
the ``XORCTL_`` prefix in those files are ignored so a shared ``.env`` cannot
leak unrelated values into the watchdog.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, Optional, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")

ENV_PREFIX = "XORCTL_"

_BOOLEANS = {"1": True, "true": True, "yes": True, "on": True, "0": False, "false": False, "no": False, "off": False}
_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".env")

_dotenv_cache: Optional[Dict[str, str]] = None


def _read_dotenv(path: Path) -> Dict[str, str]:
    """Return the ``XORCTL_*`` assignments found in ``path``."""
    if not path.is_file():
        return {}
    try:
        lines = path.read_text().splitlines()
    except OSError as exc:
        raise ConfigurationError(f"Failed to read settings from {path}") from exc

    found: Dict[str, str] = {}
    for line in lines:
        key, sep, value = line.strip().removeprefix("export ").partition("=")
        key = key.strip()
        if sep and key.startswith(ENV_PREFIX):
            found[key] = value.strip().strip("'\"")
    return found


def _dotenv_values() -> Dict[str, str]:
    global _dotenv_cache
    if _dotenv_cache is None:
        merged: Dict[str, str] = {}
        for path in _DOTENV_CANDIDATES:
            for key, value in _read_dotenv(path).items():
                merged.setdefault(key, value)
        _dotenv_cache = merged
    return _dotenv_cache


def reset_default_values() -> None:
    """Forget cached .env values so the next lookup re-reads them."""
    global _dotenv_cache
    _dotenv_cache = None


def _raw(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip() or _dotenv_values().get(name, "").strip()
    return value or None


def _parse_bool(raw: str) -> bool:
    try:
        return _BOOLEANS[raw.lower()]
    except KeyError:
        raise ValueError(raw) from None


def _typed(name: str, or_value: Optional[T], cast: Callable[[str], T], expected: str) -> Optional[T]:
    raw = _raw(name)
    if raw is None:
        return or_value
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError.invalid_value(name, raw, f"Expected {expected}") from exc


def env_str(name: str, or_value: Optional[str] = None, *, required: bool = False) -> Optional[str]:
    raw = _raw(name)
    if raw is None and required:
        raise ConfigurationError.missing_value(name, "set it in the environment or a .env file")
    return raw if raw is not None else or_value


def env_int(name: str, or_value: Optional[int] = None) -> Optional[int]:
    return _typed(name, or_value, int, "an integer")


def env_float(name: str, or_value: Optional[float] = None) -> Optional[float]:
    return _typed(name, or_value, float, "a number")


def env_bool(name: str, or_value: Optional[bool] = None) -> Optional[bool]:
    return _typed(name, or_value, _parse_bool, f"one of {sorted(_BOOLEANS)}")


def env_seconds(name: str, or_value: Optional[float] = None) -> Optional[float]:
    """Duration in seconds; negative values are rejected."""
    value = env_float(name, or_value)
    if value is not None and value < 0:
        raise ConfigurationError.invalid_value(name, value, "Must be non-negative")
    return value
