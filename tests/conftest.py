"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import logging

import pytest

from xorctl.config import get_watchdog_settings, runtime


@pytest.fixture(autouse=True)
def _isolate_configuration(monkeypatch):
    """Keep .env files and cached settings from leaking between tests."""
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    runtime.reset_default_values()
    get_watchdog_settings.cache_clear()
    yield
    runtime.reset_default_values()
    get_watchdog_settings.cache_clear()


@pytest.fixture
def xorctl_caplog(caplog):
    caplog.set_level(logging.DEBUG, logger="xorctl")
    return caplog
