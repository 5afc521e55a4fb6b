from __future__ import annotations

"""Wiring and process lifecycle for the long-running watchdog service."""

import asyncio
import logging
import os
import signal
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from .config import ConfigurationError, WatchdogSettings, get_watchdog_settings
from .cycle import WatchdogCycle
from .health import UdpHealthProber
from .logging_config import setup_logging
from .process_controller import ProcessController
from .process_controller_helpers import PsutilProcessTable
from .scheduler import ScheduleSpec, WatchdogScheduler

try:
    import fcntl
except ImportError:  # pragma: no cover - fcntl unavailable on non-POSIX platforms
    fcntl = None

SERVICE_NAME = "xorctl"
STOP_SIGNALS = ("SIGINT", "SIGTERM")

logger = logging.getLogger(__name__)


class SingleInstanceError(RuntimeError):
    """Raised when another instance of the same service is already running."""


class ServiceInstanceLock:
    """File-lock based guard to enforce single service instance per host."""

    def __init__(self, service_name: str, runtime_dir: Optional[Path] = None) -> None:
        self.service_name = service_name
        if runtime_dir is None:
            env_override = os.getenv("XORCTL_RUNTIME_DIR")
            runtime_dir = Path(env_override) if env_override else Path(tempfile.gettempdir())
        self.runtime_dir = runtime_dir
        self.runtime_dir.mkdir(parents=True, exist_ok=True)
        self.lock_path = self.runtime_dir / f"{service_name}.lock"
        self._fd: Optional[int] = None

    def acquire(self) -> None:
        """Attempt to acquire the lock; raises if already held."""

        if fcntl is None:  # pragma: no cover - non-POSIX platforms
            raise SingleInstanceError("Single instance enforcement requires fcntl on this platform.")

        fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o664)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            existing_pid = os.pread(fd, 32, 0).decode("utf-8", errors="replace").strip()
            os.close(fd)
            suffix = f" (PID {existing_pid})." if existing_pid else "."
            raise SingleInstanceError(f"Service '{self.service_name}' appears to be running already" + suffix) from exc

        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode("utf-8"))
        os.fsync(fd)
        self._fd = fd

    def release(self) -> None:
        """Release the lock and clean up the lock file."""

        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None

        try:
            self.lock_path.unlink()
        except FileNotFoundError:
            logger.debug("Lock file %s already removed", self.lock_path)


@contextmanager
def single_instance_guard(service_name: str, runtime_dir: Optional[Path] = None):
    """Context manager enforcing one running instance per service name."""

    lock = ServiceInstanceLock(service_name, runtime_dir)
    lock.acquire()
    try:
        yield
    finally:
        lock.release()


def build_watchdog(settings: WatchdogSettings) -> WatchdogScheduler:
    """Assemble prober, controller, cycle and scheduler from ``settings``."""

    prober = UdpHealthProber(
        settings.server_address,
        bind_address=settings.bind_address,
        command=settings.status_command,
        buffer_size=settings.buffer_size,
        timeout_seconds=settings.read_timeout_seconds,
    )
    controller = ProcessController(PsutilProcessTable())
    cycle = WatchdogCycle(prober, controller, settings.process_name)
    spec = ScheduleSpec(
        interval_seconds=settings.interval_seconds,
        offset_seconds=settings.tick_offset_seconds,
        align_to_wall_clock=settings.align_to_wall_clock,
    )
    return WatchdogScheduler(cycle, spec)


def install_stop_handlers(loop: asyncio.AbstractEventLoop, scheduler: WatchdogScheduler) -> list[int]:
    """Route SIGINT/SIGTERM to ``scheduler.request_stop``; returns the signals installed."""

    installed = []
    for name in STOP_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            loop.add_signal_handler(signum, scheduler.request_stop)
        except (NotImplementedError, RuntimeError, ValueError):
            # Windows event loops and non-main threads cannot install handlers.
            logger.debug("Cannot install handler for %s", name)
            continue
        installed.append(signum)
    return installed


async def serve(scheduler: WatchdogScheduler) -> None:
    """Run ``scheduler`` until a stop signal arrives."""

    loop = asyncio.get_running_loop()
    installed = install_stop_handlers(loop, scheduler)
    try:
        await scheduler.run()
    finally:
        for signum in installed:
            loop.remove_signal_handler(signum)


def _ignore_sighup() -> None:
    try:
        signal.signal(signal.SIGHUP, signal.SIG_IGN)
    except AttributeError:
        # SIGHUP is not defined on all platforms (e.g., Windows).
        logger.debug("SIGHUP not available; cannot ignore")
    except ValueError:
        # Raised when signals are configured outside the main thread.
        logger.warning("Failed to ignore SIGHUP")


def run_watchdog_service(settings: Optional[WatchdogSettings] = None, *, configure_logging: bool = True) -> None:
    """Run the watchdog until interrupted; exits with status 1 or 2 on startup failures."""

    if configure_logging:
        setup_logging(SERVICE_NAME)

    try:
        resolved = settings if settings is not None else get_watchdog_settings()
    except ConfigurationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        raise SystemExit(2) from exc

    try:
        with single_instance_guard(SERVICE_NAME):
            _ignore_sighup()
            scheduler = build_watchdog(resolved)
            logger.info(
                "Watching %s via %s:%s every %ss",
                resolved.process_name,
                resolved.server_host,
                resolved.server_port,
                resolved.interval_seconds,
            )
            try:
                asyncio.run(serve(scheduler))
            except KeyboardInterrupt:
                logger.info("%s service interrupted by user", SERVICE_NAME)
    except SingleInstanceError as exc:
        sys.stderr.write(str(exc) + "\n")
        raise SystemExit(1) from exc


__all__ = [
    "ServiceInstanceLock",
    "SingleInstanceError",
    "build_watchdog",
    "install_stop_handlers",
    "run_watchdog_service",
    "serve",
    "single_instance_guard",
]
