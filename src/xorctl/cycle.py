"""One supervisory cycle: probe the daemon, kill it if it reports disconnected."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .health import HealthProber, HealthStatus
from .logging_config import STATUS_PREFIX
from .process_controller import ProcessController
from .process_controller_helpers import ProcessTableError, RestartOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleReport:
    status: HealthStatus
    restart: Optional[RestartOutcome] = None
    error: Optional[str] = None

    @property
    def restart_attempted(self) -> bool:
        return self.restart is not None or self.error is not None


class WatchdogCycle:
    """Probe, classify, act. Failures stay inside the returned report."""

    def __init__(self, prober: HealthProber, controller: ProcessController, daemon_name: str):
        if not daemon_name:
            raise ValueError("daemon_name must be a non-empty process name")
        self.prober = prober
        self.controller = controller
        self.daemon_name = daemon_name

    def run(self) -> CycleReport:
        status = self.prober.check()

        if status.is_failure:
            logger.warning("%s %s", STATUS_PREFIX, status.describe())
            return CycleReport(status=status)

        if status.is_healthy:
            logger.info("%s %s", STATUS_PREFIX, status.describe())
            return CycleReport(status=status)

        logger.warning("%s Lost connection, restarting %s...", STATUS_PREFIX, self.daemon_name)
        try:
            outcome = self.controller.restart(self.daemon_name)
        except ProcessTableError as exc:
            logger.error("%s restart of %s failed: %s", STATUS_PREFIX, self.daemon_name, exc)
            return CycleReport(status=status, error=str(exc))
        return CycleReport(status=status, restart=outcome)


__all__ = ["CycleReport", "WatchdogCycle"]
