"""UDP health-probe watchdog that kills a disconnected daemon so its supervisor can relaunch it."""

from .cycle import CycleReport, WatchdogCycle
from .health import HealthState, HealthStatus, UdpHealthProber
from .process_controller import ProcessController
from .process_controller_helpers import ProcessRecord, RestartOutcome
from .scheduler import ScheduleSpec, SchedulerState, WatchdogScheduler

__all__ = [
    "CycleReport",
    "HealthState",
    "HealthStatus",
    "ProcessController",
    "ProcessRecord",
    "RestartOutcome",
    "ScheduleSpec",
    "SchedulerState",
    "UdpHealthProber",
    "WatchdogCycle",
    "WatchdogScheduler",
]
