"""
Fixed-cadence scheduler driving the watchdog cycle.

Ticks fire on a fixed grid (``start + k * interval``). Cycles never overlap:
each cycle is awaited before the next wait begins. When a cycle runs past one
or more grid points those ticks are skipped, not queued, and the next tick
lands on the first grid point that is not already in the past.

Stopping is cooperative. ``request_stop`` wakes the scheduler if it is
waiting; a cycle already in flight is allowed to finish and no further tick
fires afterwards.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Tuple

import psutil

from .cycle import CycleReport

logger = logging.getLogger(__name__)

CYCLE_ERRORS = (OSError, RuntimeError, ValueError, psutil.Error)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    TERMINATED = "terminated"


class SupervisedCycle(Protocol):
    def run(self) -> CycleReport: ...


@dataclass(frozen=True)
class ScheduleSpec:
    """
    Cadence description.

    With ``align_to_wall_clock`` ticks fire at wall-clock times ``t`` where
    ``(t - offset_seconds) % interval_seconds == 0`` (every 30s at :01 and :31
    for the defaults). Otherwise the first tick fires at start, or one interval
    after start when ``fire_immediately`` is false.
    """

    interval_seconds: float
    offset_seconds: float = 0.0
    align_to_wall_clock: bool = False
    fire_immediately: bool = True

    def __post_init__(self) -> None:
        if self.interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive (got {self.interval_seconds})")
        if not 0 <= self.offset_seconds < self.interval_seconds:
            raise ValueError(f"offset_seconds must be within [0, {self.interval_seconds}) (got {self.offset_seconds})")

    def first_delay(self, wall_now: float) -> float:
        """Seconds from ``wall_now`` until the first tick."""
        if self.align_to_wall_clock:
            phase = (wall_now - self.offset_seconds) % self.interval_seconds
            if phase == 0:
                return 0.0
            return self.interval_seconds - phase
        if self.fire_immediately:
            return 0.0
        return self.interval_seconds


async def _wait_for_stop(stop_event: asyncio.Event, delay: float) -> bool:
    """Wait up to ``delay`` seconds; return True if a stop was requested."""
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True


def plan_next_tick(previous_deadline: float, interval_seconds: float, now: float) -> Tuple[float, int]:
    """
    Return ``(next_deadline, skipped_ticks)`` after a tick due at ``previous_deadline``.

    Grid points that are already in the past at ``now`` are dropped and counted.
    """
    next_deadline = previous_deadline + interval_seconds
    if next_deadline >= now:
        return next_deadline, 0
    skipped = math.ceil((now - previous_deadline) / interval_seconds) - 1
    return previous_deadline + (skipped + 1) * interval_seconds, skipped


class WatchdogScheduler:
    """Runs a supervised cycle on a fixed cadence until asked to stop."""

    def __init__(
        self,
        cycle: SupervisedCycle,
        spec: ScheduleSpec,
        *,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        self.cycle = cycle
        self.spec = spec
        self._clock = clock
        self._wall_clock = wall_clock
        self._state = SchedulerState.IDLE
        self._stop_requested = False
        self._stop_event: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.cycles_run = 0
        self.failed_cycles = 0
        self.skipped_ticks = 0
        self.last_report: Optional[CycleReport] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    def request_stop(self) -> None:
        """Ask the scheduler to stop after the current cycle. Safe from any thread."""
        if self._state is SchedulerState.TERMINATED or self._stop_requested:
            return
        self._stop_requested = True
        if self._state is SchedulerState.RUNNING:
            self._state = SchedulerState.STOPPING
        logger.info("Watchdog stop requested")

        if self._loop is None or self._stop_event is None:
            return
        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None
        if running_loop is self._loop:
            self._stop_event.set()
        else:
            self._loop.call_soon_threadsafe(self._stop_event.set)

    async def run(self) -> None:
        """Fire ticks until stopped. May only be called once."""
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler cannot start from state {self._state.value}")

        self._loop = asyncio.get_running_loop()
        stop_event = self._stop_event = asyncio.Event()
        if self._stop_requested:
            stop_event.set()
            self._state = SchedulerState.STOPPING
        else:
            self._state = SchedulerState.RUNNING

        interval = self.spec.interval_seconds
        deadline = self._clock() + self.spec.first_delay(self._wall_clock())
        logger.info("Watchdog scheduler started (interval: %ss)", interval)

        try:
            while not stop_event.is_set():
                delay = deadline - self._clock()
                if delay > 0 and await _wait_for_stop(stop_event, delay):
                    break

                await self._run_tick()

                deadline, skipped = plan_next_tick(deadline, interval, self._clock())
                if skipped:
                    self.skipped_ticks += skipped
                    logger.warning("Watchdog cycle overran its interval; skipped %d tick(s)", skipped)
        finally:
            self._state = SchedulerState.TERMINATED
            logger.info("Watchdog scheduler stopped after %d cycle(s)", self.cycles_run)

    async def _run_tick(self) -> None:
        self.cycles_run += 1
        try:
            report = await asyncio.to_thread(self.cycle.run)
        except CYCLE_ERRORS:
            self.failed_cycles += 1
            logger.exception("Watchdog cycle %d failed", self.cycles_run)
            return
        self.last_report = report


__all__ = [
    "ScheduleSpec",
    "SchedulerState",
    "WatchdogScheduler",
    "plan_next_tick",
]
